"""
Botnaut dispatch engine: resolve one invocation to exactly one action.

Phases (per invocation, strictly sequential)
1. partition(): decide once whether token 1 names a subcommand.
   • subcommand mode: token 1 matches a declared alias (case-insensitively);
     arguments start at index 2 and only actions with that alias are candidates.
   • base mode: arguments start at index 1 and only base actions (empty alias)
     are candidates.
   The same token is never read both as a subcommand and as an argument.
2. bind(): for each candidate, in declaration order, feed tokens to its parsers.
   • fewer tokens than parsers → MissingArguments (no parser runs);
   • the last parser receives the re-joined tail of the invocation;
   • parsers run one after the other, each awaited before the next starts;
     the first ParseError stops the candidate → ParseFailure(position, cause).
3. resolve(): the first candidate that fully binds wins. Otherwise one diagnosis
   is picked: missing arguments (union over candidates) over parse failures
   (the first one in declaration order) over an unknown subcommand.
4. dispatch() / execute(): invoke the winner's handler with (ctx, *values) and return its
   result, or raise the single fault built by surface(). Handler errors propagate
   unchanged; no other candidate is tried once a handler was called.

Nothing here is shared between invocations besides the read-only actions, so
concurrent invocations need no coordination. Cancelling the awaiting task while a
parser is suspended abandons the remaining parsers and candidates.
"""
import difflib
import inspect
import logging
from collections import namedtuple

from .faults import *
from .utils import ordinal, pluralize

logger = logging.getLogger(__name__)

# Diagnoses: why a single candidate (or the whole invocation) did not bind.
MissingArguments = namedtuple("MissingArguments", ("names",))
MissingArguments.__doc__ = "Names of the arguments beyond the supplied tokens, in declaration order."

ParseFailure = namedtuple("ParseFailure", ("position", "cause"))
ParseFailure.__doc__ = "1-based position of the first argument that failed, and its ParseError."

UnknownSubcommand = namedtuple("UnknownSubcommand", ("input", "aliases"))
UnknownSubcommand.__doc__ = "No candidate exists: the unmatched token 1 (or '') and the declared aliases."

# Outcomes of resolve().
Success = namedtuple("Success", ("action", "arguments"))
Success.__doc__ = "The winning action and its bound values, in parser order."

Failure = namedtuple("Failure", ("diagnosis",))
Failure.__doc__ = "The aggregated diagnosis of an invocation where no candidate bound."


def _describe(action):
    name = getattr(action.handler, "__qualname__", None) or repr(action.handler)
    return f"{name}[{action.subcommand}]" if action.subcommand else name


def _count(number, noun):
    return f"{number} {noun if number == 1 else pluralize(noun)}"


def partition(actions, tokens, /):
    """
    Select the candidates of an invocation and the index of its first argument.

    Returns
    - (candidates, index): candidates keep their declaration order; index is 2 in
      subcommand mode and 1 in base mode.
    """
    actions = tuple(actions)
    if len(tokens) > 1:
        folded = tokens[1].casefold()
        if any(action.subcommand and action.subcommand.casefold() == folded for action in actions):
            return tuple(action for action in actions if action.subcommand.casefold() == folded), 2
    return tuple(action for action in actions if not action.subcommand), 1


async def bind(action, ctx, index, /):
    """
    Try to bind one candidate against the invocation tokens from `index` on.

    Returns
    - Success(action, values) when every parser succeeded;
    - MissingArguments(names) when fewer tokens than parsers remain;
    - ParseFailure(position, cause) at the first ParseError.

    Only ParseError is treated as a diagnosis; any other exception raised by a
    parser is a bug and propagates.
    """
    tokens = ctx.tokens
    parsers = action.parsers

    if (available := max(len(tokens) - index, 0)) < len(parsers):
        logger.debug("Skipping action %s: missing %s.", _describe(action), _count(len(parsers) - available, "argument"))
        return MissingArguments(action.names[available:])

    inputs = [tokens[index + offset] for offset in range(len(parsers) - 1)]
    if parsers:
        inputs.append(tokens.tail(index + len(parsers) - 1))

    values = []
    for position, (parser, token) in enumerate(zip(parsers, inputs), 1):
        try:
            value = parser.parse(ctx, token)
            if inspect.isawaitable(value):
                value = await value
        except ParseError as error:
            logger.debug("Skipping action %s: cannot parse the %s argument.", _describe(action), ordinal(position))
            return ParseFailure(position, error)
        values.append(value)

    return Success(action, tuple(values))


async def resolve(actions, ctx, /):
    """
    Resolve an invocation to Success(action, values) or Failure(diagnosis).

    Handlers are never invoked here; calling resolve() twice on the same input
    yields equal outcomes as long as the parsers are deterministic.
    """
    actions = tuple(actions)
    candidates, index = partition(actions, ctx.tokens)

    missing = []
    failure = None
    for candidate in candidates:
        match await bind(candidate, ctx, index):
            case Success() as success:
                return success
            case MissingArguments(names=names):
                missing.extend(name for name in names if name not in missing)
            case ParseFailure() as diagnosis if failure is None:
                failure = diagnosis

    if missing:
        return Failure(MissingArguments(tuple(missing)))
    if failure is not None:
        return Failure(failure)

    aliases = tuple(dict.fromkeys(action.subcommand for action in actions if action.subcommand))
    return Failure(UnknownSubcommand(ctx.tokens[1] if len(ctx.tokens) > 1 else "", aliases))


def surface(diagnosis, ctx, /, route="", actions=()):
    """
    Build the single user-facing fault for an aggregated diagnosis.

    Messages are rendered through ctx.translate("dispatch", ...); `route` is the
    command path shown to the user and `actions` feed the usage hints.
    """
    def translate(key, /, **fields):
        return ctx.translate("dispatch", key).format(**fields)

    route = route or ctx.name

    match diagnosis:
        case MissingArguments(names=names):
            candidates, _ = partition(actions, ctx.tokens)
            usage = " | ".join(" ".join(filter(None, (route, candidate.usage))) for candidate in candidates)
            return MissingArgumentsError(
                translate("missing_arguments", names=", ".join(f"`{name}`" for name in names)),
                title=translate("missing_arguments_title"),
                code=FaultCode.MISSING_ARGUMENTS,
                hint=translate("missing_arguments_hint", usage=usage) if usage else None,
                docs=getdoc(FaultCode.MISSING_ARGUMENTS),
                route=route,
                names=tuple(names),
            )
        case ParseFailure(position=position, cause=cause):
            return ArgumentParseError(
                translate("argument_parse", ordinal=ordinal(position), position=position, message=cause.message),
                title=translate("argument_parse_title"),
                code=FaultCode.ARGUMENT_PARSE,
                hint=translate("argument_parse_hint", position=position),
                docs=getdoc(FaultCode.ARGUMENT_PARSE),
                route=route,
                position=position,
                cause=cause,
            )
        case UnknownSubcommand(input=input, aliases=aliases):
            suggestions = difflib.get_close_matches(input, aliases, 5) if input else []
            listing = ", ".join(aliases) or "-"
            try:
                hint = translate("unknown_subcommand_suggestion", suggestion=suggestions[0], aliases=listing)
            except IndexError:
                hint = translate("unknown_subcommand_hint", aliases=listing)
            return UnknownSubcommandError(
                translate("unknown_subcommand" if input else "unknown_subcommand_empty", input=input, route=route),
                title=translate("unknown_subcommand_title"),
                code=FaultCode.UNKNOWN_SUBCOMMAND,
                hint=hint,
                docs=getdoc(FaultCode.UNKNOWN_SUBCOMMAND),
                route=route,
                input=input,
                suggestions=suggestions,
            )

    raise TypeError(f"surface() argument must be a diagnosis, not {type(diagnosis).__name__!r}")


async def dispatch(actions, ctx, /, route=""):
    """
    Resolve the invocation and run the winning handler.

    Returns
    - whatever the handler returns (awaited when it is awaitable).

    Raises
    - MissingArgumentsError / ArgumentParseError / UnknownSubcommandError when no
      candidate bound (exactly one of them per invocation);
    - any exception raised by the handler itself, unchanged.
    """
    actions = tuple(actions)
    outcome = await resolve(actions, ctx)

    if isinstance(outcome, Failure):
        fault = surface(outcome.diagnosis, ctx, route=route, actions=actions)
        logger.debug("No action of %r matched %r: %s.", route or ctx.name, ctx.tokens.text, type(fault).__name__)
        raise fault

    return await execute(outcome, ctx)


async def execute(success, ctx, /):
    """
    Call the handler of a resolved invocation with (ctx, *values).

    Exceptions raised by the handler are not diagnoses and propagate unchanged.
    """
    action, arguments = success
    logger.debug("Executing action %s with %s.", _describe(action), _count(len(arguments), "argument"))
    result = action.handler(ctx, *arguments)
    if inspect.isawaitable(result):
        result = await result
    return result


__all__ = (
    "MissingArguments",
    "ParseFailure",
    "UnknownSubcommand",
    "Success",
    "Failure",
    "partition",
    "bind",
    "resolve",
    "surface",
    "dispatch",
    "execute",
)
