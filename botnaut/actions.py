r"""
Botnaut action descriptors.

An Action is one invocable unit of a command: the base action (empty subcommand
alias) or a subcommand, with an ordered list of parsers and the handler that
receives the parsed values.

    async def ban(ctx, member, reason): ...

    Action(ban, (MemberParser(), StringParser()))                 # "!ban <member> <reason...>"
    Action(ban_list, (), subcommand="list", descr="show bans")   # "!ban list"

Registration contract (checked once, at construction)
- handler: an inspectable callable taking the context first, then exactly one
  positional parameter per parser (no *args). Keyword-only parameters must have
  defaults; they are never fed by the engine.
- parsers: Parser instances, in parameter order. The last one receives the
  re-joined tail of the invocation (see TokenStream.tail).
- subcommand: "" for the base action, otherwise a whitespace-free alias matched
  case-insensitively at dispatch time.
- names: argument names used in diagnostics; default to the handler's parameter
  names after the context.
- annotations: when a handler parameter is annotated with a class and the parser
  declares a class as its `type`, the parser type must be a subclass of the
  annotation. String (postponed) annotations are not evaluated.

Violations raise TypeError/ValueError immediately; a malformed action can never
reach dispatch. Instances are read-only after construction and are shared by all
invocations of their command.
"""
import functools
import inspect
import operator
import re
from collections.abc import Iterable
from inspect import Parameter

from rich.text import Text

from .parsers import Parser
from .utils import *


class ActionType(type):
    """
    Metaclass that turns descriptor classes into introspectable, read-only types.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and pretty printing.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - action(subcommand='list', parsers=(), names=(), ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_handler(cls, metadata):
    """
    Inspect the handler and check it against the declared parsers.

    Mutates
    - metadata["names"]: defaulted to the handler parameter names (after the context).

    Errors
    - TypeError on non-callable/non-inspectable handlers, a missing context
      parameter, an arity mismatch, or an incompatible annotation.
    """
    handler = metadata["handler"]
    if not callable(handler):
        raise TypeError(f"{cls.__typename__} 'handler' must be callable")
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        raise TypeError(f"{cls.__typename__} 'handler' must be an inspectable callable") from None

    positionals = []
    for parameter in signature.parameters.values():
        match parameter.kind:
            case Parameter.POSITIONAL_ONLY | Parameter.POSITIONAL_OR_KEYWORD:
                positionals.append(parameter)
            case Parameter.VAR_POSITIONAL:
                raise TypeError(f"{cls.__typename__} 'handler' cannot take variadic positional parameters")
            case Parameter.KEYWORD_ONLY if parameter.default is Parameter.empty:
                raise TypeError(f"{cls.__typename__} 'handler' keyword-only parameter {parameter.name!r} must have a default")

    if not positionals:
        raise TypeError(f"{cls.__typename__} 'handler' must take the context as first parameter")

    parameters = positionals[1:]
    parsers = metadata["parsers"]
    if len(parameters) != len(parsers):
        raise TypeError(
            f"{cls.__typename__} 'handler' takes {len(parameters)} argument(s) after the context "
            f"but {len(parsers)} parser(s) were given"
        )

    for position, (parameter, parser) in enumerate(zip(parameters, parsers), 1):
        annotation = parameter.annotation
        if not isinstance(annotation, type) or not isinstance(parser.type, type):
            continue
        if not issubclass(parser.type, annotation):
            raise TypeError(
                f"{cls.__typename__} 'handler' parameter {parameter.name!r} at {ordinal(position)} position "
                f"({annotation.__qualname__}) is incompatible with {type(parser).__name__} ({parser.type.__qualname__})"
            )

    if metadata["names"] is Unset:
        metadata["names"] = [parameter.name for parameter in parameters]


def _process_metadata(cls, metadata):
    """
    Validate and normalize parsers, subcommand alias, names and description.
    """
    if isinstance(parsers := metadata["parsers"], str) or not isinstance(parsers, Iterable):
        raise TypeError(f"{cls.__typename__} 'parsers' must be an iterable of parsers")
    parsers = metadata["parsers"] = tuple(parsers)
    for parser in parsers:
        if not isinstance(parser, Parser):
            raise TypeError(f"{cls.__typename__} 'parsers' must contain only parsers, not {type(parser).__name__!r}")

    if not isinstance(subcommand := metadata["subcommand"], str):
        raise TypeError(f"{cls.__typename__} 'subcommand' must be a string")
    elif subcommand and subcommand.split() != [subcommand]:
        raise ValueError(f"{cls.__typename__} 'subcommand' cannot contain whitespaces")

    if (names := metadata["names"]) is not Unset:
        if isinstance(names, str) or not isinstance(names, Iterable):
            raise TypeError(f"{cls.__typename__} 'names' must be an iterable of strings")
        sanitized = []
        for name in names:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} 'names' must be strings")
            elif not (name := name.strip()):
                raise ValueError(f"{cls.__typename__} 'names' cannot be empty-strings")
            sanitized.append(name)
        if len(sanitized) != len(parsers):
            raise ValueError(f"{cls.__typename__} 'names' must name each of the {len(parsers)} parser(s)")
        metadata["names"] = sanitized

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Action(metaclass=ActionType):
    """
    One candidate binding of a command: alias, parsers, handler.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes
      on instances, mirroring the sanitized metadata values.
    - signature: (casefolded alias, parser types); two actions of the same command
      cannot share it.
    - usage: "alias <first> <last...>" rendering used in hints.
    """

    __introspectable__ = (
        "subcommand",
        "parsers",
        "names",
        "descr",
        "handler",
    )

    __displayable__ = (
        "subcommand",
        "parsers",
        "names",
        "descr",
    )

    def __new__(cls, handler, parsers=(), /, subcommand="", names=Unset, descr=Unset):
        metadata = {
            "handler": handler,
            "parsers": parsers,
            "subcommand": subcommand,
            "names": names,
            "descr": descr,
        }
        _process_metadata(cls, metadata)
        _process_handler(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def signature(self):
        return self._subcommand.casefold(), tuple(map(type, self._parsers))

    @property
    def usage(self):
        words = [self._subcommand] if self._subcommand else []
        words.extend(f"<{name}>" for name in self._names[:-1])
        if self._names:
            words.append(f"<{self._names[-1]}...>")
        return " ".join(words)


def action(*parsers, subcommand="", names=Unset, descr=Unset):
    """
    Decorator form of Action.

        @action(IntegerParser(), StringParser())
        async def ban(ctx, id, reason): ...

    Returns the Action built around the decorated handler.
    """
    @rename("action")
    def wrapper(handler, /):
        if not callable(handler):
            raise TypeError("@action() must be applied to a callable")
        return Action(handler, parsers, subcommand=subcommand, names=names, descr=descr)

    return wrapper


__all__ = (
    "Action",
    "action",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ActionType
