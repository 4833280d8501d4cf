r"""
Botnaut commands and command registry.

A Command groups the actions reachable through one or more aliases; a Registry
mounts commands and turns raw chat messages into dispatches.

    registry = Registry("!")

    @registry.command("ban", "b", parsers=(IntegerParser(), StringParser()), descr="ban a member")
    async def ban(ctx, id: int, reason: str): ...

    # overloads and subcommands stack on the returned command
    @ban.action(IntegerParser(), subcommand="list")
    async def ban_list(ctx, page): ...

    await registry.invoke("!ban 42 no longer needed", session=message)

Lifecycle
- Commands are built (aliases, actions) and validated at registration time.
- Once dispatched for the first time a command is sealed: its action set is final
  and shared read-only by every concurrent invocation.

Fault routing (Registry.invoke)
- UnknownCommandError when token 0 names no mounted command.
- Missing arguments / parse failures / unknown subcommands surface as exactly one
  fault per invocation (see botnaut.engine).
- Faults go to the registered fallback when there is one, are rendered on the
  console in shell mode, and are raised otherwise.
- Exceptions raised by handlers are never faults; they propagate unchanged.
"""
import copy
import difflib
import functools
import inspect
import logging
import operator
import re
from collections.abc import Iterable

from rich.text import Text

from .actions import Action
from .context import Context
from .engine import Failure, dispatch, execute, resolve, surface
from .faults import *
from .tokens import TokenStream
from .utils import *

logger = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass for commands: typename, mirrored read-only properties and reprs.
    """
    __introspectable__ = ()

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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_alias(cls, alias, what, /):
    if not isinstance(alias, str):
        raise TypeError(f"{cls.__typename__} {what} must be strings")
    elif not alias.strip():
        raise ValueError(f"{cls.__typename__} {what} cannot be empty-strings")
    elif alias.split() != [alias]:
        raise ValueError(f"{cls.__typename__} {what} cannot contain whitespaces")
    return alias


class Command(metaclass=CommandType):
    """
    Named set of actions.

    Parameters
    - *aliases: str
      One or more case-insensitive names; the first one is the display name.
    - descr: str | Text | Unset
      Short description, shown in listings.
    - actions: Iterable[Action]
      Initial actions, in declaration order.

    Registration errors
    - TypeError: non-string alias, non-Action entry, mutation once sealed.
    - ValueError: no alias, blank/whitespace alias, duplicated alias, two
      actions sharing the same (subcommand, parser types) signature, or sealing
      (mounting, running) a command that declares no action.
    """

    __introspectable__ = (
        "aliases",
        "descr",
        "actions",
    )

    def __init__(self, *aliases, descr=Unset, actions=()):
        if not aliases:
            raise ValueError(f"{type(self).__typename__} must specify at least one alias")
        folded = set()
        for alias in aliases:
            _sanitize_alias(type(self), alias, "aliases")
            if alias.casefold() in folded:
                raise ValueError(f"{type(self).__typename__} aliases cannot contain duplicates")
            folded.add(alias.casefold())

        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{type(self).__typename__} 'descr' cannot be empty")

        if isinstance(actions, str) or not isinstance(actions, Iterable):
            raise TypeError(f"{type(self).__typename__} 'actions' must be an iterable of actions")

        self._aliases = aliases
        self._descr = coalesce(descr)
        self._actions = []
        self._sealed = False
        self.extend(actions)

    @property
    def name(self):
        return self._aliases[0]

    @property
    def sealed(self):
        return self._sealed

    @property
    def subcommands(self):
        """
        Declared subcommand aliases, unique and in declaration order.
        """
        return tuple(dict.fromkeys(action.subcommand for action in self._actions if action.subcommand))

    @property
    def usage(self):
        """
        One usage line per action, e.g. ("ban <id> <reason...>", "ban list <page...>").
        """
        return tuple(" ".join(filter(None, (self.name, action.usage))) for action in self._actions)

    def seal(self):
        """
        Freeze the action set; further registrations raise TypeError.

        A command without any action cannot be sealed (ValueError).
        """
        if not self._actions:
            raise ValueError(f"{type(self).__typename__} {self.name!r} must declare at least one action")
        self._sealed = True
        return self

    def extend(self, actions, /):
        """
        Append actions in order; the batch is validated as a whole before any
        of them is added.
        """
        if self._sealed:
            raise TypeError(f"{type(self).__typename__} {self.name!r} is sealed and cannot accept new actions")
        actions = tuple(actions)
        signatures = {action.signature for action in self._actions}
        for action in actions:
            if not isinstance(action, Action):
                raise TypeError(f"{type(self).__typename__} actions must be actions, not {type(action).__name__!r}")
            if action.signature in signatures:
                subcommand, parsers = action.signature
                raise ValueError(
                    f"{type(self).__typename__} {self.name!r} already declares an action "
                    f"{subcommand or "(base)"!r} taking ({", ".join(parser.__name__ for parser in parsers)})"
                )
            signatures.add(action.signature)
        self._actions.extend(actions)

    def action(self, *parsers, subcommand="", names=Unset, descr=Unset):
        """
        Register the decorated handler as one action per subcommand alias.

            @ban.action(IntegerParser(), StringParser())
            @ban.action(IntegerParser(), StringParser(), subcommand=("add", "new"))
            async def ban_member(ctx, id, reason): ...

        Returns the handler unchanged, so declarations can be stacked.
        """
        if isinstance(subcommand, str):
            subcommands = (subcommand,)
        elif isinstance(subcommand, Iterable):
            subcommands = tuple(subcommand)
            if not subcommands:
                raise ValueError(f"{type(self).__typename__} 'subcommand' cannot be an empty sequence")
            for alias in subcommands:
                _sanitize_alias(type(self), alias, "subcommands")
        else:
            raise TypeError(f"{type(self).__typename__} 'subcommand' must be a string or a sequence of strings")

        @rename("action")
        def wrapper(handler, /):
            self.extend(Action(handler, parsers, subcommand=alias, names=names, descr=descr) for alias in subcommands)
            return handler

        return wrapper

    async def run(self, ctx, /):
        """
        Dispatch ctx to this command's actions and return the handler result.

        Faults are raised, never rendered; see Registry.invoke for routing.
        """
        if not isinstance(ctx, Context):
            raise TypeError(f"{type(self).__typename__} run() argument must be a context")
        self.seal()
        return await dispatch(self._actions, ctx, route=ctx.name or self.name)


def command(source=Unset, /, *aliases, parsers=(), names=Unset, descr=Unset):
    """
    Create a Command around a base handler, or return a decorator to do so.

    Invocation modes
    - Direct:     cmd = command(handler, "ban", "b", parsers=(IntegerParser(),))
    - Decorator:  @command("ban", "b") / @command()
      The aliases default to the handler's __name__.

    The handler becomes the base action of the command; further overloads and
    subcommands are added with @cmd.action(...).
    """
    if isinstance(source, str):
        source, aliases = Unset, (source, *aliases)

    @rename("command")
    def wrapper(handler, /):
        if not callable(handler):
            raise TypeError("@command() must be applied to a callable")
        self = Command(*(aliases or (handler.__name__,)), descr=descr)
        self.action(*parsers, names=names, descr=descr)(handler)
        return self

    return wrapper(source) if source is not Unset else wrapper


class Registry:
    """
    Mounted commands plus the runtime flags used to surface faults.

    Parameters
    - prefix: str
      Leading marker of command messages ("!", "?"...). Messages without it are
      ignored. Defaults to "" (every message is a command).
    - shell: bool
      Render faults on the console instead of raising them.
    - fancy / colorful: bool
      Rendering flags forwarded to faults (panel layout / styles).
    """

    def __init__(self, prefix="", *, shell=False, fancy=False, colorful=False):
        if not isinstance(prefix, str):
            raise TypeError("registry 'prefix' must be a string")
        elif prefix != prefix.strip():
            raise ValueError("registry 'prefix' cannot contain whitespaces")
        for name, flag in (("shell", shell), ("fancy", fancy), ("colorful", colorful)):
            if not isinstance(flag, bool):
                raise TypeError(f"registry {name!r} must be a boolean")

        self._prefix = prefix
        self._shell = shell
        self._fancy = fancy
        self._colorful = colorful
        self._commands = {}
        self._fallback = Unset

    @property
    def prefix(self):
        return self._prefix

    @property
    def shell(self):
        return self._shell

    @property
    def fancy(self):
        return self._fancy

    @property
    def colorful(self):
        return self._colorful

    @property
    def commands(self):
        """
        Mounted commands, unique and in mounting order.
        """
        return tuple(dict.fromkeys(self._commands.values()))

    def add(self, command, /):
        """
        Mount a command; aliases are unique registry-wide.
        """
        if not isinstance(command, Command):
            raise TypeError(f"registry add() argument must be a command, not {type(command).__name__!r}")
        if not command.actions:
            raise ValueError(f"registry cannot mount {command.name!r}: it must declare at least one action")
        for alias in command.aliases:
            if (folded := alias.casefold()) in self._commands:
                raise ValueError(f"registry alias {alias!r} is already mounted by {self._commands[folded].name!r}")
        self._commands.update((alias.casefold(), command) for alias in command.aliases)
        logger.info("Mounted command %r (aliases: %s).", command.name, ", ".join(command.aliases))
        return command

    def command(self, source=Unset, /, *aliases, **options):
        """
        Build a command with command(...) and mount it here.

        Supports the same direct and decorator modes as the module-level factory.
        """
        built = command(source, *aliases, **options)
        if isinstance(built, Command):
            return self.add(built)

        @rename("command")
        def wrapper(handler, /):
            return self.add(built(handler))

        return wrapper

    def get(self, name, /):
        """
        Case-insensitive lookup; None when nothing is mounted under name.
        """
        if not isinstance(name, str):
            raise TypeError("registry get() argument must be a string")
        return self._commands.get(name.casefold())

    def __contains__(self, name, /):
        return isinstance(name, str) and name.casefold() in self._commands

    def __iter__(self):
        return iter(self.commands)

    def __len__(self):
        return len(self.commands)

    def fallback(self, fallback, /):
        """
        Register a one-time fallback handler for faults.

        Contract
        - fallback(ctx, fault) is called instead of raising/rendering the fault;
          it may be a coroutine function.
        - Can be set only once per registry (cannot be overridden).

        Returns
        - The same callable, enabling decorator-style usage: @registry.fallback
        """
        if not callable(fallback):
            raise TypeError("registry fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError("registry fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    async def invoke(self, text, /, session=None, translations=Unset):
        """
        Handle one raw message.

        Returns
        - the handler result; None when the message is not a command (missing
          prefix or nothing after it) or when a fault was surfaced.

        Raises
        - the surfaced fault, when there is no fallback and shell mode is off;
        - any exception raised by the handler, unchanged.
        """
        if not isinstance(text, str):
            raise TypeError("registry invoke() argument must be a string")
        if not text.startswith(self._prefix):
            return None
        if not (tokens := TokenStream(text[len(self._prefix):])):
            return None

        ctx = Context(tokens, session=session, translations=translations)

        if (command := self.get(tokens.name)) is None:
            return await self.trigger(self._unknown(ctx), ctx)

        command.seal()
        outcome = await resolve(command.actions, ctx)
        if isinstance(outcome, Failure):
            return await self.trigger(surface(outcome.diagnosis, ctx, route=tokens.name, actions=command.actions), ctx)
        return await execute(outcome, ctx)

    def _unknown(self, ctx, /):
        def translate(key, /, **fields):
            return ctx.translate("dispatch", key).format(**fields)

        aliases = [command.name for command in self.commands]
        suggestions = difflib.get_close_matches(
            ctx.name.casefold(),
            [alias.casefold() for alias in self._commands],
            5,
        )
        if suggestions:
            hint = translate("unknown_command_suggestion", suggestion=self._prefix + suggestions[0])
        else:
            hint = translate("unknown_command_hint", aliases=", ".join(self._prefix + alias for alias in aliases) or "-")
        return UnknownCommandError(
            translate("unknown_command", input=ctx.name),
            title=translate("unknown_command_title"),
            code=FaultCode.UNKNOWN_COMMAND,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_COMMAND),
            route=ctx.name,
            input=ctx.name,
            suggestions=suggestions,
        )

    async def trigger(self, fault, ctx, /):
        """
        Route one fault: fallback, then shell rendering, then raise.
        """
        if not isinstance(fault, CommandException):
            raise TypeError("registry trigger() argument must be a command exception")
        logger.debug("Surfacing %s for %r.", type(fault).__name__, ctx.tokens.text)
        fault = copy.replace(fault, shell=self._shell, fancy=self._fancy, colorful=self._colorful)
        if self._fallback is not Unset:
            result = self._fallback(ctx, fault)
            if inspect.isawaitable(result):
                await result
            return None
        trigger(fault)
        return None


__all__ = (
    "Command",
    "command",
    "Registry",
)

del CommandType
