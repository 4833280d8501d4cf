"""
Botnaut argument parsers.

A parser turns one token (or, for the last parameter of an action, the re-joined
tail of the invocation) into a typed value:

    value = parser.parse(ctx, token)          # plain value
    value = await parser.parse(ctx, token)    # or an awaitable resolving to one

Failure is signalled by raising ParseError(message); the message is user-facing
and is rendered after the argument position. Parsers are stateless and may be
shared by any number of actions and concurrent invocations.

Subclass Parser[_T] to support a new type; set the `type` class attribute to the
produced type so that action registration can check handler annotations:

    class MemberParser(Parser[Member]):
        type = Member

        async def parse(self, ctx, token):
            member = await ctx.session.find_member(token)
            if member is None:
                raise ParseError("no member matches %r" % token)
            return member

Built-ins
- StringParser: the token verbatim (non-empty).
- IntegerParser: base-10 integers, optionally bounded.
- FloatParser: finite decimal numbers.
- BooleanParser: yes/no, true/false, on/off, 1/0 (case-insensitive).
- ChoiceParser: one of a fixed set of words (case-insensitive).
"""
import math
from abc import ABC, abstractmethod

from .faults import ParseError
from .utils import Unset, coalesce


def _fail(ctx, key, /, **fields):
    return ParseError(ctx.translate("parsers", key).format(**fields))


class Parser[_T](ABC):
    """
    Base class for argument parsers.
    """
    type = object

    @abstractmethod
    def parse(self, ctx, token, /):
        """
        Convert token into a value of type `type`, or raise ParseError.

        May return an awaitable; the binder awaits it before invoking the next parser.
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}()"


class StringParser(Parser[str]):
    type = str

    def parse(self, ctx, token, /):
        if not token:
            raise _fail(ctx, "empty")
        return token


class IntegerParser(Parser[int]):
    type = int

    def __init__(self, minimum=Unset, maximum=Unset):
        if not isinstance(minimum, int | Unset) or isinstance(minimum, bool):
            raise TypeError("IntegerParser 'minimum' must be an integer")
        if not isinstance(maximum, int | Unset) or isinstance(maximum, bool):
            raise TypeError("IntegerParser 'maximum' must be an integer")
        if minimum is not Unset and maximum is not Unset and minimum > maximum:
            raise ValueError("IntegerParser 'minimum' cannot be greater than 'maximum'")
        self._minimum = minimum
        self._maximum = maximum

    @property
    def minimum(self):
        return coalesce(self._minimum)

    @property
    def maximum(self):
        return coalesce(self._maximum)

    def parse(self, ctx, token, /):
        if not token:
            raise _fail(ctx, "empty")
        try:
            value = int(token, 10)
        except ValueError:
            raise _fail(ctx, "integer", token=token) from None
        if self._minimum is not Unset and value < self._minimum:
            raise _fail(ctx, "integer_minimum", token=token, minimum=self._minimum)
        if self._maximum is not Unset and value > self._maximum:
            raise _fail(ctx, "integer_maximum", token=token, maximum=self._maximum)
        return value

    def __repr__(self):
        return f"IntegerParser(minimum={self.minimum!r}, maximum={self.maximum!r})"


class FloatParser(Parser[float]):
    type = float

    def parse(self, ctx, token, /):
        if not token:
            raise _fail(ctx, "empty")
        try:
            value = float(token)
        except ValueError:
            raise _fail(ctx, "float", token=token) from None
        # "nan"/"inf" are accepted by float() but never meant by a user
        if not math.isfinite(value):
            raise _fail(ctx, "float", token=token)
        return value


class BooleanParser(Parser[bool]):
    type = bool

    truthy = frozenset({"yes", "y", "true", "on", "1", "enable", "enabled"})
    falsy = frozenset({"no", "n", "false", "off", "0", "disable", "disabled"})

    def parse(self, ctx, token, /):
        if not token:
            raise _fail(ctx, "empty")
        if (folded := token.casefold()) in self.truthy:
            return True
        if folded in self.falsy:
            return False
        raise _fail(ctx, "boolean", token=token)


class ChoiceParser(Parser[str]):
    type = str

    def __init__(self, *choices):
        if not choices:
            raise TypeError("ChoiceParser must specify at least one choice")
        folded = {}
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError("ChoiceParser choices must be strings")
            elif not (choice := choice.strip()):
                raise ValueError("ChoiceParser choices cannot be empty-strings")
            elif choice.casefold() in folded:
                raise ValueError("ChoiceParser choices cannot contain duplicates")
            folded[choice.casefold()] = choice
        self._choices = folded

    @property
    def choices(self):
        return tuple(self._choices.values())

    def parse(self, ctx, token, /):
        if not token:
            raise _fail(ctx, "empty")
        try:
            return self._choices[token.casefold()]
        except KeyError:
            raise _fail(ctx, "choice", token=token, choices=", ".join(self.choices)) from None

    def __repr__(self):
        return f"ChoiceParser({", ".join(map(repr, self.choices))})"


__all__ = (
    "Parser",
    "StringParser",
    "IntegerParser",
    "FloatParser",
    "BooleanParser",
    "ChoiceParser",
)
