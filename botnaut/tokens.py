"""
Botnaut token stream: the immutable, whitespace-split view over one invocation.

Conventions
- Token 0 is the invoked command alias; arguments start at 1 (or 2 when a
  subcommand alias was recognized).
- len(stream) counts every token, the command alias included.
- tail(i) re-joins tokens [i, len) with single spaces so that the last
  parameter of an action can be free-form text ("no longer needed").
- No normalization is performed besides the split: case and inner spelling
  are preserved, comparisons are the caller's business.

Example
    >>> tokens = TokenStream("ban 42 no longer   needed")
    >>> len(tokens), tokens[1], tokens.tail(2)
    (5, '42', 'no longer needed')
    >>> tokens.tail(9)
    ''
"""
from collections.abc import Iterable


class TokenStream:
    """
    Ordered, immutable sequence of tokens split from raw invocation text.
    """
    __slots__ = ("_tokens",)

    def __init__(self, text="", /):
        if not isinstance(text, str):
            raise TypeError("TokenStream() argument must be a string")
        object.__setattr__(self, "_tokens", tuple(text.split()))

    @classmethod
    def of(cls, tokens, /):
        """
        Build a stream from already-split tokens.

        Every item must be a non-empty string without whitespace; this keeps
        the stream equal to TokenStream(" ".join(tokens)).
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("TokenStream.of() argument must be an iterable of strings")
        tokens = tuple(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("TokenStream.of() argument must be an iterable of strings")
            if not token or token.split() != [token]:
                raise ValueError("TokenStream.of() tokens must be non-empty and whitespace-free")
        self = cls.__new__(cls)
        object.__setattr__(self, "_tokens", tokens)
        return self

    @property
    def name(self):
        """
        The invoked command alias (token 0), or an empty string for empty input.
        """
        return self._tokens[0] if self._tokens else ""

    @property
    def text(self):
        """
        Every token re-joined with single spaces.
        """
        return " ".join(self._tokens)

    def get(self, index, /):
        """
        Return the token at index verbatim; IndexError when out of range.
        """
        if not isinstance(index, int):
            raise TypeError("TokenStream indices must be integers")
        if not 0 <= index < len(self._tokens):
            raise IndexError("token index out of range")
        return self._tokens[index]

    def tail(self, index, /):
        """
        Tokens [index, len) joined with single spaces; "" past the end.
        """
        if not isinstance(index, int):
            raise TypeError("TokenStream indices must be integers")
        if index < 0:
            raise IndexError("token index out of range")
        return " ".join(self._tokens[index:])

    def __getitem__(self, index, /):
        return self.get(index)

    def __len__(self):
        return len(self._tokens)

    def __iter__(self):
        return iter(self._tokens)

    def __eq__(self, other, /):
        if not isinstance(other, TokenStream):
            return NotImplemented
        return self._tokens == other._tokens

    def __hash__(self):
        return hash(self._tokens)

    def __setattr__(self, name, value, /):
        raise AttributeError("token streams are immutable")

    def __delattr__(self, name, /):
        raise AttributeError("token streams are immutable")

    def __repr__(self):
        return f"token-stream({self.text!r})"

    def __rich_repr__(self):
        yield "tokens", self._tokens


__all__ = (
    "TokenStream",
)
