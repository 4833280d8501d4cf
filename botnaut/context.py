"""
Botnaut invocation context.

A Context is created once per invocation and handed to every parser and to
the chosen handler. It carries:
- tokens: the TokenStream of the invocation (token 0 is the invoked alias),
- session: an opaque handle to platform/session state (gateway client, message,
  channel…), never inspected by the engine,
- translate(namespace, key): lookup used to render diagnostics.

Translations are plain nested mappings {namespace: {key: template}} supplied by
the host. Missing entries fall back to the built-in English catalogue below, then
to "namespace.key" itself so that a missing translation is visible but harmless.
"""
from collections.abc import Mapping
from types import MappingProxyType

from .tokens import TokenStream
from .utils import Unset, coalesce

TRANSLATIONS = MappingProxyType({
    "dispatch": MappingProxyType({
        "missing_arguments": "missing arguments: {names}",
        "missing_arguments_title": "missing arguments",
        "missing_arguments_hint": "expected usage: {usage}",
        "argument_parse": "failed to parse the {ordinal} argument: {message}",
        "argument_parse_title": "unparsable argument",
        "argument_parse_hint": "check the value given at position {position} and try again",
        "unknown_subcommand": "unknown subcommand {input!r} for {route!r}",
        "unknown_subcommand_empty": "a subcommand is required for {route!r}",
        "unknown_subcommand_title": "unknown subcommand",
        "unknown_subcommand_hint": "available subcommands: {aliases}",
        "unknown_subcommand_suggestion": "did you mean {suggestion!r}? available subcommands: {aliases}",
        "unknown_command": "unknown command {input!r}",
        "unknown_command_title": "unknown command",
        "unknown_command_hint": "available commands: {aliases}",
        "unknown_command_suggestion": "did you mean {suggestion!r}?",
    }),
    "parsers": MappingProxyType({
        "empty": "a value is required",
        "integer": "{token!r} is not a whole number",
        "integer_minimum": "{token!r} must be at least {minimum}",
        "integer_maximum": "{token!r} must be at most {maximum}",
        "float": "{token!r} is not a number",
        "boolean": "{token!r} is not a yes/no value",
        "choice": "{token!r} is not one of: {choices}",
    }),
})


class Context:
    """
    Per-invocation state shared by parsers and handlers.

    Parameters
    - tokens: TokenStream | str
      The invocation; raw text is split on whitespace.
    - session: Any
      Opaque platform/session handle (defaults to None).
    - translations: Mapping[str, Mapping[str, str]] | Unset
      Host overrides merged over the built-in catalogue.
    """

    def __init__(self, tokens, /, session=None, translations=Unset):
        if isinstance(tokens, str):
            tokens = TokenStream(tokens)
        if not isinstance(tokens, TokenStream):
            raise TypeError("Context 'tokens' must be a token stream or a string")
        if not isinstance(translations := coalesce(translations, {}), Mapping):
            raise TypeError("Context 'translations' must be a mapping")
        for namespace in translations.values():
            if not isinstance(namespace, Mapping):
                raise TypeError("Context 'translations' values must be mappings")

        self._tokens = tokens
        self._session = session
        self._translations = MappingProxyType(dict(translations))

    @property
    def tokens(self):
        return self._tokens

    @property
    def session(self):
        return self._session

    @property
    def name(self):
        """
        The alias the command was invoked with.
        """
        return self._tokens.name

    def translate(self, namespace, key, /):
        """
        Return the template registered for (namespace, key).

        Lookup order: host translations, built-in catalogue, "namespace.key".
        """
        for catalogue in (self._translations, TRANSLATIONS):
            try:
                return catalogue[namespace][key]
            except KeyError:
                continue
        return f"{namespace}.{key}"

    def __repr__(self):
        return f"context(tokens={self._tokens!r}, session={self._session!r})"

    def __rich_repr__(self):
        yield "tokens", self._tokens
        yield "session", self._session


__all__ = (
    "Context",
    "TRANSLATIONS",
)
