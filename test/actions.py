"""
Action registration tests.

Scope
- Validate that malformed actions are rejected when they are built (never at dispatch).
- Validate defaults (names from the handler), signature and usage rendering.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from botnaut.actions import *
from botnaut.parsers import *


def handler(ctx, id, reason):
    pass


class ActionRegistrationTest(TestCase):
    """Registration-time contract of Action."""

    def testNamesDefaultToHandlerParameters(self):
        action = Action(handler, (IntegerParser(), StringParser()))
        self.assertEqual(action.names, ("id", "reason"))
        self.assertEqual(action.subcommand, "")
        self.assertIsNone(action.descr)
        self.assertIs(action.handler, handler)

    def testExplicitNames(self):
        action = Action(handler, (IntegerParser(), StringParser()), names=("member", "why"))
        self.assertEqual(action.names, ("member", "why"))
        with self.assertRaises(ValueError):
            Action(handler, (IntegerParser(), StringParser()), names=("member",))
        with self.assertRaises(ValueError):
            Action(handler, (IntegerParser(), StringParser()), names=("member", " "))
        with self.assertRaises(TypeError):
            Action(handler, (IntegerParser(), StringParser()), names="member why")

    def testArityMismatchRaises(self):
        with self.assertRaises(TypeError):
            Action(handler, (IntegerParser(),))
        with self.assertRaises(TypeError):
            Action(handler, (IntegerParser(), StringParser(), StringParser()))

    def testHandlerNeedsContextParameter(self):
        with self.assertRaises(TypeError):
            Action(lambda: None)

    def testVariadicHandlerRaises(self):
        def variadic(ctx, *args):
            pass

        with self.assertRaises(TypeError):
            Action(variadic, (StringParser(),))

    def testKeywordOnlyParametersNeedDefaults(self):
        def keyword(ctx, id, *, strict):
            pass

        def defaulted(ctx, id, *, strict=False):
            pass

        with self.assertRaises(TypeError):
            Action(keyword, (IntegerParser(),))
        self.assertEqual(Action(defaulted, (IntegerParser(),)).names, ("id",))

    def testNonParserRaises(self):
        with self.assertRaises(TypeError):
            Action(handler, (IntegerParser(), str))
        with self.assertRaises(TypeError):
            Action(handler, "parsers")

    def testNonCallableHandlerRaises(self):
        with self.assertRaises(TypeError):
            Action("handler")

    def testSubcommandValidation(self):
        def listing(ctx):
            pass

        self.assertEqual(Action(listing, subcommand="List").subcommand, "List")
        with self.assertRaises(ValueError):
            Action(listing, subcommand="two words")
        with self.assertRaises(TypeError):
            Action(listing, subcommand=None)

    def testIncompatibleAnnotationRaises(self):
        def typed(ctx, id: int, reason: str):
            pass

        Action(typed, (IntegerParser(), StringParser()))
        with self.assertRaises(TypeError):
            Action(typed, (StringParser(), StringParser()))

    def testSubclassAnnotationIsAccepted(self):
        def loose(ctx, flag: int):
            pass

        # bool is a subclass of int
        Action(loose, (BooleanParser(),))

    def testUnannotatedAndStringAnnotationsAreAccepted(self):
        def postponed(ctx, id: "Member"):  # NOQA: F821
            pass

        Action(postponed, (IntegerParser(),))

    def testDescrValidation(self):
        self.assertEqual(Action(handler, (IntegerParser(), StringParser()), descr="  ban  ").descr, "ban")
        with self.assertRaises(ValueError):
            Action(handler, (IntegerParser(), StringParser()), descr=" ")
        with self.assertRaises(TypeError):
            Action(handler, (IntegerParser(), StringParser()), descr=42)

    def testSignatureIsCaseInsensitive(self):
        def first(ctx, page):
            pass

        one = Action(first, (IntegerParser(),), subcommand="List")
        two = Action(first, (IntegerParser(minimum=1),), subcommand="LIST")
        self.assertEqual(one.signature, two.signature)
        self.assertEqual(one.signature, ("list", (IntegerParser,)))

    def testUsage(self):
        def listing(ctx):
            pass

        self.assertEqual(Action(handler, (IntegerParser(), StringParser())).usage, "<id> <reason...>")
        self.assertEqual(Action(listing, subcommand="list").usage, "list")

    def testReadOnlyProperties(self):
        action = Action(handler, (IntegerParser(), StringParser()))
        with self.assertRaises(AttributeError):
            action.subcommand = "other"
        self.assertIsInstance(action.parsers, tuple)

    def testRepr(self):
        def listing(ctx):
            pass

        self.assertEqual(
            repr(Action(listing, subcommand="list")),
            "action(subcommand='list', parsers=(), names=(), descr=None)",
        )

    def testDecorator(self):
        @action(IntegerParser(), subcommand="lift")
        def lift(ctx, id):
            pass

        self.assertIsInstance(lift, Action)
        self.assertEqual(lift.subcommand, "lift")
        self.assertEqual(lift.names, ("id",))


if __name__ == "__main__":
    unittest.main()
