"""
Tests for the built-in parsers and the context translation lookup they rely on.
"""
import math
import unittest
from unittest import TestCase

from botnaut.context import *
from botnaut.faults import ParseError
from botnaut.parsers import *


class ParsersTest(TestCase):
    """
    Behavioral tests for the built-in parsers.
    """

    def setUp(self) -> None:
        self.ctx = Context("cmd")

    def testStringParserKeepsTokenVerbatim(self) -> None:
        self.assertEqual(StringParser().parse(self.ctx, "No Longer needed"), "No Longer needed")
        with self.assertRaises(ParseError):
            StringParser().parse(self.ctx, "")

    def testIntegerParser(self) -> None:
        parser = IntegerParser()
        self.assertEqual(parser.parse(self.ctx, "42"), 42)
        self.assertEqual(parser.parse(self.ctx, "-7"), -7)
        for token in ("abc", "4.2", "0x10", ""):
            with self.subTest(token=token), self.assertRaises(ParseError):
                parser.parse(self.ctx, token)

    def testIntegerParserBounds(self) -> None:
        parser = IntegerParser(minimum=1, maximum=10)
        self.assertEqual((parser.minimum, parser.maximum), (1, 10))
        self.assertEqual(parser.parse(self.ctx, "10"), 10)
        with self.assertRaises(ParseError) as captured:
            parser.parse(self.ctx, "0")
        self.assertIn("at least 1", captured.exception.message)
        with self.assertRaises(ParseError):
            parser.parse(self.ctx, "11")

    def testIntegerParserValidation(self) -> None:
        with self.assertRaises(TypeError):
            IntegerParser(minimum="1")
        with self.assertRaises(TypeError):
            IntegerParser(maximum=True)
        with self.assertRaises(ValueError):
            IntegerParser(minimum=5, maximum=1)

    def testFloatParserRejectsNonFinite(self) -> None:
        parser = FloatParser()
        self.assertTrue(math.isclose(parser.parse(self.ctx, "2.5"), 2.5))
        for token in ("nan", "inf", "-Infinity", "two"):
            with self.subTest(token=token), self.assertRaises(ParseError):
                parser.parse(self.ctx, token)

    def testBooleanParser(self) -> None:
        parser = BooleanParser()
        self.assertIs(parser.parse(self.ctx, "YES"), True)
        self.assertIs(parser.parse(self.ctx, "off"), False)
        with self.assertRaises(ParseError):
            parser.parse(self.ctx, "maybe")

    def testChoiceParserReturnsDeclaredSpelling(self) -> None:
        parser = ChoiceParser("Logs", "echo")
        self.assertEqual(parser.choices, ("Logs", "echo"))
        self.assertEqual(parser.parse(self.ctx, "LOGS"), "Logs")
        with self.assertRaises(ParseError) as captured:
            parser.parse(self.ctx, "other")
        self.assertIn("Logs, echo", captured.exception.message)

    def testChoiceParserValidation(self) -> None:
        with self.assertRaises(TypeError):
            ChoiceParser()
        with self.assertRaises(ValueError):
            ChoiceParser("a", "A")
        with self.assertRaises(ValueError):
            ChoiceParser(" ")

    def testParseErrorsDoNotChainConversionErrors(self) -> None:
        cases = ((IntegerParser(), "abc"), (FloatParser(), "two"), (ChoiceParser("logs"), "echo"))
        for parser, token in cases:
            with self.subTest(parser=parser), self.assertRaises(ParseError) as captured:
                parser.parse(self.ctx, token)
            self.assertIsNone(captured.exception.__cause__)
            self.assertTrue(captured.exception.__suppress_context__)

    def testParserIsAbstract(self) -> None:
        with self.assertRaises(TypeError):
            Parser()

    def testMessagesUseHostTranslations(self) -> None:
        ctx = Context("cmd", translations={"parsers": {"integer": "{token} n'est pas un entier"}})
        with self.assertRaises(ParseError) as captured:
            IntegerParser().parse(ctx, "abc")
        self.assertEqual(captured.exception.message, "abc n'est pas un entier")


class ContextTest(TestCase):

    def testAcceptsTextOrTokenStream(self) -> None:
        from botnaut.tokens import TokenStream

        self.assertEqual(Context("ban 42").tokens, TokenStream("ban 42"))
        self.assertEqual(Context(TokenStream("ban 42")).name, "ban")
        with self.assertRaises(TypeError):
            Context(42)

    def testSessionIsOpaque(self) -> None:
        session = object()
        self.assertIs(Context("ban", session=session).session, session)

    def testTranslateFallbacks(self) -> None:
        ctx = Context("ban", translations={"dispatch": {"unknown_command": "inconnu"}})
        self.assertEqual(ctx.translate("dispatch", "unknown_command"), "inconnu")
        self.assertEqual(ctx.translate("dispatch", "missing_arguments"), TRANSLATIONS["dispatch"]["missing_arguments"])
        self.assertEqual(ctx.translate("nowhere", "key"), "nowhere.key")

    def testTranslationsValidation(self) -> None:
        with self.assertRaises(TypeError):
            Context("ban", translations=["x"])
        with self.assertRaises(TypeError):
            Context("ban", translations={"dispatch": "x"})


if __name__ == "__main__":
    unittest.main()
