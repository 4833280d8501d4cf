"""
Tests for the internal helpers (Unset sentinel, coalesce, rename, mirror, labels).
"""
import copy
import pickle
import unittest
from unittest import TestCase

from botnaut.utils import *


class UnsetTest(TestCase):
    """
    Unset is a falsy, printable, final singleton preserved by copies.
    """

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopiesPreserveIdentity(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionInIsinstance(self) -> None:
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetChild", (UnsetType,), {})


class HelpersTest(TestCase):

    def testCoalesceKeepsFalseyValues(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)

    def testRenameDirectAndDecorator(self) -> None:
        def callback():
            pass

        self.assertIs(rename(callback, "other"), callback)
        self.assertEqual(callback.__name__, "other")
        self.assertEqual(callback.__qualname__, "other")

        @rename("decorated")
        def second():
            pass

        self.assertEqual(second.__name__, "decorated")

    def testRenameValidation(self) -> None:
        with self.assertRaises(TypeError):
            rename(42, "x")
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)
        with self.assertRaises(TypeError):
            rename()

    def testMirrorFreezesContainers(self) -> None:
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = [1, 2]

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        with self.assertRaises(AttributeError):
            holder.items = ()

    def testPluralize(self) -> None:
        self.assertEqual(pluralize("argument"), "arguments")
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("match"), "matches")
        self.assertEqual(pluralize("Action"), "Actions")

    def testOrdinal(self) -> None:
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(112), "112th")
        with self.assertRaises(ValueError):
            ordinal(0)


if __name__ == "__main__":
    unittest.main()
