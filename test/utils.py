"""
Utilities tests (Unset sentinel, coalesce, rename, mirror).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import pickle
import unittest
from collections import namedtuple
from types import MappingProxyType
from unittest import TestCase

from mercurius.utils import Unset, UnsetType, coalesce, mirror, rename


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testSealed(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnion(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(3, str | Unset)

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "x"), "x")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce("", "x"), "")
        self.assertIsNone(coalesce(None, "x"))


class TestRename(TestCase):

    def testDirectForm(self):
        def f():
            pass

        self.assertIs(rename(f, "g"), f)
        self.assertEqual((f.__name__, f.__qualname__), ("g", "g"))

    def testDecoratorForm(self):
        @rename("h")
        def f():
            pass

        self.assertEqual(f.__name__, "h")

    def testArity(self):
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(print, "a", "b")
        with self.assertRaises(TypeError):
            rename("f", "g")


class TestMirror(TestCase):

    class Record:
        options = mirror("options")
        pair = mirror("pair")

        def __init__(self):
            self._options = {"-r": ["C1"], "-d": {"x"}}
            self._pair = namedtuple("Pair", ("vcs", "name"))("git", "branch")

    def testContainersAreFrozen(self):
        options = self.Record().options
        self.assertIsInstance(options, MappingProxyType)
        self.assertEqual(options["-r"], ("C1",))
        self.assertEqual(options["-d"], frozenset({"x"}))

    def testNamedTuplesKeepTheirType(self):
        self.assertEqual(self.Record().pair.name, "branch")

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.Record().options = {}

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            mirror(3)


if __name__ == "__main__":
    unittest.main()
