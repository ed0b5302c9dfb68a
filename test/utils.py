"""
Tests for the internal helpers.

This module verifies the guarantees the rest of the package relies on:
- `Unset` is a falsy singleton distinct from None, usable in PEP 604 unions.
- `coalesce` replaces only `Unset`.
- `mirror` exposes read-only, detached views of private fields.
- `casefold` is the single case-insensitive key function.
"""
import copy
import unittest
from unittest import TestCase

from porter.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the exported instance on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInstanceCheck(self) -> None:
        """
        `str | Unset` accepts strings and the sentinel, nothing else.
        """
        self.assertIsInstance("name", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(None, str | Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    Test suite for coalesce, rename, mirror and casefold.
    """

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        for value in (None, 0, "", []):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)

    def testRename(self) -> None:
        def original():
            pass

        self.assertEqual(rename(original, "renamed").__qualname__, "renamed")
        self.assertEqual(rename("decorated")(lambda: None).__name__, "decorated")
        with self.assertRaises(TypeError):
            rename(42, "name")

    def testMirrorIsReadOnlyAndDetached(self) -> None:
        class Holder:
            values = mirror("values")

            def __init__(self):
                self._values = ["a"]

        holder = Holder()
        holder.values.append("b")
        self.assertEqual(holder.values, ["a"])
        with self.assertRaises(AttributeError):
            holder.values = []

    def testCasefold(self) -> None:
        self.assertEqual(casefold("NoHttpCache"), casefold("NOHTTPCACHE"))
        with self.assertRaises(TypeError):
            casefold(None)


if __name__ == "__main__":
    unittest.main()
