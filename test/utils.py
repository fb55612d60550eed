"""
Tests for the internal helpers.

This module verifies semantic guarantees of the `Unset` sentinel and helpers:
- Singleton identity (single instance per interpreter process).
- Falsy semantics, representation and PEP 604 unions in isinstance checks.
- Copying, deep copying, pickling, and thread safety properties.
- Finality (type cannot be subclassed).
- coalesce(), rename() and mirror() contracts.
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from unittest import TestCase

from dashbind.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self) -> None:
        self.assertIs(Unset, UnsetType())
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, 0)
        self.assertNotEqual(Unset, "")

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")
        self.assertEqual(str(Unset), "Unset")

    def testUnion(self) -> None:
        """
        `str | Unset` and `Unset | str` both build unions usable by isinstance.
        """
        self.assertTrue(isinstance("text", str | Unset))
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance(Unset, Unset | int))
        self.assertFalse(isinstance(None, str | Unset))

    def testCopy(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(copy.deepcopy({"key": Unset})["key"], Unset)

    def testPickle(self) -> None:
        for protocol in range(pickle.HIGHEST_PROTOCOL + 1):
            with self.subTest(protocol=protocol):
                self.assertIs(pickle.loads(pickle.dumps(Unset, protocol)), Unset)

    def testThreadSafety(self) -> None:
        """
        Concurrent constructions all observe the same instance.
        """
        instances = []
        lock = Lock()

        def build():
            instance = UnsetType()
            with lock:
                instances.append(instance)

        threads = [Thread(target=build) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(instances), 16)
        self.assertTrue(all(instance is Unset for instance in instances))

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            class Derived(UnsetType):
                pass


class CoalesceTest(TestCase):

    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testPreservesFalseyValues(self) -> None:
        for value in (None, 0, "", (), False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):

    def testDirect(self) -> None:
        function = rename(lambda: None, "named")
        self.assertEqual(function.__name__, "named")
        self.assertEqual(function.__qualname__, "named")

    def testDecorator(self) -> None:
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")

    def testInvalid(self) -> None:
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)
        with self.assertRaises(TypeError):
            rename(42)
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename("name")(42)


class MirrorTest(TestCase):

    class Holder:
        items = mirror("items")
        table = mirror("table")
        tags = mirror("tags")
        label = mirror("label")

        def __init__(self):
            self._items = [1, 2]
            self._table = {"a": 1}
            self._tags = {"x"}
            self._label = "text"

    def testReadOnly(self) -> None:
        holder = self.Holder()
        with self.assertRaises(AttributeError):
            holder.label = "other"

    def testContainersAreCopied(self) -> None:
        holder = self.Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertEqual(holder.tags, frozenset({"x"}))
        holder.table["b"] = 2
        self.assertEqual(holder._table, {"a": 1})

    def testScalarsPassThrough(self) -> None:
        self.assertEqual(self.Holder().label, "text")

    def testName(self) -> None:
        self.assertEqual(self.Holder.label.fget.__name__, "label")

    def testInvalid(self) -> None:
        with self.assertRaises(TypeError):
            mirror(42)


if __name__ == "__main__":
    unittest.main()
