"""
Fault taxonomy and rendering tests.

Scope
- FaultCode values and host-provided normalization (__codes__ in __main__).
- Exception hierarchy, default codes, message/options handling.
- trigger(): raise in library mode, render and exit in shell mode.
- Rich rendering of plain and fancy faults.
- getdoc() lookup through __docs__ in __main__.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import io
import pickle
import unittest
from contextlib import redirect_stderr
from unittest import TestCase, mock

from rich.console import Console

from dashbind import (
    DashbindException,
    ArgumentError,
    NoAssignmentError,
    WrongFormatError,
    IncorrectValueError,
    IndirectValueError,
    NoValueError,
    WrongVariantError,
    CommandError,
    ParameterNameNotAllowedError,
    MissingCommandArgumentsError,
    NotEnoughArgumentsError,
    IncorrectCommandNameError,
    UnknownCommandError,
    FaultCode,
    trigger,
    getdoc,
)


def render(fault, width=100):
    console = Console(file=io.StringIO(), width=width)
    console.print(fault)
    return console.file.getvalue()


class TestHierarchy(TestCase):

    def testFamilies(self):
        for cls in (NoAssignmentError, WrongFormatError, IncorrectValueError, IndirectValueError, NoValueError):
            with self.subTest(cls=cls):
                self.assertTrue(issubclass(cls, ArgumentError))
        for cls in (
            ParameterNameNotAllowedError,
            MissingCommandArgumentsError,
            NotEnoughArgumentsError,
            IncorrectCommandNameError,
            UnknownCommandError,
        ):
            with self.subTest(cls=cls):
                self.assertTrue(issubclass(cls, CommandError))
        self.assertFalse(issubclass(WrongVariantError, ArgumentError))
        self.assertFalse(issubclass(WrongVariantError, CommandError))
        for cls in (ArgumentError, WrongVariantError, CommandError):
            self.assertTrue(issubclass(cls, DashbindException))
            self.assertTrue(issubclass(cls, Exception))

    def testDefaultCodes(self):
        self.assertIs(NoAssignmentError().code, FaultCode.NO_ASSIGNMENT)
        self.assertIs(WrongFormatError().code, FaultCode.WRONG_FORMAT)
        self.assertIs(IncorrectValueError().code, FaultCode.INCORRECT_VALUE)
        self.assertIs(IndirectValueError().code, FaultCode.INDIRECT_VALUE)
        self.assertIs(NoValueError().code, FaultCode.NO_VALUE)
        self.assertIs(WrongVariantError().code, FaultCode.WRONG_VARIANT)
        self.assertIs(ParameterNameNotAllowedError().code, FaultCode.PARAMETER_NAME_NOT_ALLOWED)
        self.assertIs(MissingCommandArgumentsError().code, FaultCode.MISSING_COMMAND_ARGUMENTS)
        self.assertIs(NotEnoughArgumentsError().code, FaultCode.NOT_ENOUGH_ARGUMENTS)
        self.assertIs(IncorrectCommandNameError().code, FaultCode.INCORRECT_COMMAND_NAME)
        self.assertIs(UnknownCommandError().code, FaultCode.UNKNOWN_COMMAND)
        self.assertIsNone(DashbindException().code)

    def testCodesAreUnique(self):
        self.assertEqual(len(set(FaultCode)), len(FaultCode.__members__))


class TestFault(TestCase):

    def testMessage(self):
        self.assertEqual(str(NoValueError("no -count")), "no -count")
        self.assertEqual(str(NoValueError()), "")

    def testOptionsAreReadOnly(self):
        fault = NoValueError("x", pattern="-count")
        self.assertEqual(fault.options["pattern"], "-count")
        with self.assertRaises(TypeError):
            fault.options["pattern"] = "-other"

    def testCodeOverride(self):
        self.assertIs(NoValueError(code=FaultCode.NO_ASSIGNMENT).code, FaultCode.NO_ASSIGNMENT)

    def testReplace(self):
        fault = NoValueError("x", pattern="-count")
        replaced = copy.replace(fault, shell=True)
        self.assertIsNot(replaced, fault)
        self.assertIs(type(replaced), NoValueError)
        self.assertEqual(str(replaced), "x")
        self.assertEqual(replaced.options["pattern"], "-count")
        self.assertTrue(replaced.options["shell"])
        self.assertNotIn("shell", fault.options)

    def testPickle(self):
        fault = pickle.loads(pickle.dumps(IncorrectValueError("bad", raw="x")))
        self.assertIs(type(fault), IncorrectValueError)
        self.assertEqual(str(fault), "bad")
        self.assertEqual(fault.options["raw"], "x")
        self.assertIs(fault.code, FaultCode.INCORRECT_VALUE)

    def testParameterName(self):
        self.assertEqual(ParameterNameNotAllowedError("x", name="count").name, "count")
        self.assertIsNone(ParameterNameNotAllowedError("x").name)


class TestTrigger(TestCase):

    def testRaisesOutsideShell(self):
        with self.assertRaises(NoValueError) as context:
            trigger(NoValueError("missing", pattern="-count"), colorful=True)
        self.assertTrue(context.exception.options["colorful"])
        self.assertEqual(context.exception.options["pattern"], "-count")

    def testExitsInShell(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            trigger(NoValueError("missing -count", hint="pass -count=<Int>"), shell=True)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("missing -count", stderr.getvalue())
        self.assertIn("pass -count=<Int>", stderr.getvalue())

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))
        with self.assertRaises(TypeError):
            trigger(object())


class TestRendering(TestCase):

    def testPlain(self):
        output = render(NoValueError("no value for -count", title="no value", hint="pass -count=<Int>"))
        lines = output.splitlines()
        self.assertIn("21105", lines[0])
        self.assertIn("No Value", lines[0])
        self.assertEqual(lines[1], "no value for -count")
        self.assertIn("pass -count=<Int>", lines[2])

    def testWithoutHint(self):
        output = render(NoValueError("no value for -count"))
        self.assertEqual(len(output.splitlines()), 2)

    def testFancy(self):
        output = render(NoValueError("no value for -count", title="no value", fancy=True))
        self.assertIn("21105", output)
        self.assertIn("no value for -count", output)
        self.assertIn("─", output)

    def testToolName(self):
        tool = mock.Mock()
        tool.name = "sum"
        self.assertIn("sum", render(NoValueError("x", tool=tool)).splitlines()[0])

    def testHostCodes(self):
        main = __import__("__main__")
        with mock.patch.object(main, "__codes__", {FaultCode.NO_VALUE: "E-NOVALUE"}, create=True):
            self.assertEqual(FaultCode.NO_VALUE.normalize(), "E-NOVALUE")
            self.assertIn("E-NOVALUE", render(NoValueError("x")))
        self.assertEqual(FaultCode.NO_VALUE.normalize(), "21105")


class TestGetdoc(TestCase):

    def testMissing(self):
        main = __import__("__main__")
        with mock.patch.object(main, "__docs__", {}, create=True):
            self.assertIsNone(getdoc(FaultCode.UNKNOWN_COMMAND))

    def testHostDocs(self):
        main = __import__("__main__")
        with mock.patch.object(main, "__docs__", {FaultCode.UNKNOWN_COMMAND: "see help"}, create=True):
            self.assertEqual(getdoc(FaultCode.UNKNOWN_COMMAND), "see help")

    def testRejectsNonCodes(self):
        with self.assertRaises(TypeError):
            getdoc(21305)


if __name__ == "__main__":
    unittest.main()
