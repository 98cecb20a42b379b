"""
Faults behavioral tests.

Scope
- Validate the message contract of parse exceptions and warnings.
- Validate trigger(): raising, warning and shell rendering.
- Validate ParseExit aggregation and FaultCode normalization hooks.

Conventions
- Test method names follow CamelCase per project convention.
- Host hooks in __main__ (__codes__, __docs__) are patched, never left behind.
"""

from __future__ import annotations

import contextlib
import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from argslots import (
    ParseException,
    UnknownArgumentError,
    MissingRequiredError,
    AliasOverrideWarning,
    AliasCollisionError,
    ParseExit,
    FaultCode,
    trigger,
    getdoc,
)


def render(renderable):
    buffer = io.StringIO()
    Console(file=buffer, width=120, color_system=None).print(renderable)
    return buffer.getvalue()


class TestParseException(TestCase):
    """Behavioral tests for ParseException and its subclasses."""

    def testStrIsMessage(self):
        fault = UnknownArgumentError("Unknown argument: --x", code=FaultCode.UNKNOWN_ARGUMENT)
        self.assertEqual(str(fault), "Unknown argument: --x")
        self.assertEqual(fault.message, "Unknown argument: --x")
        self.assertIsInstance(fault, ParseException)

    def testOptionsAreReadOnly(self):
        fault = UnknownArgumentError("Unknown argument: --x", index=1)
        with self.assertRaises(TypeError):
            fault.options["index"] = 2

    def testReplaceMergesOptions(self):
        fault = UnknownArgumentError("Unknown argument: --x", index=1)
        replaced = fault.__replace__(shell=True)
        self.assertIsInstance(replaced, UnknownArgumentError)
        self.assertEqual(replaced.message, fault.message)
        self.assertEqual(dict(replaced.options), {"index": 1, "shell": True})

    def testRendering(self):
        text = render(MissingRequiredError(
            "The following required arguments was not set: --msg or -m",
            title="missing required arguments",
            code=FaultCode.MISSING_REQUIRED,
            hint="add --msg",
        ))
        self.assertIn("11125", text)
        self.assertIn("Missing Required Arguments", text)
        self.assertIn("The following required arguments was not set: --msg or -m", text)
        self.assertIn("add --msg", text)


class TestTrigger(TestCase):
    """Behavioral tests for trigger()."""

    def testRaisesOutsideShell(self):
        with self.assertRaises(UnknownArgumentError) as context:
            trigger(UnknownArgumentError("Unknown argument: --x"), index=4)
        self.assertEqual(context.exception.options["index"], 4)

    def testPrintsInShell(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            trigger(UnknownArgumentError("Unknown argument: --x"), shell=True)
        self.assertIn("Unknown argument: --x", stderr.getvalue())

    def testWarnsOutsideShell(self):
        with self.assertWarns(AliasOverrideWarning):
            trigger(AliasOverrideWarning("alias '-a' was declared again"))

    def testRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


class TestParseExit(TestCase):
    """Behavioral tests for ParseExit."""

    def setUp(self):
        self.exit = ParseExit([
            UnknownArgumentError("Unknown argument: --x"),
            MissingRequiredError("The following required arguments was not set: --msg or -m"),
        ])

    def testGroupsExceptions(self):
        self.assertIsInstance(self.exit, ExceptionGroup)
        self.assertEqual(len(self.exit.exceptions), 2)
        self.assertEqual(self.exit.message, "\n".join((
            "Unknown argument: --x",
            "The following required arguments was not set: --msg or -m",
        )))

    def testTriggerRaises(self):
        with self.assertRaises(ParseExit):
            trigger(self.exit)

    def testTriggerExitsInShell(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            trigger(self.exit, shell=True)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("Unknown argument: --x", stderr.getvalue())
        self.assertIn("--msg or -m", stderr.getvalue())


class TestHostHooks(TestCase):
    """Behavioral tests for the __main__ integration points."""

    def testNormalizeDefault(self):
        with mock.patch.object(__import__("__main__"), "__codes__", {}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_ARGUMENT.normalize(), "11112")

    def testNormalizeCustom(self):
        codes = {FaultCode.UNKNOWN_ARGUMENT: "E-UNKNOWN"}
        with mock.patch.object(__import__("__main__"), "__codes__", codes, create=True):
            self.assertEqual(FaultCode.UNKNOWN_ARGUMENT.normalize(), "E-UNKNOWN")
            self.assertEqual(FaultCode.MISSING_REQUIRED.normalize(), "11125")

    def testGetdoc(self):
        docs = {FaultCode.CONVERSION_FAILURE: "values must match the option kind"}
        with mock.patch.object(__import__("__main__"), "__docs__", docs, create=True):
            self.assertEqual(getdoc(FaultCode.CONVERSION_FAILURE), "values must match the option kind")
            self.assertIsNone(getdoc(FaultCode.UNKNOWN_ARGUMENT))
        with self.assertRaises(TypeError):
            getdoc(11123)

    def testAliasCollisionError(self):
        error = AliasCollisionError("-a")
        self.assertEqual(error.alias, "-a")
        self.assertIs(error.code, FaultCode.ALIAS_COLLISION)
        self.assertIn("'-a'", str(error))


if __name__ == "__main__":
    unittest.main()
