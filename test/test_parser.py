# python
"""
Façade behavioral tests.

Scope
- parse(): one-call resolution, ResolutionExit carrying every record, shell mode.
- ParserOptions: defaults from the process, mapping coercion, copy.replace().
- Parser: incremental registration, re-parsing, opt-in publishing.

Conventions
- Test method names follow CamelCase per project convention.
- argv and env are passed explicitly unless the test is about the process defaults.
"""

from __future__ import annotations

import contextlib
import copy
import io
import os
import sys
import unittest
from unittest import TestCase, mock

from argsenvs import (
    DuplicateSinkError,
    FaultCode,
    MissingValueError,
    OptionDefinition,
    Parser,
    ParserOptions,
    ResolutionExit,
    parse,
)

INTEGER = OptionDefinition("integer", ("--int", "-i"), env="INTEGER", type="integer", default=10)


class TestParse(TestCase):
    """One-call façade."""

    def testReturnsValues(self):
        values = parse({"argv": ["--int=12"], "env": {}}, INTEGER)
        self.assertEqual(dict(values), {"integer": 12})

    def testAcceptsMappingsAndIterables(self):
        values = parse(
            ParserOptions(["a", "b"], {}),
            [INTEGER, {"name": "files", "arg": "positional"}],
        )
        self.assertEqual(dict(values), {"integer": 10, "files": ("a", "b")})

    def testRaisesWithEveryError(self):
        with self.assertRaises(ResolutionExit) as context:
            parse(
                {"argv": ["--unknown", "--int=x"], "env": {}},
                INTEGER,
                OptionDefinition("token", "--token", env="TOKEN", required=True),
            )
        self.assertEqual(
            [error.code for error in context.exception.errors],
            [FaultCode.UNKNOWN_ARG, FaultCode.MISSING_ARG, FaultCode.PARSE],
        )

    def testConfigurationErrorsPropagate(self):
        with self.assertRaises(MissingValueError):
            parse({"argv": ["--int"], "env": {}}, INTEGER)

    def testShellModeExits(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            parse({"argv": ["--nope"], "env": {}, "shell": True, "colorful": False}, INTEGER)
        self.assertEqual(context.exception.code, 1)
        self.assertIn('Unknown command line option "--nope"', stderr.getvalue())


class TestParserOptions(TestCase):
    """Configuration bundle."""

    def testProcessDefaults(self):
        with mock.patch.object(sys, "argv", ["prog", "--int=3"]), mock.patch.dict(os.environ, {"INTEGER": "4"}):
            options = ParserOptions()
        self.assertEqual(options.argv, ("--int=3",))
        self.assertEqual(options.env["INTEGER"], "4")
        self.assertFalse(options.shell)
        self.assertTrue(options.colorful)

    def testEnvironmentIsSnapshotted(self):
        env = {"INTEGER": "4"}
        options = ParserOptions((), env)
        env["INTEGER"] = "5"
        self.assertEqual(options.env["INTEGER"], "4")

    def testCoerce(self):
        options = ParserOptions((), {})
        self.assertIs(ParserOptions.coerce(options), options)
        self.assertTrue(ParserOptions.coerce({"argv": (), "env": {}, "fancy": True}).fancy)
        with self.assertRaises(TypeError):
            ParserOptions.coerce(["--int"])  # type: ignore[arg-type]

    def testReplace(self):
        options = ParserOptions(["--int=1"], {})
        replaced = copy.replace(options, shell=True)
        self.assertTrue(replaced.shell)
        self.assertEqual(replaced.argv, ("--int=1",))
        self.assertFalse(options.shell)

    def testChecksTargetAndKey(self):
        with self.assertRaises(TypeError):
            ParserOptions((), {}, target=())  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            ParserOptions((), {}, target={}, key=1)  # type: ignore[arg-type]

    def testBooleanWordsMustNotBeStrings(self):
        with self.assertRaises(TypeError):
            ParserOptions((), {}, truthy="yes")  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            ParserOptions((), {}, falsey="no")  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            ParserOptions((), {}, truthy=1)  # type: ignore[arg-type]

    def testCustomBooleanWords(self):
        values = parse(
            ParserOptions(["--b=yep"], {}, truthy=["yep"], falsey=["nope"]),
            OptionDefinition("b", "--b", type="boolean"),
        )
        self.assertIs(values["b"], True)

    def testReprHidesEnvironment(self):
        self.assertNotIn("env=", repr(ParserOptions((), {"SECRET": "s3cr3t"})))


class TestParser(TestCase):
    """Stateful façade."""

    def testEmptyBeforeParse(self):
        parser = Parser({"argv": [], "env": {}}, INTEGER)
        self.assertFalse(parser.parsed)
        self.assertEqual(dict(parser.args), {})
        self.assertEqual(parser.errors, ())

    def testParse(self):
        parser = Parser({"argv": ["-i", "2"], "env": {}}, INTEGER)
        self.assertTrue(parser.parse())
        self.assertTrue(parser.parsed)
        self.assertEqual(dict(parser.args), {"integer": 2})

    def testFailedParse(self):
        parser = Parser({"argv": ["-i", "two"], "env": {}}, INTEGER)
        self.assertFalse(parser.parse())
        self.assertIs(parser.errors[0].code, FaultCode.PARSE)
        self.assertEqual(dict(parser.args), {})

    def testAddOptionReparses(self):
        parser = Parser({"argv": ["--name=n"], "env": {}}, INTEGER)
        self.assertFalse(parser.parse())
        parser.add_option(OptionDefinition("name", "--name"))
        self.assertEqual(parser.errors, ())
        self.assertEqual(dict(parser.args), {"integer": 10, "name": "n"})

    def testAddOptionsReparsesOnce(self):
        parser = Parser({"argv": [], "env": {}}, INTEGER)
        parser.parse()
        with mock.patch.object(parser, "parse", wraps=parser.parse) as spy:
            parser.add_options(OptionDefinition("a", default="a"), OptionDefinition("b", default="b"))
        self.assertEqual(spy.call_count, 1)
        self.assertEqual(list(parser.args), ["integer", "a", "b"])

    def testDeferredReparse(self):
        parser = Parser({"argv": [], "env": {}}, INTEGER)
        parser.parse()
        parser.add_option({"name": "extra", "default": "x"}, reparse=False)
        self.assertEqual(dict(parser.args), {"integer": 10, "extra": "x"})

    def testNoParseBeforeFirstParse(self):
        parser = Parser({"argv": [], "env": {}})
        with mock.patch.object(parser, "parse", wraps=parser.parse) as spy:
            parser.add_option(INTEGER)
        self.assertEqual(spy.call_count, 0)
        self.assertFalse(parser.parsed)

    def testPublishesIntoTarget(self):
        target = {}
        parser = Parser({"argv": [], "env": {}, "target": target}, INTEGER)
        parser.parse()
        self.assertEqual(target, {"integer": 10})

    def testPublishesUnderKey(self):
        target = {}
        Parser({"argv": [], "env": {}, "target": target, "key": "args"}, INTEGER).parse()
        self.assertEqual(dict(target["args"]), {"integer": 10})

    def testDeferredReparsePublishes(self):
        target = {}
        parser = Parser({"argv": [], "env": {}, "target": target}, INTEGER)
        parser.parse()
        parser.add_option(OptionDefinition("extra", default="x"), reparse=False)
        self.assertEqual(target, {"integer": 10})
        self.assertEqual(dict(parser.args), {"integer": 10, "extra": "x"})
        self.assertEqual(target, {"integer": 10, "extra": "x"})

    def testRejectedBatchLeavesParserUnchanged(self):
        target = {}
        parser = Parser(
            {"argv": ["--x", "1"], "env": {}, "target": target},
            OptionDefinition("files", "positional"),
        )
        parser.parse()
        with self.assertRaises(DuplicateSinkError):
            parser.add_options(OptionDefinition("x", "--x"), OptionDefinition("other", "positional"))
        self.assertEqual(parser.registry.names, ("files",))
        self.assertEqual(dict(parser.args), {"files": ("--x", "1")})
        self.assertEqual(dict(target), {"files": ("--x", "1")})

    def testFailedParseDoesNotPublish(self):
        target = {}
        Parser({"argv": ["--nope"], "env": {}, "target": target}, INTEGER).parse()
        self.assertEqual(target, {})


if __name__ == "__main__":
    unittest.main()
