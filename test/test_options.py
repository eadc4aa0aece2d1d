# python
"""
Option definition behavioral tests.

Scope
- Construction and sanitization of every field (name, switches, env, type, default,
  validators/handlers, descr, silent).
- Sink sugar ("positional", "--") and list-typing of sinks.
- from_mapping aliases, expand(), and the definitions() flattener.
- Representations: typename and masking of silent defaults.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argsenvs import OptionDefinition, Sink, ValueType, definitions


def accept(name, value, values):
    return None


class TestOptionDefinition(TestCase):
    """Field sanitization."""

    def testMinimalDefinition(self):
        d = OptionDefinition("name")
        self.assertEqual(d.name, "name")
        self.assertEqual(d.switches, ())
        self.assertIsNone(d.env)
        self.assertIs(d.type, ValueType.STRING)
        self.assertFalse(d.required)
        self.assertEqual(d.validators, ())
        self.assertEqual(d.handlers, ())
        self.assertIsNone(d.descr)
        self.assertFalse(d.silent)
        self.assertIsNone(d.sink)

    def testNameIsTrimmedAndValidated(self):
        self.assertEqual(OptionDefinition("  name ").name, "name")
        with self.assertRaises(ValueError):
            OptionDefinition("   ")
        with self.assertRaises(TypeError):
            OptionDefinition(12)  # type: ignore[arg-type]

    def testSingleStringSwitch(self):
        self.assertEqual(OptionDefinition("file", "--file").switches, ("--file",))

    def testSwitchesKeepOrder(self):
        self.assertEqual(OptionDefinition("integer", ("--int", "-i")).switches, ("--int", "-i"))

    def testSwitchesRejectEqualsAndWhitespace(self):
        with self.assertRaises(ValueError):
            OptionDefinition("file", "--file=x")
        with self.assertRaises(ValueError):
            OptionDefinition("file", ("--my file",))

    def testSwitchesRejectDuplicatesAndEmpty(self):
        with self.assertRaises(ValueError):
            OptionDefinition("file", ("--file", "--file"))
        with self.assertRaises(ValueError):
            OptionDefinition("file", ("",))
        with self.assertRaises(TypeError):
            OptionDefinition("file", (1,))  # type: ignore[arg-type]

    def testPositionalSugar(self):
        d = OptionDefinition("files", "positional")
        self.assertIs(d.sink, Sink.POSITIONAL)
        self.assertIs(d.switches, Sink.POSITIONAL)
        self.assertIs(d.type, ValueType.LIST)

    def testRemainderSugar(self):
        d = OptionDefinition("rest", "--")
        self.assertIs(d.sink, Sink.REMAINDER)
        self.assertIs(d.type, ValueType.LIST)

    def testSinkMustBeListTyped(self):
        with self.assertRaises(ValueError):
            OptionDefinition("files", Sink.POSITIONAL, type="string")

    def testTypeStringsAreNormalized(self):
        self.assertIs(OptionDefinition("n", type=" Integer ").type, ValueType.INTEGER)
        self.assertIs(OptionDefinition("n", type=ValueType.BOOLEAN).type, ValueType.BOOLEAN)

    def testUnknownTypeIsKeptVerbatim(self):
        self.assertEqual(OptionDefinition("n", type="float").type, "float")

    def testTypeMustBeString(self):
        with self.assertRaises(TypeError):
            OptionDefinition("n", type=float)  # type: ignore[arg-type]

    def testEnvValidation(self):
        self.assertEqual(OptionDefinition("n", env=" INTEGER ").env, "INTEGER")
        with self.assertRaises(ValueError):
            OptionDefinition("n", env="")
        with self.assertRaises(TypeError):
            OptionDefinition("n", env=None)  # type: ignore[arg-type]

    def testFalseyDefaultsAreRealDefaults(self):
        self.assertIs(OptionDefinition("flag", type="boolean", default=False).default, False)
        self.assertEqual(OptionDefinition("n", type="integer", default=0).default, 0)

    def testListDefaultIsFrozen(self):
        self.assertEqual(OptionDefinition("tags", type="list", default=["a"]).default, ("a",))

    def testSingleCallbackIsWrapped(self):
        d = OptionDefinition("n", validators=accept, handlers=[accept])
        self.assertEqual(d.validators, (accept,))
        self.assertEqual(d.handlers, (accept,))

    def testCallbacksMustBeCallables(self):
        with self.assertRaises(TypeError):
            OptionDefinition("n", validators="accept")  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            OptionDefinition("n", handlers=[accept, 1])  # type: ignore[list-item]

    def testAccepts(self):
        d = OptionDefinition("integer", ("--int", "-i"))
        self.assertTrue(d.accepts("-i"))
        self.assertFalse(d.accepts("--integer"))
        self.assertFalse(OptionDefinition("files", "positional").accepts("positional"))

    def testExpandKeepsNameOnly(self):
        d = OptionDefinition("integer", "--int", env="INTEGER", type="integer", default=3)
        stacked = d.expand(validators=accept)
        self.assertEqual(stacked.name, "integer")
        self.assertEqual(stacked.switches, ())
        self.assertIsNone(stacked.env)
        self.assertEqual(stacked.validators, (accept,))

    def testFieldsAreReadOnly(self):
        d = OptionDefinition("n")
        with self.assertRaises(AttributeError):
            d.name = "m"  # type: ignore[misc]


class TestFromMapping(TestCase):
    """Declarative option tables."""

    def testAliases(self):
        d = OptionDefinition.from_mapping({
            "name": "files",
            "arg": "positional",
            "validator": accept,
            "description": "input files",
        })
        self.assertIs(d.sink, Sink.POSITIONAL)
        self.assertEqual(d.validators, (accept,))
        self.assertEqual(d.descr, "input files")

    def testFieldNames(self):
        d = OptionDefinition.from_mapping({"name": "token", "switches": "--token", "silent": True})
        self.assertEqual(d.switches, ("--token",))
        self.assertTrue(d.silent)

    def testUnknownFieldRejected(self):
        with self.assertRaises(TypeError):
            OptionDefinition.from_mapping({"name": "n", "nargs": 2})

    def testAliasAndFieldTogetherRejected(self):
        with self.assertRaises(TypeError):
            OptionDefinition.from_mapping({"name": "n", "arg": "--n", "switches": "--n"})

    def testNameRequired(self):
        with self.assertRaises(TypeError):
            OptionDefinition.from_mapping({"arg": "--n"})


class TestDefinitions(TestCase):
    """Flattening of batches."""

    def testFlattensNestedBatches(self):
        batch = [
            OptionDefinition("a"),
            ({"name": "b"}, [OptionDefinition("c")]),
        ]
        self.assertEqual([d.name for d in definitions(batch, {"name": "d"})], ["a", "b", "c", "d"])

    def testRejectsStrings(self):
        with self.assertRaises(TypeError):
            list(definitions("a"))


class TestRepresentation(TestCase):
    """Readable and safe reprs."""

    def testTypename(self):
        self.assertEqual(type(OptionDefinition("n")).__typename__, "option-definition")
        self.assertTrue(repr(OptionDefinition("n")).startswith("option-definition(name='n'"))

    def testSilentDefaultIsMasked(self):
        d = OptionDefinition("token", "--token", default="s3cr3t", silent=True)
        self.assertNotIn("s3cr3t", repr(d))
        self.assertIn("default='***'", repr(d))
        self.assertEqual(d.default, "s3cr3t")

    def testRichRepr(self):
        fields = dict(OptionDefinition("n", "--n").__rich_repr__())
        self.assertEqual(fields["switches"], ("--n",))
        self.assertIn("silent", fields)


if __name__ == "__main__":
    unittest.main()
