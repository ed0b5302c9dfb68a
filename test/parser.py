"""
Command-line parser behavioral tests (binding, failures, deprecations).

Scope
- Validate binding of flags, values, repeated lists and key=value maps.
- Validate that positional arguments keep their order and shape.
- Validate friendly failures for unknown, duplicate, valueless and invalid options.
- Validate that used deprecated options are reported once.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (CommandLineParser, ParseResult, ParseFailure).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from porter.catalog import OptionCatalog
from porter.faults import (
    DuplicateOptionError,
    FaultCode,
    InvalidOptionValueError,
    MissingOptionValueError,
    UnknownOptionError,
)
from porter.parser import CommandLineParser, ParseFailure, ParseResult, is_switch
from porter.registry import CommandDescriptor


class Bag:
    pass


CATALOG = (
    OptionCatalog()
    .flag("Help", "?")
    .flag("NoCache", deprecated=True, alternative="NoHttpCache")
    .flag("NoHttpCache")
    .option("Source", multi=True)
    .option("ApiKey")
    .option("Verbosity", choices=("normal", "quiet", "detailed"), default="normal")
    .option("Project2ProjectTimeOut", type=int, target="project_timeout")
    .option("PackagesDirectory", "OutputDirectory")
    .pairs("Set")
)

DESCRIPTOR = CommandDescriptor("restore", factory=Bag, catalog=CATALOG)


class TestCommandLineParser(TestCase):
    """Binding tokens through the restore-like catalog above."""

    def setUp(self):
        self.parser = CommandLineParser()

    def parse(self, *tokens):
        return self.parser.parse(DESCRIPTOR, list(tokens))

    def testEmptyTokensBindDefaults(self):
        result = self.parse()
        self.assertIsInstance(result, ParseResult)
        self.assertEqual(result.arguments, [])
        self.assertIs(result.command.no_http_cache, False)
        self.assertEqual(result.command.source, [])
        self.assertEqual(result.command.verbosity, "normal")
        self.assertIsNone(result.command.api_key)

    def testFlagsAndValues(self):
        result = self.parse("MySolution.sln", "-NoHttpCache", "-ApiKey", "secret")
        self.assertEqual(result.arguments, ["MySolution.sln"])
        self.assertIs(result.command.no_http_cache, True)
        self.assertEqual(result.command.api_key, "secret")

    def testOptionsAreCaseInsensitive(self):
        result = self.parse("-nohttpcache", "-APIKEY", "k")
        self.assertIs(result.command.no_http_cache, True)
        self.assertEqual(result.command.api_key, "k")

    def testAliasesBindTheSameTarget(self):
        result = self.parse("-OutputDirectory", "packages")
        self.assertEqual(result.command.packages_directory, "packages")
        self.assertIs(self.parse("-?").command.help, True)

    def testRepeatedListOptionAppends(self):
        result = self.parse("-Source", "a", "-source", "b")
        self.assertEqual(result.command.source, ["a", "b"])

    def testMapOptionSplitsOnFirstEquals(self):
        result = self.parse("-Set", "HTTP_PROXY=http://host?a=b", "-Set", "Empty=")
        self.assertEqual(result.command.set, {"HTTP_PROXY": "http://host?a=b", "Empty": ""})

    def testMapOptionWithoutEqualsFails(self):
        failure = self.parse("-Set", "HTTP_PROXY")
        self.assertIsInstance(failure, ParseFailure)
        self.assertIsInstance(failure.fault, InvalidOptionValueError)
        self.assertEqual(failure.token, "-Set")

    def testValueIsTakenVerbatim(self):
        result = self.parse("-ApiKey", "-NoHttpCache")
        self.assertEqual(result.command.api_key, "-NoHttpCache")
        self.assertIs(result.command.no_http_cache, False)

    def testConverterIsApplied(self):
        self.assertEqual(self.parse("-Project2ProjectTimeOut", "30").command.project_timeout, 30)

    def testConverterFailure(self):
        failure = self.parse("-Project2ProjectTimeOut", "soon")
        self.assertEqual(failure.code, FaultCode.INVALID_OPTION_VALUE)
        self.assertEqual(failure.fault.message, "Invalid value 'soon' for option '-Project2ProjectTimeOut'.")

    def testChoicesAreNormalized(self):
        self.assertEqual(self.parse("-Verbosity", "QUIET").command.verbosity, "quiet")

    def testInvalidChoiceListsValidValues(self):
        failure = self.parse("-Verbosity", "loud")
        self.assertIsInstance(failure.fault, InvalidOptionValueError)
        self.assertIn("normal, quiet, detailed", failure.fault.message)

    def testUnknownOptionKeepsTheExactToken(self):
        failure = self.parse("-NoHttpCach")
        self.assertIsInstance(failure.fault, UnknownOptionError)
        self.assertEqual(failure.token, "-NoHttpCach")
        self.assertEqual(failure.fault.message, "'-NoHttpCach' is not a valid option.")
        self.assertIn("nohttpcache", failure.fault.options["suggestions"])
        self.assertIn("-nohttpcache", failure.fault.options["hint"])

    def testPrefixIsNotAnOption(self):
        failure = self.parse("-NoHttp")
        self.assertIsInstance(failure.fault, UnknownOptionError)

    def testMissingValue(self):
        failure = self.parse("-ApiKey")
        self.assertIsInstance(failure.fault, MissingOptionValueError)
        self.assertEqual(failure.fault.message, "Missing option value for: '-ApiKey'")

    def testDuplicateSingleValueOption(self):
        failure = self.parse("-ApiKey", "a", "-apikey", "b")
        self.assertIsInstance(failure.fault, DuplicateOptionError)
        self.assertEqual(failure.token, "-apikey")

    def testDuplicateFlagThroughAlias(self):
        failure = self.parse("-Help", "-?")
        self.assertIsInstance(failure.fault, DuplicateOptionError)

    def testNonSwitchTokensArePositional(self):
        tokens = ["-", "-5", "--", "", "   ", "value", "--Source"]
        result = self.parse(*tokens)
        self.assertEqual(result.arguments, tokens)

    def testDeprecatedOptionsAreReportedOnce(self):
        result = self.parse("-NoCache", "-NoHttpCache")
        self.assertEqual([option.name for option in result.deprecations], ["NoCache"])
        self.assertEqual(self.parse("-NoHttpCache").deprecations, ())

    def testEachParseUsesAFreshCommand(self):
        first = self.parse("-Source", "a")
        second = self.parse()
        self.assertIsNot(first.command, second.command)
        self.assertEqual(second.command.source, [])

    def testExtractOptionsRaises(self):
        command = DESCRIPTOR.create()
        with self.assertRaises(UnknownOptionError) as context:
            self.parser.extract_options(command, DESCRIPTOR, ["-Bogus"])
        self.assertEqual(context.exception.options["command"], "restore")

    def testExtractOptionsBindsInPlace(self):
        command = DESCRIPTOR.create()
        deprecations = self.parser.extract_options(command, DESCRIPTOR, ["x", "-NoCache"])
        self.assertEqual(command.arguments, ["x"])
        self.assertIs(command.no_cache, True)
        self.assertEqual(len(deprecations), 1)


class TestIsSwitch(TestCase):
    """Shape of option switches."""

    def testSwitches(self):
        for token in ("-Source", "-?", "-no-cache", "-x.y"):
            with self.subTest(token=token):
                self.assertTrue(is_switch(token))

    def testNotSwitches(self):
        for token in ("-", "-5", "--Source", "Source", "", None, "@file"):
            with self.subTest(token=token):
                self.assertFalse(is_switch(token))


if __name__ == "__main__":
    unittest.main()
