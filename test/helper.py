"""
Help formatter behavioral tests (terminal and markdown rendering).

Scope
- Validate per-command help: usage, description, options, examples.
- Validate that hidden options and hidden commands never appear.
- Validate deprecation markers and warnings in help output.
- Validate catalog help with and without include_all, in both syntaxes.

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is checked on Text.plain, with colors disabled.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from porter.catalog import OptionCatalog
from porter.helper import HelpFormatter, deprecation_warning, option_deprecation_warning
from porter.registry import CommandDescriptor


class Dummy:
    pass


RESTORE = CommandDescriptor(
    "restore",
    factory=Dummy,
    catalog=(
        OptionCatalog()
        .option("Source", multi=True, descr="A package source to use for this command.")
        .flag("NoCache", descr="Disable using the machine cache.", deprecated=True, alternative="NoHttpCache")
        .flag("NoHttpCache", descr="Disable using the http cache.")
        .option("PackagesDirectory", "OutputDirectory", descr="Specifies the packages folder.")
        .option("Secret", descr="Never shown.", hidden=True)
    ),
    descr="Restores packages.",
    usage="[<solution>] [options]",
    examples=("restore MySolution.sln",),
)

GREET = CommandDescriptor("greet", factory=Dummy, descr="Greets everybody.", deprecated=True, alternative="hello")
HIDDEN = CommandDescriptor("internal", factory=Dummy, descr="Internal plumbing.", hidden=True)
HELLO = CommandDescriptor("hello", factory=Dummy, descr="Greets somebody.")


class TestCommandHelp(TestCase):

    def setUp(self):
        self.formatter = HelpFormatter(width=100)

    def testPlainSections(self):
        text = self.formatter.render_command_help(RESTORE).plain
        self.assertTrue(text.startswith("usage: porter restore [<solution>] [options]"))
        self.assertIn("Restores packages.", text)
        self.assertIn("options:", text)
        self.assertIn("-Source +", text)
        self.assertIn("-PackagesDirectory (OutputDirectory)", text)
        self.assertIn("examples:", text)
        self.assertIn("porter restore MySolution.sln", text)

    def testHiddenOptionsAreNeverShown(self):
        for markdown in (False, True):
            with self.subTest(markdown=markdown):
                text = self.formatter.render_command_help(RESTORE, markdown=markdown).plain
                self.assertNotIn("Secret", text)
                self.assertNotIn("Never shown.", text)

    def testDeprecatedOptionIsMarked(self):
        text = self.formatter.render_command_help(RESTORE).plain
        line = next(line for line in text.splitlines() if "-NoCache" in line)
        self.assertIn("(deprecated)", line)
        self.assertIn("Option 'NoCache' has been deprecated. Use 'NoHttpCache' instead.", " ".join(text.split()))

    def testLongDescriptionsWrapUnderTheDescriptionColumn(self):
        descriptor = CommandDescriptor(
            "long",
            factory=Dummy,
            catalog=OptionCatalog().option("Value", descr=" ".join(["word"] * 40)),
        )
        lines = HelpFormatter(width=60).render_command_help(descriptor).plain.splitlines()
        option_lines = lines[lines.index("options:") + 1:]
        self.assertGreater(len(option_lines), 1)
        for line in option_lines[1:]:
            self.assertTrue(line.startswith(" " * HelpFormatter.indent))

    def testMarkdown(self):
        text = self.formatter.render_command_help(RESTORE, markdown=True).plain
        self.assertTrue(text.startswith("## restore"))
        self.assertIn("### Usage", text)
        self.assertIn("    porter restore [<solution>] [options]", text)
        self.assertIn("|Option|Description|", text)
        self.assertIn("|PackagesDirectory (OutputDirectory)|Specifies the packages folder.|", text)
        self.assertIn("### Examples", text)

    def testCommandWithoutOptions(self):
        text = self.formatter.render_command_help(HELLO).plain
        self.assertNotIn("options:", text)


class TestCatalogHelp(TestCase):

    def setUp(self):
        self.formatter = HelpFormatter()
        self.descriptors = [RESTORE, GREET, HIDDEN, HELLO]

    def testPlainListsVisibleCommandsSorted(self):
        text = self.formatter.render_catalog_help(self.descriptors).plain
        self.assertIn("usage: porter <command> [args] [options]", text)
        self.assertIn("Type 'porter help <command>' for help on a specific command.", text)
        self.assertIn("Available commands:", text)
        self.assertNotIn("internal", text)
        self.assertNotIn("greet", text)
        self.assertLess(text.index("hello"), text.index("restore"))
        self.assertIn("Greets somebody.", text)

    def testMarkdownTable(self):
        text = self.formatter.render_catalog_help(self.descriptors, markdown=True).plain
        self.assertIn("|Command|Description|", text)
        self.assertIn("|hello|Greets somebody.|", text)
        self.assertNotIn("greet", text)

    def testIncludeAllRendersDeprecatedCommands(self):
        text = self.formatter.render_catalog_help(self.descriptors, include_all=True).plain
        self.assertIn("(deprecated) greet", text)
        self.assertIn("usage: porter greet", text)
        self.assertIn(deprecation_warning(GREET), text)
        self.assertIn("usage: porter restore", text)
        self.assertNotIn("internal", text)

    def testIncludeAllMarkdown(self):
        text = self.formatter.render_catalog_help(self.descriptors, include_all=True, markdown=True).plain
        self.assertIn("## (deprecated) greet", text)
        self.assertIn("## restore", text)


class TestDeprecationWarnings(TestCase):

    def testCommandWithAlternative(self):
        self.assertEqual(deprecation_warning(GREET), "'porter greet' is deprecated. Use 'porter hello' instead.")

    def testCommandWithoutAlternative(self):
        descriptor = CommandDescriptor("old", factory=Dummy, deprecated=True)
        self.assertEqual(
            deprecation_warning(descriptor),
            "'porter old' is deprecated and will be removed in a future release.",
        )

    def testOption(self):
        self.assertEqual(
            option_deprecation_warning(RESTORE.catalog["NoCache"]),
            "Option 'NoCache' has been deprecated. Use 'NoHttpCache' instead.",
        )


if __name__ == "__main__":
    unittest.main()
