"""
Porter help rendering.

HelpFormatter turns command descriptors into rich Text, either as terminal help or as
markdown; both forms carry the same content (markdown only changes the syntax).

Rules
- hidden options are never rendered.
- catalog help lists non-hidden, non-deprecated commands by default; with include_all
  every non-hidden command is rendered in full and deprecated ones are prefixed with the
  localized deprecated marker and followed by their deprecation warning.

Palette keys (terminal form, when colorful)
- usage-label, program-name, usage-section, description-section, group-label
- command-name, command-description
- option-name, flag-name, alias, multi-marker, argument-description
- deprecated-name, deprecated-marker, deprecated-text
- examples-label, examples-dot, example

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed; deprecated-name still strikes through.
"""
import io

from rich.console import Console as RichConsole
from rich.text import Text

from . import config
from .resources import ENGLISH
from .utils import casefold


def deprecation_warning(descriptor, /, messages=ENGLISH):
    """
    the warning printed before a deprecated command runs (and under its help).
    """
    if descriptor.alternative:
        return messages("deprecated-command", command=descriptor.name, alternative=descriptor.alternative)
    return messages("deprecated-command-removal", command=descriptor.name)


def option_deprecation_warning(option, /, messages=ENGLISH):
    if option.alternative:
        return messages("deprecated-option", option=option.name, alternative=option.alternative)
    return messages("deprecated-option-removal", option=option.name)


class HelpFormatter:
    """
    render per-command and catalog-wide help.

    parameters
    - messages: resources.Messages used for labels.
    - colorful: apply the palette to terminal help.
    - width: wrapping width of terminal help.
    """
    padding = 2
    indent = 28

    def __init__(self, *, messages=ENGLISH, colorful=False, width=80):
        self.messages = messages
        self.colorful = colorful
        self.width = max(width, self.indent + 20)
        self._measure = RichConsole(file=io.StringIO(), width=self.width, color_system=None)
        self._styles = config.palette()

    def _styler(self, style):
        if "deprecated-name" in style and not self.colorful:
            return "strike"
        return self._styles[style] if self.colorful else ""

    def _text(self, fragment, style=""):
        if not fragment:
            return Text("")
        if not self.colorful:
            return Text(str(fragment), self._styler(style) if style == "deprecated-name" else "")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), self._styler(style))

    # --- single command ---

    def render_command_help(self, descriptor, /, *, markdown=False):
        """
        usage, description, options and examples of one command.
        """
        if markdown:
            return self._markdown_command(descriptor)
        return self._plain_command(descriptor)

    def _usage(self, descriptor):
        usage = Text()
        usage.append(self._text("usage", "usage-label")).append(":").append(" ")
        usage.append(self._text(config.program(), "program-name")).append(" ")
        usage.append(self._text(descriptor.name, "command-name"))
        if descriptor.usage:
            usage.append(" ").append(self._text(descriptor.usage, "usage-section"))
        return usage

    def _names(self, option):
        style = "deprecated-name" if option.deprecated else ("flag-name" if option.boolean else "option-name")
        names = Text()
        names.append(self._text("-" + option.name, style))
        for alias in sorted(option.aliases, key=casefold):
            names.append(" (").append(self._text(alias, "alias")).append(")")
        if option.multi:
            names.append(" ").append(self._text("+", "multi-marker"))
        return names

    def _option_descr(self, option):
        descr = Text()
        if option.deprecated:
            descr.append(self._text(self.messages["deprecated-marker"], "deprecated-marker"))
            if option.descr or option.alternative:
                descr.append(" ")
        if option.descr:
            descr.append(self._text(option.descr, "argument-description"))
        if option.deprecated and option.alternative:
            descr.append(" ").append(self._text(option_deprecation_warning(option, self.messages), "deprecated-text"))
        return descr

    def _plain_command(self, descriptor):
        renders = [self._usage(descriptor)]

        if descriptor.descr:
            renders.append(Text(""))
            renders.append(self._text(descriptor.descr, "description-section"))

        if options := descriptor.catalog.visible():
            renders.append(Text(""))
            renders.append(self._text(self.messages["options"], "group-label"))
            for option in options:
                section = Text(" " * self.padding).append(self._names(option))
                if descr := self._option_descr(option):
                    if len(section) >= self.indent:
                        section.append("\n").append(" " * self.indent)
                    else:
                        section.append(" " * (self.indent - len(section)))
                    wrapped = descr.wrap(self._measure, self.width - self.indent)
                    try:
                        section.append(wrapped.pop(0))
                    except IndexError:
                        pass
                    for line in wrapped:
                        section.append("\n").append(" " * self.indent).append(line)
                renders.append(section)

        if descriptor.examples:
            renders.append(Text(""))
            renders.append(self._text(self.messages["examples"], "examples-label"))
            dot = self._text(" • ", "examples-dot")
            for example in descriptor.examples:
                renders.append(Text.assemble(dot, self._text(f"{config.program()} {example}", "example")))

        return Text("\n").join(renders)

    def _markdown_command(self, descriptor, *, heading=None):
        lines = [f"## {heading or descriptor.name}", ""]
        if descriptor.descr:
            lines += [descriptor.descr, ""]
        lines += [
            f"### {self.messages['markdown-usage']}",
            "",
            f"    {config.program()} {descriptor.name}" + (f" {descriptor.usage}" if descriptor.usage else ""),
            "",
        ]
        if options := descriptor.catalog.visible():
            lines += [
                f"### {self.messages['markdown-options']}",
                "",
                f"|{self.messages['markdown-option-header']}|{self.messages['markdown-description-header']}|",
                "|---|---|",
            ]
            for option in options:
                name = option.name
                if option.aliases:
                    name += " (" + ", ".join(sorted(option.aliases, key=casefold)) + ")"
                if option.multi:
                    name += " +"
                descr = self._option_descr(option).plain.replace("|", "\\|")
                lines.append(f"|{name}|{descr}|")
            lines.append("")
        if descriptor.examples:
            lines += [f"### {self.messages['markdown-examples']}", ""]
            lines += [f"    {config.program()} {example}" for example in descriptor.examples]
            lines.append("")
        return Text("\n".join(lines).rstrip("\n"))

    # --- catalog ---

    def render_catalog_help(self, descriptors, /, *, include_all=False, markdown=False):
        """
        help for a set of commands (the registry, typically).
        """
        descriptors = sorted((d for d in descriptors if not d.hidden), key=lambda d: casefold(d.name))
        if include_all:
            return self._all(descriptors, markdown)
        descriptors = [descriptor for descriptor in descriptors if not descriptor.deprecated]
        if markdown:
            return self._markdown_catalog(descriptors)
        return self._plain_catalog(descriptors)

    def _plain_catalog(self, descriptors):
        renders = [
            self._text(self.messages("usage"), "usage-label"),
            self._text(self.messages("help-hint"), "description-section"),
            Text(""),
            self._text(self.messages["available-commands"], "group-label"),
            Text(""),
        ]
        column = max((len(d.name) for d in descriptors), default=0) + self.padding * 2
        for descriptor in descriptors:
            row = Text(" " * self.padding).append(self._text(descriptor.name, "command-name"))
            if descriptor.descr:
                row.append(" " * (column - len(row) + self.padding))
                row.append(self._text(descriptor.descr, "command-description"))
            renders.append(row)
        return Text("\n").join(renders)

    def _markdown_catalog(self, descriptors):
        lines = [
            f"## {self.messages['available-commands'].rstrip(':')}",
            "",
            self.messages("usage"),
            "",
            self.messages("help-hint"),
            "",
            "|Command|Description|",
            "|---|---|",
        ]
        for descriptor in descriptors:
            descr = (descriptor.descr or "").replace("|", "\\|")
            lines.append(f"|{descriptor.name}|{descr}|")
        return Text("\n".join(lines))

    def _all(self, descriptors, markdown):
        marker = self.messages["deprecated-marker"]
        sections = []
        for descriptor in descriptors:
            if markdown:
                heading = f"{marker} {descriptor.name}" if descriptor.deprecated else descriptor.name
                section = self._markdown_command(descriptor, heading=heading)
                if descriptor.deprecated:
                    section.append("\n\n").append(deprecation_warning(descriptor, self.messages))
            else:
                section = Text()
                if descriptor.deprecated:
                    section.append(self._text(marker, "deprecated-marker")).append(" ")
                    section.append(self._text(descriptor.name, "deprecated-name"))
                else:
                    section.append(self._text(descriptor.name, "command-name"))
                section.append("\n").append(self._plain_command(descriptor))
                if descriptor.deprecated:
                    section.append("\n").append(self._text(deprecation_warning(descriptor, self.messages), "deprecated-text"))
            sections.append(section)
        return Text("\n\n").join(sections)


__all__ = (
    "HelpFormatter",
    "deprecation_warning",
    "option_deprecation_warning",
)
