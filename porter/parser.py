r"""
Porter command-line parser.

Overview
- CommandLineParser binds a token stream onto a fresh command instance, using the
  command descriptor's OptionCatalog.
- parse() never raises for user mistakes: it returns a ParseResult on success and a
  ParseFailure (carrying the fault) otherwise. extract_options() is the raising twin for
  callers that bind onto an instance they already own.

Token grammar
- "-<name>" where <name> starts with a letter (or is "?") is an option switch,
  matched case-insensitively: exact names first, then aliases.
- Anything else ("-", "-5", "--", "", "   ", "value", "@x" left over) is a positional
  argument and is kept in order.

Binding
- flag:  presence sets the target to True.
- value: the next token, whatever it looks like, is the value.
- list:  like value; repeated occurrences append.
- map:   like list, but each value is a "key=value" pair split on the first "=".
- converters and choices apply to every value; failures become InvalidOptionValueError.
- a non-repeatable option given twice is a DuplicateOptionError.
"""
import difflib
import logging
import re
from collections import deque
from typing import NamedTuple

from .faults import (
    DuplicateOptionError,
    InvalidOptionValueError,
    MissingOptionValueError,
    UnknownOptionError,
    trigger,
)
from .resources import ENGLISH

logger = logging.getLogger(__name__)

_SWITCH = re.compile(r"-(?P<name>[^\W\d_][\w.-]*|\?)")


class ParseResult(NamedTuple):
    command: object
    arguments: list
    deprecations: tuple = ()


class ParseFailure(NamedTuple):
    fault: object

    @property
    def code(self):
        return self.fault.code

    @property
    def token(self):
        return self.fault.options.get("token")


def is_switch(token, /):
    """
    tell whether a token has the shape of an option switch.
    """
    return isinstance(token, str) and _SWITCH.fullmatch(token) is not None


class CommandLineParser:
    """
    bind tokens onto command instances.

    parameters
    - messages: resources.Messages used to phrase failures.
    """

    def __init__(self, *, messages=ENGLISH):
        self.messages = messages

    def parse(self, descriptor, tokens, /):
        """
        create a command from descriptor and bind tokens onto it.

        returns ParseResult(command, arguments, deprecations) or ParseFailure(fault).
        """
        command = descriptor.create()
        outcome = self._bind(command, descriptor, tokens)
        if isinstance(outcome, ParseFailure):
            logger.debug("parsing %s failed: %s", descriptor.name, outcome.fault)
            return outcome
        return ParseResult(command, list(command.arguments), outcome)

    def extract_options(self, command, descriptor, tokens, /):
        """
        bind tokens onto an existing command; raise the fault of a failed parse.

        returns the deprecated option descriptors that were used.
        """
        outcome = self._bind(command, descriptor, tokens)
        if isinstance(outcome, ParseFailure):
            trigger(outcome.fault, command=descriptor.name)
        return outcome

    def _bind(self, command, descriptor, tokens):
        catalog = descriptor.catalog
        if not isinstance(getattr(command, "arguments", None), list):
            command.arguments = []

        tokens = deque(tokens)
        seen = set()
        deprecations = []

        while tokens:
            token = tokens.popleft()
            if not isinstance(token, str) or not (match := _SWITCH.fullmatch(token)):
                command.arguments.append(token)
                continue

            option = catalog.get(match["name"])
            if option is None:
                return ParseFailure(self._unknown(descriptor, token, match["name"]))

            if option in seen and not option.multi:
                return ParseFailure(DuplicateOptionError(
                    self.messages("duplicate-option", token=token),
                    token=token,
                    option=option.name,
                    command=descriptor.name,
                ))
            seen.add(option)

            if option.deprecated and option not in deprecations:
                deprecations.append(option)

            if option.boolean:
                setattr(command, option.target, True)
                continue

            try:
                value = tokens.popleft()
            except IndexError:
                return ParseFailure(MissingOptionValueError(
                    self.messages("missing-option-value", token=token),
                    token=token,
                    option=option.name,
                    command=descriptor.name,
                ))

            if option.kind == "map":
                key, separator, value = str(value).partition("=")
                if not separator or not key.strip():
                    return ParseFailure(InvalidOptionValueError(
                        self.messages("invalid-option-pair", token=token, value=key + separator + value),
                        token=token,
                        value=key + separator + value,
                        option=option.name,
                        command=descriptor.name,
                    ))
                key = key.strip()

            try:
                value = option.convert(value)
            except (TypeError, ValueError):
                if option.choices:
                    message = self.messages(
                        "invalid-option-choice",
                        token=token,
                        value=value,
                        choices=", ".join(map(str, option.choices)),
                    )
                else:
                    message = self.messages("invalid-option-value", token=token, value=value)
                return ParseFailure(InvalidOptionValueError(
                    message,
                    token=token,
                    value=value,
                    option=option.name,
                    command=descriptor.name,
                ))

            match option.kind:
                case "list":
                    getattr(command, option.target).append(value)
                case "map":
                    getattr(command, option.target)[key] = value
                case _:
                    setattr(command, option.target, value)

        return tuple(deprecations)

    def _unknown(self, descriptor, token, name):
        names = [candidate.lower() for candidate in descriptor.catalog.names()]
        suggestions = difflib.get_close_matches(name.lower(), names, 3)
        if suggestions:
            hint = self.messages("unknown-option-suggestion", suggestion=suggestions[0], command=descriptor.name)
        else:
            hint = self.messages("unknown-option-hint", command=descriptor.name)
        return UnknownOptionError(
            self.messages("unknown-option", token=token),
            token=token,
            command=descriptor.name,
            suggestions=suggestions,
            hint=hint,
        )


__all__ = (
    "ParseResult",
    "ParseFailure",
    "CommandLineParser",
    "is_switch",
)
