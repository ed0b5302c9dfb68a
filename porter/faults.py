"""
Porter faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves through rich.
- trigger(): surface a fault with runtime options merged in (raise errors, emit warnings).

Families
- CommandException is the only family the dispatcher handles: its message goes to
  stderr and its exit_code (default 1) becomes the process exit code.
- Parse and resolution failures are CommandException subclasses as well, so a command
  may raise them from its own body and still get the uniform treatment.
- DuplicateCommandError is a configuration mistake (ValueError), never a user error.

Rendering options (all optional, merged with __replace__ or trigger())
- colorful: apply the palette (config.palette()).
- fancy: wrap the message in a panel titled "[ prog — code | title ]".
- hint: one extra actionable line rendered after an arrow.
"""
import warnings
from enum import IntEnum, StrEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from . import config
from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND
    - options (1111x/1112x)
      • UNKNOWN_OPTION, DUPLICATED_OPTION, OPTION_VALUE_REQUIRED,
        INVALID_OPTION_VALUE, INVALID_ARGUMENTS, ARGUMENT_COMBINATION
    - delegated (1113x)
      • COMMAND_FAILURE, SERVICE_UNAVAILABLE
    - response files (1115x)
      • RESPONSE_FILE_NOT_FOUND, RESPONSE_FILE_TOO_LARGE, RESPONSE_FILE_TOO_DEEP,
        RESPONSE_FILE_UNREADABLE
    - warnings (121xx)
      • DEPRECATED_OPTION, DEPRECATED_COMMAND, EXTENSION_FAILURE
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND             = 11101

    # --- option errors (11xxx) ---
    UNKNOWN_OPTION              = 11112
    DUPLICATED_OPTION           = 11115
    OPTION_VALUE_REQUIRED       = 11117
    INVALID_OPTION_VALUE        = 11124
    INVALID_ARGUMENTS           = 11125
    ARGUMENT_COMBINATION        = 11126

    # --- delegated errors (11xxx) ---
    COMMAND_FAILURE             = 11131
    SERVICE_UNAVAILABLE         = 11132

    # --- response file errors (11xxx) ---
    RESPONSE_FILE_NOT_FOUND     = 11151
    RESPONSE_FILE_TOO_LARGE     = 11152
    RESPONSE_FILE_TOO_DEEP      = 11153
    RESPONSE_FILE_UNREADABLE    = 11154

    # --- warnings (12xxx) ---
    DEPRECATED_OPTION           = 12112
    DEPRECATED_COMMAND          = 12113
    EXTENSION_FAILURE           = 12131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, kind):
    """
    shared rich rendering for errors and warnings.

    kind selects the palette keys ("error" or "warning").
    """
    styles = config.palette()
    colorful = fault.options.get("colorful", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    message = text(fault.message, styler(kind + "-message"))
    renders = [message]
    if hint := fault.options.get("hint"):
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if fault.options.get("fancy", False):
        header = Text.assemble(
            "[ ",
            text(config.program(), styler("prog-name")),
            " — ",
            text(fault.code.normalize(), styler("code" if kind == "error" else "warning-code")),
            " | ",
            text(fault.title.title(), styler(kind + "-title")),
            " ]",
        )
        return Panel(Group(*renders), title=header, title_align="left")

    return Group(*renders)


class Fault:
    """
    message + read-only options shared by errors and warnings.

    - code/title: taken from options when given, from __code__/__title__ otherwise.
    - __replace__(**overrides): a copy of the same type with options merged.
    """
    __code__ = FaultCode.COMMAND_FAILURE
    __title__ = "fault"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    def __str__(self):
        return coalesce(self.message, "")

    def __replace__(self, /, **overrides):
        return type(self)(self.message, **(dict(self.options) | overrides))


class CommandException(Fault, Exception):
    """
    base of every failure the dispatcher reports to the user.

    options
    - exit_code: process exit code when this fault ends the invocation (default 1).
    - code/title: override the class-level FaultCode and title.
    - any other context (token, option, path, ...) is kept read-only in .options.
    """
    __code__ = FaultCode.COMMAND_FAILURE
    __title__ = "command failure"

    @property
    def exit_code(self):
        return self.options.get("exit_code", 1)

    def __rich__(self):
        return _render(self, "error")

    def __trigger__(self):
        raise self


class ResponseFileReason(StrEnum):
    NOT_FOUND = "not-found"
    TOO_LARGE = "too-large"
    TOO_DEEP = "too-deep"
    UNREADABLE = "unreadable"


class ResponseFileError(CommandException):
    __title__ = "invalid response file"

    @property
    def reason(self):
        return self.options["reason"]

    @property
    def code(self):
        return self.options.get("code", {
            ResponseFileReason.NOT_FOUND: FaultCode.RESPONSE_FILE_NOT_FOUND,
            ResponseFileReason.TOO_LARGE: FaultCode.RESPONSE_FILE_TOO_LARGE,
            ResponseFileReason.TOO_DEEP: FaultCode.RESPONSE_FILE_TOO_DEEP,
            ResponseFileReason.UNREADABLE: FaultCode.RESPONSE_FILE_UNREADABLE,
        }[self.reason])


class UnknownCommandError(CommandException):
    __code__ = FaultCode.UNKNOWN_COMMAND
    __title__ = "unknown command"

    @property
    def name(self):
        return self.options.get("name")


class UnknownOptionError(CommandException):
    __code__ = FaultCode.UNKNOWN_OPTION
    __title__ = "unknown option"

    @property
    def token(self):
        return self.options.get("token")


class DuplicateOptionError(CommandException):
    __code__ = FaultCode.DUPLICATED_OPTION
    __title__ = "duplicated option"

    @property
    def token(self):
        return self.options.get("token")


class MissingOptionValueError(CommandException):
    __code__ = FaultCode.OPTION_VALUE_REQUIRED
    __title__ = "option value required"

    @property
    def token(self):
        return self.options.get("token")


class InvalidOptionValueError(CommandException):
    __code__ = FaultCode.INVALID_OPTION_VALUE
    __title__ = "invalid option value"

    @property
    def token(self):
        return self.options.get("token")


class InvalidArgumentsError(CommandException):
    __code__ = FaultCode.INVALID_ARGUMENTS
    __title__ = "invalid arguments"


class ArgumentCombinationError(CommandException):
    __code__ = FaultCode.ARGUMENT_COMBINATION
    __title__ = "invalid argument combination"


class ServiceUnavailableError(CommandException):
    __code__ = FaultCode.SERVICE_UNAVAILABLE
    __title__ = "service unavailable"


class DuplicateCommandError(ValueError):
    """
    two command descriptors claim the same name or alias.
    """

    def __init__(self, name, /):
        super().__init__(f"command name or alias {name!r} is registered more than once")
        self.name = name


class CommandWarning(Fault, Warning):
    """
    base of the warnings printed before a command runs (deprecations, broken extensions).
    """
    __code__ = FaultCode.DEPRECATED_COMMAND
    __title__ = "warning"

    def __rich__(self):
        return _render(self, "warning")

    def __trigger__(self):
        warnings.warn(self, stacklevel=3)


class DeprecatedCommandWarning(CommandWarning):
    __code__ = FaultCode.DEPRECATED_COMMAND
    __title__ = "deprecated command"


class DeprecatedOptionWarning(CommandWarning):
    __code__ = FaultCode.DEPRECATED_OPTION
    __title__ = "deprecated option"


class ExtensionWarning(CommandWarning):
    __code__ = FaultCode.EXTENSION_FAILURE
    __title__ = "extension failure"


def trigger(fault, /, **options):
    """
    merge options into fault, then raise it (errors) or warn with it (warnings).
    """
    if not isinstance(fault, Fault):
        raise TypeError(f"trigger() expects a fault, got {type(fault).__name__}")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "Fault",
    "CommandException",
    "ResponseFileReason",
    "ResponseFileError",
    "UnknownCommandError",
    "UnknownOptionError",
    "DuplicateOptionError",
    "MissingOptionValueError",
    "InvalidOptionValueError",
    "InvalidArgumentsError",
    "ArgumentCombinationError",
    "ServiceUnavailableError",
    "DuplicateCommandError",
    "CommandWarning",
    "DeprecatedCommandWarning",
    "DeprecatedOptionWarning",
    "ExtensionWarning",
    "trigger",
)
