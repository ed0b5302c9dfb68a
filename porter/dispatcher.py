"""
Porter command dispatcher.

CommandDispatcher.run(argv) drives one invocation from raw arguments to an exit code:

    start → expand response files → resolve command → bind options
          → (deprecation warnings) → execute → done
    any state → failed (exit 1, or the fault's exit_code)

Streams
- error text goes to stderr; usage/help, warnings and command output go to stdout.
- "-Verbosity quiet" silences everything on stdout; errors are always written.

Handled failures
- ResponseFileError / UnknownCommandError: error, then catalog usage.
- parse failures (unknown, duplicate, valueless or invalid options): error, then command help.
- positional count outside the command's arity: "<command>: invalid arguments.", then command help.
- ArgumentCombinationError from execute(): "<command>: invalid arguments. <message>", then command help.
- any other CommandException from execute(): its message; exit with its exit_code.
Everything else propagates to the caller unchanged.

Invocation switches handled before binding
- "-utf8" is removed from the token stream and switches the console streams to UTF-8.
- "-ForceEnglishOutput" anywhere disables localization for the whole invocation.
"""
import asyncio
import logging
import os
import sys

from . import config, resources
from .commands import CommandContext, builtins
from .console import Console, Verbosity
from .extensions import load_extensions
from .faults import (
    ArgumentCombinationError,
    CommandException,
    DeprecatedCommandWarning,
    DeprecatedOptionWarning,
    InvalidArgumentsError,
    ResponseFileError,
)
from .helper import HelpFormatter, deprecation_warning, option_deprecation_warning
from .logging import configure as configure_logging
from .parser import CommandLineParser, ParseFailure, ParseResult
from .registry import CommandRegistry
from .responses import ResponseFileExpander
from .services import Services
from .settings import MemorySettings
from .utils import *

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """
    run commands from argv-like token lists.

    parameters
    - registry: CommandRegistry to dispatch into; built from the built-in commands and the
      installed extensions when Unset.
    - console: porter.console.Console (stdout/stderr of the process when Unset).
    - settings/services: forwarded to every CommandContext.
    - settings_loader: callable(path) -> Settings, used when -ConfigFile is given.
    - environ: environment mapping (language override, prompting, extensions).
    - directory: base directory for relative response-file paths.
    - logs: configure the "porter" logger with a RichHandler for each run.
    """

    def __init__(
            self,
            registry=Unset,
            *,
            console=Unset,
            settings=Unset,
            services=Unset,
            settings_loader=Unset,
            environ=os.environ,
            directory=Unset,
            logs=False,
    ):
        self._registry = registry
        self.console = Console() if console is Unset else console
        self.settings = MemorySettings() if settings is Unset else settings
        self.services = Services() if services is Unset else services
        self.settings_loader = settings_loader
        self.environ = environ
        self.directory = directory
        self.logs = logs
        self.warnings = []

    @property
    def registry(self):
        if self._registry is Unset:
            registry = CommandRegistry(builtins())
            if not config.truthy(self.environ.get(config.IGNORE_EXTENSIONS_VARIABLE)):
                descriptors, self.warnings = load_extensions()
                registry.extend(descriptors)
            self._registry = registry
        return self._registry.freeze()

    def run(self, argv, /):
        """
        dispatch one invocation and return its exit code.
        """
        self.console.verbosity = Verbosity.NORMAL
        if self.logs:
            configure_logging(color=self.console.colorful)

        messages = resources.messages(self.environ)
        logger.debug("dispatching %r (culture %s)", argv, messages.culture)

        try:
            tokens = ResponseFileExpander(self.directory, messages=messages).expand(argv)
        except ResponseFileError as fault:
            return self._fail(fault, self._formatter(messages).render_catalog_help(self.registry))

        tokens, utf8 = self._strip_utf8(tokens)
        if utf8:
            self.console.use_utf8()
        if any(isinstance(token, str) and casefold(token) == "-forceenglishoutput" for token in tokens):
            messages = resources.ENGLISH

        registry = self.registry
        formatter = self._formatter(messages)

        for warning in self.warnings:
            self.console.warn(warning.__replace__(colorful=self.console.colorful))

        if not tokens:
            self.console.write(formatter.render_catalog_help(registry))
            return 0

        name, *rest = tokens

        try:
            descriptor = registry.resolve(name, messages=messages)
        except CommandException as fault:
            return self._fail(fault, formatter.render_catalog_help(registry))

        match CommandLineParser(messages=messages).parse(descriptor, rest):
            case ParseFailure(fault=fault):
                return self._fail(fault, formatter.render_command_help(descriptor))
            case ParseResult(command=command, arguments=arguments, deprecations=deprecations):
                logger.debug("bound %s with %d argument(s)", descriptor.name, len(arguments))

        verbosity = getattr(command, "verbosity", "normal")
        self.console.verbosity = Verbosity.parse(verbosity)
        self.console.interactive = not getattr(command, "non_interactive", False) and config.interactive(environ=self.environ)
        if self.logs:
            configure_logging(verbosity, color=self.console.colorful)

        if getattr(command, "help", False):
            self.console.write(formatter.render_command_help(descriptor))
            return 0

        if not descriptor.accepts(len(arguments)):
            fault = InvalidArgumentsError(
                messages("invalid-arguments", command=descriptor.name),
                command=descriptor.name,
                count=len(arguments),
            )
            return self._fail(fault, formatter.render_command_help(descriptor))

        if descriptor.deprecated:
            self.console.warn(DeprecatedCommandWarning(
                deprecation_warning(descriptor, messages),
                command=descriptor.name,
                colorful=self.console.colorful,
            ))
        for option in deprecations:
            self.console.warn(DeprecatedOptionWarning(
                option_deprecation_warning(option, messages),
                option=option.name,
                colorful=self.console.colorful,
            ))

        context = CommandContext(
            self.console,
            registry,
            settings=self._settings(command),
            services=self.services,
            messages=messages,
            formatter=formatter,
            directory=self.directory,
        )

        try:
            code = asyncio.run(command.bind(context).execute())
        except ArgumentCombinationError as fault:
            message = messages("invalid-arguments", command=descriptor.name)
            if fault.message:
                message = f"{message} {fault.message}"
            return self._fail(fault, formatter.render_command_help(descriptor), message=message)
        except CommandException as fault:
            logger.debug("%s failed with %s", descriptor.name, type(fault).__name__)
            return self._fail(fault)

        return 0 if code is None else int(code)

    def _formatter(self, messages):
        return HelpFormatter(messages=messages, colorful=self.console.colorful, width=self.console.width)

    def _settings(self, command):
        if (path := getattr(command, "config_file", None)) and self.settings_loader:
            return self.settings_loader(path)
        return self.settings

    def _strip_utf8(self, tokens):
        kept = [token for token in tokens if not (isinstance(token, str) and casefold(token) == "-utf8")]
        return kept, len(kept) != len(tokens)

    def _fail(self, fault, usage=None, /, *, message=Unset):
        if message is Unset:
            self.console.error(fault.__replace__(colorful=self.console.colorful))
        else:
            self.console.error(message)
        if usage is not None:
            self.console.write(usage)
        return fault.exit_code


def main(argv=None, /):
    """
    console-script entry point.
    """
    dispatcher = CommandDispatcher(logs=True)
    return dispatcher.run(sys.argv[1:] if argv is None else argv)


__all__ = (
    "CommandDispatcher",
    "main",
)
