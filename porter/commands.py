"""
Porter commands.

Overview
- Command: base class of every command. An instance is created per invocation by its
  descriptor, receives its bound options as attributes (see OptionCatalog targets) and
  its positional arguments in .arguments, then is bound to a CommandContext and executed.
- @command(name, *aliases, options=..., **metadata): class decorator that attaches the
  CommandDescriptor (as __descriptor__) built from the common options plus the
  command-specific ones.
- builtins(): descriptors of the built-in commands, in registration order.

Execution contract
- execute() is a coroutine; the dispatcher awaits it to completion.
- returning an int sets the process exit code; returning None means success (0).
- raising a CommandException reports its message and exits with its exit_code; raising
  ArgumentCombinationError additionally reports "<command>: invalid arguments." and the
  command help.
- collaborators come from self.services.require(...); missing ones raise
  ServiceUnavailableError.
"""
import os

from .catalog import OptionCatalog
from .faults import ArgumentCombinationError, CommandException
from .helper import HelpFormatter
from .registry import CommandDescriptor
from .resources import ENGLISH
from .services import RestoreRequest, Services, VerifyRequest
from .settings import (
    API_KEYS_SECTION,
    CONFIG_SECTION,
    CREDENTIALS_SECTION,
    DISABLED_SOURCES_SECTION,
    SOURCES_SECTION,
    MemorySettings,
)
from .utils import *

COMMON = (
    OptionCatalog()
    .flag("Help", "?", descr="Displays help information for the command.")
    .option(
        "Verbosity",
        choices=("normal", "quiet", "detailed"),
        default="normal",
        descr="Display this amount of details in the output: normal, quiet, detailed.",
    )
    .flag("NonInteractive", descr="Do not prompt for user input or confirmations.")
    .option(
        "ConfigFile",
        descr="The configuration file. If not specified, the settings of the current user are used.",
    )
    .flag(
        "ForceEnglishOutput",
        descr="Forces the command line to run using an invariant, English-based culture.",
    )
)


class CommandContext:
    """
    everything a command may reach while executing.

    - console: porter.console.Console
    - registry: the CommandRegistry in use (help needs it)
    - settings: porter.settings.Settings (MemorySettings when Unset)
    - services: porter.services.Services (an empty container when Unset)
    - messages: resources.Messages of the active culture
    - formatter: porter.helper.HelpFormatter used by help
    - directory: working directory of the invocation
    """

    def __init__(
            self,
            console,
            registry,
            *,
            settings=Unset,
            services=Unset,
            messages=ENGLISH,
            formatter=Unset,
            directory=Unset,
    ):
        self.console = console
        self.registry = registry
        self.settings = MemorySettings() if settings is Unset else settings
        self.services = Services() if services is Unset else services
        self.messages = messages
        if formatter is Unset:
            formatter = HelpFormatter(messages=messages, colorful=console.colorful, width=console.width)
        self.formatter = formatter
        self.directory = coalesce(directory, os.getcwd())


class Command:
    """
    base class of all commands; subclasses implement execute().
    """
    __descriptor__ = None

    context = None
    arguments = ()

    def bind(self, context, /):
        self.context = context
        return self

    @property
    def console(self):
        return self.context.console

    @property
    def settings(self):
        return self.context.settings

    @property
    def services(self):
        return self.context.services

    @property
    def messages(self):
        return self.context.messages

    def require(self, service, /):
        return self.services.require(service, messages=self.messages)

    async def execute(self):
        raise NotImplementedError(f"{type(self).__name__} must implement execute()")


def command(name, /, *aliases, options=Unset, common=COMMON, **metadata):
    """
    attach a CommandDescriptor to a Command subclass.

    options are appended to common; metadata is forwarded to CommandDescriptor.
    """
    catalog = common.merge(coalesce(options, OptionCatalog()))

    def wrapper(cls):
        if not isinstance(cls, type) or not issubclass(cls, Command):
            raise TypeError("@command() must be applied to a Command subclass")
        cls.__descriptor__ = CommandDescriptor(name, *aliases, factory=cls, catalog=catalog, **metadata)
        return cls

    return rename(wrapper, "command")


def default_push_source(settings, /):
    return settings.get_value(CONFIG_SECTION, "DefaultPushSource")


@command(
    "restore",
    options=(
        OptionCatalog()
        .option("Source", multi=True, descr="A package source to use for this command.")
        .option("FallbackSource", multi=True, descr="A package source to use as a fallback for this command.")
        .flag(
            "NoCache",
            descr="Disable using the machine cache as the first package source.",
            deprecated=True,
            alternative="NoHttpCache",
        )
        .flag("NoHttpCache", descr="Disable using the http cache when fetching packages.")
        .flag("DirectDownload", descr="Download directly without populating any caches with metadata or binaries.")
        .flag("DisableParallelProcessing", descr="Disable parallel processing of packages for this command.")
        .option(
            "PackageSaveMode",
            choices=("nuspec", "nupkg", "nuspec;nupkg"),
            descr="Specifies types of files to save after package installation: nuspec, nupkg, nuspec;nupkg.",
        )
        .flag("RequireConsent", descr="Checks if package restore consent is granted before installing a package.")
        .option(
            "Project2ProjectTimeOut",
            type=int,
            target="project_timeout",
            descr="Timeout in seconds for resolving project to project references.",
        )
        .option("PackagesDirectory", "OutputDirectory", descr="Specifies the packages folder.")
        .option("SolutionDirectory", descr="Specifies the solution directory.")
        .option("MSBuildVersion", descr="Specifies the version of MSBuild to be used with this command.")
        .option("MSBuildPath", descr="Specifies the path of MSBuild to be used with this command.")
        .flag("Recursive", descr="Restore all referenced projects, recursively.")
        .flag("Force", descr="Forces restore to reevaluate all dependencies even if a lock file exists.")
        .flag("UseLockFile", descr="Enables project lock file to be generated and used with restore.")
        .flag("LockedMode", descr="Don't allow updating project lock file.")
        .option("LockFilePath", descr="Output location where project lock file is written.")
        .flag("ForceEvaluate", descr="Forces restore to reevaluate all dependencies even if a lock file already exists.")
    ),
    descr="Restores packages referenced by a solution or project.",
    usage="[<solution> | <project> | <packages.config>] [options]",
    examples=("restore MySolution.sln", "restore packages.config -PackagesDirectory ..\\packages"),
    max_args=1,
)
class RestoreCommand(Command):
    async def execute(self):
        restorer = self.require("restorer")
        request = RestoreRequest(
            target=self.arguments[0] if self.arguments else None,
            sources=tuple(self.source),
            fallback_sources=tuple(self.fallback_source),
            packages_directory=self.packages_directory,
            solution_directory=self.solution_directory,
            no_http_cache=self.no_http_cache or self.no_cache,
            direct_download=self.direct_download,
            parallel=not self.disable_parallel_processing,
            package_save_mode=self.package_save_mode,
            require_consent=self.require_consent,
            project_timeout=self.project_timeout,
            msbuild_version=self.ms_build_version,
            msbuild_path=self.ms_build_path,
            recursive=self.recursive,
            force=self.force,
            use_lock_file=self.use_lock_file,
            locked_mode=self.locked_mode,
            lock_file_path=self.lock_file_path,
            force_evaluate=self.force_evaluate,
            interactive=self.console.interactive,
        )
        if await restorer.restore(request) is False:
            self.console.error(self.messages("restore-failed"))
            return 1
        self.console.write(self.messages("restore-done"))


@command(
    "delete",
    options=(
        OptionCatalog()
        .option("Source", descr="Package source (URL, UNC/folder path) to delete from.")
        .flag("NoPrompt", descr="Do not prompt when deleting.")
        .option("ApiKey", descr="The API key for the server.")
        .flag("NoServiceEndpoint", descr="Does not append \"api/v2/package\" to the source URL.")
    ),
    descr="Deletes a package from the server.",
    usage="<package id> <package version> [api key] [options]",
    examples=("delete MyPackage 1.0 -Source http://example.com -NoPrompt",),
    min_args=2,
    max_args=3,
)
class DeleteCommand(Command):
    async def execute(self):
        package, version, *rest = self.arguments
        if not (source := self.source or default_push_source(self.settings)):
            raise ArgumentCombinationError(self.messages("missing-source"))
        api_key = self.api_key or (rest[0] if rest else None) or self.settings.get_value(API_KEYS_SECTION, source)

        question = self.messages("delete-confirm", package=package, version=version, source=source)
        if not self.no_prompt and not self.console.confirm(question):
            self.console.write(self.messages("delete-cancelled"))
            return

        publisher = self.require("publisher")
        await publisher.delete(
            package,
            version,
            source=source,
            api_key=api_key,
            no_service_endpoint=self.no_service_endpoint,
        )
        self.console.write(self.messages("delete-done", package=package, version=version))


_INVALID_PATH_CHARACTERS = frozenset('\0<>"|?*')


@command(
    "config",
    options=(
        OptionCatalog()
        .pairs("Set", descr="One or more key-value pairs to be set in config; an empty value removes the key.")
        .flag("AsPath", descr="Returns the config value as a path.")
    ),
    descr="Gets or sets configuration values.",
    usage="<-Set name=value | name> [options]",
    examples=("config -Set HTTP_PROXY=http://127.0.0.1:8888", "config HTTP_PROXY"),
    max_args=1,
)
class ConfigCommand(Command):
    async def execute(self):
        if self.set:
            for key, value in self.set.items():
                if value:
                    self.settings.set_value(CONFIG_SECTION, key, value)
                else:
                    self.settings.delete_value(CONFIG_SECTION, key)
            return

        if not self.arguments:
            raise ArgumentCombinationError(self.messages("config-nothing"))

        key = self.arguments[0]
        if (raw := self.settings.get_value(CONFIG_SECTION, key)) is None:
            raise CommandException(self.messages("config-missing-key", key=key), key=key)

        if self.as_path:
            if _INVALID_PATH_CHARACTERS & set(raw):
                raise CommandException(self.messages("config-invalid-path", key=key, value=raw), key=key, value=raw)
            raw = self.settings.get_value(CONFIG_SECTION, key, as_path=True)
        self.console.write(raw)


LOCAL_RESOURCES = ("all", "http-cache", "global-packages", "temp", "plugins-cache")


@command(
    "locals",
    options=(
        OptionCatalog()
        .flag("Clear", descr="Clear the selected local resources or cache location(s).")
        .flag("List", descr="List the selected local resources or cache location(s).")
    ),
    common=COMMON.replace("ConfigFile", hidden=True),
    descr="Clears or lists local caches.",
    usage="<all | http-cache | global-packages | temp | plugins-cache> [-clear | -list] [options]",
    examples=("locals all -list", "locals http-cache -clear"),
    min_args=1,
    max_args=1,
)
class LocalsCommand(Command):
    async def execute(self):
        if self.clear == self.list:
            raise ArgumentCombinationError(self.messages("locals-combination"))

        resource = self.arguments[0].lower()
        if resource not in LOCAL_RESOURCES:
            raise CommandException(
                self.messages("locals-unknown-resource", resource=self.arguments[0], resources=", ".join(LOCAL_RESOURCES)),
                resource=self.arguments[0],
            )

        service = self.require("locals")
        if self.list:
            for name, path in service.locations().items():
                if resource in ("all", name):
                    self.console.write(self.messages("locals-entry", name=name, path=path))
            return

        if await service.clear(resource) is False:
            self.console.error(self.messages("locals-clear-failed"))
            return 1
        self.console.write(self.messages("locals-cleared"))


SOURCE_ACTIONS = ("list", "add", "remove", "enable", "disable", "update")


@command(
    "sources",
    options=(
        OptionCatalog()
        .option("Name", descr="Name of the source.")
        .option("Source", descr="Path to the package(s) source.")
        .option("Username", descr="UserName to be used when connecting to an authenticated source.")
        .option("Password", descr="Password to be used when connecting to an authenticated source.")
        .flag("StorePasswordInClearText", descr="Do not encrypt the password and store it in clear text.")
        .option("ValidAuthenticationTypes", descr="Comma-separated list of valid authentication types.")
        .option("Format", choices=("Detailed", "Short"), default="Detailed", descr="Applies to the list action: Detailed or Short.")
    ),
    descr="Provides the ability to manage the list of package sources.",
    usage="<List|Add|Remove|Enable|Disable|Update> -Name [name] -Source [source]",
    examples=("sources add -Name MyFeed -Source https://example.com/feed", "sources list -Format Short"),
    max_args=1,
)
class SourcesCommand(Command):
    async def execute(self):
        action = self.arguments[0].lower() if self.arguments else "list"
        if action not in SOURCE_ACTIONS:
            raise CommandException(
                self.messages("sources-invalid-action", action=self.arguments[0], actions=", ".join(SOURCE_ACTIONS)),
                action=self.arguments[0],
            )
        return getattr(self, "_" + action)()

    def _find(self):
        if not self.name:
            raise CommandException(self.messages("sources-required-name"))
        for name in self.settings.get_section(SOURCES_SECTION):
            if casefold(name) == casefold(self.name):
                return name
        raise CommandException(self.messages("sources-not-found", name=self.name), name=self.name)

    def _store_credentials(self, name):
        if not self.username:
            return
        self.settings.set_value(CREDENTIALS_SECTION, name, {
            "username": self.username,
            "password": self.password,
            "clear_text": self.store_password_in_clear_text,
            "authentication_types": self.valid_authentication_types,
        })

    def _list(self):
        sources = self.settings.get_section(SOURCES_SECTION)
        if not sources:
            self.console.write(self.messages("sources-none"))
            return
        disabled = {casefold(name) for name in self.settings.get_section(DISABLED_SOURCES_SECTION)}
        if self.format == "Short":
            for name, url in sources.items():
                self.console.write(f"{'D' if casefold(name) in disabled else 'E'} {url}")
            return
        self.console.write(self.messages("sources-registered"))
        self.console.write("")
        for index, (name, url) in enumerate(sources.items(), 1):
            label = self.messages["sources-disabled-label" if casefold(name) in disabled else "sources-enabled-label"]
            self.console.write(f"  {index}.  {name} [{label}]")
            self.console.write(f"      {url}")

    def _add(self):
        if not self.name:
            raise CommandException(self.messages("sources-required-name"))
        if not self.source:
            raise CommandException(self.messages("sources-required-source"))
        sources = self.settings.get_section(SOURCES_SECTION)
        if any(casefold(name) == casefold(self.name) for name in sources):
            raise CommandException(self.messages("sources-exists"), name=self.name)
        if any(casefold(url) == casefold(self.source) for url in sources.values()):
            raise CommandException(self.messages("sources-source-exists"), source=self.source)
        self.settings.set_value(SOURCES_SECTION, self.name, self.source)
        self._store_credentials(self.name)
        self.console.write(self.messages("sources-added", name=self.name))

    def _remove(self):
        name = self._find()
        self.settings.delete_value(SOURCES_SECTION, name)
        self.settings.delete_value(DISABLED_SOURCES_SECTION, name)
        self.settings.delete_value(CREDENTIALS_SECTION, name)
        self.console.write(self.messages("sources-removed", name=name))

    def _enable(self):
        name = self._find()
        self.settings.delete_value(DISABLED_SOURCES_SECTION, name)
        self.console.write(self.messages("sources-enabled", name=name))

    def _disable(self):
        name = self._find()
        self.settings.set_value(DISABLED_SOURCES_SECTION, name, "true")
        self.console.write(self.messages("sources-disabled", name=name))

    def _update(self):
        name = self._find()
        if self.source:
            self.settings.set_value(SOURCES_SECTION, name, self.source)
        self._store_credentials(name)
        self.console.write(self.messages("sources-updated", name=name))


@command(
    "init",
    options=OptionCatalog().flag("Expand", descr="Add packages to the destination feed in the expanded folder layout."),
    descr="Adds all the packages from <srcFeed> to the hierarchical <destFeed>.",
    usage="<srcPackageSourcePath> <destPackageSourcePath> [options]",
    examples=("init c:\\foo c:\\bar", "init \\\\foo\\packages \\\\bar\\packages -Expand"),
    min_args=2,
    max_args=2,
)
class InitCommand(Command):
    async def execute(self):
        source, destination = self.arguments
        await self.require("feed").initialize(source, destination, expand=self.expand)
        self.console.write(self.messages("init-done", source=source, destination=destination))


@command(
    "setApiKey",
    options=OptionCatalog().option("Source", descr="Server URL where the API key is valid."),
    descr="Saves an API key for a given server URL.",
    usage="<API key> [options]",
    examples=("setApiKey 4003d786-cc37-4004-bfdf-c4f3e8ef9b3a -Source https://example.com/feed",),
    min_args=1,
    max_args=1,
)
class SetApiKeyCommand(Command):
    async def execute(self):
        if not (source := self.source or default_push_source(self.settings)):
            raise ArgumentCombinationError(self.messages("missing-source"))
        self.settings.set_value(API_KEYS_SECTION, source, self.arguments[0])
        self.console.write(self.messages("setapikey-saved", source=source))


@command(
    "verify",
    options=(
        OptionCatalog()
        .flag("Signatures", descr="Specifies that package signature verification should be performed.")
        .flag("All", descr="Specifies that all verifications possible should be performed.")
        .option(
            "CertificateFingerprint",
            multi=True,
            descr="Verify that the signer certificate matches with one of the specified SHA256 fingerprints.",
        )
    ),
    descr="Verifies a package.",
    usage="<-Signatures | -All> <package(s)> [options]",
    examples=("verify -Signatures MyPackage.1.0.0.nupkg",),
    min_args=1,
)
class VerifyCommand(Command):
    async def execute(self):
        if not (self.signatures or self.all):
            raise ArgumentCombinationError(self.messages("verify-missing-type"))
        request = VerifyRequest(
            packages=tuple(self.arguments),
            signatures=self.signatures or self.all,
            all=self.all,
            fingerprints=tuple(self.certificate_fingerprint),
        )
        if not await self.require("verifier").verify(request):
            self.console.error(self.messages("verify-failed"))
            return 1
        self.console.write(self.messages("verify-passed"))
        return 0


@command(
    "spec",
    options=(
        OptionCatalog()
        .option("AssemblyPath", descr="Assembly to use for metadata.")
        .flag("Force", descr="Overwrite the manifest file if it exists.")
    ),
    descr="Generates a package manifest for a new package.",
    usage="[package id]",
    examples=("spec", "spec MyPackage", "spec -AssemblyPath MyAssembly.dll"),
    max_args=1,
)
class SpecCommand(Command):
    async def execute(self):
        package = self.arguments[0] if self.arguments else "Package"
        path = await self.require("manifest").create(package, assembly=self.assembly_path, force=self.force)
        self.console.write(self.messages("spec-created", path=path))


@command(
    "help",
    "?",
    options=(
        OptionCatalog()
        .flag("All", descr="Print detailed help for all available commands.")
        .flag("Markdown", descr="Print detailed help in markdown format.")
    ),
    common=COMMON.replace("ConfigFile", hidden=True),
    descr="Displays general help information and help information about other commands.",
    usage="[command]",
    examples=("help", "help restore", "help -All -Markdown"),
    max_args=1,
)
class HelpCommand(Command):
    async def execute(self):
        formatter = self.context.formatter
        if self.arguments:
            descriptor = self.context.registry.resolve(self.arguments[0], messages=self.messages)
            self.console.write(formatter.render_command_help(descriptor, markdown=self.markdown))
            return
        self.console.write(formatter.render_catalog_help(
            self.context.registry.descriptors(),
            include_all=self.all,
            markdown=self.markdown,
        ))


def builtins():
    """
    descriptors of the built-in commands, in registration order.
    """
    return (
        RestoreCommand.__descriptor__,
        DeleteCommand.__descriptor__,
        ConfigCommand.__descriptor__,
        LocalsCommand.__descriptor__,
        SourcesCommand.__descriptor__,
        InitCommand.__descriptor__,
        SetApiKeyCommand.__descriptor__,
        VerifyCommand.__descriptor__,
        SpecCommand.__descriptor__,
        HelpCommand.__descriptor__,
    )


__all__ = (
    "COMMON",
    "LOCAL_RESOURCES",
    "SOURCE_ACTIONS",
    "CommandContext",
    "Command",
    "command",
    "builtins",
    "RestoreCommand",
    "DeleteCommand",
    "ConfigCommand",
    "LocalsCommand",
    "SourcesCommand",
    "InitCommand",
    "SetApiKeyCommand",
    "VerifyCommand",
    "SpecCommand",
    "HelpCommand",
)
