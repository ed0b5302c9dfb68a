"""
Built-in command behavioral tests (settings, services, confirmations).

Scope
- Validate the declaration of the built-in commands (names, common options).
- Validate config, sources, setApiKey and delete against in-memory settings.
- Validate restore, locals, init and spec delegation to injected services.
- Validate help output for a single command and for the whole catalog.

Conventions
- Test method names follow CamelCase per project convention.
- Commands run through CommandDispatcher over StringIO streams; services are
  small async fakes that record their calls.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from porter.commands import COMMON, Command, builtins, command, default_push_source
from porter.console import Console
from porter.dispatcher import CommandDispatcher
from porter.registry import CommandRegistry
from porter.services import Services
from porter.settings import (
    API_KEYS_SECTION,
    CONFIG_SECTION,
    CREDENTIALS_SECTION,
    DISABLED_SOURCES_SECTION,
    SOURCES_SECTION,
    MemorySettings,
)


class Recorder:
    """Async fake for every service protocol; records (method, args, kwargs)."""

    def __init__(self, result=None, locations=None):
        self.result = result
        self.calls = []
        self._locations = locations or {}

    async def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        return self.result

    async def restore(self, request, /):
        return await self._record("restore", request)

    async def delete(self, package, version, /, **kwargs):
        return await self._record("delete", package, version, **kwargs)

    async def clear(self, resource, /):
        return await self._record("clear", resource)

    def locations(self):
        return dict(self._locations)

    async def initialize(self, source, destination, /, **kwargs):
        return await self._record("initialize", source, destination, **kwargs)

    async def create(self, package, /, **kwargs):
        return await self._record("create", package, **kwargs)


class CommandTestCase(TestCase):

    def setUp(self):
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.settings = MemorySettings(root="/home/user")
        self.services = Services()
        self.environ = {"PORTER_EXE_NO_PROMPT": "1"}

    def run_porter(self, *tokens):
        dispatcher = CommandDispatcher(
            CommandRegistry(builtins()),
            console=Console(self.stdout, self.stderr, colorful=False),
            settings=self.settings,
            services=self.services,
            environ=self.environ,
        )
        return dispatcher.run(list(tokens))

    @property
    def out(self):
        return self.stdout.getvalue()

    @property
    def err(self):
        return self.stderr.getvalue()


class TestDeclarations(CommandTestCase):

    def testBuiltinNames(self):
        self.assertEqual(
            [descriptor.name for descriptor in builtins()],
            ["restore", "delete", "config", "locals", "sources", "init", "setApiKey", "verify", "spec", "help"],
        )

    def testEveryBuiltinAcceptsTheCommonOptions(self):
        for descriptor in builtins():
            with self.subTest(command=descriptor.name):
                for option in COMMON:
                    self.assertIn(option.name, descriptor.catalog)

    def testConfigFileIsHiddenForLocalsAndHelp(self):
        for descriptor in builtins():
            with self.subTest(command=descriptor.name):
                hidden = descriptor.catalog["ConfigFile"].hidden
                self.assertEqual(hidden, descriptor.name in ("locals", "help"))

    def testCommandDecoratorRequiresACommandSubclass(self):
        with self.assertRaises(TypeError):
            command("plain")(object)

    def testCommandDecoratorAttachesDescriptor(self):
        @command("ping", "p", max_args=0)
        class Ping(Command):
            pass

        self.assertEqual(Ping.__descriptor__.names, ("ping", "p"))
        self.assertIn("Verbosity", Ping.__descriptor__.catalog)

    def testDefaultPushSource(self):
        self.assertIsNone(default_push_source(self.settings))
        self.settings.set_value(CONFIG_SECTION, "DefaultPushSource", "https://feed")
        self.assertEqual(default_push_source(self.settings), "https://feed")


class TestConfigCommand(CommandTestCase):

    def testSetAndGet(self):
        self.assertEqual(self.run_porter("config", "-Set", "HTTP_PROXY=http://127.0.0.1:8888"), 0)
        self.assertEqual(self.settings.get_value(CONFIG_SECTION, "HTTP_PROXY"), "http://127.0.0.1:8888")
        self.assertEqual(self.run_porter("config", "HTTP_PROXY"), 0)
        self.assertIn("http://127.0.0.1:8888", self.out)

    def testEmptyValueRemovesTheKey(self):
        self.settings.set_value(CONFIG_SECTION, "HTTP_PROXY", "http://old")
        self.assertEqual(self.run_porter("config", "-Set", "HTTP_PROXY="), 0)
        self.assertIsNone(self.settings.get_value(CONFIG_SECTION, "HTTP_PROXY"))

    def testMissingKey(self):
        self.assertEqual(self.run_porter("config", "Missing"), 1)
        self.assertIn("Key 'Missing' not found.", self.err)

    def testNothingToDo(self):
        self.assertEqual(self.run_porter("config"), 1)
        self.assertIn("config: invalid arguments. Specify either -Set", self.err)

    def testAsPath(self):
        self.settings.set_value(CONFIG_SECTION, "repositoryPath", "packages")
        self.assertEqual(self.run_porter("config", "repositoryPath", "-AsPath"), 0)
        self.assertIn("packages", self.out)
        self.assertIn("user", self.out)

    def testAsPathRejectsInvalidCharacters(self):
        self.settings.set_value(CONFIG_SECTION, "repositoryPath", "pack<ages")
        self.assertEqual(self.run_porter("config", "repositoryPath", "-AsPath"), 1)
        self.assertIn("not valid in a path", self.err)


class TestSourcesCommand(CommandTestCase):

    def testAddListDisableRemove(self):
        self.assertEqual(self.run_porter("sources", "add", "-Name", "Feed", "-Source", "https://feed"), 0)
        self.assertIn("Package source with Name: Feed added successfully.", self.out)
        self.assertEqual(self.settings.get_section(SOURCES_SECTION), {"Feed": "https://feed"})

        self.run_porter("sources", "list")
        self.assertIn("Registered Sources:", self.out)
        self.assertIn("Feed [Enabled]", self.out)

        self.assertEqual(self.run_porter("sources", "Disable", "-Name", "feed"), 0)
        self.assertIn("Feed", self.settings.get_section(DISABLED_SOURCES_SECTION))
        self.run_porter("sources", "list", "-Format", "short")
        self.assertIn("D https://feed", self.out)

        self.assertEqual(self.run_porter("sources", "remove", "-Name", "Feed"), 0)
        self.assertEqual(self.settings.get_section(SOURCES_SECTION), {})
        self.assertEqual(self.settings.get_section(DISABLED_SOURCES_SECTION), {})

    def testListWithoutSources(self):
        self.assertEqual(self.run_porter("sources"), 0)
        self.assertIn("No sources found.", self.out)

    def testAddRequiresUniqueName(self):
        self.settings.set_value(SOURCES_SECTION, "Feed", "https://feed")
        self.assertEqual(self.run_porter("sources", "add", "-Name", "FEED", "-Source", "https://other"), 1)
        self.assertIn("Provide a unique name.", self.err)

    def testAddRequiresUniqueSource(self):
        self.settings.set_value(SOURCES_SECTION, "Feed", "https://feed")
        self.assertEqual(self.run_porter("sources", "add", "-Name", "Other", "-Source", "https://feed"), 1)
        self.assertIn("Provide a unique source.", self.err)

    def testAddStoresCredentials(self):
        self.run_porter("sources", "add", "-Name", "Feed", "-Source", "https://feed", "-Username", "me", "-Password", "pw")
        credentials = self.settings.get_value(CREDENTIALS_SECTION, "Feed")
        self.assertEqual(credentials["username"], "me")
        self.assertEqual(credentials["password"], "pw")

    def testUpdate(self):
        self.settings.set_value(SOURCES_SECTION, "Feed", "https://feed")
        self.assertEqual(self.run_porter("sources", "update", "-Name", "Feed", "-Source", "https://new"), 0)
        self.assertEqual(self.settings.get_value(SOURCES_SECTION, "Feed"), "https://new")

    def testUnknownSource(self):
        self.assertEqual(self.run_porter("sources", "enable", "-Name", "Nope"), 1)
        self.assertIn("matching name: Nope", self.err)

    def testInvalidAction(self):
        self.assertEqual(self.run_porter("sources", "rename"), 1)
        self.assertIn("'rename' is not a valid action.", self.err)


class TestKeysAndDeletion(CommandTestCase):

    def testSetApiKeyNeedsASource(self):
        self.assertEqual(self.run_porter("setApiKey", "key"), 1)
        self.assertIn("setApiKey: invalid arguments.", self.err)

    def testSetApiKeyUsesDefaultPushSource(self):
        self.settings.set_value(CONFIG_SECTION, "DefaultPushSource", "https://feed")
        self.assertEqual(self.run_porter("setapikey", "key"), 0)
        self.assertEqual(self.settings.get_value(API_KEYS_SECTION, "https://feed"), "key")

    def testDelete(self):
        self.services.publisher = Recorder()
        self.settings.set_value(API_KEYS_SECTION, "https://feed", "stored")
        self.assertEqual(self.run_porter("delete", "MyPackage", "1.0", "-Source", "https://feed"), 0)
        (name, args, kwargs), = self.services.publisher.calls
        self.assertEqual(args, ("MyPackage", "1.0"))
        self.assertEqual(kwargs["source"], "https://feed")
        self.assertEqual(kwargs["api_key"], "stored")
        self.assertIn("MyPackage 1.0 was deleted successfully.", self.out)

    def testDeleteCancelledByUser(self):
        self.environ = {}
        self.services.publisher = Recorder()
        dispatcher = CommandDispatcher(
            CommandRegistry(builtins()),
            console=Console(self.stdout, self.stderr, stdin=io.StringIO("n\n"), colorful=False),
            settings=self.settings,
            services=self.services,
            environ=self.environ,
        )
        self.assertEqual(dispatcher.run(["delete", "MyPackage", "1.0", "-Source", "https://feed"]), 0)
        self.assertEqual(self.services.publisher.calls, [])
        self.assertIn("Package was not deleted.", self.out)

    def testDeleteArity(self):
        self.assertEqual(self.run_porter("delete", "MyPackage"), 1)
        self.assertIn("delete: invalid arguments.", self.err)


class TestServiceCommands(CommandTestCase):

    def testRestoreBuildsTheRequest(self):
        self.services.restorer = Recorder(True)
        code = self.run_porter(
            "restore", "My.sln",
            "-Source", "a", "-Source", "b",
            "-NoCache",
            "-MSBuildVersion", "17",
            "-Project2ProjectTimeOut", "30",
            "-OutputDirectory", "packages",
        )
        self.assertEqual(code, 0)
        (name, (request,), kwargs), = self.services.restorer.calls
        self.assertEqual(request.target, "My.sln")
        self.assertEqual(request.sources, ("a", "b"))
        self.assertTrue(request.no_http_cache)
        self.assertEqual(request.msbuild_version, "17")
        self.assertEqual(request.project_timeout, 30)
        self.assertEqual(request.packages_directory, "packages")
        self.assertIn("Restore completed.", self.out)

    def testRestoreFailure(self):
        self.services.restorer = Recorder(False)
        self.assertEqual(self.run_porter("restore"), 1)
        self.assertIn("Restore failed.", self.err)

    def testLocalsNeedsExactlyOneAction(self):
        self.services.locals = Recorder()
        self.assertEqual(self.run_porter("locals", "all"), 1)
        self.assertEqual(self.run_porter("locals", "all", "-clear", "-list"), 1)
        self.assertIn("Specify exactly one of -Clear or -List.", self.err)

    def testLocalsList(self):
        self.services.locals = Recorder(locations={"http-cache": "/cache/http", "temp": "/tmp/porter"})
        self.assertEqual(self.run_porter("locals", "temp", "-list"), 0)
        self.assertIn("temp: /tmp/porter", self.out)
        self.assertNotIn("http-cache", self.out)

    def testLocalsClear(self):
        self.services.locals = Recorder(True)
        self.assertEqual(self.run_porter("locals", "http-cache", "-clear"), 0)
        self.assertEqual(self.services.locals.calls, [("clear", ("http-cache",), {})])

    def testLocalsUnknownResource(self):
        self.services.locals = Recorder()
        self.assertEqual(self.run_porter("locals", "everything", "-list"), 1)
        self.assertIn("'everything' is not a valid local resource.", self.err)

    def testInit(self):
        self.services.feed = Recorder()
        self.assertEqual(self.run_porter("init", "src", "dst", "-Expand"), 0)
        self.assertEqual(self.services.feed.calls, [("initialize", ("src", "dst"), {"expand": True})])

    def testSpec(self):
        self.services.manifest = Recorder("MyPackage.nuspec")
        self.assertEqual(self.run_porter("spec", "MyPackage"), 0)
        self.assertIn("Created 'MyPackage.nuspec' successfully.", self.out)


class TestHelpCommand(CommandTestCase):

    def testCatalog(self):
        self.assertEqual(self.run_porter("help"), 0)
        self.assertIn("Available commands:", self.out)
        self.assertIn("setApiKey", self.out)

    def testQuestionMarkAlias(self):
        self.assertEqual(self.run_porter("?", "restore"), 0)
        self.assertIn("usage: porter restore", self.out)

    def testMarkdown(self):
        self.assertEqual(self.run_porter("help", "delete", "-Markdown"), 0)
        self.assertIn("## delete", self.out)
        self.assertIn("|Option|Description|", self.out)

    def testAll(self):
        self.assertEqual(self.run_porter("help", "-All"), 0)
        for descriptor in builtins():
            self.assertIn(f"usage: porter {descriptor.name}", self.out)


if __name__ == "__main__":
    unittest.main()
