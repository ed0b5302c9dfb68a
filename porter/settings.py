"""
Porter settings access.

The command line reads and writes configuration through the Settings protocol;
persistence belongs to the hosting installation. MemorySettings is the built-in
implementation used when nothing else is supplied (and by the tests).

Layout
- values live in named sections ("config", "packageSources", "disabledPackageSources",
  "apikeys", ...), each an ordered mapping of key -> value.
"""
import os
from typing import Protocol, runtime_checkable

CONFIG_SECTION = "config"
SOURCES_SECTION = "packageSources"
DISABLED_SOURCES_SECTION = "disabledPackageSources"
CREDENTIALS_SECTION = "packageSourceCredentials"
API_KEYS_SECTION = "apikeys"


@runtime_checkable
class Settings(Protocol):
    def get_value(self, section, key, /, *, as_path=False): ...
    def set_value(self, section, key, value, /): ...
    def delete_value(self, section, key, /): ...
    def get_section(self, section, /): ...


class MemorySettings:
    """
    settings kept in memory; root anchors relative values read with as_path=True.
    """

    def __init__(self, sections=None, /, *, root=None):
        self._sections = {name: dict(values) for name, values in (sections or {}).items()}
        self.root = root or os.getcwd()

    def get_value(self, section, key, /, *, as_path=False):
        value = self._sections.get(section, {}).get(key)
        if value is not None and as_path:
            return os.path.normpath(os.path.join(self.root, os.path.expanduser(value)))
        return value

    def set_value(self, section, key, value, /):
        self._sections.setdefault(section, {})[key] = value

    def delete_value(self, section, key, /):
        """
        remove key from section; report whether something was removed.
        """
        try:
            del self._sections[section][key]
        except KeyError:
            return False
        return True

    def get_section(self, section, /):
        return dict(self._sections.get(section, {}))

    def __repr__(self):
        return f"MemorySettings({self._sections!r})"


__all__ = (
    "CONFIG_SECTION",
    "SOURCES_SECTION",
    "DISABLED_SOURCES_SECTION",
    "CREDENTIALS_SECTION",
    "API_KEYS_SECTION",
    "Settings",
    "MemorySettings",
)
