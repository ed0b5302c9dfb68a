"""
Porter user-facing strings and UI-language selection.

Scope
- CATALOGS: message templates per culture; "en" is complete, other cultures may be
  partial and fall back to English key by key.
- Messages: a culture-bound view over the catalogs with str.format-style rendering.
- culture(): resolve the UI language from PORTER_CLI_LANGUAGE.

Language override
- An empty or missing variable keeps the default (English).
- A malformed culture name is reported once per distinct value through the
  "porter.resources" logger (error level, naming the raw value and the variable)
  and the default language is kept; the process continues.
- A well-formed but unknown culture silently falls back to English.
"""
import functools
import logging
import os
import re

from . import config

logger = logging.getLogger(__name__)

DEFAULT_CULTURE = "en"

CATALOGS = {
    "en": {
        # --- usage / help ---
        "usage": "usage: {prog} <command> [args] [options]",
        "help-hint": "Type '{prog} help <command>' for help on a specific command.",
        "available-commands": "Available commands:",
        "options": "options:",
        "examples": "examples:",
        "deprecated-marker": "(deprecated)",
        "markdown-usage": "Usage",
        "markdown-options": "Options",
        "markdown-examples": "Examples",
        "markdown-option-header": "Option",
        "markdown-description-header": "Description",

        # --- parse failures ---
        "unknown-command": "Unknown command: '{name}'",
        "unknown-command-hint": "run '{prog} help' to see the available commands",
        "unknown-option": "'{token}' is not a valid option.",
        "unknown-option-hint": "run '{prog} help {command}' to see the supported options",
        "unknown-option-suggestion": "did you mean '-{suggestion}'? run '{prog} help {command}' to see the supported options",
        "missing-option-value": "Missing option value for: '{token}'",
        "duplicate-option": "Option '{token}' was specified more than once.",
        "invalid-option-value": "Invalid value '{value}' for option '{token}'.",
        "invalid-option-choice": "Invalid value '{value}' for option '{token}'. Valid values are: {choices}.",
        "invalid-option-pair": "Invalid value '{value}' for option '{token}'. Expected a key=value pair.",
        "invalid-arguments": "{command}: invalid arguments.",

        # --- response files ---
        "response-file-missing-name": "Invalid response file, '@' does not exist",
        "response-file-not-found": "Response file '{path}' does not exist",
        "response-file-too-large": "Response file '{path}' cannot be larger than 2mb",
        "response-file-too-deep": "No more than {limit} nested response files are allowed",
        "response-file-unreadable": "Response file '{path}' cannot be read: {error}",

        # --- deprecations ---
        "deprecated-command": "'{prog} {command}' is deprecated. Use '{prog} {alternative}' instead.",
        "deprecated-command-removal": "'{prog} {command}' is deprecated and will be removed in a future release.",
        "deprecated-option": "Option '{option}' has been deprecated. Use '{alternative}' instead.",
        "deprecated-option-removal": "Option '{option}' has been deprecated and will be removed in a future release.",

        # --- services / extensions ---
        "missing-source": "Specify -Source or set the DefaultPushSource configuration value.",
        "service-unavailable": "The {service} service is not available in this installation.",
        "extension-failure": "Failed to load command extension '{name}': {reason}",

        # --- restore ---
        "restore-done": "Restore completed.",
        "restore-failed": "Restore failed.",

        # --- delete ---
        "delete-confirm": "{package} {version} will be deleted from '{source}'. Would you like to continue?",
        "delete-cancelled": "Package was not deleted.",
        "delete-done": "{package} {version} was deleted successfully.",

        # --- config ---
        "config-nothing": "Specify either -Set or the name of a value to read.",
        "config-missing-key": "Key '{key}' not found.",
        "config-invalid-path": "The value '{value}' of '{key}' contains characters that are not valid in a path.",

        # --- locals ---
        "locals-combination": "Specify exactly one of -Clear or -List.",
        "locals-unknown-resource": "'{resource}' is not a valid local resource. Valid values are: {resources}.",
        "locals-entry": "{name}: {path}",
        "locals-cleared": "Local resources cleared.",
        "locals-clear-failed": "Local resources partially cleared.",

        # --- sources ---
        "sources-invalid-action": "'{action}' is not a valid action. Valid actions are: {actions}.",
        "sources-none": "No sources found.",
        "sources-registered": "Registered Sources:",
        "sources-required-name": "The name is required.",
        "sources-required-source": "The source is required.",
        "sources-exists": "The name specified has already been added to the list of available package sources. Provide a unique name.",
        "sources-source-exists": "The source specified has already been added to the list of available package sources. Provide a unique source.",
        "sources-not-found": "Unable to find any package source(s) matching name: {name}.",
        "sources-added": "Package source with Name: {name} added successfully.",
        "sources-removed": "Package source with Name: {name} removed successfully.",
        "sources-enabled": "Package source with Name: {name} enabled successfully.",
        "sources-disabled": "Package source with Name: {name} disabled successfully.",
        "sources-updated": "Package source \"{name}\" was successfully updated.",
        "sources-enabled-label": "Enabled",
        "sources-disabled-label": "Disabled",

        # --- init ---
        "init-done": "Packages from '{source}' were added to '{destination}'.",

        # --- setApiKey ---
        "setapikey-saved": "The API key was saved for '{source}'.",

        # --- verify ---
        "verify-missing-type": "Specify -Signatures or -All to select the verifications to run.",
        "verify-passed": "Successfully verified package(s).",
        "verify-failed": "Package verification failed.",

        # --- spec ---
        "spec-created": "Created '{path}' successfully.",
    },
    "es": {
        "usage": "uso: {prog} <comando> [argumentos] [opciones]",
        "help-hint": "Escriba '{prog} help <comando>' para obtener ayuda sobre un comando.",
        "available-commands": "Comandos disponibles:",
        "options": "opciones:",
        "deprecated-marker": "(en desuso)",
        "unknown-command": "Comando desconocido: '{name}'",
        "unknown-option": "'{token}' no es una opción válida.",
        "missing-option-value": "Falta el valor de la opción: '{token}'",
        "invalid-arguments": "{command}: argumentos no válidos.",
        "deprecated-command": "'{prog} {command}' está en desuso. Use '{prog} {alternative}' en su lugar.",
        "deprecated-command-removal": "'{prog} {command}' está en desuso y se quitará en una versión futura.",
    },
}


class Messages:
    """
    culture-bound message lookup with per-key English fallback.
    """

    def __init__(self, culture=DEFAULT_CULTURE, /):
        self.culture = culture
        language = culture.split("-")[0].lower()
        self._catalog = CATALOGS.get(culture.lower(), CATALOGS.get(language, {}))

    def __getitem__(self, key):
        try:
            return self._catalog[key]
        except KeyError:
            return CATALOGS[DEFAULT_CULTURE][key]

    def __call__(self, key, /, **values):
        return self[key].format(prog=config.program(), **values)

    def __repr__(self):
        return f"Messages({self.culture!r})"


ENGLISH = Messages(DEFAULT_CULTURE)


@functools.cache
def _parse_culture(raw, /):
    """
    validate a raw culture name; malformed names are logged once and yield None.
    """
    if re.fullmatch(r"[A-Za-z]{2,8}(-[A-Za-z0-9]{1,8})*", candidate := raw.strip()):
        return candidate
    logger.error(
        "Invalid value '%s' for environment variable %s; the default language is used.",
        raw, config.LANGUAGE_VARIABLE,
    )
    return None


def culture(environ=os.environ, /):
    """
    return the culture requested through PORTER_CLI_LANGUAGE, or the default one.
    """
    if not (raw := environ.get(config.LANGUAGE_VARIABLE)):
        return DEFAULT_CULTURE
    return _parse_culture(raw) or DEFAULT_CULTURE


def messages(environ=os.environ, /, *, force_english=False):
    """
    return the Messages for the current environment.
    """
    if force_english:
        return ENGLISH
    return Messages(culture(environ))


__all__ = (
    "DEFAULT_CULTURE",
    "CATALOGS",
    "ENGLISH",
    "Messages",
    "culture",
    "messages",
)
