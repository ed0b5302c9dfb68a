"""
Porter runtime configuration.

Scope
- Program identity: the name shown in usage lines, warnings and fault headers.
- Environment contract: names of every variable the command line honors.
- Limits: response-file size and nesting bounds.
- Palette: default rich styles for help and fault rendering.

Host overrides
- A hosting script may define __prog__ and/or __styles__ in __main__; they win over
  the defaults here, the same way for help output and fault rendering.
"""
import os
from collections import defaultdict

PROGRAM = "porter"

# --- environment variables ---
LANGUAGE_VARIABLE = "PORTER_CLI_LANGUAGE"
NO_PROMPT_VARIABLE = "PORTER_EXE_NO_PROMPT"
FORCE_INTERACTIVE_VARIABLE = "FORCE_PORTER_EXE_INTERACTIVE"
IGNORE_EXTENSIONS_VARIABLE = "PORTER_IGNORE_EXTENSIONS"

# --- response files ---
MAX_RESPONSE_FILE_SIZE = 2_000_000
MAX_RESPONSE_FILE_NESTING = 3

# --- entry points ---
EXTENSION_GROUP = "porter.commands"

STYLES = {
    # === usage / headers ===
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "usage-section": "bold #36C5F0",
    "description-section": "italic #A3A3A3",
    "group-label": "bold #FFFFFF",

    # === commands / options ===
    "command-name": "bold #36C5F0",
    "command-description": "#9CA3AF",
    "option-name": "bold #00E6FF",
    "flag-name": "bold #22C55E",
    "alias": "#36C5F0",
    "multi-marker": "bold #FFD600",
    "argument-description": "#9CA3AF",
    "deprecated-name": "bold #F97316 strike",
    "deprecated-marker": "bold #F97316",
    "deprecated-text": "#F97316",

    # === examples ===
    "examples-label": "bold #22C55E",
    "examples-dot": "#22C55E dim",
    "example": "#E5E7EB",

    # === faults ===
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "error-title": "bold #FF4DA6",
    "error-message": "#C8C8D0",
    "warning-code": "bold #FFB400",
    "warning-title": "bold #FFC2E0",
    "warning-message": "#D6D6DE",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
}


def program():
    """
    return the program name, honoring a __prog__ override in __main__.
    """
    return getattr(__import__("__main__"), "__prog__", PROGRAM)


def palette():
    """
    return the merged palette; unknown keys resolve to an empty style.
    """
    return defaultdict(str, STYLES | getattr(__import__("__main__"), "__styles__", {}))


def truthy(value, /):
    """
    interpret an environment variable value as a boolean switch.
    """
    return isinstance(value, str) and value.strip().lower() in ("1", "true", "yes", "on")


def interactive(default=True, /, *, environ=os.environ):
    """
    resolve interactivity from the environment.

    - PORTER_EXE_NO_PROMPT turns prompting off.
    - FORCE_PORTER_EXE_INTERACTIVE turns it back on, whatever the first one says.
    """
    if truthy(environ.get(FORCE_INTERACTIVE_VARIABLE)):
        return True
    if truthy(environ.get(NO_PROMPT_VARIABLE)):
        return False
    return default


__all__ = (
    "PROGRAM",
    "LANGUAGE_VARIABLE",
    "NO_PROMPT_VARIABLE",
    "FORCE_INTERACTIVE_VARIABLE",
    "IGNORE_EXTENSIONS_VARIABLE",
    "MAX_RESPONSE_FILE_SIZE",
    "MAX_RESPONSE_FILE_NESTING",
    "EXTENSION_GROUP",
    "STYLES",
    "program",
    "palette",
    "truthy",
    "interactive",
)
