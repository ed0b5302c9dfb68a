"""
Porter response files.

Overview
- A token of the form "@path" stands for the contents of a text file, split into
  tokens and spliced into the command line at the token's position.
- Expansion is recursive: a response file may reference other response files.

Rules
- "@" alone, a missing path, a path the OS rejects, or a path that is not a regular
  file: NOT_FOUND.
- A file larger than MAX_RESPONSE_FILE_SIZE bytes: TOO_LARGE (checked on the file
  size, before anything is read).
- More than MAX_RESPONSE_FILE_NESTING levels of response files: TOO_DEEP.
- A file that cannot be opened or is not valid UTF-8: UNREADABLE.
- Files are UTF-8 (an optional BOM is ignored). Tokens are separated by spaces, tabs
  and line breaks; blank lines and runs of separators never produce tokens.
- Double quotes group separators into a token and are removed; a standalone ""
  produces an empty token.
- Tokens that do not start with "@" (None, "", "   " included) pass through unchanged.

Quick example
    >>> expand(["/arg1", "@file.rsp", "/arg3"])   # file.rsp holds "/r1 /r2"
    ['/arg1', '/r1', '/r2', '/arg3']
"""
import logging
import os

from . import config
from .faults import ResponseFileError, ResponseFileReason
from .resources import ENGLISH
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

SEPARATORS = frozenset(" \t\r\n")


def tokenize(content, /):
    """
    split response-file content into tokens.

    - separators: space, tab, CR and LF; consecutive separators collapse.
    - a double-quoted run may contain separators; the quotes are dropped.
    - a token made only of a quoted empty run ("") is kept as an empty token.
    - an unterminated quote runs to the end of the content.
    """
    tokens = []
    current = []
    quoted = False
    started = False
    for char in content:
        if char == '"':
            quoted = not quoted
            started = True
        elif char in SEPARATORS and not quoted:
            if started:
                tokens.append("".join(current))
                current.clear()
                started = False
        else:
            current.append(char)
            started = True
    if started:
        tokens.append("".join(current))
    return tokens


class ResponseFileExpander:
    """
    expand "@file" tokens into the tokens the files contain.

    parameters
    - directory: base directory for relative paths (current directory when Unset).
    - limit: maximum accepted file size in bytes.
    - nesting: maximum number of nested response-file levels.
    - messages: resources.Messages used to phrase failures.
    """

    def __init__(
            self,
            directory=Unset,
            *,
            limit=config.MAX_RESPONSE_FILE_SIZE,
            nesting=config.MAX_RESPONSE_FILE_NESTING,
            messages=ENGLISH,
    ):
        if not isinstance(limit, int) or limit < 0:
            raise ValueError("response file 'limit' must be a non-negative integer")
        if not isinstance(nesting, int) or nesting < 1:
            raise ValueError("response file 'nesting' must be a positive integer")
        self.directory = directory
        self.limit = limit
        self.nesting = nesting
        self.messages = messages

    def expand(self, tokens, /):
        """
        return a new list where every "@file" token is replaced by its expansion.
        """
        return self._expand(list(tokens), 0)

    def _expand(self, tokens, depth):
        expanded = []
        for token in tokens:
            if not isinstance(token, str) or not token.startswith("@"):
                expanded.append(token)
                continue
            expanded.extend(self._expand(self._read(token, depth + 1), depth + 1))
        return expanded

    def _read(self, token, depth):
        if depth > self.nesting:
            raise ResponseFileError(
                self.messages("response-file-too-deep", limit=self.nesting),
                reason=ResponseFileReason.TOO_DEEP,
                token=token,
                limit=self.nesting,
            )

        if not (name := token[1:]):
            raise ResponseFileError(
                self.messages("response-file-missing-name"),
                reason=ResponseFileReason.NOT_FOUND,
                token=token,
            )

        path = os.path.join(coalesce(self.directory, os.getcwd()), os.path.expanduser(name))
        try:
            size = os.stat(path).st_size
        except (OSError, ValueError):
            size = None
        if size is None or not os.path.isfile(path):
            raise ResponseFileError(
                self.messages("response-file-not-found", path=name),
                reason=ResponseFileReason.NOT_FOUND,
                token=token,
                path=path,
            )

        if size > self.limit:
            raise ResponseFileError(
                self.messages("response-file-too-large", path=name),
                reason=ResponseFileReason.TOO_LARGE,
                token=token,
                path=path,
                size=size,
            )

        try:
            with open(path, encoding="utf-8-sig") as stream:
                content = stream.read()
        except (OSError, UnicodeDecodeError) as error:
            raise ResponseFileError(
                self.messages("response-file-unreadable", path=name, error=error),
                reason=ResponseFileReason.UNREADABLE,
                token=token,
                path=path,
            ) from error
        tokens = tokenize(content)
        logger.debug("expanded response file %s (level %d) into %d token(s)", path, depth, len(tokens))
        return tokens


def expand(tokens, /, directory=Unset):
    """
    expand response files with the default limits.
    """
    return ResponseFileExpander(directory).expand(tokens)


__all__ = (
    "ResponseFileExpander",
    "tokenize",
    "expand",
)
