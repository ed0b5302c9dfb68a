"""
Porter console: verbosity-aware output over rich.

Streams
- write()/warn(): stdout; suppressed entirely when verbosity is QUIET.
- verbose(): stdout; only when verbosity is DETAILED.
- error(): stderr; never suppressed.

Rendering
- Anything rich can print is accepted (str, Text, faults with __rich__).
- Markup, emoji and highlighting are off so user tokens like "[x]" print verbatim.
- colorful follows the terminal unless forced by the caller.
"""
import sys
from enum import IntEnum

from rich.console import Console as RichConsole
from rich.prompt import Confirm

from .utils import Unset, coalesce


class Verbosity(IntEnum):
    QUIET = 0
    NORMAL = 1
    DETAILED = 2

    @classmethod
    def parse(cls, value, /):
        """
        convert a -Verbosity value ("quiet", "Normal", ...) into a member.
        """
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"{value!r} is not a valid verbosity") from None


class Console:
    """
    the console every command writes through.

    parameters
    - stdout/stderr: file-like objects (sys.stdout/sys.stderr when Unset).
    - stdin: stream confirmations are read from.
    - verbosity: initial Verbosity.
    - interactive: whether confirmations may prompt the user.
    - colorful: force styling on/off; follows the terminal when Unset.
    """

    def __init__(
            self,
            stdout=Unset,
            stderr=Unset,
            *,
            stdin=Unset,
            verbosity=Verbosity.NORMAL,
            interactive=True,
            colorful=Unset,
    ):
        options = dict(highlight=False, markup=False, emoji=False, soft_wrap=True)
        self._out = RichConsole(file=coalesce(stdout, sys.stdout), **options)
        self._err = RichConsole(file=coalesce(stderr, sys.stderr), **options)
        self._stdin = coalesce(stdin, sys.stdin)
        self.verbosity = Verbosity(verbosity)
        self.interactive = interactive
        self.colorful = coalesce(colorful, self._out.is_terminal)

    @property
    def width(self):
        return self._out.width

    @property
    def quiet(self):
        return self.verbosity is Verbosity.QUIET

    def write(self, *renderables):
        if self.quiet:
            return
        self._out.print(*renderables)

    def warn(self, *renderables):
        if self.quiet:
            return
        self._out.print(*renderables, style="yellow" if self.colorful else None)

    def verbose(self, *renderables):
        if self.verbosity < Verbosity.DETAILED:
            return
        self._out.print(*renderables)

    def error(self, *renderables):
        self._err.print(*renderables, style="red" if self.colorful else None)

    def use_utf8(self):
        """
        switch both streams to UTF-8 where the underlying file allows it.
        """
        for console in (self._out, self._err):
            if callable(reconfigure := getattr(console.file, "reconfigure", None)):
                reconfigure(encoding="utf-8")

    def confirm(self, question, /, *, default=False):
        """
        ask a yes/no question; non-interactive consoles answer True without asking.
        """
        if not self.interactive:
            return True
        return Confirm.ask(question, console=self._out, default=default, stream=self._stdin)


__all__ = (
    "Verbosity",
    "Console",
)
