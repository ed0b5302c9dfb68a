"""
Porter command descriptors and the command registry.

Overview
- CommandDescriptor: everything the dispatcher needs to know about a command
  before running it (names, option catalog, arity, help copy, deprecation) plus the
  factory that creates a fresh command instance per invocation.
- CommandRegistry: case-insensitive name/alias index over descriptors, built from the
  built-in commands and any extension descriptors, frozen before dispatch.

Resolution
- Exact match only (no prefixes, no fuzzy matching); the comparison is case-insensitive.
- A miss raises UnknownCommandError carrying the requested name; suggestions (if any)
  are attached as options for the hint line.
- Registering a name or alias twice raises DuplicateCommandError.
"""
import difflib
import logging

from .catalog import DescriptorType, OptionCatalog, _sanitize_descr, _sanitize_names
from .faults import DuplicateCommandError, UnknownCommandError
from .resources import ENGLISH
from .utils import *

logger = logging.getLogger(__name__)


class CommandDescriptor(metaclass=DescriptorType):
    """
    an immutable description of one command.

    parameters
    - name, *aliases: case-insensitive identifiers (e.g. "help", "?").
    - factory: zero-argument callable returning a new command instance.
    - catalog: OptionCatalog of the command's legal options.
    - descr/usage: one-line summary and argument synopsis used by help.
    - examples: example invocations (without the program name).
    - min_args/max_args: accepted positional argument count (max_args None = unbounded).
    - deprecated/alternative: deprecation state and the replacing command, if any.
    - hidden: never listed by help.
    """
    __introspectable__ = (
        "name",
        "aliases",
        "factory",
        "catalog",
        "descr",
        "usage",
        "examples",
        "min_args",
        "max_args",
        "deprecated",
        "alternative",
        "hidden",
    )
    __displayable__ = ("name", "aliases", "min_args", "max_args", "deprecated", "alternative", "hidden")

    def __init__(
            self,
            name,
            /,
            *aliases,
            factory,
            catalog=Unset,
            descr=Unset,
            usage=Unset,
            examples=(),
            min_args=0,
            max_args=None,
            deprecated=False,
            alternative=Unset,
            hidden=False,
    ):
        cls = type(self)
        self._name, self._aliases = _sanitize_names(cls, name, aliases)

        if not callable(factory):
            raise TypeError(f"{cls.__typename__} 'factory' must be callable")
        self._factory = factory

        if not isinstance(catalog := coalesce(catalog, OptionCatalog()), OptionCatalog):
            raise TypeError(f"{cls.__typename__} 'catalog' must be an option catalog")
        self._catalog = catalog

        self._descr = _sanitize_descr(cls, descr)

        if not isinstance(usage, str | Unset):
            raise TypeError(f"{cls.__typename__} 'usage' must be a string")
        self._usage = coalesce(usage, "")

        if isinstance(examples, str):
            examples = (examples,)
        examples = tuple(examples)
        if not all(isinstance(example, str) for example in examples):
            raise TypeError(f"{cls.__typename__} 'examples' must be strings")
        self._examples = examples

        if not isinstance(min_args, int) or min_args < 0:
            raise ValueError(f"{cls.__typename__} 'min_args' must be a non-negative integer")
        if max_args is not None and (not isinstance(max_args, int) or max_args < min_args):
            raise ValueError(f"{cls.__typename__} 'max_args' must be None or an integer not below 'min_args'")
        self._min_args = min_args
        self._max_args = max_args

        if not isinstance(deprecated, bool) or not isinstance(hidden, bool):
            raise TypeError(f"{cls.__typename__} 'deprecated' and 'hidden' must be booleans")
        self._deprecated = deprecated
        self._hidden = hidden

        if not isinstance(alternative, str | Unset):
            raise TypeError(f"{cls.__typename__} 'alternative' must be a string")
        if alternative and not deprecated:
            raise ValueError(f"{cls.__typename__} 'alternative' requires 'deprecated'")
        self._alternative = coalesce(alternative)

    @property
    def names(self):
        return (self._name, *sorted(self._aliases, key=casefold))

    def accepts(self, count, /):
        """
        tell whether count positional arguments satisfy the declared arity.
        """
        return self._min_args <= count and (self._max_args is None or count <= self._max_args)

    def create(self):
        """
        create a fresh command instance; every option target starts at its default.
        """
        command = self._factory()
        for descriptor in self._catalog:
            setattr(command, descriptor.target, descriptor.initial())
        command.arguments = []
        command.descriptor = self
        return command


class CommandRegistry:
    """
    case-insensitive index of command descriptors.

    contract
    - register()/extend() before freeze(); afterwards the registry is read-only.
    - resolve(name) -> CommandDescriptor or UnknownCommandError.
    - iteration yields descriptors in registration order.
    """

    def __init__(self, descriptors=(), /, *, messages=ENGLISH):
        self._descriptors = []
        self._index = {}
        self._frozen = False
        self.messages = messages
        self.extend(descriptors)

    def register(self, descriptor, /):
        if self._frozen:
            raise TypeError("command registry is frozen")
        if not isinstance(descriptor, CommandDescriptor):
            raise TypeError("register() argument must be a command descriptor")
        keys = [casefold(name) for name in descriptor.names]
        for key, name in zip(keys, descriptor.names):
            if key in self._index:
                raise DuplicateCommandError(name)
        self._descriptors.append(descriptor)
        for key in keys:
            self._index[key] = descriptor
        logger.debug("registered command %s", descriptor.name)
        return descriptor

    def extend(self, descriptors, /):
        for descriptor in descriptors:
            self.register(descriptor)
        return self

    def freeze(self):
        self._frozen = True
        return self

    @property
    def frozen(self):
        return self._frozen

    def resolve(self, name, /, *, messages=Unset):
        """
        return the descriptor registered under name (or an alias of it).

        messages localizes the UnknownCommandError of this call only; the
        registry default is used otherwise.
        """
        messages = coalesce(messages, self.messages)
        try:
            return self._index[casefold(name)]
        except (KeyError, TypeError):
            pass
        suggestions = difflib.get_close_matches(
            casefold(name) if isinstance(name, str) else "",
            [casefold(d.name) for d in self.descriptors()],
            3,
        )
        raise UnknownCommandError(
            messages("unknown-command", name=name),
            name=name,
            suggestions=suggestions,
            hint=messages("unknown-command-hint"),
        )

    def get(self, name, default=None, /):
        try:
            return self._index[casefold(name)]
        except KeyError:
            return default

    def __contains__(self, name):
        return isinstance(name, str) and casefold(name) in self._index

    def __iter__(self):
        return iter(tuple(self._descriptors))

    def __len__(self):
        return len(self._descriptors)

    def __repr__(self):
        return f"command-registry({', '.join(d.name for d in self._descriptors)})"

    def descriptors(self, *, include_hidden=False, include_deprecated=True):
        """
        registered descriptors, filtered for listing purposes.
        """
        return [
            descriptor for descriptor in self._descriptors
            if (include_hidden or not descriptor.hidden)
            and (include_deprecated or not descriptor.deprecated)
        ]


__all__ = (
    "CommandDescriptor",
    "CommandRegistry",
)
