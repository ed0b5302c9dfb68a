r"""
Porter option descriptors and catalogs.

Overview
- OptionDescriptor: one legal "-Name" option of a command (name, aliases, the
  attribute it binds to, value kind, converter, visibility and deprecation).
- OptionCatalog: an ordered, immutable table of descriptors with case-insensitive
  lookup. Catalogs are built with a fluent builder API; every builder call returns a
  new catalog and leaves the receiver untouched.

Kinds
- "flag":  presence-only, binds True (boolean).
- "value": binds exactly one value.
- "list":  binds a list; each occurrence appends one value (multi).
- "map":   binds a dict; each occurrence adds one "key=value" pair (multi).

Validation highlights (raised when the catalog is built)
- names and aliases must match r"[^\W\d_][\w.-]*" (or be "?"), case-insensitively unique
  per descriptor.
- two options cannot share a name; two options cannot share an alias.
- an alias equal to another option's name is shadowed by that name (exact name wins).
- two options cannot bind the same target.

Quick example
    >>> catalog = (
    ...     OptionCatalog()
    ...     .flag("NoCache", descr="disable the machine cache", deprecated=True, alternative="NoHttpCache")
    ...     .flag("NoHttpCache", descr="disable the http cache")
    ...     .option("Source", multi=True, descr="a package source to use")
    ... )
    >>> catalog["nohttpcache"].target
    'no_http_cache'
"""
import functools
import operator
import re

from .utils import *

_NAME = re.compile(r"[^\W\d_][\w.-]*|\?")

KINDS = ("flag", "value", "list", "map")


class DescriptorType(type):
    """
    Metaclass that turns descriptor classes into introspectable, read-only records.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property backed
      by "_{name}" (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Derive __typename__ from the class name ("OptionDescriptor" -> "option-descriptor")
      for use in validation messages.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, name, aliases, /):
    """
    Internal: validate a primary name and its aliases.

    Returns the stripped name and a frozenset of stripped aliases; aliases that
    repeat the name (case-insensitively) are rejected.
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not _NAME.fullmatch(name):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid option or command name, got {name!r}")

    if isinstance(aliases, str):
        aliases = (aliases,)
    seen = {casefold(name)}
    result = set()
    for alias in aliases:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        elif not (alias := alias.strip()):
            raise ValueError(f"{cls.__typename__} aliases cannot be empty-strings")
        elif not _NAME.fullmatch(alias):
            raise ValueError(f"{cls.__typename__} aliases must be valid names, got {alias!r}")
        elif casefold(alias) in seen:
            raise ValueError(f"{cls.__typename__} names and aliases cannot contain duplicates")
        seen.add(casefold(alias))
        result.add(alias)
    return name, frozenset(result)


def _sanitize_descr(cls, descr, /):
    if not isinstance(descr, str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    return coalesce(descr)


def target_of(name, /):
    """
    derive the attribute name bound by an option: "NoHttpCache" -> "no_http_cache".
    """
    snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", name)
    return re.sub(r"\W+", "_", snake).strip("_").lower()


class OptionDescriptor(metaclass=DescriptorType):
    """
    an immutable description of one command option.

    derived properties
    - boolean: the option is a flag (presence sets True).
    - multi: the option may repeat (list or map kinds).
    """
    __introspectable__ = (
        "name",
        "aliases",
        "target",
        "kind",
        "type",
        "choices",
        "default",
        "descr",
        "metavar",
        "hidden",
        "deprecated",
        "alternative",
    )
    __displayable__ = ("name", "aliases", "target", "kind", "hidden", "deprecated")

    def __init__(
            self,
            name,
            /,
            *aliases,
            target=Unset,
            kind="value",
            type=str,
            choices=(),
            default=Unset,
            descr=Unset,
            metavar=Unset,
            hidden=False,
            deprecated=False,
            alternative=Unset,
    ):
        cls = self.__class__
        self._name, self._aliases = _sanitize_names(cls, name, aliases)

        if not isinstance(target, str | Unset):
            raise TypeError(f"{cls.__typename__} 'target' must be a string")
        target = coalesce(target, target_of(self._name))
        if not target.isidentifier() or target.startswith("_"):
            raise ValueError(f"{cls.__typename__} 'target' must be a public identifier, got {target!r}")
        self._target = target

        if kind not in KINDS:
            raise ValueError(f"{cls.__typename__} 'kind' must be one of {', '.join(map(repr, KINDS))}")
        self._kind = kind

        if not callable(type):
            raise TypeError(f"{cls.__typename__} 'type' must be callable")
        self._type = type

        choices = tuple(choices)
        if kind == "flag" and choices:
            raise TypeError(f"{cls.__typename__} flags cannot declare choices")
        if len({casefold(str(choice)) for choice in choices}) != len(choices):
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
        self._choices = choices

        match kind:
            case "flag":
                self._default = coalesce(default, False)
            case "list":
                self._default = tuple(coalesce(default, ()))
            case "map":
                self._default = dict(coalesce(default, {}))
            case _:
                self._default = coalesce(default)

        self._descr = _sanitize_descr(cls, descr)

        if not isinstance(metavar, str | Unset):
            raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
        self._metavar = coalesce(metavar)

        if not isinstance(hidden, bool) or not isinstance(deprecated, bool):
            raise TypeError(f"{cls.__typename__} 'hidden' and 'deprecated' must be booleans")
        self._hidden = hidden
        self._deprecated = deprecated

        if not isinstance(alternative, str | Unset):
            raise TypeError(f"{cls.__typename__} 'alternative' must be a string")
        if alternative and not deprecated:
            raise ValueError(f"{cls.__typename__} 'alternative' requires 'deprecated'")
        self._alternative = coalesce(alternative)

    @property
    def boolean(self):
        return self._kind == "flag"

    @property
    def multi(self):
        return self._kind in ("list", "map")

    @property
    def names(self):
        """primary name followed by aliases (sorted)."""
        return (self._name, *sorted(self._aliases, key=casefold))

    def initial(self):
        """
        the value a command attribute holds before any option is bound.
        """
        match self._kind:
            case "list":
                return list(self._default)
            case "map":
                return dict(self._default)
            case _:
                return self._default

    def convert(self, value, /):
        """
        convert one raw token through type and choices.

        raises ValueError/TypeError on failure (the parser turns them into faults).
        """
        if self._choices:
            for choice in self._choices:
                if casefold(str(choice)) == casefold(value):
                    return choice
            raise ValueError(value)
        return self._type(value)

    def metadata(self):
        """
        keyword arguments that rebuild this descriptor (name and aliases excluded).
        """
        metadata = {
            field: getattr(self, "_" + field)
            for field in type(self).__introspectable__
            if field not in ("name", "aliases")
        }
        for field in ("descr", "metavar", "alternative"):
            if metadata[field] is None:
                metadata[field] = Unset
        return metadata

    def __eq__(self, other):
        if not isinstance(other, OptionDescriptor):
            return NotImplemented
        return (self._name, self._aliases, self.metadata()) == (other._name, other._aliases, other.metadata())

    def __hash__(self):
        return hash((self._name, self._target, self._kind))


class OptionCatalog:
    """
    an ordered, immutable table of OptionDescriptor.

    lookup
    - catalog[name] / catalog.get(name): case-insensitive; exact names win over aliases.
    - iteration yields descriptors in declaration order.

    building
    - flag(name, *aliases, **metadata)
    - option(name, *aliases, multi=False, **metadata)
    - pairs(name, *aliases, **metadata): a repeatable key=value option
    - extend(*descriptors) / merge(catalog) / without(*names)
    """

    def __init__(self, descriptors=(), /):
        self._descriptors = ()
        self._names = {}
        self._aliases = {}
        for descriptor in descriptors:
            self._add(descriptor)

    def _add(self, descriptor):
        if not isinstance(descriptor, OptionDescriptor):
            raise TypeError("option catalog entries must be option descriptors")

        key = casefold(descriptor.name)
        if key in self._names:
            raise ValueError(f"option {descriptor.name!r} is declared more than once")

        for other in self._descriptors:
            if other.target == descriptor.target:
                raise ValueError(f"options {other.name!r} and {descriptor.name!r} bind the same target {descriptor.target!r}")

        for alias in descriptor.aliases:
            if (alias := casefold(alias)) in self._aliases:
                raise ValueError(
                    f"options {self._aliases[alias].name!r} and {descriptor.name!r} share the alias {alias!r}"
                )

        self._descriptors += (descriptor,)
        self._names[key] = descriptor
        for alias in descriptor.aliases:
            self._aliases[casefold(alias)] = descriptor

    def get(self, name, default=None, /):
        """
        resolve a name or alias; exact name matches take precedence over aliases.
        """
        key = casefold(name)
        try:
            return self._names[key]
        except KeyError:
            return self._aliases.get(key, default)

    def __getitem__(self, name):
        if (descriptor := self.get(name)) is None:
            raise KeyError(name)
        return descriptor

    def __contains__(self, name):
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self):
        return iter(self._descriptors)

    def __len__(self):
        return len(self._descriptors)

    def __bool__(self):
        return bool(self._descriptors)

    def __eq__(self, other):
        if not isinstance(other, OptionCatalog):
            return NotImplemented
        return self._descriptors == other._descriptors

    def __hash__(self):
        return hash(self._descriptors)

    def __repr__(self):
        return f"option-catalog({', '.join(descriptor.name for descriptor in self._descriptors)})"

    def __rich_repr__(self):
        for descriptor in self._descriptors:
            yield descriptor

    def visible(self):
        """descriptors that help output may show."""
        return tuple(descriptor for descriptor in self._descriptors if not descriptor.hidden)

    def names(self):
        """every primary name and alias, as declared."""
        return [name for descriptor in self._descriptors for name in descriptor.names]

    def extend(self, *descriptors):
        return OptionCatalog((*self._descriptors, *descriptors))

    def merge(self, other, /):
        if not isinstance(other, OptionCatalog):
            raise TypeError("merge() argument must be an option catalog")
        return self.extend(*other)

    def without(self, *names):
        keys = set(map(casefold, names))
        return OptionCatalog(d for d in self._descriptors if casefold(d.name) not in keys)

    def replace(self, name, /, **overrides):
        """
        return a catalog where the option called name is rebuilt with overrides.
        """
        descriptor = self[name]
        aliases = overrides.pop("aliases", descriptor.aliases)
        rebuilt = OptionDescriptor(descriptor.name, *aliases, **(descriptor.metadata() | overrides))
        return OptionCatalog(rebuilt if d is descriptor else d for d in self._descriptors)

    def flag(self, name, /, *aliases, **metadata):
        return self.extend(OptionDescriptor(name, *aliases, kind="flag", **metadata))

    def option(self, name, /, *aliases, multi=False, **metadata):
        return self.extend(OptionDescriptor(name, *aliases, kind="list" if multi else "value", **metadata))

    def pairs(self, name, /, *aliases, **metadata):
        return self.extend(OptionDescriptor(name, *aliases, kind="map", **metadata))


__all__ = (
    "KINDS",
    "DescriptorType",
    "OptionDescriptor",
    "OptionCatalog",
    "target_of",
)
