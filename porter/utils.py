"""
Porter internal helpers.

Contents
- Unset: the "no value given" marker used as keyword default throughout the package,
  so that None stays available as a real value (an option default of None, a
  descriptor without description, ...). Falsy, printable, one instance per process.
- coalesce(value, default): swap Unset for a default; every other value is returned
  untouched, falsy ones included.
- rename(): give generated functions readable names in tracebacks and reprs.
- mirror("field"): read-only property over "_field"; mutable containers are copied on
  the way out, so descriptors stay immutable through their public attributes.
- casefold(name): the key of every case-insensitive table (commands, options, aliases).

    >>> coalesce(Unset, 10), coalesce(0, 10)
    (10, 0)
    >>> casefold("MSBuildPath") == casefold("msbuildpath")
    True
"""
import functools
from collections.abc import Mapping, Sequence, Set
from typing import final


@final
class UnsetType:
    """
    type of the Unset marker; instantiating it always yields the same object.

    Unset takes part in PEP 604 unions, so "isinstance(x, str | Unset)" reads the way
    the validators in this package need it to.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


def coalesce(value, default=None, /):
    """
    return default when value is Unset, value otherwise.
    """
    return default if value is Unset else value


def rename(*parameters):
    """
    rename(function, name) -> function, or rename(name) -> decorator.

    sets both __name__ and __qualname__.
    """
    if len(parameters) == 1:
        return functools.partial(_rename, name=parameters[0])
    if len(parameters) == 2:
        return _rename(*parameters)
    raise TypeError(f"rename() expects 1 or 2 arguments, got {len(parameters)}")


def _rename(function, /, name):
    if not callable(function):
        raise TypeError(f"cannot rename {function!r}: not callable")
    if not isinstance(name, str):
        raise TypeError("rename() name must be a string")
    function.__name__ = function.__qualname__ = name
    return function


def _detach(value):
    if isinstance(value, str | tuple | frozenset):
        return value
    if isinstance(value, Mapping):
        return {key: _detach(item) for key, item in value.items()}
    if isinstance(value, Sequence):
        return [_detach(item) for item in value]
    if isinstance(value, Set):
        return {_detach(item) for item in value}
    return value


def mirror(field, /):
    """
    read-only property returning a detached copy of self._<field>.
    """
    if not isinstance(field, str):
        raise TypeError("mirror() field must be a string")

    @rename(field)
    def getter(self):
        return _detach(getattr(self, "_" + field))

    return property(getter)


def casefold(name, /):
    """
    lookup key of a command or option name (matching ignores case everywhere).
    """
    if not isinstance(name, str):
        raise TypeError(f"names must be strings, not {type(name).__name__}")
    return name.casefold()


Unset = UnsetType()


__all__ = (
    "Unset",
    "UnsetType",
    "coalesce",
    "rename",
    "mirror",
    "casefold",
)
