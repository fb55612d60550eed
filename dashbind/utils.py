"""
Small helpers shared by the dashbind modules.

- Unset: the "not given" marker. Option defaults and descriptions may be None
  once resolved, so keyword defaults need a third state that is neither None
  nor a Value. isinstance(x, str | Unset) is supported.
- coalesce(object, default=None): turn Unset into a concrete default; any other
  object (None, 0, "" included) passes through.
- rename(callable, name) / @rename(name): fix __name__ and __qualname__ of
  generated functions (properties, reprs, decorators).
- mirror(name): read-only property over the private "_<name>" slot; lists,
  dicts and sets come back as fresh copies.

    >>> coalesce(Unset, "-")
    '-'
    >>> coalesce(None, "-") is None
    True
"""
import builtins
import functools
from collections.abc import Mapping, Sequence, Set
from typing import final


@final
class UnsetType:
    """Type of the Unset marker; falsy, sealed and instantiated once."""

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    # "str | Unset" builds the union with the marker's type.
    def __or__(self, other, /):
        return type(self) | other

    def __ror__(self, other, /):
        return other | type(self)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"


def coalesce(object, default=None, /):
    """Return 'object', or 'default' when 'object' is Unset."""
    return default if object is Unset else object


def _rename(callable, name):
    if not builtins.callable(callable):
        raise TypeError(f"cannot rename a {type(callable).__name__!r} object")
    if not isinstance(name, str):
        raise TypeError("names given by rename() must be strings")
    try:
        callable.__name__ = callable.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError(f"cannot rename {callable!r}") from None
    return callable


def rename(*parameters):
    """
    Rename a callable in place, or build a decorator that will.

        rename(function, "name") -> function
        @rename("name")
    """
    if len(parameters) == 2:
        return _rename(*parameters)
    if len(parameters) != 1:
        raise TypeError(f"rename() takes 1 or 2 arguments ({len(parameters)} given)")

    name, = parameters
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")
    return _rename(lambda callable, /: _rename(callable, name), "rename")


def _detach(object):
    # Shallow copies: schema entries are immutable, only the containers are not.
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return dict(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """Read-only property exposing self._<name>."""
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    return property(rename(lambda self: _detach(getattr(self, "_" + name)), name))


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)
