r"""
Dashbind parameter schema.

Overview
- Parameter: closed base for the two kinds of schema entries below.
- Argument: required, value-bearing, named parameter matched as "-<name>=<value>".
  Extraction failures always reach the caller.
- Option: optional named parameter matched as "--<name>", in one of two modes:
  • flag: presence-only, true iff the exact token "--<name>" is present.
  • value: "--<name>=<value>" with an optional default; extraction failures
    are absorbed into that default.

Metadata (sanitized on construction)
- name: bare identifier, r"[^\W\d]([\w-]*)" (unicode letters allowed, no '=' or prefix dashes).
- descr: Unset | str, non-empty when provided (shown in help).
- expected: ValueType (Argument; Option in value mode).
- default: Unset | Value conforming to expected (Option in value mode only).

Introspection & representation
- ParameterType metaclass exposes the names in __introspectable__ as read-only
  properties and provides stable __repr__/__rich_repr__.

Examples
    >>> Argument("count", ValueType.INT).value(["-count=3"])
    Value.int(3)
    >>> Option("verbose").flag(["--verbose"])
    True
"""
import functools
import operator
import re

from .extractor import extract
from .faults import ArgumentError
from .utils import *
from .values import Value, ValueType


class ParameterType(type):
    """
    Metaclass that turns parameter classes into introspectable, read-only specs.

    Responsibilities
    - Derive __typename__ from the class name ("Argument" -> "argument").
    - Mirror every name in __introspectable__ into a read-only property.
    - Provide stable __repr__/__rich_repr__ implementations.
    - Keep the Parameter family closed: only classes defined in this module may
      derive from a ParameterType class.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        if bases and namespace.get("__module__") != __name__:
            raise TypeError(f"type {bases[0].__name__!r} is not an acceptable base type")

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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the shared 'name' and 'descr' metadata in place.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not re.fullmatch(r"[^\W\d][\w-]*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a bare identifier (got {name!r})")

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

    metadata["descr"] = coalesce(descr)


def _sanitize_expected(cls, metadata, /):
    if not isinstance(metadata["expected"], ValueType):
        raise TypeError(f"{cls.__typename__} 'expected' must be a value-type")


class Parameter(metaclass=ParameterType):
    """
    Closed base of the parameter schema: every entry is an Argument or an Option.

    Schema order is insertion order; it only affects help rendering.
    """

    @property
    def consolename(self):
        """Literal prefix+name string matched against raw tokens."""
        return type(self).__prefix__ + self._name

    def __setattr__(self, name, value):
        if not name.startswith("_") or hasattr(self, name):
            raise AttributeError(f"{type(self).__typename__} is immutable")
        super().__setattr__(name, value)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash((type(self), *self.__rich_repr__()))


class Argument(Parameter):
    """
    Required named parameter: "-<name>=<value>".

    An Argument has no default; value() surfaces every extraction error.
    """
    __prefix__ = "-"
    __introspectable__ = (
        "name",
        "expected",
        "descr",
    )

    def __init__(self, name, expected, /, descr=Unset):
        metadata = {"name": name, "expected": expected, "descr": descr}
        _sanitize_metadata(type(self), metadata)
        _sanitize_expected(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def value(self, tokens, /):
        """Extract this argument from 'tokens'; raises ArgumentError on failure."""
        return extract(tokens, self.consolename, self._expected)


class Option(Parameter):
    """
    Optional named parameter: "--<name>" (flag) or "--<name>=<value>" (value).

    Mode is inferred from 'expected': without it the option is a flag.
    In value mode, value() never raises an extraction error: failures resolve to
    the configured default (None when no default was given).
    """
    __prefix__ = "--"
    __introspectable__ = (
        "name",
        "mode",
        "expected",
        "default",
        "descr",
    )

    def __init__(self, name, /, expected=Unset, default=Unset, descr=Unset):
        metadata = {"name": name, "expected": expected, "default": default, "descr": descr}
        _sanitize_metadata(type(self), metadata)

        if expected is Unset:
            if default is not Unset:
                raise TypeError(f"{type(self).__typename__} flags cannot have a default")
            metadata["mode"] = "flag"
        else:
            _sanitize_expected(type(self), metadata)
            if not isinstance(default, Value | Unset):
                raise TypeError(f"{type(self).__typename__} 'default' must be a value")
            if default is not Unset and not default.conforms(expected):
                raise ValueError(f"{type(self).__typename__} 'default' {default} does not conform to {expected}")
            metadata["mode"] = "value"

        metadata["expected"] = coalesce(expected)
        metadata["default"] = coalesce(default)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def flag(self, tokens, /):
        """True iff this is a flag and some token equals the console name exactly."""
        if self._mode != "flag":
            return False
        return any(token == self.consolename for token in tokens)

    def value(self, tokens, /):
        """Extracted value, or the default (possibly None) when extraction fails."""
        if self._mode != "value":
            return None
        default = Unset if self._default is None else self._default
        try:
            return extract(tokens, self.consolename, self._expected, default)
        except ArgumentError:
            return self._default


__all__ = (
    "Parameter",
    "Argument",
    "Option",
)
