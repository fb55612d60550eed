"""
Dashbind value model.

Overview
- ValueType: immutable, recursive type declaration. Variants are the scalar
  singletons ValueType.INT, ValueType.DOUBLE, ValueType.STRING and the
  parametric ValueType.array(inner).
- Value: immutable tagged union holding an int, a float, a str, or a tuple of
  Values. Built only through the Value.int/double/string/array constructors,
  which check the payload so that a Value never holds the wrong Python type.

Unwrapping
- intvalue()/doublevalue()/stringvalue()/arrayvalue() return the payload or raise
  WrongVariantError when the stored variant does not match the request.

Descriptions
- str(ValueType.array(ValueType.INT)) -> "Array<Int>"
- str(Value.array([Value.int(1), Value.int(2)])) -> "Array(Int(1),Int(2))"
"""
import math
from collections.abc import Iterable
from typing import final

from rich.text import Text

from .faults import WrongVariantError
from .utils import Unset, mirror

_KINDS = ("int", "double", "string", "array")


@final
class ValueType:
    """
    Declared type of a parameter value.

    Scalars are process-wide singletons; arrays are compared structurally.
    Nested arrays (array of array) are representable on purpose: they are
    rejected by the extractor, not by the declaration.
    """
    __slots__ = ("_kind", "_inner")

    INT: "ValueType"
    DOUBLE: "ValueType"
    STRING: "ValueType"

    kind = mirror("kind")
    inner = mirror("inner")

    def __new__(cls, kind, inner=Unset, /):
        if kind not in _KINDS:
            raise ValueError(f"value-type kind must be one of {', '.join(map(repr, _KINDS))}")
        if kind == "array":
            if not isinstance(inner, ValueType):
                raise TypeError("value-type 'inner' must be a value-type for arrays")
        elif inner is not Unset:
            raise TypeError(f"value-type {kind!r} cannot have an inner type")
        else:
            # Scalars are singletons once the class attributes exist.
            cached = getattr(cls, kind.upper(), None)
            if cached is not None:
                return cached

        self = super().__new__(cls)
        object.__setattr__(self, "_kind", kind)
        object.__setattr__(self, "_inner", inner if kind == "array" else None)
        return self

    def __setattr__(self, name, value):
        raise AttributeError("value-type is immutable")

    @classmethod
    def array(cls, inner, /):
        """Declare an array whose elements are of type 'inner'."""
        return cls("array", inner)

    @property
    def scalar(self):
        return self._kind != "array"

    @property
    def depth(self):
        """Number of array levels wrapping the innermost scalar type."""
        return 0 if self.scalar else 1 + self._inner.depth

    def __eq__(self, other):
        if not isinstance(other, ValueType):
            return NotImplemented
        return self._kind == other._kind and self._inner == other._inner

    def __hash__(self):
        return hash((self._kind, self._inner))

    def __str__(self):
        if self._kind == "array":
            return f"Array<{self._inner}>"
        return self._kind.capitalize()

    def __repr__(self):
        if self._kind == "array":
            return f"ValueType.array({self._inner!r})"
        return f"ValueType.{self._kind.upper()}"

    def __reduce__(self):
        if self._kind == "array":
            return ValueType, ("array", self._inner)
        return ValueType, (self._kind,)


ValueType.INT = ValueType("int")
ValueType.DOUBLE = ValueType("double")
ValueType.STRING = ValueType("string")


@final
class Value:
    """
    Typed value produced by extraction (or supplied as an option default).

    Invariant
    - an array holds elements of a single variant; mixed arrays cannot be built.
    """
    __slots__ = ("_kind", "_payload")

    kind = mirror("kind")

    def __new__(cls, kind, payload, /):
        match kind:
            case "int":
                if not isinstance(payload, int) or isinstance(payload, bool):
                    raise TypeError("int value payload must be an integer")
            case "double":
                if not isinstance(payload, int | float) or isinstance(payload, bool):
                    raise TypeError("double value payload must be a real number")
                payload = float(payload)
            case "string":
                if not isinstance(payload, str):
                    raise TypeError("string value payload must be a string")
            case "array":
                if not isinstance(payload, Iterable) or isinstance(payload, str):
                    raise TypeError("array value payload must be an iterable of values")
                payload = tuple(payload)
                if not all(isinstance(element, Value) for element in payload):
                    raise TypeError("array value elements must be values")
                if len({element._kind for element in payload}) > 1:
                    raise TypeError("array value elements must share a single variant")
            case _:
                raise ValueError(f"value kind must be one of {', '.join(map(repr, _KINDS))}")

        self = super().__new__(cls)
        object.__setattr__(self, "_kind", kind)
        object.__setattr__(self, "_payload", payload)
        return self

    def __setattr__(self, name, value):
        raise AttributeError("value is immutable")

    @classmethod
    def int(cls, payload, /):
        return cls("int", payload)

    @classmethod
    def double(cls, payload, /):
        return cls("double", payload)

    @classmethod
    def string(cls, payload, /):
        return cls("string", payload)

    @classmethod
    def array(cls, payload, /):
        return cls("array", payload)

    def _unwrap(self, kind):
        if self._kind != kind:
            raise WrongVariantError(
                "value %s holds %s, not %s" % (self, self._kind, kind),
                title="wrong value variant",
                hint="check the declared type of the parameter before unwrapping",
                expected=kind,
                actual=self._kind,
            )
        return self._payload

    def intvalue(self):
        return self._unwrap("int")

    def doublevalue(self):
        return self._unwrap("double")

    def stringvalue(self):
        return self._unwrap("string")

    def arrayvalue(self):
        return self._unwrap("array")

    def conforms(self, expected, /):
        """
        Tell whether this value fits the declared type 'expected'.

        Empty arrays conform to every array type.
        """
        if not isinstance(expected, ValueType):
            raise TypeError("conforms() argument must be a value-type")
        if self._kind != expected.kind:
            return False
        if self._kind == "array":
            return all(element.conforms(expected.inner) for element in self._payload)
        return True

    @property
    def description(self):
        if self._kind == "array":
            return "Array(%s)" % ",".join(element.description for element in self._payload)
        return f"{self._kind.capitalize()}({self._payload})"

    def __str__(self):
        return self.description

    def __repr__(self):
        if self._kind == "array":
            return f"Value.array([{', '.join(map(repr, self._payload))}])"
        return f"Value.{self._kind}({self._payload!r})"

    def __rich__(self):
        return Text(self.description, style="bold #FFD600")

    def _identity(self):
        # NaN doubles compare equal to each other so repeated extractions agree.
        if self._kind == "array":
            return self._kind, tuple(element._identity() for element in self._payload)
        if self._kind == "double" and math.isnan(self._payload):
            return self._kind, "nan"
        return self._kind, self._payload

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self):
        return hash(self._identity())

    def __reduce__(self):
        return Value, (self._kind, self._payload)


__all__ = (
    "ValueType",
    "Value",
)
