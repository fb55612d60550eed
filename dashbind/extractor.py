r"""
Dashbind token extractor.

Given the raw token list of an invocation, a console name pattern (e.g. "-count"
or "--limit"), and a declared ValueType, locate the first token shaped
"<pattern>=<raw>" and coerce <raw> into a typed Value.

Token grammar
- assignment: <key>=<raw>; the key is everything before the first '=', so
  "-expr=a=b" carries the raw value "a=b".
- arrays: <raw> is split on ',' with no escaping; "" yields one empty element.
- tokens without '=' never match, even when they equal the pattern.

Numeric literals (locale-independent)
- int:    [+-]?[0-9]+ within the signed 64-bit range
- double: decimal/exponent forms plus inf, infinity and nan (case-insensitive),
          with an optional sign; whitespace and '_' separators are rejected

Failure modes
- WrongFormatError: the pattern itself is not a usable console name.
- IndirectValueError: the declared type is an array of arrays (checked before scanning).
- IncorrectValueError: a scalar or an array element failed numeric coercion.
- NoAssignmentError: no assignment matched, no default, but the bare pattern was given.
- NoValueError: no assignment matched and no default was supplied.
"""
import re

from .faults import (
    IncorrectValueError,
    IndirectValueError,
    NoAssignmentError,
    NoValueError,
    WrongFormatError,
)
from .utils import Unset
from .values import Value, ValueType

DELIMITER = "="
SEPARATOR = ","

_INT_MIN = -(2 ** 63)
_INT_MAX = 2 ** 63 - 1

_INT = re.compile(r"[+-]?[0-9]+")
_DOUBLE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE
)


def split(token, /):
    """
    Split a token on its first delimiter.

    Returns (key, raw) for assignments and (token, None) when there is no '='.
    """
    key, delimiter, raw = token.partition(DELIMITER)
    if not delimiter:
        return token, None
    return key, raw


def parseint(text, /):
    """Parse a strict, signed 64-bit decimal integer literal."""
    if not _INT.fullmatch(text):
        raise IncorrectValueError(
            "%r is not an integer" % text,
            title="incorrect value",
            hint="use digits with an optional sign (for example: -count=42)",
            raw=text,
            expected=ValueType.INT,
        )
    number = int(text)
    if not _INT_MIN <= number <= _INT_MAX:
        raise IncorrectValueError(
            "%r does not fit in a 64-bit integer" % text,
            title="incorrect value",
            hint="use a value between %d and %d" % (_INT_MIN, _INT_MAX),
            raw=text,
            expected=ValueType.INT,
        )
    return number


def parsedouble(text, /):
    """Parse a locale-independent floating point literal."""
    if not _DOUBLE.fullmatch(text):
        raise IncorrectValueError(
            "%r is not a number" % text,
            title="incorrect value",
            hint="use a decimal number such as 1.5, -2 or 3e8",
            raw=text,
            expected=ValueType.DOUBLE,
        )
    return float(text)


def _coerce(raw, expected):
    match expected.kind:
        case "int":
            return Value.int(parseint(raw))
        case "double":
            return Value.double(parsedouble(raw))
        case "string":
            return Value.string(raw)
    # Nested arrays are rejected before the scan starts, so inner is always scalar here.
    return Value.array(_coerce(element, expected.inner) for element in raw.split(SEPARATOR))


def extract(tokens, pattern, expected, default=Unset):
    """
    Extract the value assigned to 'pattern' from 'tokens'.

    Parameters
    - tokens: Iterable[str]
      Raw invocation tokens, scanned in order; the first match wins.
    - pattern: str
      Exact console name to match against the key of each assignment.
    - expected: ValueType
      Declared type driving the coercion.
    - default: Value | Unset
      Returned when nothing matches; Unset means "no default".

    Raises
    - ArgumentError subclasses (see module documentation).
    """
    if not isinstance(expected, ValueType):
        raise TypeError("extract() 'expected' must be a value-type")
    if not isinstance(pattern, str) or not pattern or DELIMITER in pattern:
        raise WrongFormatError(
            "name pattern %r cannot be matched against assignments" % (pattern,),
            title="wrong format",
            hint="console names are non-empty and never contain '='",
            pattern=pattern,
        )
    if not expected.scalar and not expected.inner.scalar:
        raise IndirectValueError(
            "nested arrays are not supported (%s declared for %s)" % (expected, pattern),
            title="indirect value",
            hint="declare a flat array such as Array<Int> and split the data yourself",
            pattern=pattern,
            expected=expected,
        )

    bare = False
    for token in tokens:
        key, raw = split(token)
        if raw is None:
            bare = bare or key == pattern
            continue
        if key != pattern:
            continue
        try:
            return _coerce(raw, expected)
        except IncorrectValueError as error:
            raise IncorrectValueError(
                "incorrect value for %s: %s" % (pattern, error),
                **{
                    **error.options,
                    "hint": "%s expects %s" % (pattern, expected),
                    "pattern": pattern,
                    "token": token,
                    "expected": expected,
                }
            ) from None

    if default is not Unset:
        return default

    if bare:
        raise NoAssignmentError(
            "%s was given without a value" % pattern,
            title="no assignment",
            hint="assign a value with '=' (for example: %s=<value>)" % pattern,
            pattern=pattern,
            expected=expected,
        )
    raise NoValueError(
        "no value for %s" % pattern,
        title="no value",
        hint="pass it as %s=<%s>" % (pattern, expected),
        pattern=pattern,
        expected=expected,
    )


__all__ = (
    "DELIMITER",
    "SEPARATOR",
    "split",
    "parseint",
    "parsedouble",
    "extract",
)
