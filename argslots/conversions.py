r"""
Argslots conversion table: the closed set of value kinds a slot can hold.

Overview
- Kind: enumeration of supported value kinds (text, character, boolean,
  signed/unsigned integers of several widths, single/double floats).
- Conversion: one table entry per kind — Python type, default value, arity
  and a pure converter `convert(current, token)`.
- ConversionFailure: ValueError raised by converters; its message is the
  user-facing text ('"abc" is not a positive integer.').

Arity
- Number of tokens consumed after the alias on success.
  • 1 for text, integers and floats.
  • 0 for booleans (toggle) and characters: they inspect the following token
    but leave it in place for the next alias lookup.

Strictness
- Integers: the whole token must match r"[+-]?[0-9]+" and fit the kind's range.
- Floats: the whole token must be a decimal literal or inf/infinity/nan.
- No surrounding whitespace, no underscores, no alternative bases.

Adding a kind means adding a Kind member and its table entry; entries do not
share state.
"""
import math
import re
import struct
from enum import Enum
from types import MappingProxyType
from typing import NamedTuple, Any
from collections.abc import Callable

from .utils import rename


class ConversionFailure(ValueError):
    """
    A token could not be converted; str(failure) is the user-facing message.
    """

    def __init__(self, message, /):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class Conversion(NamedTuple):
    type: type
    default: Any
    arity: int
    convert: Callable[[Any, str | None], Any]


_INTEGER = re.compile(r"[+-]?[0-9]+")
_NUMBER = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE
)


def _valued(convert):
    """
    Reject a missing token before an arity-1 converter sees it.
    """
    @rename(convert.__name__)
    def wrapper(current, token, /):
        if token is None:
            raise ConversionFailure("no value was given.")
        return convert(current, token)
    return wrapper


def _integral(bits, signed):
    if signed:
        low, high = -(1 << bits - 1), (1 << bits - 1) - 1
        template = '"%s" is not an integer.'
    else:
        low, high = 0, (1 << bits) - 1
        template = '"%s" is not a positive integer.'

    @_valued
    @rename("%sint%d" % ("" if signed else "u", bits))
    def convert(current, token, /):
        if not _INTEGER.fullmatch(token):
            raise ConversionFailure(template % token)
        if not low <= (value := int(token)) <= high:
            raise ConversionFailure(template % token)
        return value

    convert.bounds = (low, high)
    return convert


def _floating(single):
    @_valued
    @rename("float32" if single else "float64")
    def convert(current, token, /):
        if not _NUMBER.fullmatch(token):
            raise ConversionFailure('"%s" is not a number.' % token)
        value = float(token)
        if single:
            try:
                value = struct.unpack("f", struct.pack("f", value))[0]
            except OverflowError:
                # out of single range saturates, as strtof does
                value = math.copysign(math.inf, value)
        return value

    return convert


@_valued
@rename("text")
def _text(current, token, /):
    return str(token)


@rename("char")
def _char(current, token, /):
    return (token or "")[:1]


@rename("toggle")
def _toggle(current, token, /):
    return not current


class Kind(Enum):
    """
    Closed set of value kinds a slot can store.

    Each member resolves to a Conversion entry through its properties
    (type, default, arity, convert), so the parser never branches on kinds.
    """
    STR = "str"
    CHAR = "char"
    BOOL = "bool"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def conversion(self):
        return TABLE[self]

    @property
    def type(self):
        return TABLE[self].type

    @property
    def default(self):
        return TABLE[self].default

    @property
    def arity(self):
        return TABLE[self].arity

    def convert(self, current, token, /):
        """
        Convert `token` for this kind; raises ConversionFailure.
        """
        return TABLE[self].convert(current, token)

    def admits(self, value, /):
        """
        Tell whether `value` can be stored by a slot of this kind.

        Used to validate declared defaults: the Python type must match exactly
        (bool is not accepted as an integer), integers must fit the width and
        characters hold at most one character. Floats also accept ints.
        """
        entry = TABLE[self]
        if entry.type is float:
            return isinstance(value, int | float) and not isinstance(value, bool)
        if entry.type is int:
            if not isinstance(value, int) or isinstance(value, bool):
                return False
            low, high = entry.convert.bounds
            return low <= value <= high
        if not isinstance(value, entry.type):
            return False
        return self is not Kind.CHAR or len(value) <= 1

    @classmethod
    def resolve(cls, object, /):
        """
        Resolve a Kind, a kind name ("uint32") or a builtin type to a Kind.

        Builtins map to their natural kinds: str → STR, bool → BOOL,
        int → INT64, float → FLOAT64.
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, str):
            try:
                return cls(object.strip().lower())
            except ValueError:
                raise ValueError("unknown value kind %r" % object) from None
        if isinstance(object, type):
            try:
                return _BUILTINS[object]
            except KeyError:
                raise TypeError("type %r has no matching value kind" % object.__name__) from None
        raise TypeError("value kind must be a Kind, a kind name or a builtin type")

    def __repr__(self):
        return "Kind.%s" % self.name


TABLE = MappingProxyType({
    Kind.STR: Conversion(str, "", 1, _text),
    Kind.CHAR: Conversion(str, "", 0, _char),
    Kind.BOOL: Conversion(bool, False, 0, _toggle),
    Kind.INT8: Conversion(int, 0, 1, _integral(8, signed=True)),
    Kind.INT16: Conversion(int, 0, 1, _integral(16, signed=True)),
    Kind.INT32: Conversion(int, 0, 1, _integral(32, signed=True)),
    Kind.INT64: Conversion(int, 0, 1, _integral(64, signed=True)),
    Kind.UINT8: Conversion(int, 0, 1, _integral(8, signed=False)),
    Kind.UINT16: Conversion(int, 0, 1, _integral(16, signed=False)),
    Kind.UINT32: Conversion(int, 0, 1, _integral(32, signed=False)),
    Kind.UINT64: Conversion(int, 0, 1, _integral(64, signed=False)),
    Kind.FLOAT32: Conversion(float, 0.0, 1, _floating(single=True)),
    Kind.FLOAT64: Conversion(float, 0.0, 1, _floating(single=False)),
})

_BUILTINS = {
    str: Kind.STR,
    bool: Kind.BOOL,
    int: Kind.INT64,
    float: Kind.FLOAT64,
}


__all__ = (
    "Kind",
    "Conversion",
    "ConversionFailure",
    "TABLE",
)
