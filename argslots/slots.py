"""
Argslots value slots.

A Slot is the storage cell behind one declared option. It owns exactly one
value of its Kind, plus the metadata the parser needs (help text, required
flag) and the per-pass bookkeeping (was_set, error).

Everything outside the slot reads it through read-only properties; the only
way to change the value is receive(token), which goes through the conversion
table. The Slot object handed back by declare() (and Parser.arg) is the
client's handle: it stays valid for as long as the parser that holds it.

Example
    >>> slot = declare(Kind.UINT32, 1, "how many times")
    >>> slot.receive("3")
    Receipt(consumed=1, ok=True)
    >>> slot.value
    3
"""
import builtins
import functools
import operator
from typing import NamedTuple

from .conversions import Kind, ConversionFailure
from .utils import *


class Receipt(NamedTuple):
    """
    Result of offering a token to a slot.

    - consumed: tokens taken after the alias (the kind's arity on success, 0 on failure).
    - ok: False when the conversion failed; the slot's error holds the message.
    """
    consumed: int
    ok: bool


def _sanitize_metadata(metadata, /):
    """
    Internal: validate and normalize declaration metadata in place.

    - kind: resolved through Kind.resolve (Kind, kind name or builtin type).
    - default: Unset becomes the kind's default; otherwise it must be admitted
      by the kind (TypeError for a wrong type, ValueError for an out-of-range
      integer or a multi-character CHAR default).
    - descr: Unset becomes None; otherwise a non-empty string after trimming.
    - required: coerced to bool.
    """
    kind = metadata["kind"] = Kind.resolve(metadata["kind"])

    if (default := metadata["default"]) is Unset:
        metadata["default"] = kind.default
    elif not kind.admits(default):
        if isinstance(default, kind.type) and not (kind.type is int and isinstance(default, bool)):
            raise ValueError("default %r does not fit a %s slot" % (default, kind.value))
        raise TypeError("default for a %s slot must be %s, not %s" % (
            kind.value, kind.type.__name__, builtins.type(default).__name__
        ))
    elif kind.type is float:
        metadata["default"] = float(default)

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError("slot 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError("slot 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    metadata["required"] = bool(metadata["required"])


class Slot[_T]:
    """
    Typed storage cell for one declared option.

    Properties (read-only)
    - kind: the Kind stored by this slot.
    - value: current value; starts as the declared default.
    - default: declared default.
    - descr: help text, or None.
    - required: whether a parse pass must reach this slot.
    - was_set: True once receive() was attempted during the current pass.
    - error: message of the most recent conversion failure, "" otherwise.

    Slots are not thread-safe; the parser that owns them serializes access.
    """

    __introspectable__ = (
        "kind",
        "value",
        "default",
        "descr",
        "required",
        "was_set",
        "error",
    )

    kind = mirror("kind")
    value = mirror("value")
    default = mirror("default")
    descr = mirror("descr")
    required = mirror("required")
    was_set = mirror("was_set")
    error = mirror("error")

    def __init__(self, kind, default=Unset, descr=Unset, required=False):
        metadata = {
            "kind": kind,
            "default": default,
            "descr": descr,
            "required": required,
        }
        _sanitize_metadata(metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._value = self._default
        self._was_set = False
        self._error = ""

    def receive(self, token, /):
        """
        Offer the token that follows this slot's alias.

        The token is None when the alias was the last argument. Zero-arity
        kinds (BOOL, CHAR) look at it but never consume it. Conversion
        problems are reported through the receipt and the error property,
        never raised, so the parser can keep going.
        """
        self._error = ""
        try:
            value = self._kind.convert(self._value, token)
        except ConversionFailure as failure:
            self._error = failure.message
            return Receipt(0, False)
        finally:
            self._was_set = True
        self._value = value
        return Receipt(self._kind.arity, True)

    def reset(self):
        """
        Forget the bookkeeping of a previous pass; the value is kept.
        """
        self._was_set = False
        self._error = ""

    def __repr__(self):
        return "slot(%s)" % ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


def declare(kind, default=Unset, descr=Unset, required=False):
    """
    Allocate a slot of `kind`, write its default and return it.

    Parameters
    - kind: Kind | str | type
      Value kind, a kind name ("uint32") or a builtin type (int → INT64).
    - default: value admitted by the kind; the kind's default when omitted.
    - descr: help text shown in the help listing.
    - required: report a fault when a parse pass never reaches the slot.
    """
    return Slot(kind, default, descr, required)


__all__ = (
    "Slot",
    "Receipt",
    "declare",
)
