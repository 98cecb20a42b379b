"""
Argslots faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue.
- ParseException / ParseWarning: base types that carry a message plus options
  and know how to render themselves with rich.
- ParseExit: the aggregation of every exception found in one parse pass.
- AliasCollisionError: configuration error raised by strict registries.
- trigger(): central entry point to surface a fault (print in shell mode,
  raise or warn otherwise).
- getdoc(): optional description lookup for a code from the host application.

Message contract
- str(fault) is exactly the message recorded by the parser, e.g.
  "Unknown argument: --colour" or
  "The following required arguments was not set: --msg or -m".
  Failure.message is these lines joined with newlines.

Integration
- The parser collects faults during a pass and hands them back in a Failure.
- invoke() triggers them: in shell mode they are rendered on stderr via rich,
  otherwise ParseExit is raised.
"""
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - arguments (1111x/1112x)
      • UNKNOWN_ARGUMENT, CONVERSION_FAILURE, MISSING_REQUIRED
    - declarations (1115x)
      • ALIAS_COLLISION
    - warnings (12xxx)
      • ALIAS_OVERRIDE

    normalize() lets the host remap codes to its own labels through a
    __codes__ mapping in __main__.
    """
    # --- argument errors (11xxx) ---
    UNKNOWN_ARGUMENT    = 11112
    CONVERSION_FAILURE  = 11123
    MISSING_REQUIRED    = 11125

    # --- declaration errors (11xxx) ---
    ALIAS_COLLISION     = 11151

    # --- warnings (12xxx) ---
    ALIAS_OVERRIDE      = 12151

    def normalize(self):
        """
        return a host-normalized string for this code.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _program(options):
    main = __import__("__main__")
    tool = options.get("tool")
    return getattr(main, "__prog__", getattr(tool, "name", None) or "argslots")


def _render(self, styles):
    colorful = self.options.get("colorful", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if colorful else "")

    code = self.options.get("code")
    header = Text.assemble(
        "[ ",
        text(_program(self.options), "prog-name"),
        " — ",
        text(code.normalize() if code else "", "code"),
        " | ",
        text(str(self.options.get("title", type(self).__name__)).title(), "title"),
        " ]"
    )
    renders = [header, text(self.message, "message")]
    if hint := self.options.get("hint"):
        renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
    return Group(*renders)


class ParseException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, _palette({
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }))

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownArgumentError(ParseException): ...
class ConversionError(ParseException): ...
class MissingRequiredError(ParseException): ...


class ParseWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, _palette({
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }))

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class AliasOverrideWarning(ParseWarning): ...


class AliasCollisionError(ValueError):
    """
    raised by strict registries when an alias is declared twice.
    """

    def __init__(self, alias, /):
        super().__init__("alias %r is already declared" % alias)
        self.alias = alias
        self.code = FaultCode.ALIAS_COLLISION


class ParseExit(ExceptionGroup):
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    @property
    def message(self):
        return "\n".join(map(str, self.exceptions))

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        })
        colorful = self.options.get("colorful", False)
        header = Text.assemble(
            "[ ",
            Text(_program(self.options), styles["prog-name"] if colorful else ""),
            " — ",
            Text("Bad Exit", styles["title"] if colorful else ""),
            " ]"
        )
        renders = []
        for exception in self.exceptions:
            if hasattr(exception, "__replace__"):
                exception = exception.__replace__(**{**exception.options, **self.options})
            renders.append(exception)
        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise,
      exceptions are raised and warnings go through the warnings module.

    typical options
    - tool, shell, colorful, title, code, hint, input, index.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode members; returns None when nothing is documented.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ParseException",
    "UnknownArgumentError",
    "ConversionError",
    "MissingRequiredError",
    "ParseWarning",
    "AliasOverrideWarning",
    "AliasCollisionError",
    "ParseExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
