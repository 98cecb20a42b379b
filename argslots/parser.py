"""
Argslots parser engine: declare slots, parse an argument vector, render help.

What this module provides
- Parser: owns a Registry of slots, declares options (arg), runs one parse
  pass over an argv-like sequence (parse) and renders the help listing
  (help / __rich__).
- Outcome: tri-state result of a pass — Success, HelpRequested, Failure.
- invoke(parser, prompt): convenience runner for programs; prints and exits
  in shell mode, returns or raises otherwise.

Quick start
    from argslots import Parser, Kind, Failure, HelpRequested

    class Arguments(Parser):
        welcome = "This program will print a message a number of times."

        def __init__(self, **settings):
            super().__init__(**settings)
            self.msg = self.arg(Kind.STR, "msg", "m", descr="The message to print.", required=True)
            self.times = self.arg(Kind.UINT32, "times", "t", 1, "How many times.")

    arguments = Arguments()
    match arguments.parse(["prog", "-m", "hi", "-t", "3"]):
        case HelpRequested(help=help):
            print(help)
        case Failure(message=message):
            print(message)
        case _:
            print(arguments.msg.value * arguments.times.value)

Parse pass
- argv[0] is the program name and is skipped.
- Help short-circuit: with help enabled, a single argument equal to one of
  the helper aliases yields HelpRequested before anything else is checked.
- Every other token is looked up exactly in the registry:
  • unknown → kept as leftover; a fault unless the parser is tolerant.
  • known   → the following token is offered to the slot; the receipt says
              how many tokens were consumed. A failed conversion skips the
              alias and the inspected token.
- Required slots never reached during the pass are reported in one line.
- Faults accumulate; parse never raises for user input and never exits.
"""
import difflib
import os.path
import shlex
import sys
from collections.abc import Iterable
from enum import Enum

from rich.console import Console
from rich.text import Text

from .faults import *
from .faults import _palette
from .registry import Registry
from .slots import declare
from .utils import *


class Status(Enum):
    SUCCESS = "success"
    HELP_REQUESTED = "help-requested"
    FAILURE = "failure"


class Outcome:
    """
    Result of one parse pass.

    Properties
    - status: Status of the pass.
    - leftovers: tokens that matched no alias, in input order.
    - faults: faults recorded during the pass (empty unless Failure).
    - message: faults joined with newlines ("" unless Failure).

    bool(outcome) is True only for Success.
    """
    __match_args__ = ("leftovers",)

    status = Unset

    leftovers = mirror("leftovers")

    def __init__(self, leftovers=()):
        self._leftovers = tuple(leftovers)

    @property
    def faults(self):
        return ()

    @property
    def message(self):
        return "\n".join(map(str, self.faults))

    def __bool__(self):
        return self.status is Status.SUCCESS

    def __repr__(self):
        return "%s(leftovers=%r)" % (type(self).__name__, self.leftovers)


class Success(Outcome):
    status = Status.SUCCESS


class HelpRequested(Outcome):
    """
    The caller asked for help; `help` holds the rendered listing.

    The caller is expected to show it and stop normal execution.
    """
    __match_args__ = ("help", "leftovers")

    status = Status.HELP_REQUESTED

    help = mirror("help")

    def __init__(self, help, leftovers=()):
        super().__init__(leftovers)
        self._help = help

    def __repr__(self):
        return "%s(help=%r, leftovers=%r)" % (type(self).__name__, self.help, self.leftovers)


class Failure(Outcome):
    """
    At least one fault was recorded; `faults` lists every one of them.
    """
    __match_args__ = ("faults", "leftovers")

    status = Status.FAILURE

    def __init__(self, faults, leftovers=()):
        super().__init__(leftovers)
        self._faults = tuple(faults)

    @property
    def faults(self):
        return self._faults

    def __repr__(self):
        return "%s(faults=%r, leftovers=%r)" % (type(self).__name__, self.faults, self.leftovers)


def _sanitize_name(name, label, /):
    """
    Internal: validate a long/short option name (given without dashes).
    """
    if not isinstance(name, str):
        raise TypeError("option %s name must be a string" % label)
    if name.startswith("-"):
        raise ValueError("option %s name must be given without leading dashes" % label)
    if "=" in name or any(char.isspace() for char in name):
        raise ValueError("option %s name cannot contain '=' or whitespace" % label)
    return name


def _sanitize_settings(settings, /):
    """
    Internal: validate and normalize parser settings in place.

    - name: program name; Unset becomes the basename of sys.argv[0].
    - welcome: banner printed above the help listing (string, may be empty).
    - helper: iterable of non-empty alias strings, normalized to a tuple.
    - helpful / tolerant / strict / shell / colorful: coerced to bool.
    """
    if (name := settings["name"]) is Unset:
        name = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "argslots"
    elif not isinstance(name, str) or not (name := name.strip()):
        raise TypeError("parser 'name' must be a non-empty string")
    settings["name"] = name

    if not isinstance(settings["welcome"], str):
        raise TypeError("parser 'welcome' must be a string")

    if isinstance(helper := settings["helper"], str) or not isinstance(helper, Iterable):
        raise TypeError("parser 'helper' must be an iterable of strings")
    helper = tuple(helper)
    if not all(isinstance(alias, str) and alias for alias in helper):
        raise ValueError("parser 'helper' aliases must be non-empty strings")
    settings["helper"] = helper

    for flag in ("helpful", "tolerant", "strict", "shell", "colorful"):
        settings[flag] = bool(settings[flag])


class Parser:
    """
    Declarative argument parser.

    Settings
    - Class attributes below are the defaults; subclasses override them and
      keyword arguments to __init__ override them per instance.
      • name: program name used in fault headers and by invoke().
      • welcome: banner shown above the help listing.
      • helpful: recognise the helper aliases as a sole argument.
      • helper: aliases that request help.
      • tolerant: unknown arguments are only collected, not reported.
      • strict: declaring an alias twice raises instead of overwriting.
      • shell: invoke() prints help/faults and exits the process.
      • colorful: style rich output.

    Declaring
    - arg(kind, long, short, default, descr, required) returns the Slot that
      will hold the value; keep it and read slot.value after parsing.

    Threading
    - A parser and its slots are not safe for concurrent parse() calls;
      callers must serialize them. Distinct parsers are independent.
    """

    name = Unset
    welcome = "These are the arguments available for this program:"
    helpful = True
    helper = ("--help", "-h")
    tolerant = False
    strict = False
    shell = False
    colorful = False

    def __init__(
            self,
            *,
            name=Unset,
            welcome=Unset,
            helpful=Unset,
            helper=Unset,
            tolerant=Unset,
            strict=Unset,
            shell=Unset,
            colorful=Unset
    ):
        settings = {
            "name": name,
            "welcome": welcome,
            "helpful": helpful,
            "helper": helper,
            "tolerant": tolerant,
            "strict": strict,
            "shell": shell,
            "colorful": colorful,
        }
        for key, object in settings.items():
            settings[key] = coalesce(object, getattr(type(self), key))
        _sanitize_settings(settings)

        for key, object in settings.items():
            setattr(self, key, object)
        self._registry = Registry(strict=self.strict)

    @property
    def registry(self):
        return self._registry

    def arg(self, kind, long, short="", default=Unset, descr=Unset, required=False):
        """
        Declare an option and return its slot.

        Parameters
        - kind: Kind | str | type
          Value kind of the slot (see Kind.resolve).
        - long: str
          Long name, reachable as "--<long>"; "" for none.
        - short: str
          Short name, reachable as "-<short>"; "" for none.
        - default: value admitted by the kind; the kind's default when omitted.
        - descr: help text.
        - required: report a fault when the option is missing from a pass.
        """
        long = _sanitize_name(long, "long")
        short = _sanitize_name(short, "short")

        slot = declare(kind, default, descr, required)
        self._registry.register("--" + long if long else "", "-" + short if short else "", slot)
        return slot

    def parse(self, argv, /):
        """
        Run one parse pass over `argv` (argv[0] is the program name).

        Returns Success, HelpRequested or Failure; see the module docstring
        for the pass itself. Not safe to call concurrently on one parser.
        """
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("parse() argument must be a sequence of strings")
        argv = list(argv)
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("parse() argument must be a sequence of strings")

        entries = self._registry.unique()
        for entry in entries:
            entry.slot.reset()

        if self.helpful and len(argv) == 2 and argv[1] in self.helper:
            return HelpRequested(self.help())

        faults = []
        leftovers = []

        index = 1
        while index < len(argv):
            token = argv[index]

            if (slot := self._registry.lookup(token)) is None:
                leftovers.append(token)
                if not self.tolerant:
                    faults.append(self._unknown(token, index))
                index += 1
                continue

            receipt = slot.receive(argv[index + 1] if index + 1 < len(argv) else None)
            if not receipt.ok:
                faults.append(ConversionError(
                    "Error in argument: %s, %s" % (token, slot.error),
                    title="invalid value",
                    code=FaultCode.CONVERSION_FAILURE,
                    input=token,
                    index=index,
                    hint="%s expects a %s value" % (token, slot.kind.value),
                    docs=getdoc(FaultCode.CONVERSION_FAILURE),
                ))
                # skip the alias and the inspected token so the pass always advances
                index += 2
                continue

            index += 1 + receipt.consumed

        if missing := [entry for entry in entries if entry.slot.required and not entry.slot.was_set]:
            faults.append(MissingRequiredError(
                "The following required arguments was not set: %s" % ", ".join(entry.label for entry in missing),
                title="missing required arguments",
                code=FaultCode.MISSING_REQUIRED,
                missing=tuple(entry.aliases for entry in missing),
                hint="add %s" % " and ".join(entry.primary for entry in missing),
                docs=getdoc(FaultCode.MISSING_REQUIRED),
            ))

        if faults:
            return Failure(faults, leftovers)
        return Success(leftovers)

    def _unknown(self, token, index):
        suggestions = difflib.get_close_matches(token, list(self._registry), 3)
        if suggestions:
            hint = "did you mean %r?" % suggestions[0]
        elif self.helpful:
            hint = "run '%s %s' to see all available arguments" % (self.name, self.helper[0])
        else:
            hint = "remove this argument"
        return UnknownArgumentError(
            "Unknown argument: %s" % token,
            title="unknown argument",
            code=FaultCode.UNKNOWN_ARGUMENT,
            input=token,
            index=index,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_ARGUMENT),
        )

    def _listing(self, colorful):
        """
        Build the help listing as rich Text.

        Layout: the welcome banner, then per option the short aliases and the
        long aliases right-aligned in two 10-wide columns, " : " and the help
        text. Options are ordered by their primary alias.
        """
        styles = _palette({
            "welcome": "bold #FFFFFF",
            "short-alias": "bold #22C55E",  # green short aliases
            "long-alias": "bold #00E6FF",  # cyan long aliases
            "separator": "#6B6F7A",
            "descr": "#9CA3AF",  # muted gray
        })

        def text(fragment, style=""):
            return Text(fragment, styles[style] if colorful else "")

        listing = Text()
        listing.append(text(self.welcome, "welcome")).append("\n")
        for entry in self._registry.unique():
            listing.append(text(" ".join(entry.short).rjust(10), "short-alias"))
            listing.append(" ")
            listing.append(text(" ".join(entry.long).rjust(10), "long-alias"))
            listing.append(text(" : ", "separator"))
            listing.append(text(entry.slot.descr or "", "descr"))
            listing.append("\n")
        return listing

    def help(self):
        """
        Return the help listing as plain text (one line per option).
        """
        return self._listing(False).plain

    def __rich__(self):
        listing = self._listing(self.colorful)
        listing.rstrip()
        return listing

    def __repr__(self):
        return "%s(name=%r, %r)" % (type(self).__name__, self.name, self._registry)


def invoke(parser, prompt=Unset, /):
    """
    Parse a prompt with `parser` the way a program entry point would.

    Parameters
    - parser: Parser
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: used as tokens (each must be str).

    Behavior
    - Success: returned.
    - HelpRequested: shell mode prints the listing and exits with status 0;
      otherwise the outcome is returned.
    - Failure: shell mode prints the help listing and every fault on stderr
      and exits with status 1; otherwise ParseExit is raised.
    """
    if not isinstance(parser, Parser):
        raise TypeError("invoke() first argument must be a parser")

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() argument must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() argument must be a string or an iterable of strings")

    outcome = parser.parse([parser.name, *tokens])

    match outcome:
        case HelpRequested() if parser.shell:
            Console().print(parser)
            sys.exit(0)
        case Failure(faults=faults):
            if parser.shell:
                Console(stderr=True).print(parser)
            trigger(ParseExit(faults), tool=parser, shell=parser.shell, colorful=parser.colorful)

    return outcome


__all__ = (
    "Parser",
    "Outcome",
    "Success",
    "HelpRequested",
    "Failure",
    "Status",
    "invoke",
)
