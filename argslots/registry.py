"""
Argslots alias registry.

The registry resolves command-line aliases ("--times", "-t") to slots. One
declared option has zero, one or two aliases that all point at the same Slot
object; nothing is copied. Anything that must show "one line per option"
(the help listing, the missing-required report) goes through unique(), which
groups aliases by slot identity.

Collisions
- Aliases are unique across the registry. Declaring an alias again replaces
  the previous mapping and emits an AliasOverrideWarning; a strict registry
  raises AliasCollisionError instead and leaves the mapping untouched.
"""
from typing import NamedTuple

from .faults import AliasOverrideWarning, AliasCollisionError, FaultCode, trigger, getdoc
from .slots import Slot


class Entry(NamedTuple):
    """
    One logical option: its aliases (sorted) and the slot they share.

    - primary: the smallest alias, used to order entries.
    - label: every alias joined with " or ", e.g. "--msg or -m".
    - long/short: the double-dash and single-dash aliases.
    """
    primary: str
    aliases: tuple[str, ...]
    slot: Slot

    @property
    def label(self):
        return " or ".join(self.aliases)

    @property
    def long(self):
        return tuple(alias for alias in self.aliases if alias.startswith("--"))

    @property
    def short(self):
        return tuple(alias for alias in self.aliases if not alias.startswith("--"))


class Registry:
    """
    Mapping of alias → Slot with de-duplication by slot identity.

    Parameters
    - strict: bool (keyword-only)
      raise AliasCollisionError on a repeated alias instead of overwriting it.
    """

    def __init__(self, *, strict=False):
        self._strict = bool(strict)
        self._slots = {}

    @property
    def strict(self):
        return self._strict

    def register(self, long, short, slot, /):
        """
        Map the given aliases to `slot` and return the aliases registered.

        An empty alias means "no alias of this kind". An option with neither
        alias is accepted and simply unreachable from the command line.
        """
        if not isinstance(slot, Slot):
            raise TypeError("register() third argument must be a slot")

        aliases = tuple(alias for alias in (long, short) if alias)
        for alias in aliases:
            if not isinstance(alias, str):
                raise TypeError("register() aliases must be strings")

        if self._strict:
            for alias in aliases:
                if alias in self._slots:
                    raise AliasCollisionError(alias)

        for alias in aliases:
            if alias in self._slots and self._slots[alias] is not slot:
                trigger(AliasOverrideWarning(
                    "alias %r was declared again and now refers to the latest option" % alias,
                    title="alias overridden",
                    code=FaultCode.ALIAS_OVERRIDE,
                    input=alias,
                    hint="give each option its own long and short names",
                    docs=getdoc(FaultCode.ALIAS_OVERRIDE),
                ))
            self._slots[alias] = slot
        return aliases

    def lookup(self, token, /):
        """
        Return the slot registered under exactly `token`, or None.

        No prefix matching, no abbreviations, no "--name=value" splitting.
        """
        return self._slots.get(token)

    def unique(self):
        """
        Return one Entry per distinct slot, sorted by primary alias.
        """
        groups = {}
        for alias, slot in self._slots.items():
            groups.setdefault(id(slot), (slot, []))[1].append(alias)

        entries = []
        for slot, aliases in groups.values():
            aliases = tuple(sorted(aliases))
            entries.append(Entry(aliases[0], aliases, slot))
        return tuple(sorted(entries, key=lambda entry: entry.primary))

    def __contains__(self, alias):
        return alias in self._slots

    def __iter__(self):
        return iter(sorted(self._slots))

    def __len__(self):
        return len(self._slots)

    def __repr__(self):
        return "registry(%s)" % ", ".join("%s=%r" % (entry.label, entry.slot.kind) for entry in self.unique())


__all__ = (
    "Registry",
    "Entry",
)
