"""Tool filter expressions.

A filter selects tools by name:

* ``""`` / ``None`` / ``"*"``: every tool
* ``"-*"``: no tool
* ``"a,b -c"``: only ``a`` and ``b``, never ``c``
* ``"* -x"``: every tool except ``x``

Names are matched case-insensitively. Includes and excludes may be separated
by commas or spaces.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

_SPLIT = re.compile(r"[,\s]+")


@dataclass(frozen=True)
class ToolFilter:
    exclude_all: bool = False
    include_all: bool = True
    includes: FrozenSet[str] = field(default_factory=frozenset)
    excludes: FrozenSet[str] = field(default_factory=frozenset)
    # original spelling of each name, keyed by casefolded form
    _spelling: tuple = field(default=(), compare=False, repr=False)

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ToolFilter":
        if raw is None or not raw.strip():
            return cls()
        parts = [p for p in _SPLIT.split(raw.strip()) if p]
        if "-*" in parts:
            return cls(exclude_all=True, include_all=False)
        includes = [p for p in parts if not p.startswith("-")]
        excludes = [p[1:] for p in parts if p.startswith("-") and p[1:] and p[1:] != "*"]
        names = [p for p in includes if p != "*"]
        spelling = {n.casefold(): n for n in names + excludes}
        return cls(
            exclude_all=False,
            include_all="*" in includes or not names,
            includes=frozenset(n.casefold() for n in names),
            excludes=frozenset(n.casefold() for n in excludes),
            _spelling=tuple(sorted(spelling.items())),
        )

    def should_include(self, name: str) -> bool:
        if self.exclude_all:
            return False
        key = name.casefold()
        if key in self.excludes:
            return False
        return self.include_all or key in self.includes

    def canonical(self) -> str:
        """Canonical text: ``-*``, ``*``, ``* -a -b`` or ``a,b -c``; names sorted."""
        if self.exclude_all:
            return "-*"
        spell = dict(self._spelling)
        excludes = " ".join(f"-{spell.get(x, x)}" for x in sorted(self.excludes))
        if self.include_all:
            return f"* {excludes}" if excludes else "*"
        includes = ",".join(spell.get(x, x) for x in sorted(self.includes))
        return f"{includes} {excludes}" if excludes else includes


__all__ = ["ToolFilter"]
