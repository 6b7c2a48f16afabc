"""
nllfacts.intern
===============

Name ↔ dense-id interning.

Every entity the analysis manipulates (regions, loans, points, variables) is
a small integer.  An :class:`Interner` is an arena of names plus a reverse
lookup table; :class:`InternerTables` bundles one interner per entity kind
and is shared by every front-end that feeds the same analysis (program
lowering, tab-delimited loading), so that a name always maps to the same id.
"""

from __future__ import annotations

from typing import Dict, Iterable, List


class Interner:
    """Injective mapping between names and dense ids ``0, 1, 2, ...``."""

    def __init__(self) -> None:
        self._names: List[str] = []
        self._ids: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def intern(self, name: str) -> int:
        """Return the id of *name*, allocating the next id on first use."""
        ident = self._ids.get(name)
        if ident is None:
            ident = len(self._names)
            self._names.append(name)
            self._ids[name] = ident
        return ident

    def untern(self, ident: int) -> str:
        """Return the name interned as *ident* (``IndexError`` if unknown)."""
        return self._names[ident]

    def untern_vec(self, idents: Iterable[int]) -> List[str]:
        return [self._names[i] for i in idents]

    def lookup(self, name: str) -> int:
        """Return the id of an already interned *name* (``KeyError`` if not)."""
        return self._ids[name]


class InternerTables:
    """One :class:`Interner` per entity kind."""

    def __init__(self) -> None:
        self.regions = Interner()
        self.loans = Interner()
        self.points = Interner()
        self.variables = Interner()
