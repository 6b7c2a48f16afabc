"""
nllfacts.output
===============

The relations a strategy derives from :class:`~nllfacts.facts.AllFacts`.

All maps are keyed by point and only contain populated points, so
``output.var_live_at.get(p)`` is ``None`` when nothing is live at ``p``.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from .facts import Loan, Point, Region, Variable


@dataclass
class Output:
    """Result of one strategy run.

    Attributes
    ----------
    errors : dict
        Point → loans that are live where they are invalidated.
    borrow_live_at : dict
        Point → live loans.
    requires : dict
        Point → region → loans the region may hold.
    subset : dict
        Point → region → regions it flows into; never reflexive.
    region_live_at, var_live_at, var_drop_live_at : dict
        Point → live regions / variables / drop-live variables.
    subset_anywhere, requires_anywhere : dict
        Location-insensitive counterparts of ``subset`` and ``requires``.
    algorithm : str
        Name of the strategy that produced this output.
    dump_enabled : bool
        Whether the intermediate relations were recorded.
    iterations : int
        Rounds (Naive) or point visits (worklist strategies) performed.
    elapsed_seconds : float
        Wall-clock time of the computation.
    """

    errors: Dict[Point, Set[Loan]] = field(default_factory=dict)
    borrow_live_at: Dict[Point, Set[Loan]] = field(default_factory=dict)
    requires: Dict[Point, Dict[Region, Set[Loan]]] = field(default_factory=dict)
    subset: Dict[Point, Dict[Region, Set[Region]]] = field(default_factory=dict)
    region_live_at: Dict[Point, Set[Region]] = field(default_factory=dict)
    var_live_at: Dict[Point, Set[Variable]] = field(default_factory=dict)
    var_drop_live_at: Dict[Point, Set[Variable]] = field(default_factory=dict)
    subset_anywhere: Dict[Region, Set[Region]] = field(default_factory=dict)
    requires_anywhere: Dict[Region, Set[Loan]] = field(default_factory=dict)
    algorithm: str = ""
    dump_enabled: bool = True
    iterations: int = 0
    elapsed_seconds: float = 0.0

    def error_tuples(self) -> List[Tuple[Point, Loan]]:
        """``(point, loan)`` conflict pairs, sorted."""
        return sorted((p, l) for p, loans in self.errors.items() for l in loans)

    def has_errors(self) -> bool:
        return any(self.errors.values())


def group_pairs(pairs: Iterable[Tuple[int, Point]]) -> Dict[Point, Set[int]]:
    """``(x, point)`` tuples → ``{point: {x, ...}}``."""
    grouped: Dict[Point, Set[int]] = defaultdict(set)
    for x, point in pairs:
        grouped[point].add(x)
    return dict(grouped)


def group_triples(triples: Iterable[Tuple[int, int, Point]]) -> Dict[Point, Dict[int, Set[int]]]:
    """``(x, y, point)`` tuples → ``{point: {x: {y, ...}}}``."""
    grouped: Dict[Point, Dict[int, Set[int]]] = defaultdict(lambda: defaultdict(set))
    for x, y, point in triples:
        grouped[point][x].add(y)
    return {p: dict(inner) for p, inner in grouped.items()}
