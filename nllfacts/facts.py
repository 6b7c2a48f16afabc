"""
nllfacts.facts
==============

The flat relational input of the analysis.

Each relation is a ``set`` of tuples of interned ids, so order is irrelevant
and duplicates collapse.  ``AllFacts`` is pure data: front-ends fill it,
strategies only read it.

Relations
---------
borrow_region       (region, loan, point)    loan created at point, flowing into region
universal_region    region                   free regions, live everywhere
cfg_edge            (point, point)           control-flow successor relation
killed              (loan, point)            loan ends at point
outlives            (region, region, point)  ``'a: 'b`` holds at point
region_live_at      (region, point)          region live on entry to point
invalidates         (loan, point)            point would conflict with a live loan
var_used            (variable, point)
var_defined         (variable, point)
var_drop_used       (variable, point)
var_uses_region     (variable, region)       regions in the type of a variable
var_drops_region    (variable, region)       regions its destructor may touch
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Set, Tuple

# Dense interned ids; see :mod:`nllfacts.intern`.
Region = int
Loan = int
Point = int
Variable = int


@dataclass
class AllFacts:
    """All base facts for one analysed function."""

    borrow_region: Set[Tuple[Region, Loan, Point]] = field(default_factory=set)
    universal_region: Set[Region] = field(default_factory=set)
    cfg_edge: Set[Tuple[Point, Point]] = field(default_factory=set)
    killed: Set[Tuple[Loan, Point]] = field(default_factory=set)
    outlives: Set[Tuple[Region, Region, Point]] = field(default_factory=set)
    region_live_at: Set[Tuple[Region, Point]] = field(default_factory=set)
    invalidates: Set[Tuple[Loan, Point]] = field(default_factory=set)
    var_used: Set[Tuple[Variable, Point]] = field(default_factory=set)
    var_defined: Set[Tuple[Variable, Point]] = field(default_factory=set)
    var_drop_used: Set[Tuple[Variable, Point]] = field(default_factory=set)
    var_uses_region: Set[Tuple[Variable, Region]] = field(default_factory=set)
    var_drops_region: Set[Tuple[Variable, Region]] = field(default_factory=set)

    def all_points(self) -> Set[Point]:
        """Every point mentioned by a point-bearing relation."""
        points: Set[Point] = set()
        for p, q in self.cfg_edge:
            points.add(p)
            points.add(q)
        points.update(p for _, _, p in self.borrow_region)
        points.update(p for _, _, p in self.outlives)
        for relation in (
            self.killed,
            self.region_live_at,
            self.invalidates,
            self.var_used,
            self.var_defined,
            self.var_drop_used,
        ):
            points.update(p for _, p in relation)
        return points
