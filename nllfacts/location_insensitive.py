"""
nllfacts.location_insensitive
=============================

Coarse, fast over-approximation that ignores control flow::

    subset(R1, R2)       :- outlives(R1, R2, _), R1 != R2.
    subset(R1, R3)       :- subset(R1, R2), subset(R2, R3), R1 != R3.
    requires(R, L)       :- borrow_region(R, L, _).
    requires(R2, L)      :- requires(R1, L), subset(R1, R2).
    borrow_live_at(L, P) :- requires(R, L), region_live_at(R, P).

Every flow-sensitive ``requires(R, L, P)`` tuple has a matching
``requires(R, L)`` here, so the errors found by this strategy are a superset
of the exact ones.  A program it accepts is accepted by every strategy.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Set

from .cfg import ControlFlow
from .facts import AllFacts, Loan, Point, Region
from .liveness import Liveness
from .output import Output
from .strategy import Strategy

logger = logging.getLogger(__name__)


def transitive_closure(edges: Dict[Region, Set[Region]]) -> Dict[Region, Set[Region]]:
    """Regions reachable from each region through one or more edges, minus itself."""
    closure: Dict[Region, Set[Region]] = {}
    for source in edges:
        reached: Set[Region] = set()
        stack = list(edges[source])
        while stack:
            region = stack.pop()
            if region in reached:
                continue
            reached.add(region)
            stack.extend(edges.get(region, ()))
        reached.discard(source)
        if reached:
            closure[source] = reached
    return closure


class LocationInsensitiveStrategy(Strategy):
    """One global closure; point ordering is ignored."""

    name = "LocationInsensitive"

    def solve(
        self,
        facts: AllFacts,
        cfg: ControlFlow,
        liveness: Liveness,
        output: Output,
    ) -> None:
        edges: Dict[Region, Set[Region]] = defaultdict(set)
        for r1, r2, _ in facts.outlives:
            if r1 != r2:
                edges[r1].add(r2)
        subset = transitive_closure(edges)

        requires: Dict[Region, Set[Loan]] = defaultdict(set)
        for region, loan, _ in facts.borrow_region:
            requires[region].add(loan)
            for reached in subset.get(region, ()):
                requires[reached].add(loan)

        borrow_live_at: Dict[Point, Set[Loan]] = {}
        for point, regions in liveness.region_live_at.items():
            loans: Set[Loan] = set()
            for region in regions:
                loans.update(requires.get(region, ()))
            if loans:
                borrow_live_at[point] = loans

        output.iterations = len(subset)
        output.borrow_live_at = borrow_live_at
        output.subset_anywhere = subset
        output.requires_anywhere = dict(requires)
        logger.debug(
            "location-insensitive closure: %d regions with subsets, %d requiring regions",
            len(subset), len(requires),
        )
