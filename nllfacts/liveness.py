"""
nllfacts.liveness
=================

Variable and region liveness shared by every strategy.

::

    var_live(V, P)       :- var_used(V, P).
    var_live(V, P)       :- var_live(V, Q), cfg_edge(P, Q), !var_defined(V, P).
    var_drop_live(V, P)  :- var_drop_used(V, P).
    var_drop_live(V, P)  :- var_drop_live(V, Q), cfg_edge(P, Q), !var_defined(V, P).

    region_live_at(R, P) :- region_live_at input fact.
    region_live_at(R, P) :- universal_region(R), P any point.
    region_live_at(R, P) :- var_live(V, P), var_uses_region(V, R).
    region_live_at(R, P) :- var_drop_live(V, P), var_drops_region(V, R).

The two variable relations are backward may-analyses solved with a worklist
seeded in post-order; a point is revisited only when a successor's live set
grew.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, Set, Tuple

from .cfg import ControlFlow
from .facts import AllFacts, Point, Region, Variable

logger = logging.getLogger(__name__)


@dataclass
class Liveness:
    """Per-point live sets.  Points with nothing live are absent."""

    var_live_at: Dict[Point, Set[Variable]] = field(default_factory=dict)
    var_drop_live_at: Dict[Point, Set[Variable]] = field(default_factory=dict)
    region_live_at: Dict[Point, Set[Region]] = field(default_factory=dict)

    def is_region_live(self, region: Region, point: Point) -> bool:
        return region in self.region_live_at.get(point, ())


def compute_var_liveness(
    used: Iterable[Tuple[Variable, Point]],
    defined: Iterable[Tuple[Variable, Point]],
    cfg: ControlFlow,
) -> Dict[Point, Set[Variable]]:
    """Backward propagation of uses, stopped by (re)definitions.

    Parameters
    ----------
    used:
        ``(variable, point)`` pairs where the variable is read.
    defined:
        ``(variable, point)`` pairs where the variable is overwritten; a
        definition at ``P`` keeps liveness flowing into ``P`` from its
        successors out of ``P``.
    cfg:
        The point-level control-flow graph.
    """
    defined_at: Dict[Point, Set[Variable]] = defaultdict(set)
    for variable, point in defined:
        defined_at[point].add(variable)

    live: Dict[Point, Set[Variable]] = defaultdict(set)
    for variable, point in used:
        live[point].add(variable)

    seeded = set(live)
    worklist: Deque[Point] = deque(p for p in cfg.postorder() if p in seeded)
    worklist.extend(sorted(seeded.difference(worklist)))
    queued: Set[Point] = set(worklist)

    visits = 0
    while worklist:
        point = worklist.popleft()
        queued.discard(point)
        visits += 1
        for pred in cfg.pred(point):
            incoming = live[point] - defined_at.get(pred, set()) - live[pred]
            if not incoming:
                continue
            live[pred] |= incoming
            if pred not in queued:
                worklist.append(pred)
                queued.add(pred)

    logger.debug("variable liveness converged after %d visits", visits)
    return {p: vs for p, vs in live.items() if vs}


def compute_liveness(facts: AllFacts, cfg: ControlFlow) -> Liveness:
    """Compute variable, drop and region liveness for *facts*."""
    var_live_at = compute_var_liveness(facts.var_used, facts.var_defined, cfg)
    var_drop_live_at = compute_var_liveness(facts.var_drop_used, facts.var_defined, cfg)

    uses_regions: Dict[Variable, Set[Region]] = defaultdict(set)
    for variable, region in facts.var_uses_region:
        uses_regions[variable].add(region)
    drops_regions: Dict[Variable, Set[Region]] = defaultdict(set)
    for variable, region in facts.var_drops_region:
        drops_regions[variable].add(region)

    region_live_at: Dict[Point, Set[Region]] = defaultdict(set)
    for region, point in facts.region_live_at:
        region_live_at[point].add(region)
    if facts.universal_region:
        for point in facts.all_points():
            region_live_at[point].update(facts.universal_region)
    for point, variables in var_live_at.items():
        for variable in variables:
            region_live_at[point].update(uses_regions.get(variable, ()))
    for point, variables in var_drop_live_at.items():
        for variable in variables:
            region_live_at[point].update(drops_regions.get(variable, ()))

    return Liveness(
        var_live_at=var_live_at,
        var_drop_live_at=var_drop_live_at,
        region_live_at={p: rs for p, rs in region_live_at.items() if rs},
    )
