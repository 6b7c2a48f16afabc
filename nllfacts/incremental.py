"""
nllfacts.incremental
====================

Optimized strategy: the Naive rules solved as a forward worklist problem.

Each point carries a state ``(subset, requires)`` closed under the two
same-point rules.  A point's state is a monotone function of its own facts
and of the states of its predecessors:

``subset(Q)``
    transitive closure of ``outlives(Q)`` plus every predecessor subset
    edge whose two regions are live at ``Q``;
``requires(Q)``
    ``borrow_region(Q)`` plus every predecessor ``(R, L)`` with ``L`` not
    killed at the predecessor and ``R`` live at ``Q``, then pushed along
    ``subset(Q)``.

Points are seeded in reverse post-order and a point is re-derived only when
one of its predecessors changed, so work concentrates on the frontier.  The
least solution of this system is the Naive fixpoint restricted to each
point, which makes ``borrow_live_at`` and ``errors`` identical to Naive's.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Deque, Dict, List, Set, Tuple

from .cfg import ControlFlow
from .facts import AllFacts, Loan, Point, Region
from .liveness import Liveness
from .location_insensitive import transitive_closure
from .output import Output
from .strategy import Strategy

logger = logging.getLogger(__name__)

SubsetState = Dict[Region, Set[Region]]
RequiresState = Dict[Region, Set[Loan]]


class IncrementalStrategy(Strategy):
    """Exact, flow-sensitive; only re-derives points whose inputs changed."""

    name = "Optimized"

    def solve(
        self,
        facts: AllFacts,
        cfg: ControlFlow,
        liveness: Liveness,
        output: Output,
    ) -> None:
        live = liveness.is_region_live

        outlives_at: Dict[Point, List[Tuple[Region, Region]]] = defaultdict(list)
        for r1, r2, p in facts.outlives:
            if r1 != r2:
                outlives_at[p].append((r1, r2))
        borrows_at: Dict[Point, List[Tuple[Region, Loan]]] = defaultdict(list)
        for region, loan, p in facts.borrow_region:
            borrows_at[p].append((region, loan))
        killed_at: Dict[Point, Set[Loan]] = defaultdict(set)
        for loan, p in facts.killed:
            killed_at[p].add(loan)

        subset_at: Dict[Point, SubsetState] = {}
        requires_at: Dict[Point, RequiresState] = {}

        def transfer(q: Point) -> Tuple[SubsetState, RequiresState]:
            edges: Dict[Region, Set[Region]] = defaultdict(set)
            for r1, r2 in outlives_at.get(q, ()):
                edges[r1].add(r2)
            base: RequiresState = defaultdict(set)
            for region, loan in borrows_at.get(q, ()):
                base[region].add(loan)

            for p in cfg.pred(q):
                for r1, targets in subset_at.get(p, {}).items():
                    if not live(r1, q):
                        continue
                    for r2 in targets:
                        if live(r2, q):
                            edges[r1].add(r2)
                dead = killed_at.get(p, set())
                for region, loans in requires_at.get(p, {}).items():
                    if live(region, q):
                        base[region].update(loans - dead)

            subset = transitive_closure(edges)
            requires: RequiresState = defaultdict(set)
            for region, loans in base.items():
                if not loans:
                    continue
                requires[region].update(loans)
                for reached in subset.get(region, ()):
                    requires[reached].update(loans)
            return subset, dict(requires)

        worklist: Deque[Point] = deque(cfg.reverse_postorder())
        queued: Set[Point] = set(worklist)
        visits = 0
        while worklist:
            q = worklist.popleft()
            queued.discard(q)
            visits += 1

            subset, requires = transfer(q)
            if subset == subset_at.get(q, {}) and requires == requires_at.get(q, {}):
                continue
            subset_at[q] = subset
            requires_at[q] = requires
            for succ in cfg.succ(q):
                if succ not in queued:
                    worklist.append(succ)
                    queued.add(succ)

        logger.debug("incremental worklist converged after %d point visits", visits)

        borrow_live_at: Dict[Point, Set[Loan]] = {}
        for p, requires in requires_at.items():
            loans: Set[Loan] = set()
            for region, held in requires.items():
                if live(region, p):
                    loans.update(held)
            if loans:
                borrow_live_at[p] = loans

        output.iterations = visits
        output.borrow_live_at = borrow_live_at
        if output.dump_enabled:
            output.subset = {p: s for p, s in subset_at.items() if s}
            output.requires = {p: r for p, r in requires_at.items() if r}
