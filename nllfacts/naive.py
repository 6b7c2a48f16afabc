"""
nllfacts.naive
==============

Ground-truth strategy: plain relational fixpoint.

Every round re-applies every rule to the *full* relations (no deltas) and
the loop stops once a round adds nothing::

    subset(R1, R2, P)  :- outlives(R1, R2, P), R1 != R2.
    subset(R1, R3, P)  :- subset(R1, R2, P), subset(R2, R3, P), R1 != R3.
    subset(R1, R2, Q)  :- subset(R1, R2, P), cfg_edge(P, Q),
                          region_live_at(R1, Q), region_live_at(R2, Q).

    requires(R, L, P)  :- borrow_region(R, L, P).
    requires(R2, L, P) :- requires(R1, L, P), subset(R1, R2, P).
    requires(R, L, Q)  :- requires(R, L, P), !killed(L, P), cfg_edge(P, Q),
                          region_live_at(R, Q).

    borrow_live_at(L, P) :- requires(R, L, P), region_live_at(R, P).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Set, Tuple

from .cfg import ControlFlow
from .facts import AllFacts, Loan, Point, Region
from .liveness import Liveness
from .output import Output, group_pairs, group_triples
from .strategy import Strategy

logger = logging.getLogger(__name__)


class NaiveStrategy(Strategy):
    """Exact, flow-sensitive; recomputes everything every round."""

    name = "Naive"

    def solve(
        self,
        facts: AllFacts,
        cfg: ControlFlow,
        liveness: Liveness,
        output: Output,
    ) -> None:
        live = liveness.is_region_live
        killed = facts.killed

        subset: Set[Tuple[Region, Region, Point]] = {
            (r1, r2, p) for r1, r2, p in facts.outlives if r1 != r2
        }
        requires: Set[Tuple[Region, Loan, Point]] = set(facts.borrow_region)

        rounds = 0
        while True:
            rounds += 1
            subset_from: Dict[Tuple[Region, Point], Set[Region]] = defaultdict(set)
            for r1, r2, p in subset:
                subset_from[(r1, p)].add(r2)

            next_subset = set(subset)
            for r1, r2, p in subset:
                for r3 in subset_from.get((r2, p), ()):
                    if r1 != r3:
                        next_subset.add((r1, r3, p))
                for q in cfg.succ(p):
                    if live(r1, q) and live(r2, q):
                        next_subset.add((r1, r2, q))

            next_requires = set(requires)
            for r1, loan, p in requires:
                for r2 in subset_from.get((r1, p), ()):
                    next_requires.add((r2, loan, p))
                if (loan, p) in killed:
                    continue
                for q in cfg.succ(p):
                    if live(r1, q):
                        next_requires.add((r1, loan, q))

            grew = len(next_subset) != len(subset) or len(next_requires) != len(requires)
            subset, requires = next_subset, next_requires
            logger.debug(
                "naive round %d: %d subset, %d requires tuples",
                rounds, len(subset), len(requires),
            )
            if not grew:
                break

        output.iterations = rounds
        output.borrow_live_at = group_pairs(
            (loan, p) for r, loan, p in requires if live(r, p)
        )
        if output.dump_enabled:
            output.subset = group_triples(subset)
            output.requires = group_triples(requires)
