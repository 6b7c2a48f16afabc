"""
nllfacts.strategy
=================

The contract shared by every evaluation strategy.

A strategy is a pure function ``AllFacts → Output``.  :class:`Strategy`
implements the common frame (CFG index, liveness, error extraction, timing
and logging) and leaves the region/loan fixpoint to :meth:`Strategy.solve`.

Error extraction is identical for all strategies::

    errors(L, P) :- invalidates(L, P), borrow_live_at(L, P).
"""

from __future__ import annotations

import abc
import logging
import time
from collections import defaultdict
from typing import Dict, Iterable, Set, Tuple

from .cfg import ControlFlow
from .facts import AllFacts, Loan, Point
from .liveness import Liveness, compute_liveness
from .output import Output

logger = logging.getLogger(__name__)


def extract_errors(
    borrow_live_at: Dict[Point, Set[Loan]],
    invalidates: Iterable[Tuple[Loan, Point]],
) -> Dict[Point, Set[Loan]]:
    """Loans live at a point that invalidates them."""
    errors: Dict[Point, Set[Loan]] = defaultdict(set)
    for loan, point in invalidates:
        if loan in borrow_live_at.get(point, ()):
            errors[point].add(loan)
    return dict(errors)


class Strategy(abc.ABC):
    """Base class of the analysis strategies."""

    name: str = ""

    def compute(self, facts: AllFacts, dump_enabled: bool = True) -> Output:
        """Run the analysis on *facts* to fixpoint.

        Parameters
        ----------
        facts:
            Base facts; never mutated.
        dump_enabled:
            Record the intermediate relations (``subset``, ``requires``,
            liveness maps) in addition to ``errors`` and ``borrow_live_at``.
        """
        t0 = time.monotonic()
        cfg = ControlFlow(facts.cfg_edge, facts.all_points())
        liveness = compute_liveness(facts, cfg)

        output = Output(algorithm=self.name, dump_enabled=dump_enabled)
        self.solve(facts, cfg, liveness, output)
        output.errors = extract_errors(output.borrow_live_at, facts.invalidates)

        if dump_enabled:
            output.region_live_at = liveness.region_live_at
            output.var_live_at = liveness.var_live_at
            output.var_drop_live_at = liveness.var_drop_live_at
        else:
            output.subset = {}
            output.requires = {}
            output.subset_anywhere = {}
            output.requires_anywhere = {}

        output.elapsed_seconds = time.monotonic() - t0
        logger.info(
            "%s: %d points, %d error tuples, %d iterations in %.3fs",
            self.name, len(cfg.points), len(output.error_tuples()),
            output.iterations, output.elapsed_seconds,
        )
        return output

    @abc.abstractmethod
    def solve(
        self,
        facts: AllFacts,
        cfg: ControlFlow,
        liveness: Liveness,
        output: Output,
    ) -> None:
        """Fill ``output.borrow_live_at`` and the strategy's own relations."""
