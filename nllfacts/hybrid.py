"""
nllfacts.hybrid
===============

Location-insensitive pre-pass, exact analysis only when needed.

Most functions borrow-check cleanly, and the location-insensitive strategy
already proves that for them: its errors are a superset of the exact ones,
so "no location-insensitive error" means "no error".  Only when the pre-pass
reports a potential error does Hybrid run the incremental strategy; the
shared frame in :class:`~nllfacts.strategy.Strategy` then extracts
``errors`` with the exact rule.
"""

from __future__ import annotations

import logging

from .cfg import ControlFlow
from .facts import AllFacts
from .incremental import IncrementalStrategy
from .liveness import Liveness
from .location_insensitive import LocationInsensitiveStrategy
from .output import Output
from .strategy import Strategy, extract_errors

logger = logging.getLogger(__name__)


class HybridStrategy(Strategy):
    """Exact errors; cheaper intermediate relations for accepted programs."""

    name = "Hybrid"

    def solve(
        self,
        facts: AllFacts,
        cfg: ControlFlow,
        liveness: Liveness,
        output: Output,
    ) -> None:
        LocationInsensitiveStrategy().solve(facts, cfg, liveness, output)
        potential = extract_errors(output.borrow_live_at, facts.invalidates)
        if not potential:
            logger.debug("hybrid: location-insensitive pre-pass found no potential errors")
            return

        logger.debug(
            "hybrid: %d points with potential errors, running the exact analysis",
            len(potential),
        )
        pre_pass_iterations = output.iterations
        output.borrow_live_at = {}
        IncrementalStrategy().solve(facts, cfg, liveness, output)
        output.iterations += pre_pass_iterations
