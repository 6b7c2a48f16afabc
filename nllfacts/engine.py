"""
nllfacts.engine
===============

Strategy selection.

::

    from nllfacts.engine import Algorithm, compute

    output = compute(facts, Algorithm.HYBRID)
    for point, loan in output.error_tuples():
        ...
"""

from __future__ import annotations

import enum
from typing import Dict, Tuple, Type

from .facts import AllFacts
from .hybrid import HybridStrategy
from .incremental import IncrementalStrategy
from .location_insensitive import LocationInsensitiveStrategy
from .naive import NaiveStrategy
from .output import Output
from .strategy import Strategy


class Algorithm(enum.Enum):
    NAIVE = "Naive"
    LOCATION_INSENSITIVE = "LocationInsensitive"
    OPTIMIZED = "Optimized"
    HYBRID = "Hybrid"

    @classmethod
    def from_name(cls, name: str) -> "Algorithm":
        """Parse a user-supplied algorithm name (case and dashes ignored)."""
        key = name.replace("-", "").replace("_", "").lower()
        try:
            return _ALIASES[key]
        except KeyError:
            choices = ", ".join(a.value for a in cls)
            raise ValueError(f"unknown algorithm {name!r} (expected one of: {choices})") from None


_ALIASES: Dict[str, Algorithm] = {
    "naive": Algorithm.NAIVE,
    "locationinsensitive": Algorithm.LOCATION_INSENSITIVE,
    "optimized": Algorithm.OPTIMIZED,
    "datafrogopt": Algorithm.OPTIMIZED,
    "hybrid": Algorithm.HYBRID,
}

# Strategies required to match Naive on borrow_live_at and errors.
OPTIMIZED_ALGORITHMS: Tuple[Algorithm, ...] = (Algorithm.OPTIMIZED,)

STRATEGIES: Dict[Algorithm, Type[Strategy]] = {
    Algorithm.NAIVE: NaiveStrategy,
    Algorithm.LOCATION_INSENSITIVE: LocationInsensitiveStrategy,
    Algorithm.OPTIMIZED: IncrementalStrategy,
    Algorithm.HYBRID: HybridStrategy,
}


def compute(facts: AllFacts, algorithm: Algorithm, dump_enabled: bool = True) -> Output:
    """Run *algorithm* over *facts* and return its :class:`Output`."""
    return STRATEGIES[algorithm]().compute(facts, dump_enabled)
