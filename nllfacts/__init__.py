"""
nllfacts — fact-based borrow checking
=====================================

Evaluates region/loan/point facts to a fixpoint and reports the points where
a loan is still live while something invalidates it.

Modules
-------
facts
    ``AllFacts``: the flat relational input.
intern
    Name ↔ dense-id tables shared by the front-ends.
program
    Parser and lowering for the textual program mini-language.
tab_delim
    Loader for directories of tab-separated ``.facts`` files.
engine
    ``Algorithm`` and ``compute``: run a strategy, get an ``Output``.
naive, location_insensitive, incremental, hybrid
    The four strategies.

Quick start
-----------
>>> from nllfacts import Algorithm, InternerTables, compute, parse_from_program
>>> tables = InternerTables()
>>> facts = parse_from_program('''
...     block B0 { borrow_region_at('a, L0), region_live_at('a), invalidates(L0); }
... ''', tables)
>>> [(tables.points.untern(p), tables.loans.untern(l))
...  for p, l in compute(facts, Algorithm.NAIVE).error_tuples()]
[('Mid(B0[0])', 'L0')]
"""

from __future__ import annotations

import logging
from typing import List

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .engine import Algorithm, compute  # noqa: E402
from .errors import FactsLoadError, NllFactsError, ParseError  # noqa: E402
from .facts import AllFacts  # noqa: E402
from .intern import InternerTables  # noqa: E402
from .output import Output  # noqa: E402
from .program import parse_from_program  # noqa: E402
from .tab_delim import load_tab_delimited_facts  # noqa: E402

__all__: List[str] = [
    "Algorithm",
    "AllFacts",
    "FactsLoadError",
    "InternerTables",
    "NllFactsError",
    "Output",
    "ParseError",
    "compute",
    "load_tab_delimited_facts",
    "parse_from_program",
]
