"""
nllfacts.ir
===========

Structural description of a test program, as produced by the parser in
:mod:`nllfacts.program` and consumed by its lowering step.

A program is a list of named blocks; a block is an ordered list of
statements plus successor block names; a statement is a list of effects.
Names are kept as plain strings here; interning happens during lowering.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import List, Tuple, Union


class FactKind(enum.Enum):
    """Fact effects, keyed by their surface keyword."""

    OUTLIVES = "outlives"                   # ('a, 'b)
    BORROW_REGION_AT = "borrow_region_at"   # ('r, loan)
    INVALIDATES = "invalidates"             # (loan,)
    KILLED = "killed"                       # (loan,)
    REGION_LIVE_AT = "region_live_at"       # ('r,)
    VAR_DEFINED = "var_defined"             # (variable,)
    VAR_USED = "var_used"                   # (variable,)
    VAR_DROP_USED = "var_drop_used"         # (variable,)


@dataclass(frozen=True)
class Fact:
    """One fact effect; ``args`` follow the order shown on :class:`FactKind`."""

    kind: FactKind
    args: Tuple[str, ...]


@dataclass(frozen=True)
class Use:
    """``use('a, 'b)``: the regions are read at the statement."""

    regions: Tuple[str, ...]


Effect = Union[Use, Fact]


@dataclass(frozen=True)
class Statement:
    """
    A statement and its effects.

    ``effects`` are emitted at the statement's Mid point.  ``effects_start``
    are emitted at its Start point; the parser leaves it empty and
    :func:`nllfacts.program.promote_start_effects` fills it.
    """

    effects: Tuple[Effect, ...]
    effects_start: Tuple[Effect, ...] = ()

    def with_start_effects(self, effects_start: Tuple[Effect, ...]) -> "Statement":
        return replace(self, effects_start=effects_start)


@dataclass
class Block:
    name: str
    statements: List[Statement] = field(default_factory=list)
    goto: List[str] = field(default_factory=list)
    line: int = 0


@dataclass
class Input:
    """A whole program: universal regions, projection tables and blocks."""

    universal_regions: List[str] = field(default_factory=list)
    blocks: List[Block] = field(default_factory=list)
    var_uses_region: List[Tuple[str, str]] = field(default_factory=list)
    var_drops_region: List[Tuple[str, str]] = field(default_factory=list)
