# tests/conftest.py
"""
Shared fixtures: program sources, a lowering helper, a seeded random fact
generator and the cross-strategy checks every fixture is run through.
"""

import random
from typing import Dict, Tuple

import pytest

from nllfacts.engine import OPTIMIZED_ALGORITHMS, Algorithm, compute
from nllfacts.facts import AllFacts
from nllfacts.intern import InternerTables
from nllfacts.output import Output
from nllfacts.program import parse_from_program


# ── Programs ──────────────────────────────────────────────────────

# A borrow flowing into a live region through one outlives edge.
SEND_IS_NOT_STATIC = """
    universal_regions { }
    block B0 {
        borrow_region_at('a, L0), outlives('a: 'b), region_live_at('b);
    }
"""

ESCAPE_UPVAR_NESTED = """
    universal_regions { }
    block B0 {
        borrow_region_at('a, L0), outlives('a: 'b), outlives('b: 'c), region_live_at('c);
    }
"""

# Chain of three outlives at a single point reaching a live region.
ISSUE_31567 = """
    universal_regions { }
    block B0 {
        borrow_region_at('a, L0),
        outlives('a: 'b),
        outlives('b: 'c),
        outlives('c: 'd),
        region_live_at('d);
    }
"""

ISSUE_31567_INVALIDATED = """
    block B0 {
        borrow_region_at('a, L0),
        outlives('a: 'b),
        outlives('b: 'c),
        outlives('c: 'd),
        region_live_at('d),
        invalidates(L0);
    }
"""

BORROWED_LOCAL_ERROR = """
    universal_regions { 'c }
    block B0 {
        borrow_region_at('a, L0), outlives('a: 'b), outlives('b: 'c);
    }
"""

USE_WHILE_BORROWED = """
    block B0 {
        borrow_region_at('a, L0);
        goto B1;
    }
    block B1 {
        invalidates(L0), use('a);
    }
"""

# L0 is killed before the invalidation: only the location-insensitive
# analysis reports it.
KILLED_BEFORE_INVALIDATION = """
    var_uses_region { (V1, 'a) }
    block B0 {
        borrow_region_at('a, L0);
        killed(L0);
        goto B1;
    }
    block B1 {
        invalidates(L0), var_used(V1);
    }
"""

SUBSET_CYCLE = """
    block B0 {
        borrow_region_at('a, L0), outlives('a: 'b), outlives('b: 'a), region_live_at('b);
        goto B1;
    }
    block B1 {
        invalidates(L0), use('a, 'b);
    }
"""

LOOP_WITH_REBORROW = """
    universal_regions { 'static }
    var_uses_region { (V1, 'a), (V2, 'b) }
    var_drops_region { (V2, 'b) }
    block B0 {
        borrow_region_at('a, L0), var_defined(V1);
        goto B1;
    }
    block B1 {
        outlives('a: 'b), var_used(V1), var_defined(V2);
        goto B2, B3;
    }
    block B2 {
        var_used(V2);
        invalidates(L0), borrow_region_at('a, L1);
        goto B1;
    }
    block B3 {
        var_drop_used(V2), invalidates(L1);
    }
"""

KILL_IN_LOOP = """
    var_uses_region { (V1, 'r) }
    block B0 {
        borrow_region_at('r, L0), var_used(V1);
        goto B1;
    }
    block B1 {
        var_used(V1);
        killed(L0), borrow_region_at('r, L0);
        goto B1, B2;
    }
    block B2 {
        invalidates(L0), var_used(V1);
    }
"""

PROGRAMS: Dict[str, str] = {
    "send_is_not_static": SEND_IS_NOT_STATIC,
    "escape_upvar_nested": ESCAPE_UPVAR_NESTED,
    "issue_31567": ISSUE_31567,
    "issue_31567_invalidated": ISSUE_31567_INVALIDATED,
    "borrowed_local_error": BORROWED_LOCAL_ERROR,
    "use_while_borrowed": USE_WHILE_BORROWED,
    "killed_before_invalidation": KILLED_BEFORE_INVALIDATION,
    "subset_cycle": SUBSET_CYCLE,
    "loop_with_reborrow": LOOP_WITH_REBORROW,
    "kill_in_loop": KILL_IN_LOOP,
}


# ── Helpers ───────────────────────────────────────────────────────

def lower(program: str) -> Tuple[AllFacts, InternerTables]:
    tables = InternerTables()
    return parse_from_program(program, tables), tables


# AllFacts relation → interner of each stored column
RELATION_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "borrow_region": ("regions", "loans", "points"),
    "universal_region": ("regions",),
    "cfg_edge": ("points", "points"),
    "killed": ("loans", "points"),
    "outlives": ("regions", "regions", "points"),
    "region_live_at": ("regions", "points"),
    "invalidates": ("loans", "points"),
    "var_used": ("variables", "points"),
    "var_defined": ("variables", "points"),
    "var_drop_used": ("variables", "points"),
    "var_uses_region": ("variables", "regions"),
    "var_drops_region": ("variables", "regions"),
}


def named_relations(facts: AllFacts, tables: InternerTables) -> Dict[str, set]:
    """Every relation of *facts* with ids replaced by their names."""
    named = {}
    for name, columns in RELATION_COLUMNS.items():
        interners = [getattr(tables, column) for column in columns]
        rows = getattr(facts, name)
        if name == "universal_region":
            rows = {(region,) for region in rows}
        named[name] = {
            tuple(interner.untern(i) for interner, i in zip(interners, row))
            for row in rows
        }
    return named


def subset_symmetries(output: Output):
    """``(point, region)`` pairs where a region is its own subset."""
    return [
        (point, r1)
        for point, subsets in output.subset.items()
        for r1, targets in subsets.items()
        if r1 in targets
    ]


def assert_strategies_agree(facts: AllFacts) -> Output:
    """Check the relations the strategies must keep with Naive.

    Returns the Naive output for further assertions.
    """
    naive = compute(facts, Algorithm.NAIVE)

    insensitive = compute(facts, Algorithm.LOCATION_INSENSITIVE)
    for point, loans in naive.errors.items():
        missing = loans - insensitive.errors.get(point, set())
        assert not missing, (
            f"naive analysis had errors {missing} at {point} "
            f"but the location-insensitive one did not"
        )

    for algorithm in OPTIMIZED_ALGORITHMS:
        optimized = compute(facts, algorithm)
        assert optimized.borrow_live_at == naive.borrow_live_at, algorithm
        assert optimized.errors == naive.errors, algorithm

    hybrid = compute(facts, Algorithm.HYBRID)
    assert hybrid.errors == naive.errors
    return naive


def random_facts(seed: int) -> AllFacts:
    """Small random fact tables over a CFG that may contain loops."""
    rng = random.Random(seed)
    n_points = rng.randint(4, 14)
    regions, loans, variables = range(5), range(3), range(3)

    def point():
        return rng.randrange(n_points)

    facts = AllFacts()
    for p in range(n_points - 1):
        facts.cfg_edge.add((p, p + 1))
    for _ in range(rng.randint(0, 4)):
        facts.cfg_edge.add((point(), point()))

    for _ in range(rng.randint(1, 3)):
        facts.borrow_region.add((rng.choice(regions), rng.choice(loans), point()))
    for _ in range(rng.randint(0, 2 * n_points)):
        facts.outlives.add((rng.choice(regions), rng.choice(regions), point()))
    for _ in range(rng.randint(0, n_points)):
        facts.region_live_at.add((rng.choice(regions), point()))
    for _ in range(rng.randint(0, 2)):
        facts.killed.add((rng.choice(loans), point()))
    for _ in range(rng.randint(1, 4)):
        facts.invalidates.add((rng.choice(loans), point()))
    if rng.random() < 0.3:
        facts.universal_region.add(rng.choice(regions))

    for _ in range(rng.randint(0, 3)):
        facts.var_used.add((rng.choice(variables), point()))
    for _ in range(rng.randint(0, 2)):
        facts.var_defined.add((rng.choice(variables), point()))
    for _ in range(rng.randint(0, 2)):
        facts.var_drop_used.add((rng.choice(variables), point()))
    for variable in variables:
        if rng.random() < 0.5:
            facts.var_uses_region.add((variable, rng.choice(regions)))
        if rng.random() < 0.3:
            facts.var_drops_region.add((variable, rng.choice(regions)))
    return facts


# ── Fixtures ──────────────────────────────────────────────────────

@pytest.fixture
def tables():
    return InternerTables()


@pytest.fixture(params=sorted(PROGRAMS))
def program_facts(request):
    """Every fixture program, lowered."""
    return lower(PROGRAMS[request.param])
