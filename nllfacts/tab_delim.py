"""
nllfacts.tab_delim
==================

Load :class:`~nllfacts.facts.AllFacts` from a directory of tab-separated
``<relation>.facts`` files, one tuple per line, as dumped by the compiler.

Names are interned through the same :class:`~nllfacts.intern.InternerTables`
the program front-end uses, so facts from either source are comparable.
Columns wrapped in double quotes are unquoted.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple, Union

from .errors import FactsLoadError
from .facts import AllFacts
from .intern import Interner, InternerTables

logger = logging.getLogger(__name__)

# relation name (file stem and AllFacts attribute), column kinds in file
# order, and the stored tuple as indexes into the file columns
_RELATIONS: List[Tuple[str, Tuple[str, ...], Tuple[int, ...]]] = [
    ("borrow_region", ("region", "loan", "point"), (0, 1, 2)),
    ("universal_region", ("region",), (0,)),
    ("cfg_edge", ("point", "point"), (0, 1)),
    ("killed", ("loan", "point"), (0, 1)),
    ("outlives", ("region", "region", "point"), (0, 1, 2)),
    ("region_live_at", ("region", "point"), (0, 1)),
    ("invalidates", ("point", "loan"), (1, 0)),
    ("var_used", ("variable", "point"), (0, 1)),
    ("var_defined", ("variable", "point"), (0, 1)),
    ("var_drop_used", ("variable", "point"), (0, 1)),
    ("var_uses_region", ("variable", "region"), (0, 1)),
    ("var_drops_region", ("variable", "region"), (0, 1)),
]


def _unquote(column: str) -> str:
    column = column.strip()
    if len(column) >= 2 and column[0] == column[-1] == '"':
        return column[1:-1]
    return column


def _interner_for(tables: InternerTables, kind: str) -> Interner:
    return {
        "region": tables.regions,
        "loan": tables.loans,
        "point": tables.points,
        "variable": tables.variables,
    }[kind]


def load_tab_delimited_file(
    path: Path,
    interners: List[Interner],
) -> List[Tuple[int, ...]]:
    """Read one facts file into tuples of ids, in file column order."""
    rows: List[Tuple[int, ...]] = []
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FactsLoadError(f"{path}: {exc}") from exc
    for lineno, line in enumerate(text.split("\n"), start=1):
        line = line.rstrip("\r")
        if not line.strip():
            continue
        columns = line.split("\t")
        if len(columns) != len(interners):
            raise FactsLoadError(
                f"{path}:{lineno}: expected {len(interners)} columns, got {len(columns)}"
            )
        rows.append(tuple(
            interner.intern(_unquote(column))
            for interner, column in zip(interners, columns)
        ))
    return rows


def load_tab_delimited_facts(
    tables: InternerTables,
    facts_dir: Union[str, Path],
) -> AllFacts:
    """Load every known relation found in *facts_dir*.

    Missing files are empty relations.

    Raises
    ------
    FactsLoadError
        If *facts_dir* is not a directory or a file has a malformed row.
    """
    facts_dir = Path(facts_dir)
    if not facts_dir.is_dir():
        raise FactsLoadError(f"facts directory not found: {facts_dir}")

    facts = AllFacts()
    for name, kinds, order in _RELATIONS:
        path = facts_dir / f"{name}.facts"
        if not path.exists():
            logger.debug("no %s in %s, relation left empty", path.name, facts_dir)
            continue
        interners = [_interner_for(tables, kind) for kind in kinds]
        rows = load_tab_delimited_file(path, interners)
        target = getattr(facts, name)
        if name == "universal_region":
            target.update(row[0] for row in rows)
        else:
            target.update(tuple(row[i] for i in order) for row in rows)
        logger.debug("loaded %d tuples from %s", len(rows), path.name)
    return facts
