"""
nllfacts.program
================

Front-end for the textual program mini-language used to author focused
test inputs.

::

    universal_regions { 'static }
    var_uses_region { (V1, 'a) }
    block B0 {
        borrow_region_at('a, L0), outlives('a: 'b);   // one statement
        use('b), invalidates(L0);
        goto B1;
    }
    block B1 { var_used(V1); }

The pipeline has three explicit steps:

1.  :func:`parse_input`: PEG parse (parsimonious) and visitor → :mod:`ir`.
2.  :func:`promote_start_effects`: liveness required at a statement's Mid
    point is also required on entry to its Start point.
3.  :func:`lower`: allocate two points per statement, wire the CFG, and
    emit the effects as :class:`~nllfacts.facts.AllFacts` tuples.

:func:`parse_from_program` chains the three.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from parsimonious.exceptions import ParseError as PegParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from . import ir
from .errors import ParseError
from .facts import AllFacts, Point
from .intern import InternerTables

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  GRAMMAR
# ═══════════════════════════════════════════════════════════════════

PROGRAM_GRAMMAR = Grammar(r'''
    program          = _ universal_decl? uses_decl? drops_decl? block_decl*

    universal_decl   = "universal_regions" _ "{" _ region_list? "}" _
    uses_decl        = "var_uses_region" _ "{" _ mapping_list? "}" _
    drops_decl       = "var_drops_region" _ "{" _ mapping_list? "}" _
    mapping_list     = mapping ("," _ mapping)*
    mapping          = "(" _ ident "," _ region ")" _

    block_decl       = "block" __ ident "{" _ statement* goto? "}" _
    statement        = effect ("," _ effect)* ";" _
    goto             = "goto" __ ident_list ";" _

    effect           = use / outlives / borrow_region_at / invalidates
                     / killed / region_live_at / var_used / var_defined
                     / var_drop_used

    use              = "use" _ "(" _ region_list? ")" _
    outlives         = "outlives" _ "(" _ region ":" _ region ")" _
    borrow_region_at = "borrow_region_at" _ "(" _ region "," _ ident ")" _
    invalidates      = "invalidates" _ "(" _ ident ")" _
    killed           = "killed" _ "(" _ ident ")" _
    region_live_at   = "region_live_at" _ "(" _ region ")" _
    var_used         = "var_used" _ "(" _ ident ")" _
    var_defined      = "var_defined" _ "(" _ ident ")" _
    var_drop_used    = "var_drop_used" _ "(" _ ident ")" _

    region_list      = region ("," _ region)*
    ident_list       = ident ("," _ ident)*
    region           = ~r"'[A-Za-z_][A-Za-z0-9_]*" _
    ident            = ~r"[A-Za-z_][A-Za-z0-9_]*" _

    __               = ~r"\s+" _
    _                = (~r"\s+" / comment)*
    comment          = ~r"//[^\n]*"
''')


def _many(visited) -> list:
    """Children of a ``*`` expression; an unmatched one visits to its Node."""
    return visited if isinstance(visited, list) else []


def _optional(visited):
    """Child of a ``?`` expression, or ``None`` when it did not match."""
    if isinstance(visited, list) and visited:
        return visited[0]
    return None


def _line_of(node: Node) -> int:
    return node.full_text.count("\n", 0, node.start) + 1


class ProgramBuilder(NodeVisitor):
    """Transforms the parsimonious parse tree into an :class:`ir.Input`."""

    unwrapped_exceptions = (ParseError,)

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_program(self, node, visited_children):
        _, universal, uses, drops, blocks = visited_children
        return ir.Input(
            universal_regions=_optional(universal) or [],
            blocks=_many(blocks),
            var_uses_region=_optional(uses) or [],
            var_drops_region=_optional(drops) or [],
        )

    def visit_universal_decl(self, node, visited_children):
        return _optional(visited_children[4]) or []

    def visit_uses_decl(self, node, visited_children):
        return _optional(visited_children[4]) or []

    visit_drops_decl = visit_uses_decl

    def visit_mapping_list(self, node, visited_children):
        first, rest = visited_children
        return [first] + [group[2] for group in _many(rest)]

    def visit_mapping(self, node, visited_children):
        return (visited_children[2], visited_children[5])

    def visit_block_decl(self, node, visited_children):
        name = visited_children[2]
        goto = _optional(visited_children[6]) or []
        return ir.Block(
            name=name,
            statements=_many(visited_children[5]),
            goto=list(goto),
            line=_line_of(node),
        )

    def visit_statement(self, node, visited_children):
        first, rest, _, _ = visited_children
        effects = [first] + [group[2] for group in _many(rest)]
        return ir.Statement(effects=tuple(effects))

    def visit_goto(self, node, visited_children):
        return visited_children[2]

    def visit_effect(self, node, visited_children):
        return visited_children[0]

    def visit_use(self, node, visited_children):
        return ir.Use(regions=tuple(_optional(visited_children[4]) or ()))

    def visit_outlives(self, node, visited_children):
        return ir.Fact(ir.FactKind.OUTLIVES, (visited_children[4], visited_children[7]))

    def visit_borrow_region_at(self, node, visited_children):
        return ir.Fact(ir.FactKind.BORROW_REGION_AT, (visited_children[4], visited_children[7]))

    def _unary(self, kind: ir.FactKind, visited_children) -> ir.Fact:
        return ir.Fact(kind, (visited_children[4],))

    def visit_invalidates(self, node, visited_children):
        return self._unary(ir.FactKind.INVALIDATES, visited_children)

    def visit_killed(self, node, visited_children):
        return self._unary(ir.FactKind.KILLED, visited_children)

    def visit_region_live_at(self, node, visited_children):
        return self._unary(ir.FactKind.REGION_LIVE_AT, visited_children)

    def visit_var_used(self, node, visited_children):
        return self._unary(ir.FactKind.VAR_USED, visited_children)

    def visit_var_defined(self, node, visited_children):
        return self._unary(ir.FactKind.VAR_DEFINED, visited_children)

    def visit_var_drop_used(self, node, visited_children):
        return self._unary(ir.FactKind.VAR_DROP_USED, visited_children)

    def visit_region_list(self, node, visited_children):
        first, rest = visited_children
        return [first] + [group[2] for group in _many(rest)]

    visit_ident_list = visit_region_list

    def visit_region(self, node, visited_children):
        return visited_children[0].text

    visit_ident = visit_region


# ═══════════════════════════════════════════════════════════════════
#  PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def parse_input(text: str) -> ir.Input:
    """Parse program *text* into its structural description.

    Raises
    ------
    ParseError
        On any syntax violation, with the line/column of the failure.
    """
    try:
        tree = PROGRAM_GRAMMAR.parse(text)
    except PegParseError as exc:
        excerpt = exc.text[exc.pos:exc.pos + 24].split("\n", 1)[0]
        where = repr(excerpt) if excerpt else "end of input"
        raise ParseError(
            f"unexpected {where}",
            line=exc.line(),
            column=exc.column(),
        ) from exc
    return ProgramBuilder().visit(tree)


def _is_region_live_at(effect: ir.Effect) -> bool:
    return isinstance(effect, ir.Fact) and effect.kind is ir.FactKind.REGION_LIVE_AT


def promote_start_effects(program: ir.Input) -> ir.Input:
    """Copy the liveness a statement requires onto its Start point.

    Anything live on entry to a statement's Mid point is live on entry to
    its Start point: explicit ``region_live_at`` facts are copied, and each
    region named by ``use(...)`` becomes a ``region_live_at`` at Start.
    """
    blocks: List[ir.Block] = []
    for block in program.blocks:
        statements = []
        for statement in block.statements:
            promoted: List[ir.Effect] = list(statement.effects_start)
            for effect in statement.effects:
                if _is_region_live_at(effect):
                    promoted.append(effect)
                elif isinstance(effect, ir.Use):
                    promoted.extend(
                        ir.Fact(ir.FactKind.REGION_LIVE_AT, (region,))
                        for region in effect.regions
                    )
            statements.append(statement.with_start_effects(tuple(promoted)))
        blocks.append(replace(block, statements=statements))
    return replace(program, blocks=blocks)


def _check_block_references(program: ir.Input) -> Dict[str, ir.Block]:
    by_name: Dict[str, ir.Block] = {}
    for block in program.blocks:
        if block.name in by_name:
            raise ParseError(f"block `{block.name}` is declared twice", line=block.line)
        by_name[block.name] = block
    for block in program.blocks:
        for target in block.goto:
            successor = by_name.get(target)
            if successor is None:
                raise ParseError(
                    f"block `{block.name}` jumps to undeclared block `{target}`",
                    line=block.line,
                )
            if not successor.statements:
                raise ParseError(
                    f"block `{block.name}` jumps to `{target}`, which has no statements",
                    line=block.line,
                )
    return by_name


def _emit(
    facts: AllFacts,
    tables: InternerTables,
    effects: Tuple[ir.Effect, ...],
    point: Point,
) -> None:
    regions, loans, variables = tables.regions, tables.loans, tables.variables
    for effect in effects:
        if isinstance(effect, ir.Use):
            for region in effect.regions:
                facts.region_live_at.add((regions.intern(region), point))
            continue

        kind, args = effect.kind, effect.args
        if kind is ir.FactKind.OUTLIVES:
            facts.outlives.add((regions.intern(args[0]), regions.intern(args[1]), point))
        elif kind is ir.FactKind.BORROW_REGION_AT:
            facts.borrow_region.add((regions.intern(args[0]), loans.intern(args[1]), point))
        elif kind is ir.FactKind.INVALIDATES:
            facts.invalidates.add((loans.intern(args[0]), point))
        elif kind is ir.FactKind.KILLED:
            facts.killed.add((loans.intern(args[0]), point))
        elif kind is ir.FactKind.REGION_LIVE_AT:
            facts.region_live_at.add((regions.intern(args[0]), point))
        elif kind is ir.FactKind.VAR_DEFINED:
            facts.var_defined.add((variables.intern(args[0]), point))
        elif kind is ir.FactKind.VAR_USED:
            facts.var_used.add((variables.intern(args[0]), point))
        elif kind is ir.FactKind.VAR_DROP_USED:
            facts.var_drop_used.add((variables.intern(args[0]), point))
        else:  # pragma: no cover
            raise ParseError(f"unsupported fact kind {kind!r}")


def lower(program: ir.Input, tables: InternerTables) -> AllFacts:
    """Lower a promoted program into fact tables.

    Every statement gets a Start and a Mid point, numbered in declaration
    order.  All points are allocated before any edge is wired.
    """
    _check_block_references(program)
    facts = AllFacts()

    facts.universal_region.update(tables.regions.intern(r) for r in program.universal_regions)
    for variable, region in program.var_uses_region:
        facts.var_uses_region.add((tables.variables.intern(variable), tables.regions.intern(region)))
    for variable, region in program.var_drops_region:
        facts.var_drops_region.add((tables.variables.intern(variable), tables.regions.intern(region)))

    layout: Dict[str, List[Tuple[Point, Point]]] = {}
    for block in program.blocks:
        layout[block.name] = [
            (
                tables.points.intern(f"Start({block.name}[{index}])"),
                tables.points.intern(f"Mid({block.name}[{index}])"),
            )
            for index in range(len(block.statements))
        ]

    for block in program.blocks:
        points = layout[block.name]
        for (start, mid), statement in zip(points, block.statements):
            facts.cfg_edge.add((start, mid))
            _emit(facts, tables, statement.effects_start, start)
            _emit(facts, tables, statement.effects, mid)
        for (_, mid), (next_start, _) in zip(points, points[1:]):
            facts.cfg_edge.add((mid, next_start))
        if not points:
            continue
        last_mid = points[-1][1]
        for target in block.goto:
            facts.cfg_edge.add((last_mid, layout[target][0][0]))

    logger.debug(
        "lowered %d blocks into %d points, %d cfg edges",
        len(program.blocks), sum(len(p) for p in layout.values()) * 2, len(facts.cfg_edge),
    )
    return facts


def parse_from_program(text: str, tables: InternerTables) -> AllFacts:
    """Parse, promote and lower *text* using the shared interner *tables*."""
    return lower(promote_start_effects(parse_input(text)), tables)
