# tests/test_tab_delim.py
"""Tests for loading directories of tab-separated .facts files."""

import pytest

from nllfacts.errors import FactsLoadError
from nllfacts.tab_delim import load_tab_delimited_facts, load_tab_delimited_file


def _write(directory, name, text):
    (directory / f"{name}.facts").write_text(text, encoding="utf-8")


class TestLoadFile:

    def test_rows_in_column_order(self, tmp_path, tables):
        _write(tmp_path, "outlives", "'a\t'b\tP0\n'b\t'c\tP1\n")
        rows = load_tab_delimited_file(
            tmp_path / "outlives.facts",
            [tables.regions, tables.regions, tables.points],
        )
        assert rows == [(0, 1, 0), (1, 2, 1)]
        assert tables.regions.untern_vec([0, 1, 2]) == ["'a", "'b", "'c"]

    def test_quoted_columns(self, tmp_path, tables):
        _write(tmp_path, "killed", '"bw0"\t"Mid(bb0[1])"\n')
        rows = load_tab_delimited_file(tmp_path / "killed.facts", [tables.loans, tables.points])
        assert rows == [(0, 0)]
        assert tables.loans.untern(0) == "bw0"
        assert tables.points.untern(0) == "Mid(bb0[1])"

    def test_blank_lines_skipped(self, tmp_path, tables):
        _write(tmp_path, "killed", "\nL0\tP0\n\n")
        rows = load_tab_delimited_file(tmp_path / "killed.facts", [tables.loans, tables.points])
        assert rows == [(0, 0)]

    def test_wrong_column_count(self, tmp_path, tables):
        _write(tmp_path, "killed", "L0\tP0\n\nL1\n")
        with pytest.raises(FactsLoadError, match=r"killed\.facts:3: expected 2 columns, got 1"):
            load_tab_delimited_file(tmp_path / "killed.facts", [tables.loans, tables.points])

    def test_undecodable_bytes(self, tmp_path, tables):
        (tmp_path / "killed.facts").write_bytes(b"L\xff0\tP0\n")
        with pytest.raises(FactsLoadError, match=r"killed\.facts"):
            load_tab_delimited_file(tmp_path / "killed.facts", [tables.loans, tables.points])

    def test_unreadable_path(self, tmp_path, tables):
        (tmp_path / "killed.facts").mkdir()
        with pytest.raises(FactsLoadError):
            load_tab_delimited_file(tmp_path / "killed.facts", [tables.loans, tables.points])

    def test_crlf_line_endings(self, tmp_path, tables):
        (tmp_path / "killed.facts").write_bytes(b"L0\tP0\r\nL1\tP1\r\n")
        rows = load_tab_delimited_file(tmp_path / "killed.facts", [tables.loans, tables.points])
        assert rows == [(0, 0), (1, 1)]


class TestLoadFacts:

    def test_all_relations(self, tmp_path, tables):
        _write(tmp_path, "borrow_region", "'a\tL0\tP1\n")
        _write(tmp_path, "universal_region", "'static\n")
        _write(tmp_path, "cfg_edge", "P0\tP1\n")
        _write(tmp_path, "killed", "L0\tP1\n")
        _write(tmp_path, "outlives", "'a\t'static\tP1\n")
        _write(tmp_path, "region_live_at", "'a\tP1\n")
        _write(tmp_path, "invalidates", "P1\tL0\n")
        _write(tmp_path, "var_used", "V1\tP1\n")
        _write(tmp_path, "var_defined", "V1\tP0\n")
        _write(tmp_path, "var_drop_used", "V2\tP1\n")
        _write(tmp_path, "var_uses_region", "V1\t'a\n")
        _write(tmp_path, "var_drops_region", "V2\t'static\n")

        facts = load_tab_delimited_facts(tables, tmp_path)

        a, static = tables.regions.lookup("'a"), tables.regions.lookup("'static")
        l0 = tables.loans.lookup("L0")
        p0, p1 = tables.points.lookup("P0"), tables.points.lookup("P1")
        v1, v2 = tables.variables.lookup("V1"), tables.variables.lookup("V2")
        assert facts.borrow_region == {(a, l0, p1)}
        assert facts.universal_region == {static}
        assert facts.cfg_edge == {(p0, p1)}
        assert facts.killed == {(l0, p1)}
        assert facts.outlives == {(a, static, p1)}
        assert facts.region_live_at == {(a, p1)}
        assert facts.invalidates == {(l0, p1)}
        assert facts.var_used == {(v1, p1)}
        assert facts.var_defined == {(v1, p0)}
        assert facts.var_drop_used == {(v2, p1)}
        assert facts.var_uses_region == {(v1, a)}
        assert facts.var_drops_region == {(v2, static)}

    def test_invalidates_columns_swapped(self, tmp_path, tables):
        _write(tmp_path, "invalidates", "Mid(bb0[0])\tbw0\n")
        facts = load_tab_delimited_facts(tables, tmp_path)
        (loan, point), = facts.invalidates
        assert tables.loans.untern(loan) == "bw0"
        assert tables.points.untern(point) == "Mid(bb0[0])"

    def test_missing_files_are_empty(self, tmp_path, tables):
        _write(tmp_path, "cfg_edge", "P0\tP1\n")
        facts = load_tab_delimited_facts(tables, tmp_path)
        assert len(facts.cfg_edge) == 1
        assert facts.borrow_region == set()
        assert facts.universal_region == set()

    def test_duplicates_collapse(self, tmp_path, tables):
        _write(tmp_path, "cfg_edge", "P0\tP1\nP0\tP1\n")
        facts = load_tab_delimited_facts(tables, tmp_path)
        assert len(facts.cfg_edge) == 1

    def test_unknown_files_ignored(self, tmp_path, tables):
        _write(tmp_path, "child", "L0\tL1\n")
        facts = load_tab_delimited_facts(tables, tmp_path)
        assert facts.all_points() == set()

    def test_not_a_directory(self, tmp_path, tables):
        with pytest.raises(FactsLoadError, match="not found"):
            load_tab_delimited_facts(tables, tmp_path / "missing")

    def test_accepts_string_path(self, tmp_path, tables):
        _write(tmp_path, "cfg_edge", "P0\tP1\n")
        facts = load_tab_delimited_facts(tables, str(tmp_path))
        assert len(facts.cfg_edge) == 1
