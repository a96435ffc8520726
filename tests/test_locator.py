"""Tests for locating snippets in a disassembled document."""

from __future__ import annotations

import pytest

from inlineil.errors import AmbiguousLocationError, LocationNotFoundError
from inlineil.locator import InsertionPlan, locate, plan_insertions
from inlineil.markers import HIDDEN_LINE
from inlineil.snippet import Snippet
from tests.helpers import FOO_INSERT_INDEX, doc, foo_document, marker


def snippet(start: int, end: int, source: str = "a.cs") -> Snippet:
    return Snippet(source, start, end, ["nop"] * (end - start + 1))


class TestLocate:
    def test_basic_scenario(self):
        document = doc(
            ".line 3,3 : 1,5 'a.cs'",
            "nop",
            ".line 9,9 : 1,5 'a.cs'",
            "ret",
        )
        assert locate(document, snippet(5, 7)) == 2

    def test_markers_without_filename_keep_current_file(self):
        document = doc(marker(3, "a.cs"), "nop", marker(9), "ret")
        assert locate(document, snippet(5, 7)) == 2

    def test_deterministic(self):
        document = doc(marker(3, "a.cs"), "nop", marker(9), "ret")
        s = snippet(5, 7)
        assert locate(document, s) == locate(document, s)

    def test_realistic_method(self):
        assert locate(foo_document(), snippet(8, 9, "Foo.cs")) == FOO_INSERT_INDEX

    def test_insert_before_marker_at_first_line(self):
        document = doc(marker(1, "a.cs"), marker(9), "ret")
        assert locate(document, snippet(2, 5)) == 1

    def test_hidden_lines_are_skipped(self):
        document = doc(
            marker(3, "a.cs"),
            "nop",
            f".line {HIDDEN_LINE},{HIDDEN_LINE} : 0,0 ''",
            "pop",
            marker(9),
            "ret",
        )
        assert locate(document, snippet(5, 7)) == 4

    def test_other_files_are_ignored(self):
        document = doc(
            marker(3, "a.cs"),
            "nop",
            marker(6, "b.cs"),
            "nop",
            marker(20, "b.cs"),
            marker(9, "a.cs"),
            "ret",
        )
        assert locate(document, snippet(5, 7)) == 5

    def test_snippet_in_other_file(self):
        document = doc(marker(3, "a.cs"), marker(9), marker(4, "b.cs"), marker(8))
        assert locate(document, snippet(5, 6, "b.cs")) == 3

    def test_first_marker_never_straddles(self):
        document = doc(marker(9, "a.cs"), "ret")
        with pytest.raises(LocationNotFoundError):
            locate(document, snippet(5, 7))

    def test_not_found(self):
        document = doc(marker(3, "a.cs"), "nop", marker(4), "ret")
        with pytest.raises(LocationNotFoundError, match="can't find where to place") as exc:
            locate(document, snippet(5, 7))
        assert exc.value.start_line == 5
        assert exc.value.end_line == 7

    def test_unknown_file_not_found(self):
        document = doc(marker(3, "a.cs"), marker(9))
        with pytest.raises(LocationNotFoundError):
            locate(document, snippet(5, 7, "c.cs"))

    def test_marker_inside_range_is_no_match(self):
        document = doc(marker(3, "a.cs"), marker(6), marker(9))
        with pytest.raises(LocationNotFoundError):
            locate(document, snippet(5, 7))

    def test_ambiguous(self):
        # A loop condition compiled after its body gives a second straddling pair
        document = doc(
            marker(3, "a.cs"),
            "nop",
            marker(9),
            "br.s IL_0000",
            marker(2),
            marker(10),
            "ret",
        )
        with pytest.raises(AmbiguousLocationError, match="multiple spots") as exc:
            locate(document, snippet(5, 7))
        assert exc.value.source_file == "a.cs"
        assert exc.value.to_diagnostic().code == "E202"


class TestPlanInsertions:
    def test_plans_in_discovery_order(self):
        document = doc(marker(3, "a.cs"), "nop", marker(9), "nop", marker(15), "ret")
        first, second = snippet(11, 12), snippet(5, 7)
        plans = plan_insertions(document, [first, second])
        assert plans == [InsertionPlan(first, 4), InsertionPlan(second, 2)]

    def test_no_snippets(self):
        assert plan_insertions(doc("ret"), []) == []

    def test_failure_propagates(self):
        with pytest.raises(LocationNotFoundError):
            plan_insertions(doc(marker(3, "a.cs")), [snippet(5, 7)])
