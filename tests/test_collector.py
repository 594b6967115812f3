"""Tests for change source collection."""

from __future__ import annotations

from gochanged.analysis.models import DeltaKind, DependencyDelta, Severity
from gochanged.changes.collector import (
    collect_changes,
    dependency_deltas,
    detect_fallback,
    directory_records,
)
from gochanged.config import ClassifierConfig
from gochanged.toolchain.modfile import parse_modfile

PAST = parse_modfile("""\
module example.com/m
go 1.21
require (
    example.com/same v1.0.0
    example.com/bumped v1.0.0
)
replace example.com/same => ../same
replace example.com/moved => ../moved
replace example.com/dropped => ../dropped
""")

CURRENT = parse_modfile("""\
module example.com/m
go 1.21
require (
    example.com/same v1.0.0
    example.com/bumped v1.1.0
    example.com/added v0.1.0
)
replace example.com/same => ../same
replace example.com/moved => ../elsewhere
replace example.com/fresh v1.0.0 => ../fresh
""")


class TestDirectoryRecords:
    def test_source_change_is_full(self):
        records = directory_records(["/repo/a/a.go"], "/repo")
        assert len(records) == 1
        assert records[0].directory == "/repo/a"
        assert records[0].relative == "a"
        assert records[0].severity is Severity.FULLY_AFFECTED

    def test_test_file_is_test_only(self):
        records = directory_records(["/repo/a/a_test.go"], "/repo")
        assert records[0].severity is Severity.TEST_AFFECTED

    def test_testdata_segment_is_test_only(self):
        records = directory_records(["/repo/a/testdata/golden.json"], "/repo")
        assert records[0].directory == "/repo/a/testdata"
        assert records[0].severity is Severity.TEST_AFFECTED

    def test_testdata_must_be_a_whole_segment(self):
        records = directory_records(["/repo/mytestdatatool/main.go"], "/repo")
        assert records[0].severity is Severity.FULLY_AFFECTED

    def test_worse_case_wins(self):
        records = directory_records(
            ["/repo/a/a_test.go", "/repo/a/a.go", "/repo/a/b_test.go"], "/repo"
        )
        assert len(records) == 1
        assert records[0].severity is Severity.FULLY_AFFECTED

    def test_custom_suffixes(self):
        config = ClassifierConfig(test_file_suffixes=["_test.go", ".golden"])
        records = directory_records(["/repo/a/out.golden"], "/repo", config)
        assert records[0].severity is Severity.TEST_AFFECTED

    def test_first_seen_order(self):
        records = directory_records(["/repo/z/z.go", "/repo/a/a.go", "/repo/z/y.go"], "/repo")
        assert [r.relative for r in records] == ["z", "a"]


class TestDependencyDeltas:
    def test_all_kinds(self):
        deltas = dependency_deltas(CURRENT, PAST)
        assert deltas == [
            DependencyDelta("example.com/bumped", DeltaKind.VERSION_CHANGED),
            DependencyDelta("example.com/added", DeltaKind.NEW_REQUIRE),
            DependencyDelta("example.com/moved", DeltaKind.REPLACE_CHANGED),
            DependencyDelta("example.com/fresh", DeltaKind.NEW_REPLACE),
            DependencyDelta("example.com/dropped", DeltaKind.REPLACE_REMOVED),
        ]

    def test_reasons(self):
        reasons = [d.reason for d in dependency_deltas(CURRENT, PAST)]
        assert "new dependency example.com/added" in reasons
        assert "changed dependency example.com/bumped" in reasons
        assert "removed replace example.com/dropped" in reasons

    def test_identical(self):
        assert dependency_deltas(PAST, PAST) == []

    def test_removed_require_is_not_a_delta(self):
        assert dependency_deltas(parse_modfile("module m\n"), PAST) == [
            DependencyDelta("example.com/same", DeltaKind.REPLACE_REMOVED),
            DependencyDelta("example.com/moved", DeltaKind.REPLACE_REMOVED),
            DependencyDelta("example.com/dropped", DeltaKind.REPLACE_REMOVED),
        ]


class TestDetectFallback:
    def test_no_fallback(self):
        assert detect_fallback(CURRENT, PAST) is None

    def test_missing_history(self):
        fallback = detect_fallback(CURRENT, None)
        assert fallback is not None
        assert "new" in fallback.reason

    def test_go_version_changed(self):
        newer = parse_modfile("module example.com/m\ngo 1.22\n")
        fallback = detect_fallback(newer, PAST)
        assert fallback is not None
        assert "1.21" in fallback.reason and "1.22" in fallback.reason

    def test_toolchain_changed(self):
        past = parse_modfile("module m\ngo 1.21\n")
        current = parse_modfile("module m\ngo 1.21\ntoolchain go1.21.5\n")
        fallback = detect_fallback(current, past)
        assert fallback is not None
        assert "toolchain" in fallback.reason

    def test_workspace(self):
        fallback = detect_fallback(CURRENT, PAST, workspace="/repo/go.work")
        assert fallback is not None
        assert "workspace" in fallback.reason


class TestCollectChanges:
    def test_collect(self):
        diff = "M\0svc/a/a.go\0A\0svc/b/b_test.go\0"
        changes = collect_changes(diff, "/repo", "/repo/svc", CURRENT, PAST)
        assert changes.files == ["/repo/svc/a/a.go", "/repo/svc/b/b_test.go"]
        assert [(r.relative, r.severity) for r in changes.directories] == [
            ("a", Severity.FULLY_AFFECTED),
            ("b", Severity.TEST_AFFECTED),
        ]
        assert len(changes.deltas) == 5
