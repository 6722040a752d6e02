# Copyright Rand Arete @ Ananke 2025
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Tests for diagnostic wording and the DiagnosticCollector."""

from __future__ import annotations

import threading

import pytest

from shapecheck.config import EngineConfig
from shapecheck.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticCollector,
    Severity,
    describe_verdict,
    diagnostics_for_narrowing,
    diagnostics_for_sync,
    diagnostics_for_verdict,
    severity_of,
)
from shapecheck.engine import COMPATIBLE, is_assignable
from shapecheck.narrowing import NarrowingContext, narrow
from shapecheck.synchronizer import SyncReport, check, derive
from shapecheck.types import (
    NUMBER,
    STRING,
    ArrayType,
    FieldType,
    IndexSignature,
    LiteralType,
    ObjectType,
    TupleElement,
    TupleType,
    UnionType,
)


# =============================================================================
# Wording
# =============================================================================


class TestVerdictDiagnostics:
    """One diagnostic per incompatible verdict."""

    def test_compatible_yields_nothing(self) -> None:
        assert diagnostics_for_verdict(COMPATIBLE) == []

    def test_readonly_violation(self) -> None:
        verdict = is_assignable(
            ObjectType.of(x=FieldType(NUMBER, readonly=True)), ObjectType.of(x=NUMBER)
        )
        [d] = diagnostics_for_verdict(verdict, subject="point")
        assert d.code is DiagnosticCode.READONLY_VIOLATION
        assert d.severity is Severity.ERROR
        assert d.location == "point.x"
        assert "readonly" in d.message

    def test_missing_field_names_the_field(self) -> None:
        verdict = is_assignable(ObjectType.of(a=NUMBER), ObjectType.of(a=NUMBER, b=STRING))
        message = describe_verdict(verdict)
        assert "'b'" in message
        assert "string" in message

    def test_field_type_mismatch_renders_types(self) -> None:
        verdict = is_assignable(ObjectType.of(w=STRING), ObjectType.of(w=NUMBER))
        assert describe_verdict(verdict) == "Type 'string' is not assignable to type 'number'"

    def test_tuple_length(self) -> None:
        target = TupleType(
            (TupleElement(NUMBER), TupleElement(STRING), TupleElement(STRING, optional=True))
        )
        verdict = is_assignable(TupleType.of(NUMBER), target)
        assert "1 element(s)" in describe_verdict(verdict)
        assert "2 to 3" in describe_verdict(verdict)

    def test_array_to_tuple_length(self) -> None:
        verdict = is_assignable(ArrayType(NUMBER), TupleType.of(NUMBER))
        assert "no fixed length" in describe_verdict(verdict)

    def test_index_key_mismatch(self) -> None:
        verdict = is_assignable(
            ObjectType((), IndexSignature(NUMBER, NUMBER)),
            ObjectType((), IndexSignature(STRING, NUMBER)),
        )
        [d] = diagnostics_for_verdict(verdict)
        assert d.code is DiagnosticCode.INDEX_KEY_MISMATCH
        assert d.message == "Index signature keys [number] do not cover [string]"
        assert d.location == "[string]"

    def test_union_failure_carries_member_notes(self, shape) -> None:
        circle = ObjectType.of(kind=LiteralType("circle"), radius=NUMBER)
        [d] = diagnostics_for_verdict(is_assignable(circle, shape))
        assert d.code is DiagnosticCode.NO_UNION_MEMBER_MATCHES
        assert len(d.notes) == 2
        assert d.notes[0].startswith("member '{ kind: 'square'")
        assert d.notes[0].endswith("at .kind")

    def test_every_reason_kind_has_a_code(self) -> None:
        from shapecheck.engine import ReasonKind

        names = {c.name for c in DiagnosticCode}
        assert all(kind.name in names for kind in ReasonKind)


class TestSyncDiagnostics:
    def test_one_per_key_sorted_missing_first(self) -> None:
        report = SyncReport(frozenset({"b", "a"}), frozenset({"z", "y"}))
        diagnostics = diagnostics_for_sync(report, subject="User")
        assert [d.code for d in diagnostics] == [DiagnosticCode.KEY_SET_DRIFT] * 4
        assert [d.location for d in diagnostics] == ["User.a", "User.b", "User.y", "User.z"]
        assert "missing" in diagnostics[0].message
        assert "no counterpart" in diagnostics[2].message

    def test_synchronized_yields_nothing(self) -> None:
        assert diagnostics_for_sync(SyncReport()) == []


class TestNarrowingDiagnostics:
    def test_success_yields_nothing(self, shape) -> None:
        result = narrow(shape, NarrowingContext.by_tag("kind", "square"))
        assert diagnostics_for_narrowing(result) == []

    def test_no_match(self, shape) -> None:
        result = narrow(shape, NarrowingContext.by_tag("kind", "circle"))
        [d] = diagnostics_for_narrowing(result, subject="s")
        assert d.code is DiagnosticCode.NO_MATCH
        assert "kind === 'circle'" in d.message
        assert d.location == "s"

    def test_ambiguous(self, shape) -> None:
        config = EngineConfig(enforce_tag_narrowing=False)
        result = narrow(shape, NarrowingContext.by_presence("kind"), config=config)
        [d] = diagnostics_for_narrowing(result)
        assert d.code is DiagnosticCode.AMBIGUOUS_NARROWING
        assert "members 0, 1" in d.message

    def test_tag_available_is_a_warning(self, shape) -> None:
        result = narrow(shape, NarrowingContext.by_presence("width"))
        [d] = diagnostics_for_narrowing(result)
        assert d.code is DiagnosticCode.TAG_DISCRIMINANT_AVAILABLE
        assert d.severity is Severity.WARNING

    def test_missing_discriminant(self, square) -> None:
        union = UnionType.of(square, ObjectType.of(radius=NUMBER))
        [d] = diagnostics_for_narrowing(narrow(union, NarrowingContext.by_tag("kind", "square")))
        assert d.code is DiagnosticCode.MISSING_DISCRIMINANT
        assert "Members 1" in d.message


class TestSeverity:
    @pytest.mark.parametrize("code", list(DiagnosticCode))
    def test_only_tag_hint_is_a_warning(self, code) -> None:
        expected = Severity.ERROR
        if code is DiagnosticCode.TAG_DISCRIMINANT_AVAILABLE:
            expected = Severity.WARNING
        assert severity_of(code) is expected


# =============================================================================
# Collector
# =============================================================================


class TestDiagnosticCollector:
    """Tests for DiagnosticCollector."""

    def test_collects_in_report_order(self, shape) -> None:
        collector = DiagnosticCollector()
        collector.report_verdict(is_assignable(STRING, NUMBER), subject="first")
        collector.report_narrowing(narrow(shape, NarrowingContext.by_tag("kind", "x")), subject="second")
        collector.report_sync(SyncReport(frozenset({"k"})), subject="third")
        subjects = [d.subject for d in collector.diagnostics()]
        assert subjects == ["first", "second", "third"]
        assert len(collector) == 3

    def test_compatible_reports_nothing(self) -> None:
        collector = DiagnosticCollector()
        assert collector.report_verdict(COMPATIBLE) == []
        assert not collector.has_errors()
        assert collector.error_count() == 0

    def test_error_counting_ignores_warnings(self, shape) -> None:
        collector = DiagnosticCollector()
        collector.report_narrowing(narrow(shape, NarrowingContext.by_presence("width")))
        assert not collector.has_errors()
        collector.report_verdict(is_assignable(STRING, NUMBER))
        assert collector.has_errors()
        assert collector.error_count() == 1

    def test_summary(self) -> None:
        collector = DiagnosticCollector()
        collector.report_sync(SyncReport(frozenset({"a", "b"}), frozenset({"c"})))
        summary = collector.summary()
        assert summary["total"] == 3
        assert summary["errors"] == 3
        assert summary["warnings"] == 0
        assert summary["by_code"] == {"KEY_SET_DRIFT": 3}

    def test_format_includes_notes(self, shape) -> None:
        collector = DiagnosticCollector()
        circle = ObjectType.of(kind=LiteralType("circle"))
        collector.report_verdict(is_assignable(circle, shape), subject="value")
        lines = collector.format().splitlines()
        assert lines[0].startswith("error[NO_UNION_MEMBER_MATCHES] value.kind:")
        assert len(lines) == 3
        assert all(line.startswith("  note: ") for line in lines[1:])

    def test_to_dicts(self) -> None:
        collector = DiagnosticCollector()
        collector.report_verdict(is_assignable(STRING, NUMBER))
        [d] = collector.to_dicts()
        assert d["code"] == "FIELD_TYPE_MISMATCH"
        assert d["severity"] == "error"
        assert d["path"] == "<root>"

    def test_clear(self) -> None:
        collector = DiagnosticCollector()
        collector.report_verdict(is_assignable(STRING, NUMBER))
        collector.clear()
        assert collector.diagnostics() == []

    def test_limit(self) -> None:
        collector = DiagnosticCollector(max_diagnostics=2)
        collector.report_sync(SyncReport(frozenset({"a", "b", "c"})))
        assert len(collector) == 2
        assert collector.summary()["dropped"] == 1

    def test_sync_round_trip_reports_nothing(self) -> None:
        user = ObjectType.of(id=NUMBER)
        collector = DiagnosticCollector()
        collector.report_sync(check(user, derive(user, True)))
        assert len(collector) == 0

    def test_concurrent_reporting(self) -> None:
        collector = DiagnosticCollector()
        verdict = is_assignable(STRING, NUMBER)

        def report() -> None:
            for _ in range(50):
                collector.report_verdict(verdict)

        threads = [threading.Thread(target=report) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert collector.error_count() == 400

    def test_diagnostic_str(self) -> None:
        d = Diagnostic(DiagnosticCode.NO_MATCH, Severity.ERROR, "nothing matched")
        assert str(d) == "error[NO_MATCH] <root>: nothing matched"
