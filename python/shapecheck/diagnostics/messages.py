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
"""Diagnostic records and the wording for each kind of finding.

Verdicts, narrowing results and sync reports carry structure only. This
module turns them into Diagnostic records with human-readable messages,
rendering types through format_type.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple

from ..engine.verdict import (
    AssignabilityVerdict,
    Path,
    PathSegment,
    ROOT,
    ReasonKind,
    SegmentKind,
    format_path,
)
from ..narrowing import NarrowingFailure, NarrowingResult
from ..synchronizer import SyncReport
from ..types.formatting import format_type
from ..types.keys import format_key_domain
from ..types.nodes import ArrayType, TupleType, TypeNode


class DiagnosticCode(Enum):
    MISSING_FIELD = auto()
    FIELD_TYPE_MISMATCH = auto()
    READONLY_VIOLATION = auto()
    LENGTH_MISMATCH = auto()
    NO_UNION_MEMBER_MATCHES = auto()
    OPTIONALITY_MISMATCH = auto()
    INDEX_KEY_MISMATCH = auto()
    AMBIGUOUS_NARROWING = auto()
    NO_MATCH = auto()
    MISSING_DISCRIMINANT = auto()
    TAG_DISCRIMINANT_AVAILABLE = auto()
    KEY_SET_DRIFT = auto()


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


_REASON_CODES = {
    ReasonKind.MISSING_FIELD: DiagnosticCode.MISSING_FIELD,
    ReasonKind.FIELD_TYPE_MISMATCH: DiagnosticCode.FIELD_TYPE_MISMATCH,
    ReasonKind.READONLY_VIOLATION: DiagnosticCode.READONLY_VIOLATION,
    ReasonKind.LENGTH_MISMATCH: DiagnosticCode.LENGTH_MISMATCH,
    ReasonKind.NO_UNION_MEMBER_MATCHES: DiagnosticCode.NO_UNION_MEMBER_MATCHES,
    ReasonKind.OPTIONALITY_MISMATCH: DiagnosticCode.OPTIONALITY_MISMATCH,
    ReasonKind.INDEX_KEY_MISMATCH: DiagnosticCode.INDEX_KEY_MISMATCH,
}

_NARROWING_CODES = {
    NarrowingFailure.AMBIGUOUS: DiagnosticCode.AMBIGUOUS_NARROWING,
    NarrowingFailure.NO_MATCH: DiagnosticCode.NO_MATCH,
    NarrowingFailure.MISSING_DISCRIMINANT: DiagnosticCode.MISSING_DISCRIMINANT,
    NarrowingFailure.TAG_DISCRIMINANT_AVAILABLE: DiagnosticCode.TAG_DISCRIMINANT_AVAILABLE,
}


def severity_of(code: DiagnosticCode) -> Severity:
    if code is DiagnosticCode.TAG_DISCRIMINANT_AVAILABLE:
        return Severity.WARNING
    return Severity.ERROR


@dataclass(frozen=True)
class Diagnostic:
    """One finding, ready to show to a user.

    Attributes:
        code: What kind of finding this is
        severity: ERROR or WARNING
        message: Human-readable description
        path: Segments from the root of the checked shape to the finding
        subject: Optional name of what was checked (a declaration, a variable)
        notes: Supporting lines, e.g. why each union member was rejected
    """

    code: DiagnosticCode
    severity: Severity
    message: str
    path: Path = ROOT
    subject: Optional[str] = None
    notes: Tuple[str, ...] = ()

    @property
    def location(self) -> str:
        where = format_path(self.path)
        if self.subject is None:
            return where
        if not self.path:
            return self.subject
        return f"{self.subject}{where}"

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def __str__(self) -> str:
        return f"{self.severity.value}[{self.code.name}] {self.location}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.name,
            "severity": self.severity.value,
            "message": self.message,
            "path": format_path(self.path),
            "subject": self.subject,
            "notes": list(self.notes),
        }


def _make(
    code: DiagnosticCode,
    message: str,
    path: Path = ROOT,
    subject: Optional[str] = None,
    notes: Tuple[str, ...] = (),
) -> Diagnostic:
    return Diagnostic(code, severity_of(code), message, tuple(path), subject, notes)


# =============================================================================
# Verdicts
# =============================================================================


def _fmt(node: Optional[TypeNode]) -> str:
    return "?" if node is None else format_type(node)


def _last_label(path: Path, kind: SegmentKind) -> Optional[str]:
    if path and path[-1].kind is kind:
        return path[-1].label
    return None


def describe_verdict(verdict: AssignabilityVerdict) -> str:
    """One-sentence explanation of an incompatible verdict."""
    kind = verdict.kind
    source, target = _fmt(verdict.source), _fmt(verdict.target)
    where = format_path(verdict.path)

    if kind is ReasonKind.MISSING_FIELD:
        name = _last_label(verdict.path, SegmentKind.FIELD) or where
        return f"Field '{name}' of type '{target}' is required but missing in '{source}'"

    if kind is ReasonKind.FIELD_TYPE_MISMATCH:
        return f"Type '{source}' is not assignable to type '{target}'"

    if kind is ReasonKind.READONLY_VIOLATION:
        return (
            f"'{where}' is readonly in the source and cannot be assigned to a "
            f"mutable '{target}'"
        )

    if kind is ReasonKind.LENGTH_MISMATCH:
        if isinstance(verdict.source, ArrayType):
            return f"Array '{source}' has no fixed length and cannot fill tuple '{target}'"
        if isinstance(verdict.source, TupleType) and isinstance(verdict.target, TupleType):
            low, high = verdict.target.required_length, len(verdict.target)
            allowed = str(high) if low == high else f"{low} to {high}"
            return (
                f"Tuple '{source}' has {len(verdict.source)} element(s) but "
                f"'{target}' takes {allowed}"
            )
        return f"Length of '{source}' does not match '{target}'"

    if kind is ReasonKind.NO_UNION_MEMBER_MATCHES:
        return f"Type '{source}' is not assignable to any member of '{target}'"

    if kind is ReasonKind.OPTIONALITY_MISMATCH:
        return f"'{where}' is optional in the source but required in the target"

    if kind is ReasonKind.INDEX_KEY_MISMATCH:
        source_keys = format_key_domain(verdict.source) if verdict.source is not None else "?"
        target_keys = format_key_domain(verdict.target) if verdict.target is not None else "?"
        return f"Index signature keys [{source_keys}] do not cover [{target_keys}]"

    raise ValueError(f"Unknown reason kind: {kind}")


def _union_notes(verdict: AssignabilityVerdict) -> Tuple[str, ...]:
    # One line per target member, in declaration order
    target = verdict.target
    members = getattr(target, "members", ())
    notes = []
    for i, cause in enumerate(verdict.causes):
        member = _fmt(members[i]) if i < len(members) else _fmt(cause.target)
        notes.append(
            f"member '{member}': {describe_verdict(cause)} at {format_path(cause.path)}"
        )
    return tuple(notes)


def diagnostics_for_verdict(
    verdict: AssignabilityVerdict, subject: Optional[str] = None
) -> List[Diagnostic]:
    """A compatible verdict yields nothing; an incompatible one, one diagnostic."""
    if verdict.compatible:
        return []
    notes = _union_notes(verdict) if verdict.kind is ReasonKind.NO_UNION_MEMBER_MATCHES else ()
    return [
        _make(
            _REASON_CODES[verdict.kind],
            describe_verdict(verdict),
            verdict.path,
            subject,
            notes,
        )
    ]


# =============================================================================
# Sync reports
# =============================================================================


def diagnostics_for_sync(report: SyncReport, subject: Optional[str] = None) -> List[Diagnostic]:
    """One KEY_SET_DRIFT per drifting key: missing keys first, each group sorted."""
    companion = f"companion of '{subject}'" if subject else "companion"
    out = []
    for key in sorted(report.missing_in_companion):
        out.append(
            _make(
                DiagnosticCode.KEY_SET_DRIFT,
                f"Key '{key}' is missing from the {companion}",
                (PathSegment.field(key),),
                subject,
            )
        )
    for key in sorted(report.extra_in_companion):
        out.append(
            _make(
                DiagnosticCode.KEY_SET_DRIFT,
                f"Key '{key}' in the {companion} has no counterpart in the source",
                (PathSegment.field(key),),
                subject,
            )
        )
    return out


# =============================================================================
# Narrowing
# =============================================================================


def describe_narrowing(result: NarrowingResult) -> str:
    """One-sentence explanation of a failed narrowing request."""
    union = _fmt(result.union)
    test = result.context.describe() if result.context is not None else "?"
    indices = ", ".join(str(i) for i in result.candidates)

    if result.failure is NarrowingFailure.AMBIGUOUS:
        return f"Narrowing '{union}' on {test} is ambiguous between members {indices}"
    if result.failure is NarrowingFailure.NO_MATCH:
        return f"No member of '{union}' satisfies {test}"
    if result.failure is NarrowingFailure.MISSING_DISCRIMINANT:
        field = result.context.discriminant_field if result.context is not None else "?"
        return f"Members {indices} of '{union}' carry no literal tag '{field}'"
    if result.failure is NarrowingFailure.TAG_DISCRIMINANT_AVAILABLE:
        return f"'{union}' has a literal tag field; narrow by tag instead of {test}"
    raise ValueError(f"Unknown narrowing failure: {result.failure}")


def diagnostics_for_narrowing(
    result: NarrowingResult, subject: Optional[str] = None
) -> List[Diagnostic]:
    """A successful narrowing yields nothing; a failed one, one diagnostic."""
    if result.success:
        return []
    return [_make(_NARROWING_CODES[result.failure], describe_narrowing(result), ROOT, subject)]
