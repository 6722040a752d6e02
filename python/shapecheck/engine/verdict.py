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
"""Assignability verdicts and reason paths.

A verdict is either compatible or incompatible. An incompatible verdict
records where the mismatch is (a path of segments from the root down to the
deepest failing node), what kind of mismatch it is, and the pair of nodes that
failed to line up there. It carries no message text: wording is the
diagnostics layer's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Sequence, Tuple

from ..types.nodes import TypeNode


class ReasonKind(Enum):
    """Why a source is not assignable to a target."""

    MISSING_FIELD = auto()
    FIELD_TYPE_MISMATCH = auto()
    READONLY_VIOLATION = auto()
    LENGTH_MISMATCH = auto()
    NO_UNION_MEMBER_MATCHES = auto()
    OPTIONALITY_MISMATCH = auto()
    INDEX_KEY_MISMATCH = auto()


class SegmentKind(Enum):
    """What one step of a reason path descends into."""

    FIELD = auto()            # named object field
    INDEX_SIGNATURE = auto()  # an object's index signature
    ELEMENT = auto()          # array element
    POSITION = auto()         # tuple position


@dataclass(frozen=True, slots=True)
class PathSegment:
    """One step of a reason path.

    Attributes:
        kind: What the step descends into
        label: Field name, key domain, or tuple position as text
    """

    kind: SegmentKind
    label: str = ""

    @staticmethod
    def field(name: str) -> PathSegment:
        return PathSegment(SegmentKind.FIELD, name)

    @staticmethod
    def index(domain: str) -> PathSegment:
        return PathSegment(SegmentKind.INDEX_SIGNATURE, domain)

    @staticmethod
    def element() -> PathSegment:
        return PathSegment(SegmentKind.ELEMENT)

    @staticmethod
    def position(i: int) -> PathSegment:
        return PathSegment(SegmentKind.POSITION, str(i))

    def __str__(self) -> str:
        if self.kind is SegmentKind.FIELD:
            return f".{self.label}"
        if self.kind is SegmentKind.INDEX_SIGNATURE:
            return f"[{self.label}]"
        if self.kind is SegmentKind.ELEMENT:
            return "[]"
        return f"[{self.label}]"


Path = Tuple[PathSegment, ...]
ROOT: Path = ()


def format_path(path: Sequence[PathSegment]) -> str:
    """Render a path as `.shape.width`, `.items[][0]`, or `<root>`."""
    if not path:
        return "<root>"
    return "".join(str(s) for s in path)


@dataclass(frozen=True)
class AssignabilityVerdict:
    """Result of an assignability check.

    Attributes:
        compatible: True if the source is assignable to the target
        path: Segments from the root to the deepest failure (empty if compatible)
        kind: Why the check failed (None if compatible)
        source: The source-side node at the failure point
        target: The target-side node at the failure point
        causes: For NO_UNION_MEMBER_MATCHES, one verdict per target member
            in declaration order
    """

    compatible: bool
    path: Path = ROOT
    kind: Optional[ReasonKind] = None
    source: Optional[TypeNode] = None
    target: Optional[TypeNode] = None
    causes: Tuple["AssignabilityVerdict", ...] = ()

    @staticmethod
    def ok() -> AssignabilityVerdict:
        """Create a compatible verdict."""
        return COMPATIBLE

    @staticmethod
    def fail(
        path: Path,
        kind: ReasonKind,
        source: Optional[TypeNode] = None,
        target: Optional[TypeNode] = None,
        causes: Tuple["AssignabilityVerdict", ...] = (),
    ) -> AssignabilityVerdict:
        """Create an incompatible verdict."""
        return AssignabilityVerdict(
            compatible=False,
            path=tuple(path),
            kind=kind,
            source=source,
            target=target,
            causes=tuple(causes),
        )

    @property
    def incompatible(self) -> bool:
        return not self.compatible

    def __bool__(self) -> bool:
        return self.compatible

    def __repr__(self) -> str:
        if self.compatible:
            return "Compatible"
        return f"Incompatible({format_path(self.path)}, {self.kind.name})"


COMPATIBLE = AssignabilityVerdict(compatible=True)
