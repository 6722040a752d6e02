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
"""Central diagnostic collection."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..engine.verdict import AssignabilityVerdict
from ..narrowing import NarrowingResult
from ..synchronizer import SyncReport
from .messages import (
    Diagnostic,
    Severity,
    diagnostics_for_narrowing,
    diagnostics_for_sync,
    diagnostics_for_verdict,
)

logger = logging.getLogger(__name__)


@dataclass
class DiagnosticCollector:
    """Ordered, thread-safe accumulator of diagnostics.

    Several checkers may report into one collector; diagnostics keep the order
    in which they were reported.

    Attributes:
        max_diagnostics: Stop recording after this many (0 for no limit)
    """

    max_diagnostics: int = 0

    _diagnostics: List[Diagnostic] = field(default_factory=list)
    _dropped: int = 0

    # Thread safety
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def _record(self, new: List[Diagnostic]) -> List[Diagnostic]:
        """Append diagnostics (called without the lock held)."""
        if not new:
            return new
        with self._lock:
            if self.max_diagnostics:
                room = max(self.max_diagnostics - len(self._diagnostics), 0)
                if room < len(new):
                    self._dropped += len(new) - room
                    logger.warning(
                        "Diagnostic limit %d reached, dropping %d", self.max_diagnostics,
                        len(new) - room,
                    )
                    new = new[:room]
            self._diagnostics.extend(new)
        for d in new:
            logger.debug("Recorded %s", d)
        return new

    def report_verdict(
        self, verdict: AssignabilityVerdict, subject: Optional[str] = None
    ) -> List[Diagnostic]:
        """Record the diagnostic for an assignability verdict, if any.

        Args:
            verdict: Result of is_assignable
            subject: Optional name of what was checked

        Returns:
            The diagnostics recorded (empty for a compatible verdict)
        """
        return self._record(diagnostics_for_verdict(verdict, subject))

    def report_sync(self, report: SyncReport, subject: Optional[str] = None) -> List[Diagnostic]:
        """Record one KEY_SET_DRIFT diagnostic per drifting key."""
        return self._record(diagnostics_for_sync(report, subject))

    def report_narrowing(
        self, result: NarrowingResult, subject: Optional[str] = None
    ) -> List[Diagnostic]:
        """Record the diagnostic for a failed narrowing request, if any."""
        return self._record(diagnostics_for_narrowing(result, subject))

    def diagnostics(self) -> List[Diagnostic]:
        """Snapshot of every diagnostic, in report order."""
        with self._lock:
            return list(self._diagnostics)

    def has_errors(self) -> bool:
        with self._lock:
            return any(d.severity is Severity.ERROR for d in self._diagnostics)

    def error_count(self) -> int:
        with self._lock:
            return sum(1 for d in self._diagnostics if d.severity is Severity.ERROR)

    def clear(self) -> None:
        """Forget every recorded diagnostic."""
        with self._lock:
            self._diagnostics.clear()
            self._dropped = 0

    def format(self) -> str:
        """Render every diagnostic, one per line, notes indented below it."""
        lines = []
        for d in self.diagnostics():
            lines.append(str(d))
            lines.extend(f"  note: {note}" for note in d.notes)
        return "\n".join(lines)

    def summary(self) -> Dict[str, Any]:
        """Get counts by severity and by code.

        Returns:
            Dictionary with total, errors, warnings, dropped and by_code
        """
        with self._lock:
            by_code = Counter(d.code.name for d in self._diagnostics)
            errors = sum(1 for d in self._diagnostics if d.severity is Severity.ERROR)
            return {
                "total": len(self._diagnostics),
                "errors": errors,
                "warnings": len(self._diagnostics) - errors,
                "dropped": self._dropped,
                "by_code": dict(sorted(by_code.items())),
            }

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [d.to_dict() for d in self.diagnostics()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._diagnostics)
