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
"""Engine configuration.

A single frozen EngineConfig is threaded through the subtyping engine and the
narrowing support. The defaults follow the rules most structural type systems
apply; each switch turns off one relaxation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class EngineConfig:
    """Switches controlling optional relaxations of the assignability rules.

    Attributes:
        widen_literals: A literal type is assignable to its base primitive
            ('square' to string, 3 to number, true to boolean).

        index_signature_satisfies_required: A required target field absent
            from the source is satisfied by a source index signature whose key
            domain covers the field name.

        allow_trailing_optional_tuple: A source tuple may be shorter than the
            target as long as the missing positions are optional in the target.
            When off, tuple lengths must match exactly.

        enforce_tag_narrowing: Presence-based narrowing is refused on unions
            that carry a usable tag field, so callers must narrow by tag.
            The refusal surfaces as a TAG_DISCRIMINANT_AVAILABLE warning.

    Example:
        >>> config = EngineConfig(widen_literals=False)
        >>> checker = AssignabilityChecker(config)
    """

    widen_literals: bool = True
    index_signature_satisfies_required: bool = True
    allow_trailing_optional_tuple: bool = True
    enforce_tag_narrowing: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "widen_literals": self.widen_literals,
            "index_signature_satisfies_required": self.index_signature_satisfies_required,
            "allow_trailing_optional_tuple": self.allow_trailing_optional_tuple,
            "enforce_tag_narrowing": self.enforce_tag_narrowing,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EngineConfig":
        """Create from dictionary. Missing keys take their defaults.

        Raises:
            TypeError: A present value is not a bool
        """
        defaults = cls()
        values = {}
        for name in defaults.to_dict():
            value = d.get(name, getattr(defaults, name))
            if not isinstance(value, bool):
                raise TypeError(f"{name} must be a bool, got {type(value).__name__}")
            values[name] = value
        return cls(**values)


# Default configuration singleton
DEFAULT_CONFIG = EngineConfig()
