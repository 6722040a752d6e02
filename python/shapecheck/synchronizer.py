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
"""Key-set synchronization between a structure and its companion mapping.

A companion is a MappedType whose key set must mirror a source object's
(for example a per-field "is this column visible" flag table). When a field
is added to or removed from the source, the companion drifts; check()
reports the drift instead of ignoring or repairing it, and derive() builds a
companion that is in sync by construction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .types.environment import TypeEnvironment, resolve
from .types.nodes import LiteralType, MappedType, ObjectType, TypeNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncReport:
    """Key-set drift between a source structure and its companion.

    Attributes:
        missing_in_companion: Source keys the companion does not cover
        extra_in_companion: Companion keys the source no longer has
    """

    missing_in_companion: FrozenSet[str] = frozenset()
    extra_in_companion: FrozenSet[str] = frozenset()

    @property
    def is_synchronized(self) -> bool:
        return not self.missing_in_companion and not self.extra_in_companion

    def __bool__(self) -> bool:
        return self.is_synchronized


def _source_keys(source: TypeNode, environment: Optional[TypeEnvironment]) -> FrozenSet[str]:
    node = resolve(source, environment)
    if isinstance(node, MappedType):
        return node.source_keys
    if isinstance(node, ObjectType):
        return node.keys()
    raise TypeError(f"Companion source must be an object type, got {type(node).__name__}")


def check(
    source: TypeNode,
    companion: MappedType,
    environment: Optional[TypeEnvironment] = None,
) -> SyncReport:
    """Compare a source's key set with its companion's.

    Only named fields count; an index signature on the source has no keys
    for a companion to mirror.
    """
    keys = _source_keys(source, environment)
    report = SyncReport(
        missing_in_companion=keys - companion.source_keys,
        extra_in_companion=companion.source_keys - keys,
    )
    if not report.is_synchronized:
        logger.warning(
            "Companion out of sync with %s: missing %s, extra %s",
            source,
            sorted(report.missing_in_companion),
            sorted(report.extra_in_companion),
        )
    return report


def derive(
    source: TypeNode,
    default_flag: bool,
    environment: Optional[TypeEnvironment] = None,
) -> MappedType:
    """Build a companion with one mutable, required entry per source key.

    Every entry's value is the literal default_flag.
    """
    keys = _source_keys(source, environment)
    flag = LiteralType(bool(default_flag))
    return MappedType(keys, {k: flag for k in keys})


def companion_flags(companion: MappedType) -> Dict[str, bool]:
    """Read back the boolean flag of each key of a derived companion.

    Raises:
        ValueError: A key's value is not a boolean literal
    """
    flags = {}
    for key in companion.sorted_keys():
        node = companion.value_for[key]
        if not (isinstance(node, LiteralType) and node.kind == "boolean"):
            raise ValueError(f"Companion entry '{key}' is {node}, not a boolean literal")
        flags[key] = node.value
    return flags


def check_all(
    pairs: Iterable[Tuple[str, TypeNode, MappedType]],
    environment: Optional[TypeEnvironment] = None,
) -> List[Tuple[str, SyncReport]]:
    """Check several (name, source, companion) declarations, in input order."""
    return [(name, check(source, companion, environment)) for name, source, companion in pairs]
