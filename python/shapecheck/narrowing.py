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
"""Union narrowing.

Given a union and a narrowing context, pick the one member the context
selects. Two strategies are supported:

- Tag-based: every member carries a literal-valued field at the same name
  (kind: 'square' | 'rectangle'); the member whose literal equals the
  requested value is selected.
- Presence-based: the member that requires a given field is selected.
  Members whose required fields overlap make the request AMBIGUOUS rather
  than resolving to whichever comes first.

Narrowing is a decision over declarations only. Nothing here inspects values.

Members are indexed in declaration order after nested unions are flattened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import FrozenSet, List, Optional, Set, Tuple

from .config import DEFAULT_CONFIG, EngineConfig
from .errors import InvalidLiteralError, InvalidNarrowingContextError
from .types.environment import TypeEnvironment, resolve
from .types.nodes import (
    LiteralType,
    LiteralValue,
    MappedType,
    ObjectType,
    TypeNode,
    UnionType,
)
from .types.transform import materialize, union_of

logger = logging.getLogger(__name__)


class NarrowingStrategy(Enum):
    """Which discriminant a context narrows on."""

    TAG = auto()
    PRESENCE = auto()


class NarrowingFailure(Enum):
    """Why a narrowing request selected no member."""

    AMBIGUOUS = auto()
    NO_MATCH = auto()
    MISSING_DISCRIMINANT = auto()
    TAG_DISCRIMINANT_AVAILABLE = auto()


@dataclass(frozen=True, slots=True)
class NarrowingContext:
    """What is known at a branch point.

    Exactly one strategy must be active: either discriminant_field together
    with discriminant_value, or presence_field alone.

    Attributes:
        discriminant_field: Name of the tag field (tag-based)
        discriminant_value: Literal the tag was compared against (tag-based)
        presence_field: Name of the field tested for presence (presence-based)
    """

    discriminant_field: Optional[str] = None
    discriminant_value: Optional[LiteralValue] = None
    presence_field: Optional[str] = None

    def __post_init__(self) -> None:
        tag = self.discriminant_field is not None
        if tag and self.discriminant_value is None:
            raise InvalidNarrowingContextError("discriminant_field requires a discriminant_value")
        if not tag and self.discriminant_value is not None:
            raise InvalidNarrowingContextError("discriminant_value given without discriminant_field")
        if tag and self.presence_field is not None:
            raise InvalidNarrowingContextError(
                "tag-based and presence-based narrowing cannot be combined"
            )
        if not tag and self.presence_field is None:
            raise InvalidNarrowingContextError("no narrowing strategy given")
        if tag:
            try:
                LiteralType(self.discriminant_value)
            except InvalidLiteralError as e:
                raise InvalidNarrowingContextError(str(e)) from e

    @classmethod
    def by_tag(cls, field: str, value: LiteralValue) -> NarrowingContext:
        return cls(discriminant_field=field, discriminant_value=value)

    @classmethod
    def by_presence(cls, field: str) -> NarrowingContext:
        return cls(presence_field=field)

    @property
    def strategy(self) -> NarrowingStrategy:
        if self.discriminant_field is not None:
            return NarrowingStrategy.TAG
        return NarrowingStrategy.PRESENCE

    def describe(self) -> str:
        """Render the test this context stands for, e.g. kind === 'square'."""
        if self.strategy is NarrowingStrategy.TAG:
            return f"{self.discriminant_field} === {LiteralType(self.discriminant_value)}"
        return f"'{self.presence_field}' in value"


@dataclass(frozen=True)
class NarrowingResult:
    """Outcome of a narrowing request.

    Attributes:
        member: The selected member (None on failure)
        index: Its position among the union's members (None on failure)
        failure: Why nothing was selected (None on success)
        candidates: Indices of the members the failure concerns: every
            match for AMBIGUOUS, the members lacking a tag for
            MISSING_DISCRIMINANT, empty otherwise
        context: The request
        union: The union that was narrowed
    """

    member: Optional[TypeNode] = None
    index: Optional[int] = None
    failure: Optional[NarrowingFailure] = None
    candidates: Tuple[int, ...] = ()
    context: Optional[NarrowingContext] = None
    union: Optional[TypeNode] = None

    @staticmethod
    def ok(
        member: TypeNode,
        index: int,
        context: Optional[NarrowingContext] = None,
        union: Optional[TypeNode] = None,
    ) -> NarrowingResult:
        return NarrowingResult(member=member, index=index, context=context, union=union)

    @staticmethod
    def fail(
        failure: NarrowingFailure,
        candidates: Tuple[int, ...] = (),
        context: Optional[NarrowingContext] = None,
        union: Optional[TypeNode] = None,
    ) -> NarrowingResult:
        return NarrowingResult(
            failure=failure, candidates=tuple(candidates), context=context, union=union
        )

    @property
    def success(self) -> bool:
        return self.failure is None

    def __bool__(self) -> bool:
        return self.success


# =============================================================================
# Member views
# =============================================================================


def _members(union: TypeNode, environment: Optional[TypeEnvironment]) -> Tuple[TypeNode, ...]:
    """The union's alternatives, nested unions flattened. A non-union is one member."""
    node = resolve(union, environment)
    if not isinstance(node, UnionType):
        return (node,)
    out: List[TypeNode] = []
    _flatten(node, environment, out, set())
    return tuple(out)


def _flatten(
    union: UnionType,
    environment: Optional[TypeEnvironment],
    out: List[TypeNode],
    seen: Set[UnionType],
) -> None:
    # A union that reaches itself through a reference adds nothing new
    if union in seen:
        return
    seen.add(union)
    for member in union.members:
        resolved = resolve(member, environment)
        if isinstance(resolved, UnionType):
            _flatten(resolved, environment, out, seen)
        elif member not in out:
            out.append(member)


def _object_view(
    member: TypeNode, environment: Optional[TypeEnvironment]
) -> Optional[ObjectType]:
    node = resolve(member, environment)
    if isinstance(node, MappedType):
        node = materialize(node)
    if isinstance(node, ObjectType):
        return node
    return None


def _tag_literals(
    view: Optional[ObjectType], name: str, environment: Optional[TypeEnvironment]
) -> Optional[FrozenSet[LiteralType]]:
    """The literal values a member's tag field may hold, or None if it has no tag."""
    if view is None:
        return None
    f = view.get_field(name)
    if f is None or f.optional:
        return None
    node = resolve(f.type, environment)
    if isinstance(node, LiteralType):
        return frozenset((node,))
    if isinstance(node, UnionType):
        literals = [resolve(m, environment) for m in node.members]
        if all(isinstance(m, LiteralType) for m in literals):
            return frozenset(literals)
    return None


def _requires(view: Optional[ObjectType], name: str) -> bool:
    if view is None:
        return False
    f = view.get_field(name)
    return f is not None and not f.optional


# =============================================================================
# Operations
# =============================================================================


def discriminant_fields(
    union: TypeNode, *, environment: Optional[TypeEnvironment] = None
) -> Tuple[str, ...]:
    """Field names every member carries as a required literal-valued field.

    Returned in the first member's declaration order.
    """
    members = _members(union, environment)
    views = [_object_view(m, environment) for m in members]
    if views[0] is None:
        return ()
    return tuple(
        name
        for name in views[0].field_names()
        if all(_tag_literals(v, name, environment) is not None for v in views)
    )


def narrow(
    union: TypeNode,
    context: NarrowingContext,
    *,
    environment: Optional[TypeEnvironment] = None,
    config: Optional[EngineConfig] = None,
) -> NarrowingResult:
    """Select the union member a narrowing context identifies.

    Args:
        union: The union being narrowed (a lone node is a one-member union)
        context: The branch condition
        environment: Declarations for resolving references
        config: Relaxation switches (DEFAULT_CONFIG if omitted)

    Returns:
        A NarrowingResult. Failures are values, never exceptions.
    """
    config = config or DEFAULT_CONFIG
    members = _members(union, environment)
    views = [_object_view(m, environment) for m in members]

    if context.strategy is NarrowingStrategy.TAG:
        result = _narrow_by_tag(members, views, context, union, environment)
    else:
        if config.enforce_tag_narrowing and len(members) > 1:
            tags = discriminant_fields(union, environment=environment)
            if tags:
                result = NarrowingResult.fail(
                    NarrowingFailure.TAG_DISCRIMINANT_AVAILABLE, (), context, union
                )
                logger.debug("Presence narrowing refused, tags available: %s", ", ".join(tags))
                return result
        result = _narrow_by_presence(members, views, context, union)

    if result.success:
        logger.debug("Narrowed %s on %s to member %d", union, context.describe(), result.index)
    else:
        logger.debug(
            "Narrowing %s on %s failed: %s", union, context.describe(), result.failure.name
        )
    return result


def _narrow_by_tag(
    members: Tuple[TypeNode, ...],
    views: List[Optional[ObjectType]],
    context: NarrowingContext,
    union: TypeNode,
    environment: Optional[TypeEnvironment],
) -> NarrowingResult:
    wanted = LiteralType(context.discriminant_value)
    tags = [_tag_literals(v, context.discriminant_field, environment) for v in views]

    untagged = tuple(i for i, t in enumerate(tags) if t is None)
    if untagged:
        return NarrowingResult.fail(
            NarrowingFailure.MISSING_DISCRIMINANT, untagged, context, union
        )

    matches = tuple(i for i, t in enumerate(tags) if wanted in t)
    if not matches:
        return NarrowingResult.fail(NarrowingFailure.NO_MATCH, (), context, union)
    if len(matches) > 1:
        return NarrowingResult.fail(NarrowingFailure.AMBIGUOUS, matches, context, union)
    return NarrowingResult.ok(members[matches[0]], matches[0], context, union)


def _narrow_by_presence(
    members: Tuple[TypeNode, ...],
    views: List[Optional[ObjectType]],
    context: NarrowingContext,
    union: TypeNode,
) -> NarrowingResult:
    matches = tuple(i for i, v in enumerate(views) if _requires(v, context.presence_field))
    if not matches:
        return NarrowingResult.fail(NarrowingFailure.NO_MATCH, (), context, union)
    if len(matches) > 1:
        return NarrowingResult.fail(NarrowingFailure.AMBIGUOUS, matches, context, union)
    return NarrowingResult.ok(members[matches[0]], matches[0], context, union)


def exclude(
    union: TypeNode,
    context: NarrowingContext,
    *,
    environment: Optional[TypeEnvironment] = None,
) -> Optional[TypeNode]:
    """The members left in the branch where the context's test is false.

    A member is dropped only when the test is certainly true for it: its tag
    can hold nothing but the requested value, or it requires the tested
    field. Returns a union, a single member, or None when nothing is left.
    """
    members = _members(union, environment)
    remaining = []
    for member in members:
        view = _object_view(member, environment)
        if context.strategy is NarrowingStrategy.TAG:
            tags = _tag_literals(view, context.discriminant_field, environment)
            dropped = tags == frozenset((LiteralType(context.discriminant_value),))
        else:
            dropped = _requires(view, context.presence_field)
        if not dropped:
            remaining.append(member)
    if not remaining:
        return None
    return union_of(*remaining)
