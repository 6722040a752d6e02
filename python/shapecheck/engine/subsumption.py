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
"""Structural assignability checking.

Decides whether a source shape can be used wherever a target shape is
expected (source <: target). The relation handles:

- any/unknown/never: any both ways, unknown as top, never as bottom
- Literal widening to the literal's base primitive
- Width subtyping for objects: extra source fields are never an error
- Index signatures on either side, including key-domain coverage
- Readonly variance: mutable flows into readonly, never the reverse.
  Readonly is shallow; each level is judged by its own declared flags.
- Arrays, tuples (with trailing optional positions), tuple-to-array
- Unions on either side, with deterministic first-failure reporting
- Mapped types, by materializing them first
- Recursive shapes through references, with a coinductive visited set

Every outcome is a value. The only exceptions are for malformed graphs
(unresolved references, alias cycles) and unknown node classes.

References:
    - Pierce (2002). "Types and Programming Languages", Chapter 15
    - Amadio & Cardelli (1993). "Subtyping Recursive Types"
"""

from __future__ import annotations

import logging
from typing import Optional, Set, Tuple

from ..config import DEFAULT_CONFIG, EngineConfig
from ..types.environment import TypeEnvironment, resolve
from ..types.keys import format_key_domain, key_domain_covers, key_in_domain
from ..types.nodes import (
    ANY,
    NEVER,
    UNKNOWN,
    ArrayType,
    LiteralType,
    MappedType,
    ObjectType,
    PrimitiveType,
    TupleType,
    TYPE_NODE_CLASSES,
    TypeNode,
    TypeReference,
    UnionType,
    unhandled_node,
)
from ..types.transform import materialize
from .verdict import (
    COMPATIBLE,
    ROOT,
    AssignabilityVerdict,
    Path,
    PathSegment,
    ReasonKind,
    format_path,
)

logger = logging.getLogger(__name__)

_Assumptions = Set[Tuple[TypeNode, TypeNode]]


class AssignabilityChecker:
    """Checks structural assignability under one configuration.

    The checker holds no per-call state, so one instance may serve any
    number of threads.

    Attributes:
        config: Relaxation switches
        environment: Declarations used to resolve TypeReference nodes
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        environment: Optional[TypeEnvironment] = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.environment = environment

    def check(self, source: TypeNode, target: TypeNode) -> AssignabilityVerdict:
        """Check whether `source` is assignable to `target`.

        Args:
            source: The type of the value being assigned
            target: The type of the slot receiving it

        Returns:
            COMPATIBLE, or an incompatible verdict with the deepest failing path

        Raises:
            UnresolvedReferenceError: A reference names no declaration
            CyclicAliasError: References loop without reaching a structure
        """
        verdict = self._check(source, target, ROOT, set())
        if not verdict.compatible:
            logger.debug(
                "%s is not assignable to %s: %s at %s",
                source, target, verdict.kind.name, format_path(verdict.path),
            )
        return verdict

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _check(
        self,
        source: TypeNode,
        target: TypeNode,
        path: Path,
        assumed: _Assumptions,
    ) -> AssignabilityVerdict:
        if not isinstance(source, TYPE_NODE_CLASSES):
            raise unhandled_node(source)
        if not isinstance(target, TYPE_NODE_CLASSES):
            raise unhandled_node(target)

        # Reflexivity
        if source is target:
            return COMPATIBLE

        # References: assume the pair holds while checking it (coinduction)
        if isinstance(source, TypeReference) or isinstance(target, TypeReference):
            key = (source, target)
            if key in assumed:
                return COMPATIBLE
            snapshot = set(assumed)
            assumed.add(key)
            verdict = self._check(
                resolve(source, self.environment),
                resolve(target, self.environment),
                path,
                assumed,
            )
            if not verdict.compatible:
                # Pairs proved under a refuted assumption go with it
                assumed.intersection_update(snapshot)
            return verdict

        if isinstance(source, MappedType):
            source = materialize(source)
        if isinstance(target, MappedType):
            target = materialize(target)

        if source == target:
            return COMPATIBLE

        # Top and bottom
        if target == ANY or target == UNKNOWN or source == ANY or source == NEVER:
            return COMPATIBLE
        if target == NEVER or source == UNKNOWN:
            return AssignabilityVerdict.fail(path, ReasonKind.FIELD_TYPE_MISMATCH, source, target)

        # (A | B) <: T if A <: T and B <: T
        if isinstance(source, UnionType):
            for member in source.members:
                verdict = self._check(member, target, path, assumed)
                if not verdict.compatible:
                    return verdict
            return COMPATIBLE

        # S <: (A | B) if S <: A or S <: B
        if isinstance(target, UnionType):
            return self._check_union_target(source, target, path, assumed)

        if isinstance(source, LiteralType):
            return self._check_literal(source, target, path)

        if isinstance(source, PrimitiveType) or isinstance(target, (PrimitiveType, LiteralType)):
            # Equal primitives were handled above
            return AssignabilityVerdict.fail(path, ReasonKind.FIELD_TYPE_MISMATCH, source, target)

        if isinstance(target, ArrayType):
            if isinstance(source, ArrayType):
                return self._check_array(source, target, path, assumed)
            if isinstance(source, TupleType):
                return self._check_tuple_to_array(source, target, path, assumed)
            return AssignabilityVerdict.fail(path, ReasonKind.FIELD_TYPE_MISMATCH, source, target)

        if isinstance(target, TupleType):
            if isinstance(source, TupleType):
                return self._check_tuple(source, target, path, assumed)
            if isinstance(source, ArrayType):
                # An array's length is not pinned, so it never fills a tuple
                return AssignabilityVerdict.fail(path, ReasonKind.LENGTH_MISMATCH, source, target)
            return AssignabilityVerdict.fail(path, ReasonKind.FIELD_TYPE_MISMATCH, source, target)

        if isinstance(target, ObjectType):
            if isinstance(source, ObjectType):
                return self._check_object(source, target, path, assumed)
            return AssignabilityVerdict.fail(path, ReasonKind.FIELD_TYPE_MISMATCH, source, target)

        raise unhandled_node(target)

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def _check_mutability(
        self,
        source_readonly: bool,
        target_readonly: bool,
        path: Path,
        source: TypeNode,
        target: TypeNode,
    ) -> AssignabilityVerdict:
        """Readonly variance: only readonly-into-mutable is refused."""
        if source_readonly and not target_readonly:
            return AssignabilityVerdict.fail(path, ReasonKind.READONLY_VIOLATION, source, target)
        return COMPATIBLE

    def _check_union_target(
        self,
        source: TypeNode,
        target: UnionType,
        path: Path,
        assumed: _Assumptions,
    ) -> AssignabilityVerdict:
        causes = []
        snapshot = set(assumed)
        for member in target.members:
            verdict = self._check(source, member, path, assumed)
            if verdict.compatible:
                return COMPATIBLE
            # Each member starts from the assumptions the union started with
            assumed.intersection_update(snapshot)
            causes.append(verdict)
        first = causes[0]
        return AssignabilityVerdict.fail(
            first.path,
            ReasonKind.NO_UNION_MEMBER_MATCHES,
            source,
            target,
            causes=tuple(causes),
        )

    def _check_literal(
        self, source: LiteralType, target: TypeNode, path: Path
    ) -> AssignabilityVerdict:
        # Equal literals were handled by the reflexivity check
        if self.config.widen_literals and target == source.base:
            return COMPATIBLE
        return AssignabilityVerdict.fail(path, ReasonKind.FIELD_TYPE_MISMATCH, source, target)

    def _check_array(
        self,
        source: ArrayType,
        target: ArrayType,
        path: Path,
        assumed: _Assumptions,
    ) -> AssignabilityVerdict:
        verdict = self._check(
            source.element, target.element, path + (PathSegment.element(),), assumed
        )
        if not verdict.compatible:
            return verdict
        return self._check_mutability(source.readonly, target.readonly, path, source, target)

    def _check_tuple_to_array(
        self,
        source: TupleType,
        target: ArrayType,
        path: Path,
        assumed: _Assumptions,
    ) -> AssignabilityVerdict:
        for i, element in enumerate(source.elements):
            position = path + (PathSegment.position(i),)
            verdict = self._check(element.type, target.element, position, assumed)
            if not verdict.compatible:
                return verdict
            verdict = self._check_mutability(
                element.readonly, target.readonly, position, element.type, target.element
            )
            if not verdict.compatible:
                return verdict
        return COMPATIBLE

    def _check_tuple(
        self,
        source: TupleType,
        target: TupleType,
        path: Path,
        assumed: _Assumptions,
    ) -> AssignabilityVerdict:
        max_length = len(target.elements)
        if self.config.allow_trailing_optional_tuple:
            min_length = target.required_length
        else:
            min_length = max_length
        if not min_length <= len(source.elements) <= max_length:
            return AssignabilityVerdict.fail(path, ReasonKind.LENGTH_MISMATCH, source, target)

        for i, (s, t) in enumerate(zip(source.elements, target.elements)):
            position = path + (PathSegment.position(i),)
            verdict = self._check(s.type, t.type, position, assumed)
            if not verdict.compatible:
                return verdict
            if s.optional and not t.optional:
                return AssignabilityVerdict.fail(
                    position, ReasonKind.OPTIONALITY_MISMATCH, s.type, t.type
                )
            verdict = self._check_mutability(s.readonly, t.readonly, position, s.type, t.type)
            if not verdict.compatible:
                return verdict
        return COMPATIBLE

    def _check_object(
        self,
        source: ObjectType,
        target: ObjectType,
        path: Path,
        assumed: _Assumptions,
    ) -> AssignabilityVerdict:
        source_sig = source.index_signature

        # Every field the target declares
        for name, target_field in target.fields:
            field_path = path + (PathSegment.field(name),)
            source_field = source.get_field(name)

            if source_field is None:
                if target_field.optional:
                    continue
                if (
                    source_sig is not None
                    and self.config.index_signature_satisfies_required
                    and key_in_domain(source_sig.key_type, name)
                ):
                    verdict = self._check(
                        source_sig.value_type, target_field.type, field_path, assumed
                    )
                    if not verdict.compatible:
                        return verdict
                    verdict = self._check_mutability(
                        source_sig.readonly, target_field.readonly, field_path,
                        source_sig.value_type, target_field.type,
                    )
                    if not verdict.compatible:
                        return verdict
                    continue
                return AssignabilityVerdict.fail(
                    field_path, ReasonKind.MISSING_FIELD, source, target_field.type
                )

            verdict = self._check(source_field.type, target_field.type, field_path, assumed)
            if not verdict.compatible:
                return verdict
            if source_field.optional and not target_field.optional:
                return AssignabilityVerdict.fail(
                    field_path, ReasonKind.OPTIONALITY_MISMATCH,
                    source_field.type, target_field.type,
                )
            verdict = self._check_mutability(
                source_field.readonly, target_field.readonly, field_path,
                source_field.type, target_field.type,
            )
            if not verdict.compatible:
                return verdict

        target_sig = target.index_signature
        if target_sig is None:
            return COMPATIBLE

        # Source fields not matched by name fall under the target's signature
        for name, source_field in source.fields:
            if name in target or not key_in_domain(target_sig.key_type, name):
                continue
            field_path = path + (PathSegment.field(name),)
            verdict = self._check(source_field.type, target_sig.value_type, field_path, assumed)
            if not verdict.compatible:
                return verdict
            verdict = self._check_mutability(
                source_field.readonly, target_sig.readonly, field_path,
                source_field.type, target_sig.value_type,
            )
            if not verdict.compatible:
                return verdict

        if source_sig is None:
            return COMPATIBLE

        index_path = path + (PathSegment.index(format_key_domain(target_sig.key_type)),)
        if not key_domain_covers(source_sig.key_type, target_sig.key_type):
            return AssignabilityVerdict.fail(
                index_path, ReasonKind.INDEX_KEY_MISMATCH,
                source_sig.key_type, target_sig.key_type,
            )
        verdict = self._check(source_sig.value_type, target_sig.value_type, index_path, assumed)
        if not verdict.compatible:
            return verdict
        return self._check_mutability(
            source_sig.readonly, target_sig.readonly, index_path,
            source_sig.value_type, target_sig.value_type,
        )


def is_assignable(
    source: TypeNode,
    target: TypeNode,
    *,
    environment: Optional[TypeEnvironment] = None,
    config: Optional[EngineConfig] = None,
) -> AssignabilityVerdict:
    """Check if a value of the source type can be stored where target is expected.

    This is the main entry point for assignability checking.

    Args:
        source: The type of the value being assigned
        target: The type of the assignment target
        environment: Declarations for resolving references
        config: Relaxation switches (DEFAULT_CONFIG if omitted)

    Returns:
        An AssignabilityVerdict
    """
    return AssignabilityChecker(config, environment).check(source, target)


def assignable(
    source: TypeNode,
    target: TypeNode,
    *,
    environment: Optional[TypeEnvironment] = None,
    config: Optional[EngineConfig] = None,
) -> bool:
    """Boolean shorthand for is_assignable(...).compatible."""
    return is_assignable(source, target, environment=environment, config=config).compatible
