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
"""Pure transformations over type nodes.

Nothing here mutates a node; every function builds and returns new ones.

- widen_readonly: deep copy with every readonly flag cleared (diagnostic only)
- fresh_copy: shallow copy into an independently owned value, the one legal
  way across the readonly boundary
- materialize: expand a MappedType into the ObjectType it denotes
- readonly_of / partial_of / required_of / pick / omit / record_of: the
  usual homomorphic mapped types over objects
- union_of: flattening, de-duplicating union constructor
"""

from __future__ import annotations

from typing import Iterable, Optional

from .nodes import (
    ArrayType,
    FieldType,
    IndexSignature,
    LiteralType,
    MappedType,
    ObjectType,
    PrimitiveType,
    TupleElement,
    TupleType,
    TypeNode,
    TypeReference,
    UnionType,
    unhandled_node,
)


def widen_readonly(node: TypeNode) -> TypeNode:
    """Return a copy of `node` with every readonly flag cleared, at every depth.

    References are left as they are: the declarations they name are not
    rewritten.
    """
    if isinstance(node, (PrimitiveType, LiteralType, TypeReference)):
        return node
    if isinstance(node, ObjectType):
        signature = node.index_signature
        if signature is not None:
            signature = IndexSignature(
                signature.key_type, widen_readonly(signature.value_type), readonly=False
            )
        return ObjectType(
            tuple(
                (name, FieldType(widen_readonly(f.type), readonly=False, optional=f.optional))
                for name, f in node.fields
            ),
            signature,
        )
    if isinstance(node, ArrayType):
        return ArrayType(widen_readonly(node.element), readonly=False)
    if isinstance(node, TupleType):
        return TupleType(
            tuple(
                TupleElement(widen_readonly(e.type), readonly=False, optional=e.optional)
                for e in node.elements
            )
        )
    if isinstance(node, UnionType):
        return UnionType(tuple(widen_readonly(m) for m in node.members))
    if isinstance(node, MappedType):
        return MappedType(
            node.source_keys,
            {k: widen_readonly(v) for k, v in node.value_for.items()},
            optional_for=node.optional_for,
        )
    raise unhandled_node(node)


def fresh_copy(node: TypeNode) -> TypeNode:
    """Type of a value copied into a fresh, independently owned structure.

    Only the outermost level is copied, so only its readonly flags are
    cleared; nested structures keep their own declared flags. Unions copy
    each alternative. Nodes with no mutable level are returned unchanged.
    """
    if isinstance(node, ObjectType):
        signature = node.index_signature
        if signature is not None:
            signature = signature.with_readonly(False)
        return ObjectType(
            tuple((name, f.with_readonly(False)) for name, f in node.fields), signature
        )
    if isinstance(node, ArrayType):
        return ArrayType(node.element, readonly=False)
    if isinstance(node, TupleType):
        return TupleType(
            tuple(TupleElement(e.type, readonly=False, optional=e.optional) for e in node.elements)
        )
    if isinstance(node, UnionType):
        return UnionType(tuple(fresh_copy(m) for m in node.members))
    if isinstance(node, MappedType):
        return fresh_copy(materialize(node))
    if isinstance(node, (PrimitiveType, LiteralType, TypeReference)):
        return node
    raise unhandled_node(node)


def materialize(mapped: MappedType) -> ObjectType:
    """Expand a mapped type into an object type, keys in sorted order."""
    return ObjectType(
        tuple(
            (
                key,
                FieldType(
                    mapped.value_for[key],
                    readonly=mapped.readonly_for[key],
                    optional=mapped.optional_for[key],
                ),
            )
            for key in mapped.sorted_keys()
        )
    )


def mapped_from(
    source: ObjectType,
    readonly: Optional[bool] = None,
    optional: Optional[bool] = None,
) -> MappedType:
    """Build { [K in keyof source]: source[K] } with optional modifiers.

    Args:
        source: The object whose keys and value types are mapped
        readonly: True adds readonly to every key, False removes it, None keeps
        optional: Same, for the optional modifier

    Returns:
        A MappedType over the source's named fields
    """
    fields = dict(source.fields)
    return MappedType(
        frozenset(fields),
        {k: f.type for k, f in fields.items()},
        {k: f.readonly if readonly is None else readonly for k, f in fields.items()},
        {k: f.optional if optional is None else optional for k, f in fields.items()},
    )


def readonly_of(source: ObjectType) -> ObjectType:
    """Readonly<T>: every named field and the index signature made readonly."""
    signature = source.index_signature
    if signature is not None:
        signature = signature.with_readonly(True)
    return ObjectType(
        tuple((name, f.with_readonly(True)) for name, f in source.fields), signature
    )


def partial_of(source: ObjectType) -> ObjectType:
    """Partial<T>: every named field made optional."""
    return ObjectType(
        tuple((name, f.with_optional(True)) for name, f in source.fields),
        source.index_signature,
    )


def required_of(source: ObjectType) -> ObjectType:
    """Required<T>: every named field made required."""
    return ObjectType(
        tuple((name, f.with_optional(False)) for name, f in source.fields),
        source.index_signature,
    )


def pick(source: ObjectType, keys: Iterable[str]) -> ObjectType:
    """Pick<T, K>: only the named fields, in the source's order."""
    wanted = frozenset(keys)
    return ObjectType(tuple((n, f) for n, f in source.fields if n in wanted))


def omit(source: ObjectType, keys: Iterable[str]) -> ObjectType:
    """Omit<T, K>: every named field except the given ones."""
    dropped = frozenset(keys)
    return ObjectType(
        tuple((n, f) for n, f in source.fields if n not in dropped), source.index_signature
    )


def record_of(keys: Iterable[str], value_type: TypeNode, readonly: bool = False) -> ObjectType:
    """Record<K, V>: one required field of type V per key, in the given order."""
    return ObjectType(tuple((k, FieldType(value_type, readonly=readonly)) for k in keys))


def union_of(*members: TypeNode) -> TypeNode:
    """Build a union, flattening nested unions.

    Returns the member itself when only one distinct member remains.
    """
    flat = []
    for member in members:
        if isinstance(member, UnionType):
            flat.extend(member.members)
        else:
            flat.append(member)
    union = UnionType(tuple(flat))
    if len(union.members) == 1:
        return union.members[0]
    return union
