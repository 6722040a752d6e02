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
"""Type nodes: the in-memory model of shapes.

The node set is closed. Every consumer dispatches over exactly these classes
and raises on anything else (see unhandled_node), so adding a kind without
teaching the engine about it fails loudly.

- PrimitiveType: string, number, boolean, ... plus any/unknown/never
- LiteralType: exact values ('square', 42, true), used for tag fields
- ObjectType: named fields with readonly/optional flags, optional index signature
- ArrayType: homogeneous arrays, optionally readonly
- TupleType: fixed positions, each with its own readonly/optional flag
- UnionType: non-empty set of alternatives, declaration order kept
- MappedType: a per-key table derived from a key set
- TypeReference: named reference resolved through a TypeEnvironment

All nodes are frozen. Transformations (see transform.py) build new nodes.
Equality is structural: order-insensitive for object fields and union members,
order-sensitive for tuple positions.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

from immutables import Map as ImmutableMap

from ..errors import (
    DuplicateFieldError,
    EmptyUnionError,
    InvalidIndexKeyError,
    InvalidLiteralError,
    InvalidMappedTypeError,
    InvalidTupleError,
)

LiteralValue = Union[str, int, float, bool]


class TypeNode(ABC):
    """Abstract base class for all type nodes.

    Subclasses using @dataclass(frozen=True) get __eq__ and __hash__
    generated; the ones with order-insensitive equality define them by hand.
    """

    @abstractmethod
    def __eq__(self, other: object) -> bool:
        pass

    @abstractmethod
    def __hash__(self) -> int:
        pass

    def __str__(self) -> str:
        from .formatting import format_type

        return format_type(self)


# =============================================================================
# Primitives and literals
# =============================================================================


@dataclass(frozen=True, slots=True)
class PrimitiveType(TypeNode):
    """A primitive type identified by name.

    Attributes:
        name: The type name (e.g., "string", "number", "boolean")
    """

    name: str


STRING = PrimitiveType("string")
NUMBER = PrimitiveType("number")
BOOLEAN = PrimitiveType("boolean")
BIGINT = PrimitiveType("bigint")
SYMBOL = PrimitiveType("symbol")
NULL = PrimitiveType("null")
UNDEFINED = PrimitiveType("undefined")

# Special primitives with their own assignability rules
ANY = PrimitiveType("any")
UNKNOWN = PrimitiveType("unknown")
NEVER = PrimitiveType("never")


@dataclass(frozen=True, slots=True)
class LiteralType(TypeNode):
    """An exact-value type: 'hello', 42, true.

    The kind is derived from the value and takes part in equality, so the
    boolean literal true never equals the number literal 1.
    """

    value: LiteralValue
    kind: str = field(init=False)

    def __post_init__(self) -> None:
        if isinstance(self.value, bool):
            kind = "boolean"
        elif isinstance(self.value, (int, float)):
            kind = "number"
        elif isinstance(self.value, str):
            kind = "string"
        else:
            raise InvalidLiteralError(self.value)
        object.__setattr__(self, "kind", kind)

    @property
    def base(self) -> PrimitiveType:
        """The primitive this literal widens to."""
        return _LITERAL_BASES[self.kind]


_LITERAL_BASES = {"string": STRING, "number": NUMBER, "boolean": BOOLEAN}


# =============================================================================
# Objects
# =============================================================================


@dataclass(frozen=True, slots=True)
class FieldType:
    """The declared type of one object field.

    Attributes:
        type: The field's value type
        readonly: Consumers may read but never write the field
        optional: The field may be absent
    """

    type: TypeNode
    readonly: bool = False
    optional: bool = False

    def with_readonly(self, readonly: bool) -> FieldType:
        return dataclasses.replace(self, readonly=readonly)

    def with_optional(self, optional: bool) -> FieldType:
        return dataclasses.replace(self, optional=optional)


def _is_index_key(key_type: Any) -> bool:
    if key_type == STRING or key_type == NUMBER:
        return True
    if isinstance(key_type, LiteralType):
        return key_type.kind in ("string", "number")
    if isinstance(key_type, UnionType):
        return all(_is_index_key(m) for m in key_type.members)
    return False


@dataclass(frozen=True, slots=True)
class IndexSignature:
    """A rule typing every key of a domain not named explicitly.

    Attributes:
        key_type: The key domain: STRING, NUMBER, a literal, or a union of these
        value_type: The type of every value stored under a key of the domain
        readonly: Values reached through the signature cannot be written
    """

    key_type: TypeNode
    value_type: TypeNode
    readonly: bool = False

    def __post_init__(self) -> None:
        if not _is_index_key(self.key_type):
            raise InvalidIndexKeyError(self.key_type)

    def with_readonly(self, readonly: bool) -> IndexSignature:
        return dataclasses.replace(self, readonly=readonly)


FieldSpec = Union[FieldType, TypeNode]
FieldsArg = Union[Mapping[str, FieldSpec], Iterable[Tuple[str, FieldSpec]]]


def _coerce_field(spec: FieldSpec) -> FieldType:
    if isinstance(spec, FieldType):
        return spec
    if isinstance(spec, TypeNode):
        return FieldType(spec)
    raise TypeError(f"Object field must be a FieldType or TypeNode, got {type(spec).__name__}")


@dataclass(frozen=True, eq=False)
class ObjectType(TypeNode):
    """An object shape: named fields plus an optional index signature.

    Fields may be given as a mapping or as (name, field) pairs, and a bare
    TypeNode stands for a mutable, required field of that type. Declaration
    order is kept for iteration and formatting but ignored by equality.

    Attributes:
        fields: Tuple of (name, FieldType) pairs in declaration order
        index_signature: Optional rule for keys not named in fields
    """

    fields: Tuple[Tuple[str, FieldType], ...] = ()
    index_signature: Optional[IndexSignature] = None
    _index: ImmutableMap = field(init=False, repr=False, compare=False)
    _hash: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        items = self.fields.items() if isinstance(self.fields, Mapping) else self.fields
        pairs = []
        seen = set()
        for name, spec in items:
            if name in seen:
                raise DuplicateFieldError(name)
            seen.add(name)
            pairs.append((name, _coerce_field(spec)))
        index = ImmutableMap(pairs)
        object.__setattr__(self, "fields", tuple(pairs))
        object.__setattr__(self, "_index", index)
        object.__setattr__(self, "_hash", hash((index, self.index_signature)))

    @classmethod
    def of(cls, **fields: FieldSpec) -> ObjectType:
        """Build an object type from keyword arguments, in argument order."""
        return cls(tuple(fields.items()))

    def get_field(self, name: str) -> Optional[FieldType]:
        """Look up a field by name."""
        return self._index.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __getitem__(self, name: str) -> FieldType:
        try:
            return self._index[name]
        except KeyError:
            raise KeyError(f"Field '{name}' not found in object type") from None

    def field_names(self) -> Tuple[str, ...]:
        """Field names in declaration order."""
        return tuple(name for name, _ in self.fields)

    def keys(self) -> FrozenSet[str]:
        """The key set of the named fields."""
        return frozenset(self._index.keys())

    def required_field_names(self) -> Tuple[str, ...]:
        return tuple(name for name, f in self.fields if not f.optional)

    def with_field(self, name: str, spec: FieldSpec) -> ObjectType:
        """Return a copy with a field added, or replaced in place."""
        new_field = _coerce_field(spec)
        if name in self._index:
            pairs = tuple((n, new_field if n == name else f) for n, f in self.fields)
        else:
            pairs = self.fields + ((name, new_field),)
        return ObjectType(pairs, self.index_signature)

    def without_field(self, name: str) -> ObjectType:
        """Return a copy with a field removed (no-op if absent)."""
        return ObjectType(
            tuple((n, f) for n, f in self.fields if n != name), self.index_signature
        )

    def with_index_signature(self, signature: Optional[IndexSignature]) -> ObjectType:
        return ObjectType(self.fields, signature)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectType):
            return NotImplemented
        return (
            self._hash == other._hash
            and self._index == other._index
            and self.index_signature == other.index_signature
        )

    def __hash__(self) -> int:
        return self._hash


# =============================================================================
# Arrays and tuples
# =============================================================================


@dataclass(frozen=True, slots=True)
class ArrayType(TypeNode):
    """A homogeneous array: T[] or readonly T[]."""

    element: TypeNode
    readonly: bool = False


@dataclass(frozen=True, slots=True)
class TupleElement:
    """One position of a tuple type."""

    type: TypeNode
    readonly: bool = False
    optional: bool = False


def _coerce_element(spec: Union[TupleElement, TypeNode]) -> TupleElement:
    if isinstance(spec, TupleElement):
        return spec
    if isinstance(spec, TypeNode):
        return TupleElement(spec)
    raise TypeError(f"Tuple element must be a TupleElement or TypeNode, got {type(spec).__name__}")


@dataclass(frozen=True, slots=True)
class TupleType(TypeNode):
    """A fixed-position tuple: [T, U, V?].

    Optional positions must all come after the required ones.
    """

    elements: Tuple[TupleElement, ...]

    def __post_init__(self) -> None:
        elements = tuple(_coerce_element(e) for e in self.elements)
        seen_optional = False
        for i, element in enumerate(elements):
            if element.optional:
                seen_optional = True
            elif seen_optional:
                raise InvalidTupleError(i)
        object.__setattr__(self, "elements", elements)

    @classmethod
    def of(cls, *types: TypeNode, readonly: bool = False) -> TupleType:
        """Build a tuple of required positions sharing one readonly flag."""
        return cls(tuple(TupleElement(t, readonly=readonly) for t in types))

    @property
    def required_length(self) -> int:
        return sum(1 for e in self.elements if not e.optional)

    def __len__(self) -> int:
        return len(self.elements)


# =============================================================================
# Unions
# =============================================================================


@dataclass(frozen=True, eq=False)
class UnionType(TypeNode):
    """A union of alternatives (T1 | T2 | ...).

    Members are kept in declaration order so narrowing and error reporting are
    deterministic; equality and hashing go through a frozenset so the order
    never affects identity. Repeated members collapse to their first
    occurrence.

    Attributes:
        members: The alternatives, in declaration order
    """

    members: Tuple[TypeNode, ...]
    _member_set: FrozenSet[TypeNode] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ordered = []
        seen = set()
        for member in self.members:
            if not isinstance(member, TypeNode):
                raise TypeError(f"Union member must be a TypeNode, got {type(member).__name__}")
            if member not in seen:
                seen.add(member)
                ordered.append(member)
        if not ordered:
            raise EmptyUnionError()
        object.__setattr__(self, "members", tuple(ordered))
        object.__setattr__(self, "_member_set", frozenset(ordered))

    @classmethod
    def of(cls, *members: TypeNode) -> UnionType:
        return cls(members)

    def __len__(self) -> int:
        return len(self.members)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnionType):
            return NotImplemented
        return self._member_set == other._member_set

    def __hash__(self) -> int:
        return hash(self._member_set)


# =============================================================================
# Mapped types
# =============================================================================


def _as_map(table: Any) -> ImmutableMap:
    if isinstance(table, ImmutableMap):
        return table
    return ImmutableMap(table)


def _full_flag_table(name: str, table: Any, keys: FrozenSet[str]) -> ImmutableMap:
    table = _as_map(table)
    stray = [k for k in table.keys() if k not in keys]
    if stray:
        raise InvalidMappedTypeError(name, stray)
    return ImmutableMap({k: bool(table.get(k, False)) for k in keys})


@dataclass(frozen=True)
class MappedType(TypeNode):
    """A per-key table derived from a source key set.

    Models a companion declaration such as { [K in keyof T]: boolean } whose
    key set is required to mirror another structure's. value_for must cover
    the key set exactly; readonly_for and optional_for may omit keys, which
    then default to False (both are stored fully populated so equality is
    canonical).

    Attributes:
        source_keys: The keys the mapping ranges over
        value_for: key -> TypeNode
        readonly_for: key -> bool
        optional_for: key -> bool
    """

    source_keys: FrozenSet[str]
    value_for: ImmutableMap
    readonly_for: ImmutableMap = ImmutableMap()
    optional_for: ImmutableMap = ImmutableMap()

    def __post_init__(self) -> None:
        keys = frozenset(self.source_keys)
        value_for = _as_map(self.value_for)
        value_keys = frozenset(value_for.keys())
        if value_keys != keys:
            raise InvalidMappedTypeError("value_for", value_keys ^ keys)
        for key, node in value_for.items():
            if not isinstance(node, TypeNode):
                raise TypeError(
                    f"Mapped value for '{key}' must be a TypeNode, got {type(node).__name__}"
                )
        object.__setattr__(self, "source_keys", keys)
        object.__setattr__(self, "value_for", value_for)
        object.__setattr__(self, "readonly_for", _full_flag_table("readonly_for", self.readonly_for, keys))
        object.__setattr__(self, "optional_for", _full_flag_table("optional_for", self.optional_for, keys))

    def sorted_keys(self) -> Tuple[str, ...]:
        """Keys in the deterministic order used for materialization."""
        return tuple(sorted(self.source_keys))


# =============================================================================
# References
# =============================================================================


@dataclass(frozen=True, slots=True)
class TypeReference(TypeNode):
    """A named reference, resolved through a TypeEnvironment.

    References are how recursive shapes are expressed:
    Tree = { value: number, children: Tree[] }.
    """

    name: str


TYPE_NODE_CLASSES = (
    PrimitiveType,
    LiteralType,
    ObjectType,
    ArrayType,
    TupleType,
    UnionType,
    MappedType,
    TypeReference,
)


def unhandled_node(node: object) -> TypeError:
    """Build the error raised when a dispatch meets an unknown node class."""
    return TypeError(f"Unhandled type node: {type(node).__name__}")
