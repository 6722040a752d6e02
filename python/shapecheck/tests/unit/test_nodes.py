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
"""Tests for type node construction, validation and structural equality."""

from __future__ import annotations

import pytest

from shapecheck.errors import (
    DuplicateFieldError,
    EmptyUnionError,
    InvalidIndexKeyError,
    InvalidLiteralError,
    InvalidMappedTypeError,
    InvalidTupleError,
    MalformedTypeError,
    ShapeCheckError,
)
from shapecheck.types import (
    BOOLEAN,
    NUMBER,
    STRING,
    ArrayType,
    FieldType,
    IndexSignature,
    LiteralType,
    MappedType,
    ObjectType,
    TupleElement,
    TupleType,
    TypeReference,
    UnionType,
)


# =============================================================================
# Literals
# =============================================================================


class TestLiteralType:
    """Tests for LiteralType."""

    def test_kind_is_derived_from_value(self) -> None:
        assert LiteralType("square").kind == "string"
        assert LiteralType(3).kind == "number"
        assert LiteralType(2.5).kind == "number"
        assert LiteralType(True).kind == "boolean"

    def test_base_primitive(self) -> None:
        assert LiteralType("a").base == STRING
        assert LiteralType(1).base == NUMBER
        assert LiteralType(False).base == BOOLEAN

    def test_boolean_never_equals_number(self) -> None:
        """true and 1 are different literal types."""
        assert LiteralType(True) != LiteralType(1)
        assert LiteralType(False) != LiteralType(0)

    def test_invalid_value_rejected(self) -> None:
        with pytest.raises(InvalidLiteralError) as exc_info:
            LiteralType(None)
        assert exc_info.value.value is None

    def test_literal_is_hashable(self) -> None:
        assert len({LiteralType("a"), LiteralType("a"), LiteralType("b")}) == 2


# =============================================================================
# Objects
# =============================================================================


class TestObjectType:
    """Tests for ObjectType."""

    def test_bare_node_becomes_mutable_required_field(self) -> None:
        obj = ObjectType.of(x=NUMBER)
        assert obj["x"] == FieldType(NUMBER)
        assert not obj["x"].readonly
        assert not obj["x"].optional

    def test_fields_accept_mapping_and_pairs(self) -> None:
        from_mapping = ObjectType({"x": NUMBER, "y": STRING})
        from_pairs = ObjectType((("x", NUMBER), ("y", STRING)))
        assert from_mapping == from_pairs

    def test_declaration_order_kept(self) -> None:
        obj = ObjectType.of(b=NUMBER, a=STRING, c=BOOLEAN)
        assert obj.field_names() == ("b", "a", "c")

    def test_equality_ignores_field_order(self) -> None:
        a = ObjectType.of(x=NUMBER, y=STRING)
        b = ObjectType.of(y=STRING, x=NUMBER)
        assert a == b
        assert hash(a) == hash(b)

    def test_flags_take_part_in_equality(self) -> None:
        mutable = ObjectType.of(x=NUMBER)
        readonly = ObjectType.of(x=FieldType(NUMBER, readonly=True))
        assert mutable != readonly

    def test_index_signature_takes_part_in_equality(self) -> None:
        plain = ObjectType.of(x=NUMBER)
        indexed = plain.with_index_signature(IndexSignature(STRING, NUMBER))
        assert plain != indexed

    def test_duplicate_field_rejected(self) -> None:
        with pytest.raises(DuplicateFieldError) as exc_info:
            ObjectType((("x", NUMBER), ("x", STRING)))
        assert exc_info.value.name == "x"

    def test_non_node_field_rejected(self) -> None:
        with pytest.raises(TypeError):
            ObjectType.of(x="number")

    def test_lookup(self) -> None:
        obj = ObjectType.of(x=NUMBER)
        assert "x" in obj
        assert "y" not in obj
        assert obj.get_field("y") is None
        with pytest.raises(KeyError):
            obj["y"]

    def test_keys_and_required_names(self) -> None:
        obj = ObjectType.of(x=NUMBER, y=FieldType(STRING, optional=True))
        assert obj.keys() == frozenset({"x", "y"})
        assert obj.required_field_names() == ("x",)

    def test_with_field_replaces_in_place(self) -> None:
        obj = ObjectType.of(a=NUMBER, b=NUMBER, c=NUMBER)
        updated = obj.with_field("b", STRING)
        assert updated.field_names() == ("a", "b", "c")
        assert updated["b"].type == STRING
        assert obj["b"].type == NUMBER

    def test_with_field_appends_new(self) -> None:
        obj = ObjectType.of(a=NUMBER).with_field("z", STRING)
        assert obj.field_names() == ("a", "z")

    def test_without_field(self) -> None:
        obj = ObjectType.of(a=NUMBER, b=STRING)
        assert obj.without_field("a") == ObjectType.of(b=STRING)
        assert obj.without_field("missing") == obj


class TestIndexSignature:
    """Tests for IndexSignature key validation."""

    @pytest.mark.parametrize(
        "key_type",
        [
            STRING,
            NUMBER,
            LiteralType("a"),
            LiteralType(0),
            UnionType.of(LiteralType("a"), LiteralType("b")),
        ],
    )
    def test_valid_key_types(self, key_type) -> None:
        assert IndexSignature(key_type, NUMBER).key_type == key_type

    @pytest.mark.parametrize(
        "key_type",
        [BOOLEAN, LiteralType(True), ArrayType(STRING), UnionType.of(STRING, BOOLEAN)],
    )
    def test_invalid_key_types(self, key_type) -> None:
        with pytest.raises(InvalidIndexKeyError):
            IndexSignature(key_type, NUMBER)


# =============================================================================
# Tuples and unions
# =============================================================================


class TestTupleType:
    """Tests for TupleType."""

    def test_equality_is_order_sensitive(self) -> None:
        assert TupleType.of(NUMBER, STRING) != TupleType.of(STRING, NUMBER)
        assert TupleType.of(NUMBER, STRING) == TupleType.of(NUMBER, STRING)

    def test_required_length(self) -> None:
        t = TupleType((TupleElement(NUMBER), TupleElement(STRING, optional=True)))
        assert len(t) == 2
        assert t.required_length == 1

    def test_optional_must_be_trailing(self) -> None:
        with pytest.raises(InvalidTupleError) as exc_info:
            TupleType((TupleElement(NUMBER, optional=True), TupleElement(STRING)))
        assert exc_info.value.position == 1

    def test_readonly_shorthand(self) -> None:
        t = TupleType.of(NUMBER, NUMBER, readonly=True)
        assert all(e.readonly for e in t.elements)


class TestUnionType:
    """Tests for UnionType."""

    def test_empty_union_rejected(self) -> None:
        with pytest.raises(EmptyUnionError):
            UnionType(())

    def test_duplicates_collapse_to_first(self) -> None:
        u = UnionType.of(STRING, NUMBER, STRING)
        assert u.members == (STRING, NUMBER)
        assert len(u) == 2

    def test_equality_ignores_member_order(self) -> None:
        assert UnionType.of(STRING, NUMBER) == UnionType.of(NUMBER, STRING)
        assert hash(UnionType.of(STRING, NUMBER)) == hash(UnionType.of(NUMBER, STRING))

    def test_non_node_member_rejected(self) -> None:
        with pytest.raises(TypeError):
            UnionType(("string",))


# =============================================================================
# Mapped types and references
# =============================================================================


class TestMappedType:
    """Tests for MappedType validation."""

    def test_flag_tables_are_filled(self) -> None:
        m = MappedType(frozenset({"a", "b"}), {"a": BOOLEAN, "b": BOOLEAN}, {"a": True})
        assert m.readonly_for["a"] is True
        assert m.readonly_for["b"] is False
        assert m.optional_for["a"] is False

    def test_sparse_and_full_tables_are_equal(self) -> None:
        keys = frozenset({"a"})
        assert MappedType(keys, {"a": BOOLEAN}) == MappedType(
            keys, {"a": BOOLEAN}, {"a": False}, {"a": False}
        )

    def test_value_table_must_cover_keys(self) -> None:
        with pytest.raises(InvalidMappedTypeError) as exc_info:
            MappedType(frozenset({"a", "b"}), {"a": BOOLEAN})
        assert exc_info.value.keys == frozenset({"b"})

    def test_flag_table_must_stay_within_keys(self) -> None:
        with pytest.raises(InvalidMappedTypeError) as exc_info:
            MappedType(frozenset({"a"}), {"a": BOOLEAN}, {"z": True})
        assert exc_info.value.table == "readonly_for"

    def test_sorted_keys(self) -> None:
        m = MappedType(frozenset({"b", "a", "c"}), {k: NUMBER for k in "abc"})
        assert m.sorted_keys() == ("a", "b", "c")


class TestTypeReference:
    def test_equality_by_name(self) -> None:
        assert TypeReference("Tree") == TypeReference("Tree")
        assert TypeReference("Tree") != TypeReference("Node")


class TestErrorHierarchy:
    """Malformed graphs raise MalformedTypeError subclasses."""

    @pytest.mark.parametrize(
        "error_class",
        [
            DuplicateFieldError,
            EmptyUnionError,
            InvalidIndexKeyError,
            InvalidLiteralError,
            InvalidMappedTypeError,
            InvalidTupleError,
        ],
    )
    def test_subclasses(self, error_class) -> None:
        assert issubclass(error_class, MalformedTypeError)
        assert issubclass(error_class, ShapeCheckError)
