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
"""TypeScript-like rendering of type nodes for messages."""

from __future__ import annotations

from .keys import format_key_domain
from .nodes import (
    ArrayType,
    FieldType,
    LiteralType,
    MappedType,
    ObjectType,
    PrimitiveType,
    TupleType,
    TypeNode,
    TypeReference,
    UnionType,
    unhandled_node,
)


def format_literal(literal: LiteralType) -> str:
    if literal.kind == "string":
        return repr(literal.value)
    if literal.kind == "boolean":
        return str(literal.value).lower()
    return str(literal.value)


def format_field(name: str, f: FieldType) -> str:
    """Render one field declaration: readonly name?: type."""
    prefix = "readonly " if f.readonly else ""
    optional = "?" if f.optional else ""
    return f"{prefix}{name}{optional}: {format_type(f.type)}"


def format_type(node: TypeNode) -> str:
    """Format a type node as TypeScript-like syntax."""
    if isinstance(node, PrimitiveType):
        return node.name

    if isinstance(node, LiteralType):
        return format_literal(node)

    if isinstance(node, TypeReference):
        return node.name

    if isinstance(node, ArrayType):
        elem_str = format_type(node.element)
        # Wrap unions in parens so the [] binds to the whole element
        if isinstance(node.element, UnionType):
            elem_str = f"({elem_str})"
        prefix = "readonly " if node.readonly else ""
        return f"{prefix}{elem_str}[]"

    if isinstance(node, TupleType):
        parts = []
        for e in node.elements:
            prefix = "readonly " if e.readonly else ""
            optional = "?" if e.optional else ""
            parts.append(f"{prefix}{format_type(e.type)}{optional}")
        return f"[{', '.join(parts)}]"

    if isinstance(node, ObjectType):
        parts = [format_field(name, f) for name, f in node.fields]
        if node.index_signature is not None:
            sig = node.index_signature
            prefix = "readonly " if sig.readonly else ""
            parts.append(
                f"{prefix}[key: {format_key_domain(sig.key_type)}]: {format_type(sig.value_type)}"
            )
        if not parts:
            return "{}"
        return "{ " + "; ".join(parts) + " }"

    if isinstance(node, UnionType):
        return " | ".join(format_type(m) for m in node.members)

    if isinstance(node, MappedType):
        parts = []
        for key in node.sorted_keys():
            f = FieldType(
                node.value_for[key],
                readonly=node.readonly_for[key],
                optional=node.optional_for[key],
            )
            parts.append(format_field(key, f))
        return "mapped { " + "; ".join(parts) + " }" if parts else "mapped {}"

    raise unhandled_node(node)
