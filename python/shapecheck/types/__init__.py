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
"""Type representation for structural compatibility checking.

Key Components:
- nodes: The closed set of immutable type nodes
- keys: Index-signature key domains
- environment: Immutable name -> node environment for references
- transform: widen_readonly, fresh_copy, materialize and utility mapped types
- formatting: TypeScript-like rendering
"""

from .nodes import (
    # Node hierarchy
    TypeNode,
    PrimitiveType,
    LiteralType,
    FieldType,
    IndexSignature,
    ObjectType,
    ArrayType,
    TupleElement,
    TupleType,
    UnionType,
    MappedType,
    TypeReference,
    TYPE_NODE_CLASSES,
    LiteralValue,
    unhandled_node,
    # Primitive singletons
    STRING,
    NUMBER,
    BOOLEAN,
    BIGINT,
    SYMBOL,
    NULL,
    UNDEFINED,
    ANY,
    UNKNOWN,
    NEVER,
)
from .keys import is_numeric_key, key_in_domain, key_domain_covers, format_key_domain
from .environment import (
    TypeEnvironment,
    EMPTY_ENVIRONMENT,
    create_environment,
    merge_environments,
    resolve,
)
from .transform import (
    widen_readonly,
    fresh_copy,
    materialize,
    mapped_from,
    readonly_of,
    partial_of,
    required_of,
    pick,
    omit,
    record_of,
    union_of,
)
from .formatting import format_type, format_field, format_literal

__all__ = [
    "TypeNode",
    "PrimitiveType",
    "LiteralType",
    "FieldType",
    "IndexSignature",
    "ObjectType",
    "ArrayType",
    "TupleElement",
    "TupleType",
    "UnionType",
    "MappedType",
    "TypeReference",
    "TYPE_NODE_CLASSES",
    "LiteralValue",
    "unhandled_node",
    "STRING",
    "NUMBER",
    "BOOLEAN",
    "BIGINT",
    "SYMBOL",
    "NULL",
    "UNDEFINED",
    "ANY",
    "UNKNOWN",
    "NEVER",
    "is_numeric_key",
    "key_in_domain",
    "key_domain_covers",
    "format_key_domain",
    "TypeEnvironment",
    "EMPTY_ENVIRONMENT",
    "create_environment",
    "merge_environments",
    "resolve",
    "widen_readonly",
    "fresh_copy",
    "materialize",
    "mapped_from",
    "readonly_of",
    "partial_of",
    "required_of",
    "pick",
    "omit",
    "record_of",
    "union_of",
    "format_type",
    "format_field",
    "format_literal",
]
