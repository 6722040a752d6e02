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
"""Key domains of index signatures.

A key domain is described by a key type: STRING (every key), NUMBER (every
numeric key), a literal (one key) or a union of these. Field names are always
strings, so a number domain matches names that spell a number.
"""

from __future__ import annotations

import re

from .nodes import NUMBER, STRING, LiteralType, TypeNode, UnionType

_NUMERIC_KEY = re.compile(r"^-?(0|[1-9][0-9]*)(\.[0-9]+)?$")


def is_numeric_key(name: str) -> bool:
    """Check if a field name is the canonical spelling of a number."""
    return _NUMERIC_KEY.match(name) is not None


def _literal_key(literal: LiteralType) -> str:
    value = literal.value
    if literal.kind == "number" and float(value).is_integer():
        return str(int(value))
    return str(value)


def key_in_domain(key_type: TypeNode, name: str) -> bool:
    """Check if a field name belongs to the domain of an index key type."""
    if key_type == STRING:
        return True
    if key_type == NUMBER:
        return is_numeric_key(name)
    if isinstance(key_type, LiteralType):
        return _literal_key(key_type) == name
    if isinstance(key_type, UnionType):
        return any(key_in_domain(m, name) for m in key_type.members)
    return False


def key_domain_covers(wider: TypeNode, narrower: TypeNode) -> bool:
    """Check if the domain of `wider` is a superset of the domain of `narrower`.

    string covers everything; number covers number and numeric literals;
    a literal covers an equal literal; unions are checked member-wise.
    """
    if isinstance(narrower, UnionType):
        return all(key_domain_covers(wider, m) for m in narrower.members)
    if isinstance(wider, UnionType):
        return any(key_domain_covers(m, narrower) for m in wider.members)
    if wider == STRING:
        return True
    if wider == NUMBER:
        if narrower == NUMBER:
            return True
        return isinstance(narrower, LiteralType) and is_numeric_key(_literal_key(narrower))
    if isinstance(wider, LiteralType) and isinstance(narrower, LiteralType):
        return _literal_key(wider) == _literal_key(narrower)
    return False


def format_key_domain(key_type: TypeNode) -> str:
    """Render a key domain the way it appears in a reason path: [string]."""
    if isinstance(key_type, UnionType):
        return " | ".join(format_key_domain(m) for m in key_type.members)
    if isinstance(key_type, LiteralType):
        return repr(_literal_key(key_type)) if key_type.kind == "string" else _literal_key(key_type)
    return str(getattr(key_type, "name", key_type))
