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
"""Pytest configuration for shapecheck tests.

Puts the python/ source directory on sys.path so the tests run against the
working tree whether or not the package is installed, and provides the
shapes most tests share.
"""

import sys
from pathlib import Path

import pytest

# python/ holds the shapecheck package
python_dir = Path(__file__).parent.parent.parent
if str(python_dir) not in sys.path:
    sys.path.insert(0, str(python_dir))

from shapecheck.types import (  # noqa: E402
    NUMBER,
    ArrayType,
    FieldType,
    LiteralType,
    ObjectType,
    TypeReference,
    UnionType,
    create_environment,
)


@pytest.fixture
def square() -> ObjectType:
    """{ kind: 'square'; size: number }"""
    return ObjectType.of(kind=LiteralType("square"), size=NUMBER)


@pytest.fixture
def rectangle() -> ObjectType:
    """{ kind: 'rectangle'; width: number; height: number }"""
    return ObjectType.of(kind=LiteralType("rectangle"), width=NUMBER, height=NUMBER)


@pytest.fixture
def shape(square, rectangle) -> UnionType:
    """Square | Rectangle"""
    return UnionType.of(square, rectangle)


@pytest.fixture
def tree_env():
    """Tree = { value: number; children: Tree[] }, plus a readonly variant."""
    return create_environment(
        {
            "Tree": ObjectType.of(value=NUMBER, children=ArrayType(TypeReference("Tree"))),
            "ReadonlyTree": ObjectType.of(
                value=FieldType(NUMBER, readonly=True),
                children=FieldType(
                    ArrayType(TypeReference("ReadonlyTree"), readonly=True), readonly=True
                ),
            ),
        }
    )
