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
"""Exceptions raised for malformed type graphs.

Ordinary type incompatibility is never an exception: the engine returns it as
an AssignabilityVerdict. The classes here cover the other case, where the
caller handed the engine something that is not a well-formed type graph
(an empty union, a duplicated field, a dangling reference...). Keeping the two
apart lets calling code distinguish "these types don't match" from "this type
was built wrong".
"""

from __future__ import annotations

from typing import Any, Iterable, Optional


class ShapeCheckError(Exception):
    """Base class for every exception raised by shapecheck."""


class MalformedTypeError(ShapeCheckError):
    """A type node or type graph violates a construction invariant."""


class EmptyUnionError(MalformedTypeError):
    """A union was built with no members."""

    def __init__(self) -> None:
        super().__init__("Union type must have at least one member")


class DuplicateFieldError(MalformedTypeError):
    """An object type declares the same field name twice."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Duplicate field '{name}' in object type")


class InvalidLiteralError(MalformedTypeError):
    """A literal type was given a value that is not str, int, float or bool."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"Literal types hold str, int, float or bool values, got {type(value).__name__}"
        )


class InvalidIndexKeyError(MalformedTypeError):
    """An index signature key type is not a string/number/literal domain."""

    def __init__(self, key_type: Any):
        self.key_type = key_type
        super().__init__(
            f"Index signature key must be string, number, a literal or a union of these, "
            f"got {key_type!r}"
        )


class InvalidTupleError(MalformedTypeError):
    """A tuple has a required element after an optional one."""

    def __init__(self, position: int):
        self.position = position
        super().__init__(
            f"Required tuple element at position {position} follows an optional element"
        )


class InvalidMappedTypeError(MalformedTypeError):
    """A mapped type's per-key tables disagree with its key set."""

    def __init__(self, table: str, keys: Iterable[str]):
        self.table = table
        self.keys = frozenset(keys)
        listed = ", ".join(sorted(self.keys))
        super().__init__(f"Mapped type table '{table}' disagrees with the key set on: {listed}")


class UnresolvedReferenceError(MalformedTypeError):
    """A type reference names nothing in the environment."""

    def __init__(self, name: str, environment: Optional[Any] = None):
        self.name = name
        self.environment = environment
        super().__init__(f"Unresolved type reference '{name}'")


class CyclicAliasError(MalformedTypeError):
    """References resolve to each other without ever reaching a structure."""

    def __init__(self, chain: Iterable[str]):
        self.chain = tuple(chain)
        super().__init__(f"Type alias cycle: {' -> '.join(self.chain)}")


class InvalidNarrowingContextError(ShapeCheckError):
    """A narrowing context does not select exactly one discriminant strategy."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Invalid narrowing context: {message}")
