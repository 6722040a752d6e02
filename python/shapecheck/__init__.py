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
"""shapecheck: structural type-compatibility checking.

Decides whether a value of one declared shape may be used where another shape
is expected, under TypeScript-like rules: width subtyping, readonly variance,
index signatures, arrays and tuples, unions, and recursive shapes.

Key Components:
    - types: Immutable type nodes, environments and transformations
    - engine: The assignability relation (is_assignable)
    - narrowing: Selecting a union member by tag or by field presence
    - synchronizer: Key-set drift between a structure and its companion mapping
    - diagnostics: Human-readable findings from all of the above
    - config: EngineConfig relaxation switches

Usage:
    >>> from shapecheck import ObjectType, NUMBER, is_assignable
    >>> point = ObjectType.of(x=NUMBER, y=NUMBER)
    >>> is_assignable(point, ObjectType.of(x=NUMBER)).compatible
    True
"""

__version__ = "0.1.0"

_TYPES = (
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
    "TypeEnvironment",
    "EMPTY_ENVIRONMENT",
    "create_environment",
    "widen_readonly",
    "fresh_copy",
    "materialize",
    "readonly_of",
    "partial_of",
    "required_of",
    "pick",
    "omit",
    "record_of",
    "union_of",
    "format_type",
)

_ENGINE = (
    "AssignabilityChecker",
    "AssignabilityVerdict",
    "PathSegment",
    "ReasonKind",
    "assignable",
    "format_path",
    "is_assignable",
)

_NARROWING = (
    "NarrowingContext",
    "NarrowingFailure",
    "NarrowingResult",
    "NarrowingStrategy",
    "discriminant_fields",
    "exclude",
    "narrow",
)

_DIAGNOSTICS = (
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticCollector",
    "Severity",
)

_ERRORS = (
    "ShapeCheckError",
    "MalformedTypeError",
    "EmptyUnionError",
    "DuplicateFieldError",
    "InvalidLiteralError",
    "InvalidIndexKeyError",
    "InvalidTupleError",
    "InvalidMappedTypeError",
    "UnresolvedReferenceError",
    "CyclicAliasError",
    "InvalidNarrowingContextError",
)


def __getattr__(name: str):
    """Lazy import of module attributes."""
    if name in _TYPES:
        from . import types

        return getattr(types, name)

    if name in _ENGINE:
        from . import engine

        return getattr(engine, name)

    if name in _NARROWING:
        from . import narrowing

        return getattr(narrowing, name)

    if name in _DIAGNOSTICS:
        from . import diagnostics

        return getattr(diagnostics, name)

    if name in _ERRORS:
        from . import errors

        return getattr(errors, name)

    if name in ("EngineConfig", "DEFAULT_CONFIG"):
        from . import config

        return getattr(config, name)

    # The synchronizer's check/derive keep their module namespace
    if name in ("SyncReport", "companion_flags", "check_all"):
        from . import synchronizer

        return getattr(synchronizer, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    *_TYPES,
    *_ENGINE,
    *_NARROWING,
    *_DIAGNOSTICS,
    *_ERRORS,
    "EngineConfig",
    "DEFAULT_CONFIG",
    "SyncReport",
    "companion_flags",
    "check_all",
    "__version__",
]
