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
"""Type environment for named (and possibly recursive) shapes.

The TypeEnvironment is an immutable mapping from declaration names to type
nodes, backed by a persistent `immutables.Map` so that adding a declaration
is cheap and never disturbs environments already handed to other threads.

TypeReference nodes are resolved through it. A reference chain that loops
back on itself without reaching a structure (A = B, B = A) is a malformed
graph; a reference reached again *through* a structure (Tree = { children:
Tree[] }) is ordinary recursion and is handled by the engine's visited set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, Mapping, Optional

from immutables import Map as ImmutableMap

from ..errors import CyclicAliasError, UnresolvedReferenceError
from .nodes import TypeNode, TypeReference


@dataclass(frozen=True)
class TypeEnvironment:
    """Immutable mapping from declaration names to type nodes.

    Operations return new environments rather than mutating in place.

    Attributes:
        _bindings: The internal persistent map
    """

    _bindings: ImmutableMap = field(default_factory=ImmutableMap)

    def bind(self, name: str, node: TypeNode) -> TypeEnvironment:
        """Create a new environment with an additional declaration.

        Args:
            name: The declaration name
            node: The type it denotes

        Returns:
            A new TypeEnvironment with the binding added
        """
        return TypeEnvironment(_bindings=self._bindings.set(name, node))

    def bind_many(self, bindings: Mapping[str, TypeNode]) -> TypeEnvironment:
        """Create a new environment with several declarations added."""
        return TypeEnvironment(_bindings=self._bindings.update(bindings))

    def lookup(self, name: str) -> Optional[TypeNode]:
        """Look up a declaration, returning None if it is unknown."""
        return self._bindings.get(name)

    def contains(self, name: str) -> bool:
        return name in self._bindings

    def resolve(self, node: TypeNode) -> TypeNode:
        """Follow references until a non-reference node is reached.

        Non-reference nodes are returned unchanged.

        Raises:
            UnresolvedReferenceError: A reference names no declaration
            CyclicAliasError: References loop without reaching a structure
        """
        chain = []
        while isinstance(node, TypeReference):
            if node.name in chain:
                raise CyclicAliasError(chain + [node.name])
            chain.append(node.name)
            target = self._bindings.get(node.name)
            if target is None:
                raise UnresolvedReferenceError(node.name, self)
            node = target
        return node

    def names(self) -> FrozenSet[str]:
        return frozenset(self._bindings.keys())

    def all_bindings(self) -> Dict[str, TypeNode]:
        return dict(self._bindings.items())

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __repr__(self) -> str:
        return f"TypeEnvironment({{{', '.join(sorted(self._bindings.keys()))}}})"


# Empty environment singleton
EMPTY_ENVIRONMENT = TypeEnvironment()


def create_environment(bindings: Optional[Mapping[str, TypeNode]] = None) -> TypeEnvironment:
    """Create a type environment with optional initial declarations."""
    if not bindings:
        return EMPTY_ENVIRONMENT
    return EMPTY_ENVIRONMENT.bind_many(bindings)


def merge_environments(env1: TypeEnvironment, env2: TypeEnvironment) -> TypeEnvironment:
    """Merge two environments, with env2 taking precedence."""
    return env1.bind_many(env2.all_bindings())


def resolve(node: TypeNode, environment: Optional[TypeEnvironment]) -> TypeNode:
    """Resolve a node against an optional environment.

    Without an environment, any reference is unresolved.
    """
    if isinstance(node, TypeReference) and environment is None:
        raise UnresolvedReferenceError(node.name)
    if environment is None:
        return node
    return environment.resolve(node)
