"""Mapping table - implementation node to architecture node.

The table is a partial function: each implementation node maps to at
most one architecture node, while many implementation nodes may share
the same architecture node. Every accessor validates subgraph membership
of its arguments before touching the table.
"""

from __future__ import annotations

from typing import Callable, Iterator

from reflexion.errors import MappingConflictError, SubgraphMismatchError
from reflexion.graph.GraphNode import SubgraphKind


class MappingTable:
    """Partial map from implementation nodes to architecture nodes.

    Args:
        subgraph_of: Resolves a node handle to its subgraph. Must raise
            NodeNotFoundError for unknown handles.
    """

    def __init__(self, subgraph_of: Callable[[int], SubgraphKind]) -> None:
        self._subgraph_of = subgraph_of
        self._maps_to: dict[int, int] = {}

    # Validation helpers

    def _expect(self, node_id: int, expected: SubgraphKind) -> None:
        found = self._subgraph_of(node_id)
        if found != expected:
            raise SubgraphMismatchError(node_id, expected, found)

    def expect_impl_node(self, impl_node: int) -> None:
        """Raise unless ``impl_node`` is an implementation node."""
        self._expect(impl_node, SubgraphKind.IMPLEMENTATION)

    def expect_arch_node(self, arch_node: int) -> None:
        """Raise unless ``arch_node`` is an architecture node."""
        self._expect(arch_node, SubgraphKind.ARCHITECTURE)

    # Mutation

    def set_mapping(self, impl_node: int, arch_node: int) -> None:
        """Map an implementation node to an architecture node.

        Setting an identical mapping again is a no-op.

        Raises:
            SubgraphMismatchError: If either node is in the wrong subgraph.
            MappingConflictError: If ``impl_node`` is already mapped elsewhere.
        """
        self.expect_impl_node(impl_node)
        self.expect_arch_node(arch_node)

        old_arch = self._maps_to.get(impl_node)
        if old_arch is None:
            self._maps_to[impl_node] = arch_node
        elif old_arch != arch_node:
            raise MappingConflictError(impl_node, old_arch, arch_node)

    def set_mapping_overwrite(self, impl_node: int, arch_node: int) -> int | None:
        """Map unconditionally, replacing any existing mapping.

        Returns:
            The previous architecture node, or None if there was none.
        """
        self.expect_impl_node(impl_node)
        self.expect_arch_node(arch_node)

        previous = self._maps_to.get(impl_node)
        self._maps_to[impl_node] = arch_node
        return previous

    def remove_mapping(self, impl_node: int) -> int | None:
        """Remove the mapping for ``impl_node`` and return its old target."""
        self.expect_impl_node(impl_node)
        return self._maps_to.pop(impl_node, None)

    def clear_mappings(self) -> None:
        self._maps_to.clear()

    # Queries

    def get_arch_node(self, impl_node: int) -> int | None:
        """Return the architecture node for ``impl_node``, or None if unmapped."""
        self.expect_impl_node(impl_node)
        return self._maps_to.get(impl_node)

    def is_mapped(self, impl_node: int) -> bool:
        self.expect_impl_node(impl_node)
        return impl_node in self._maps_to

    def mapping_len(self) -> int:
        return len(self._maps_to)

    def iter_mapping(self) -> Iterator[tuple[int, int]]:
        """Iterate (implementation node, architecture node) pairs in insertion order."""
        yield from self._maps_to.items()

    def validate_all_mappings(self) -> None:
        """Re-check subgraph membership of every entry.

        Not invoked automatically; see ``EngineConfig.validate_mappings_before_run``.

        Raises:
            NodeNotFoundError: If an entry references a node that no longer exists.
            SubgraphMismatchError: If an entry's endpoints are in the wrong subgraph.
        """
        for impl_node, arch_node in self._maps_to.items():
            self.expect_impl_node(impl_node)
            self.expect_arch_node(arch_node)

    def __len__(self) -> int:
        return len(self._maps_to)

    def __contains__(self, impl_node: object) -> bool:
        return impl_node in self._maps_to


__all__ = ["MappingTable"]
