"""Error types raised by the reflexion engine.

Three classes of failure cross the public API:
- Structural: a referenced node or edge handle does not exist.
- Contract: a node or edge was used where a different subgraph is required.
- Policy: a strict mapping insert would silently replace an existing mapping.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reflexion.graph.GraphNode import SubgraphKind


class ReflexionError(Exception):
    """Base class for all reflexion engine errors."""


class EdgeNotFoundError(ReflexionError):
    """A referenced edge handle does not exist in the graph."""

    def __init__(self, edge_id: int) -> None:
        self.edge_id = edge_id
        super().__init__(f"Edge {edge_id} not found")


class NodeNotFoundError(ReflexionError):
    """A referenced node handle does not exist in the graph."""

    def __init__(self, node_id: int) -> None:
        self.node_id = node_id
        super().__init__(f"Node {node_id} not found")


class SubgraphMismatchError(ReflexionError):
    """A node or edge belongs to a different subgraph than required.

    Attributes:
        handle: The offending node (or edge) handle.
        expected: The subgraph the operation required.
        found: The subgraph the handle actually belongs to.
    """

    def __init__(self, handle: int, expected: SubgraphKind, found: SubgraphKind) -> None:
        self.handle = handle
        self.expected = expected
        self.found = found
        super().__init__(
            f"Wrong subgraph for {handle}: expected {expected.value}, found {found.value}"
        )


class ReservedSubgraphError(ReflexionError, ValueError):
    """Nodes or edges were added directly to the propagated subgraph.

    Propagated edges are produced only by the propagation engine, and
    no node belongs to the propagated subgraph.
    """


class MappingConflictError(ReflexionError):
    """A strict mapping insert conflicts with an existing mapping.

    Use ``set_mapping_overwrite`` to replace the mapping explicitly.
    """

    def __init__(self, impl_node: int, old_arch: int, new_arch: int) -> None:
        self.impl_node = impl_node
        self.old_arch = old_arch
        self.new_arch = new_arch
        super().__init__(
            f"Implementation node {impl_node} is already mapped to {old_arch} "
            f"(attempted {new_arch})"
        )


class InvariantViolationError(ReflexionError):
    """The graph failed a consistency check after classification."""


class ConfigError(ReflexionError):
    """Configuration file or value could not be interpreted."""


__all__ = [
    "ReflexionError",
    "EdgeNotFoundError",
    "NodeNotFoundError",
    "SubgraphMismatchError",
    "MappingConflictError",
    "ReservedSubgraphError",
    "InvariantViolationError",
    "ConfigError",
]
