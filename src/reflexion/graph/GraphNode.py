"""GraphNode - Node representation for the reflexion graph.

This module provides:
- SubgraphKind: Which part of the model a node or edge belongs to
- GraphNode: A labelled node with an optional containment parent
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SubgraphKind(Enum):
    """Partitions of the reflexion graph.

    - ARCHITECTURE: Declared components and the relations they allow
    - IMPLEMENTATION: Entities and relations extracted from the system
    - PROPAGATED: Implementation relations projected into architecture
      space (edges only, created by the propagation engine)
    """

    ARCHITECTURE = "architecture"
    IMPLEMENTATION = "implementation"
    PROPAGATED = "propagated"

    @property
    def in_architecture_space(self) -> bool:
        """True for subgraphs whose edges connect architecture nodes."""
        return self in (SubgraphKind.ARCHITECTURE, SubgraphKind.PROPAGATED)


@dataclass
class GraphNode:
    """A node in the reflexion graph.

    Nodes are created once and never mutated. The parent handle forms a
    containment forest within a subgraph (e.g. module -> class).

    Attributes:
        id: Handle assigned by the graph (-1 until added).
        label: Human-readable name.
        subgraph: ARCHITECTURE or IMPLEMENTATION.
        parent: Handle of the containing node, if any.
    """

    label: str
    subgraph: SubgraphKind
    parent: int | None = None
    id: int = -1

    def __str__(self) -> str:
        """Return string representation for display."""
        return f"{self.label}#{self.id} ({self.subgraph.value})"


__all__ = ["SubgraphKind", "GraphNode"]
