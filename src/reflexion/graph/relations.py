"""Relations - Edge types, states, and the Edge record.

This module defines:
- EdgeKind: Open, hashable relation tag ("calls", "depends-on", ...)
- EdgeState: Classification state of an edge
- Edge: A directed, typed edge between two nodes
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from reflexion.graph.GraphNode import SubgraphKind


@dataclass(frozen=True, order=True)
class EdgeKind:
    """Relation kind of an edge.

    Kinds form an open set: any non-empty name is valid. Two kinds are
    equal when their names are equal, so kinds can key the
    (source, target, kind) indexes used for propagation and lifting.
    """

    name: str

    CALLS: ClassVar[EdgeKind]
    DEPENDS_ON: ClassVar[EdgeKind]
    IMPORTS: ClassVar[EdgeKind]
    INHERITS: ClassVar[EdgeKind]
    CONTAINS: ClassVar[EdgeKind]
    USES: ClassVar[EdgeKind]

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("EdgeKind name must be non-empty")

    @classmethod
    def of(cls, kind: EdgeKindLike) -> EdgeKind:
        """Coerce a string or EdgeKind into an EdgeKind."""
        if isinstance(kind, EdgeKind):
            return kind
        return cls(str(kind))

    def __str__(self) -> str:
        return self.name


EdgeKind.CALLS = EdgeKind("calls")
EdgeKind.DEPENDS_ON = EdgeKind("depends-on")
EdgeKind.IMPORTS = EdgeKind("imports")
EdgeKind.INHERITS = EdgeKind("inherits")
EdgeKind.CONTAINS = EdgeKind("contains")
EdgeKind.USES = EdgeKind("uses")

EdgeKindLike = Union[EdgeKind, str]


class EdgeState(Enum):
    """Classification state of an edge.

    Architecture edges: UNDEFINED -> SPECIFIED -> CONVERGENT | ABSENT
    Implementation and propagated edges: UNDEFINED -> ALLOWED | DIVERGENT | UNMAPPED
    """

    UNDEFINED = "undefined"
    SPECIFIED = "specified"
    CONVERGENT = "convergent"
    DIVERGENT = "divergent"
    ABSENT = "absent"
    ALLOWED = "allowed"
    UNMAPPED = "unmapped"

    def is_violation(self) -> bool:
        """Check if this state counts as an architecture violation.

        Returns:
            True for DIVERGENT (implemented but not specified) and
            ABSENT (specified but not implemented).
        """
        return self in (EdgeState.DIVERGENT, EdgeState.ABSENT)


@dataclass
class Edge:
    """A directed, typed edge between two nodes.

    Only ``state`` and ``counter`` change after creation, and only during
    classification. ``counter`` is meaningful for architecture and
    propagated edges: it counts the distinct implementation edges
    currently projecting onto the edge.

    Attributes:
        source: Handle of the source node.
        target: Handle of the target node.
        kind: Relation kind.
        subgraph: Subgraph the edge belongs to.
        state: Current classification state.
        counter: Number of contributing implementation edges.
        id: Handle assigned by the graph (-1 until added).
    """

    source: int
    target: int
    kind: EdgeKind
    subgraph: SubgraphKind
    state: EdgeState = EdgeState.UNDEFINED
    counter: int = 0
    id: int = -1

    def __post_init__(self) -> None:
        self.kind = EdgeKind.of(self.kind)

    @property
    def triple(self) -> tuple[int, int, EdgeKind]:
        """The (source, target, kind) identity used for matching."""
        return (self.source, self.target, self.kind)

    def __str__(self) -> str:
        """Human-readable representation."""
        return (
            f"{self.source} --[{self.kind}]--> {self.target} "
            f"({self.subgraph.value}, {self.state.value})"
        )


__all__ = ["EdgeKind", "EdgeKindLike", "EdgeState", "Edge"]
