"""Lifting - Match propagated edges against specified architecture edges.

Outcomes:
- Convergent: specified and implemented
- Divergent: implemented but not specified
- Absent: specified but not implemented (decided at finalization)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from reflexion.analysis.propagation import propagate_impl_edge
from reflexion.errors import EdgeNotFoundError
from reflexion.graph.GraphNode import SubgraphKind
from reflexion.graph.relations import EdgeKindLike, EdgeState

if TYPE_CHECKING:
    from reflexion.graph.builder import ReflexionGraph

logger = logging.getLogger(__name__)


def lift_exact(
    graph: ReflexionGraph,
    from_arch: int,
    to_arch: int,
    kind: EdgeKindLike,
) -> int | None:
    """Find the architecture edge that exactly matches (from, to, kind).

    No partial or hierarchical matching is attempted. When several
    identical architecture edges exist, the earliest-created one wins.

    Returns:
        Handle of the matching ARCHITECTURE edge, or None.
    """
    matches = graph.find_edge_ids(SubgraphKind.ARCHITECTURE, from_arch, to_arch, kind)
    return matches[0] if matches else None


def propagate_and_lift(graph: ReflexionGraph, edge_id: int) -> None:
    """Propagate one implementation edge, then classify it.

    On a match the architecture edge becomes CONVERGENT and gains the
    implementation edge as a contributor; the propagated edge and the
    implementation edge become ALLOWED. Otherwise both become DIVERGENT.

    Raises:
        EdgeNotFoundError: If ``edge_id`` does not exist, or propagation
            left no provenance entry for it.
        SubgraphMismatchError: If the edge is not an implementation edge.
    """
    if propagate_impl_edge(graph, edge_id) is None:
        return

    impl_edge = graph.get_edge(edge_id)
    prop_id = graph.propagated_edge_for(edge_id)
    if prop_id is None:
        raise EdgeNotFoundError(edge_id)
    prop_edge = graph.get_edge(prop_id)

    arch_id = lift_exact(graph, prop_edge.source, prop_edge.target, prop_edge.kind)
    if arch_id is not None:
        arch_edge = graph.get_edge(arch_id)
        contributors = graph._lift_table.setdefault(arch_id, set())
        contributors.add(edge_id)
        arch_edge.counter = len(contributors)
        arch_edge.state = EdgeState.CONVERGENT
        prop_edge.state = EdgeState.ALLOWED
        impl_edge.state = EdgeState.ALLOWED
        logger.debug("Edge %d converges on architecture edge %d", edge_id, arch_id)
    else:
        prop_edge.state = EdgeState.DIVERGENT
        impl_edge.state = EdgeState.DIVERGENT
        logger.debug("Edge %d diverges (propagated edge %d)", edge_id, prop_id)


__all__ = ["lift_exact", "propagate_and_lift"]
