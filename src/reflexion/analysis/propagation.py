"""Propagation - Project implementation edges into architecture space.

An implementation edge (a -> b, kind) whose endpoints map to
architecture nodes (A, B) produces exactly one propagated edge
(A -> B, kind) per distinct triple. Every contributing implementation
edge is recorded in the propagation table, and the propagated edge's
counter always equals the size of that provenance set.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from reflexion.errors import SubgraphMismatchError
from reflexion.graph.GraphNode import SubgraphKind
from reflexion.graph.relations import Edge, EdgeKind, EdgeKindLike, EdgeState

if TYPE_CHECKING:
    from reflexion.graph.builder import ReflexionGraph

logger = logging.getLogger(__name__)


def get_or_create_propagated_edge(
    graph: ReflexionGraph,
    source: int,
    target: int,
    kind: EdgeKindLike,
) -> int:
    """Reuse the propagated edge for (source, target, kind) or create it.

    Only PROPAGATED edges are considered for reuse; an ARCHITECTURE edge
    with the same triple is never returned.

    Returns:
        Handle of the propagated edge.
    """
    kind = EdgeKind.of(kind)
    existing = graph.find_edge_ids(SubgraphKind.PROPAGATED, source, target, kind)
    if existing:
        return existing[0]

    prop_id = graph._insert_edge(Edge(source, target, kind, SubgraphKind.PROPAGATED))
    logger.debug("Created propagated edge %d: %d --[%s]--> %d", prop_id, source, kind, target)
    return prop_id


def detach_impl_edge(graph: ReflexionGraph, edge_id: int) -> None:
    """Withdraw an implementation edge from every provenance set holding it.

    Counters of the affected propagated and architecture edges are
    re-synced. A propagated edge left without provenance is removed; an
    architecture edge left without contributors returns to SPECIFIED.
    """
    prop_id = graph._propagated_by.pop(edge_id, None)
    if prop_id is not None:
        sources = graph._propagation_table.get(prop_id, set())
        sources.discard(edge_id)
        if sources:
            graph.get_edge(prop_id).counter = len(sources)
        else:
            graph._propagation_table.pop(prop_id, None)
            graph._remove_edge(prop_id)
            logger.debug("Removed propagated edge %d with empty provenance", prop_id)

    for arch_id, contributors in graph._lift_table.items():
        if edge_id not in contributors:
            continue
        contributors.discard(edge_id)
        arch_edge = graph.get_edge(arch_id)
        arch_edge.counter = len(contributors)
        if not contributors:
            arch_edge.state = EdgeState.SPECIFIED


def propagate_impl_edge(graph: ReflexionGraph, edge_id: int) -> int | None:
    """Propagate a single implementation edge into architecture space.

    Steps:
    1. Map both endpoints through the mapping table. If either is
       unmapped, mark the edge UNMAPPED and stop.
    2. Find or create the propagated edge for the mapped triple.
    3. If the edge previously projected elsewhere (its mapping changed
       since), withdraw it from the old provenance and lift sets.
    4. Record the implementation edge in the propagated edge's
       provenance and sync its counter.

    Returns:
        Handle of the propagated edge, or None if the edge is unmapped.

    Raises:
        EdgeNotFoundError: If ``edge_id`` does not exist.
        SubgraphMismatchError: If the edge is not an implementation edge.
    """
    edge = graph.get_edge(edge_id)
    if edge.subgraph != SubgraphKind.IMPLEMENTATION:
        raise SubgraphMismatchError(edge_id, SubgraphKind.IMPLEMENTATION, edge.subgraph)

    from_arch = graph.mapping.get_arch_node(edge.source)
    to_arch = graph.mapping.get_arch_node(edge.target)
    if from_arch is None or to_arch is None:
        detach_impl_edge(graph, edge_id)
        edge.state = EdgeState.UNMAPPED
        logger.debug("Implementation edge %d is unmapped", edge_id)
        return None

    prop_id = get_or_create_propagated_edge(graph, from_arch, to_arch, edge.kind)
    if graph._propagated_by.get(edge_id) != prop_id:
        detach_impl_edge(graph, edge_id)
    sources = graph._propagation_table.setdefault(prop_id, set())
    sources.add(edge_id)
    graph._propagated_by[edge_id] = prop_id
    graph.get_edge(prop_id).counter = len(sources)
    return prop_id


__all__ = ["detach_impl_edge", "get_or_create_propagated_edge", "propagate_impl_edge"]
