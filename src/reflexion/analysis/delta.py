"""Incremental updates - Mutate one implementation edge and reclassify.

Both operations currently trade efficiency for correctness: they apply
the single-edge change and then rerun the full analysis. The contract
any replacement must keep: adding (or removing) one implementation edge
and recomputing yields the same ``snapshot()`` as building the graph
with (or without) that edge and running ``run_from_scratch`` once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from reflexion.analysis.classify import run_from_scratch
from reflexion.errors import SubgraphMismatchError
from reflexion.graph.GraphNode import SubgraphKind
from reflexion.graph.relations import Edge

if TYPE_CHECKING:
    from reflexion.graph.builder import ReflexionGraph

logger = logging.getLogger(__name__)


def add_impl_edge_and_recompute(graph: ReflexionGraph, edge: Edge) -> int:
    """Insert an implementation edge, then recompute everything.

    Args:
        graph: The graph to update.
        edge: Unattached edge record; its ``id``, ``state`` and
            ``counter`` are ignored.

    Returns:
        Handle of the inserted edge.

    Raises:
        SubgraphMismatchError: If ``edge`` is not an implementation edge
            or an endpoint is not an implementation node.
        NodeNotFoundError: If an endpoint does not exist.
    """
    if edge.subgraph != SubgraphKind.IMPLEMENTATION:
        raise SubgraphMismatchError(edge.source, SubgraphKind.IMPLEMENTATION, edge.subgraph)

    edge_id = graph.add_edge(edge.source, edge.target, edge.kind, edge.subgraph)
    logger.debug("Added implementation edge %d; recomputing", edge_id)
    run_from_scratch(graph)
    return edge_id


def remove_impl_edge_and_recompute(graph: ReflexionGraph, edge_id: int) -> None:
    """Remove an implementation edge, then recompute everything.

    Raises:
        EdgeNotFoundError: If ``edge_id`` does not exist.
        SubgraphMismatchError: If the edge is not an implementation edge.
    """
    edge = graph.get_edge(edge_id)
    if edge.subgraph != SubgraphKind.IMPLEMENTATION:
        raise SubgraphMismatchError(edge_id, SubgraphKind.IMPLEMENTATION, edge.subgraph)

    graph._remove_edge(edge_id)
    logger.debug("Removed implementation edge %d; recomputing", edge_id)
    run_from_scratch(graph)


__all__ = ["add_impl_edge_and_recompute", "remove_impl_edge_and_recompute"]
