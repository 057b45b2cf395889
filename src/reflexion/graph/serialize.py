"""Graph Serialization - Export ReflexionGraph to JSON-compatible dicts.

Reporters consume these dicts; nothing here writes files.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from reflexion.graph.GraphNode import SubgraphKind

if TYPE_CHECKING:
    from reflexion.graph.builder import ReflexionGraph
    from reflexion.graph.GraphNode import GraphNode
    from reflexion.graph.relations import Edge


def serialize_node(node: GraphNode) -> dict[str, Any]:
    """Serialize a GraphNode to a JSON-compatible dict."""
    result: dict[str, Any] = {
        "id": node.id,
        "label": node.label,
        "subgraph": node.subgraph.value,
    }
    if node.parent is not None:
        result["parent"] = node.parent
    return result


def serialize_edge(graph: ReflexionGraph, edge: Edge) -> dict[str, Any]:
    """Serialize an Edge, including provenance for propagated edges.

    Args:
        graph: Graph owning the edge (for provenance lookups).
        edge: The edge to serialize.

    Returns:
        Dict suitable for JSON serialization.
    """
    result: dict[str, Any] = {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "kind": edge.kind.name,
        "subgraph": edge.subgraph.value,
        "state": edge.state.value,
    }
    if edge.subgraph == SubgraphKind.PROPAGATED:
        result["counter"] = edge.counter
        result["provenance"] = sorted(graph.provenance(edge.id))
    elif edge.subgraph == SubgraphKind.ARCHITECTURE:
        result["counter"] = edge.counter
        result["contributors"] = sorted(graph.lifted_from(edge.id))
    return result


def serialize_graph(graph: ReflexionGraph) -> dict[str, Any]:
    """Serialize a ReflexionGraph to a JSON-compatible dict.

    Returns:
        Dict with nodes, edges, mapping, violations and summary metadata.
    """
    summary = graph.summary()
    return {
        "nodes": [serialize_node(node) for node in graph.iter_nodes()],
        "edges": [serialize_edge(graph, edge) for edge in graph.iter_edges()],
        "mapping": [
            {"implementation": impl_node, "architecture": arch_node}
            for impl_node, arch_node in graph.iter_mapping()
        ],
        "violations": [edge.id for edge in graph.iter_violations()],
        "metadata": {
            "node_count": graph.node_count(),
            "edge_count": graph.edge_count(),
            "violation_count": summary.violations,
            "convergent": summary.convergent,
            "absent": summary.absent,
            "divergent": summary.divergent,
            "allowed": summary.allowed,
            "unmapped": summary.unmapped,
            "mapped_nodes": summary.mapped_nodes,
            "unmapped_nodes": summary.unmapped_nodes,
        },
    }


__all__ = ["serialize_node", "serialize_edge", "serialize_graph"]
