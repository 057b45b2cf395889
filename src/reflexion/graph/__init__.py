"""Graph module - Core graph data structures.

Exports:
- SubgraphKind: Architecture / implementation / propagated partitions
- GraphNode: Labelled node with optional containment parent
- Edge: Typed edge with classification state and counter
- EdgeKind: Open relation kind
- EdgeState: Classification state
- MappingTable: Implementation-to-architecture node mapping
- ReflexionGraph: Store owning nodes, edges, indexes and provenance
"""

from reflexion.graph.builder import ReflexionGraph
from reflexion.graph.GraphNode import GraphNode, SubgraphKind
from reflexion.graph.mapping import MappingTable
from reflexion.graph.relations import Edge, EdgeKind, EdgeState
from reflexion.graph.serialize import serialize_graph

__all__ = [
    "SubgraphKind",
    "GraphNode",
    "Edge",
    "EdgeKind",
    "EdgeState",
    "MappingTable",
    "ReflexionGraph",
    "serialize_graph",
]
