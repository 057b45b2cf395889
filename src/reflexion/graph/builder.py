"""Graph store - Holds the complete reflexion model.

This module provides ReflexionGraph, the arena that owns every node and
edge by integer handle, the architecture-space and implementation
adjacency indexes, the hashed (source, target, kind) index, the mapping
table, and the provenance tables written by the propagation engine.

Classification itself lives in ``reflexion.analysis``; the methods in the
"Analysis API" section below delegate there.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

from reflexion.config import EngineConfig
from reflexion.errors import (
    EdgeNotFoundError,
    NodeNotFoundError,
    ReservedSubgraphError,
    SubgraphMismatchError,
)
from reflexion.graph.GraphNode import GraphNode, SubgraphKind
from reflexion.graph.mapping import MappingTable
from reflexion.graph.relations import Edge, EdgeKind, EdgeKindLike, EdgeState

if TYPE_CHECKING:
    from reflexion.analysis.classify import ConformanceSummary

logger = logging.getLogger(__name__)

TripleKey = tuple[SubgraphKind, int, int, EdgeKind]


@dataclass
class ReflexionGraph:
    """Container for architecture, implementation and propagated edges.

    Nodes and edges are referenced by integer handles allocated from
    monotonic counters; handles are never reused. Propagated edges are
    discarded and regenerated by every full recompute.

    Attributes:
        config: Engine settings (pre/post-run checks).
    """

    config: EngineConfig = field(default_factory=EngineConfig)

    # Internal storage (prefixed) - excluded from constructor
    _nodes: dict[int, GraphNode] = field(default_factory=dict, init=False, repr=False)
    _edges: dict[int, Edge] = field(default_factory=dict, init=False, repr=False)
    _next_node_id: int = field(default=0, init=False, repr=False)
    _next_edge_id: int = field(default=0, init=False, repr=False)

    # Adjacency: architecture space holds ARCHITECTURE and PROPAGATED edges
    _arch_out: dict[int, list[int]] = field(default_factory=dict, init=False, repr=False)
    _impl_out: dict[int, list[int]] = field(default_factory=dict, init=False, repr=False)
    _triple_index: dict[TripleKey, list[int]] = field(
        default_factory=dict, init=False, repr=False
    )

    # Provenance written by propagation and lifting
    _propagation_table: dict[int, set[int]] = field(default_factory=dict, init=False, repr=False)
    _propagated_by: dict[int, int] = field(default_factory=dict, init=False, repr=False)
    _lift_table: dict[int, set[int]] = field(default_factory=dict, init=False, repr=False)

    mapping: MappingTable = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.mapping = MappingTable(self.node_subgraph)

    # ─────────────────────────────────────────────────────────────────────────
    # Nodes
    # ─────────────────────────────────────────────────────────────────────────

    def add_node(
        self,
        label: str,
        subgraph: SubgraphKind,
        parent: int | None = None,
    ) -> int:
        """Add a node and return its handle.

        Args:
            label: Display name.
            subgraph: ARCHITECTURE or IMPLEMENTATION.
            parent: Optional containing node; must be in the same subgraph.

        Raises:
            ReservedSubgraphError: If ``subgraph`` is PROPAGATED.
            NodeNotFoundError: If ``parent`` does not exist.
            SubgraphMismatchError: If ``parent`` is in another subgraph.
        """
        if subgraph == SubgraphKind.PROPAGATED:
            raise ReservedSubgraphError("Nodes cannot belong to the propagated subgraph")
        if parent is not None:
            parent_subgraph = self.node_subgraph(parent)
            if parent_subgraph != subgraph:
                raise SubgraphMismatchError(parent, subgraph, parent_subgraph)

        node_id = self._next_node_id
        self._next_node_id += 1
        self._nodes[node_id] = GraphNode(label=label, subgraph=subgraph, parent=parent, id=node_id)
        return node_id

    def get_node(self, node_id: int) -> GraphNode:
        """Return the node for a handle.

        Raises:
            NodeNotFoundError: If no node has this handle.
        """
        node = self._nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def has_node(self, node_id: int) -> bool:
        return node_id in self._nodes

    def node_subgraph(self, node_id: int) -> SubgraphKind:
        return self.get_node(node_id).subgraph

    def iter_nodes(self, subgraph: SubgraphKind | None = None) -> Iterator[GraphNode]:
        """Iterate nodes in creation order, optionally filtered by subgraph."""
        for node in self._nodes.values():
            if subgraph is None or node.subgraph == subgraph:
                yield node

    def iter_children(self, node_id: int) -> Iterator[GraphNode]:
        """Iterate nodes whose parent is ``node_id``."""
        self.get_node(node_id)
        for node in self._nodes.values():
            if node.parent == node_id:
                yield node

    def node_count(self) -> int:
        return len(self._nodes)

    # ─────────────────────────────────────────────────────────────────────────
    # Edges
    # ─────────────────────────────────────────────────────────────────────────

    def add_edge(
        self,
        source: int,
        target: int,
        kind: EdgeKindLike,
        subgraph: SubgraphKind,
    ) -> int:
        """Add an architecture or implementation edge and return its handle.

        Raises:
            ReservedSubgraphError: If ``subgraph`` is PROPAGATED (reserved for propagation).
            NodeNotFoundError: If an endpoint does not exist.
            SubgraphMismatchError: If an endpoint is not in ``subgraph``.
        """
        if subgraph == SubgraphKind.PROPAGATED:
            raise ReservedSubgraphError("Propagated edges are created by the propagation engine")
        return self._insert_edge(Edge(source, target, EdgeKind.of(kind), subgraph))

    def _insert_edge(self, edge: Edge) -> int:
        """Validate endpoint typing, assign a handle and index the edge."""
        expected = (
            SubgraphKind.ARCHITECTURE
            if edge.subgraph.in_architecture_space
            else SubgraphKind.IMPLEMENTATION
        )
        for endpoint in (edge.source, edge.target):
            found = self.node_subgraph(endpoint)
            if found != expected:
                raise SubgraphMismatchError(endpoint, expected, found)

        edge.id = self._next_edge_id
        self._next_edge_id += 1
        self._edges[edge.id] = edge

        if edge.subgraph.in_architecture_space:
            self._arch_out.setdefault(edge.source, []).append(edge.id)
            key = (edge.subgraph, edge.source, edge.target, edge.kind)
            self._triple_index.setdefault(key, []).append(edge.id)
        else:
            self._impl_out.setdefault(edge.source, []).append(edge.id)
        return edge.id

    def _remove_edge(self, edge_id: int) -> Edge:
        """Drop an edge from storage, adjacency and the triple index."""
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            raise EdgeNotFoundError(edge_id)

        adjacency = self._arch_out if edge.subgraph.in_architecture_space else self._impl_out
        out = adjacency.get(edge.source)
        if out is not None:
            out.remove(edge_id)
            if not out:
                del adjacency[edge.source]

        key = (edge.subgraph, edge.source, edge.target, edge.kind)
        bucket = self._triple_index.get(key)
        if bucket is not None:
            bucket.remove(edge_id)
            if not bucket:
                del self._triple_index[key]
        return edge

    def get_edge(self, edge_id: int) -> Edge:
        """Return the edge for a handle.

        Raises:
            EdgeNotFoundError: If no edge has this handle.
        """
        edge = self._edges.get(edge_id)
        if edge is None:
            raise EdgeNotFoundError(edge_id)
        return edge

    def has_edge(self, edge_id: int) -> bool:
        return edge_id in self._edges

    def edge_state(self, edge_id: int) -> EdgeState:
        return self.get_edge(edge_id).state

    def edge_counter(self, edge_id: int) -> int:
        return self.get_edge(edge_id).counter

    def iter_edges(self, subgraph: SubgraphKind | None = None) -> Iterator[Edge]:
        """Iterate edges in creation order, optionally filtered by subgraph."""
        for edge in self._edges.values():
            if subgraph is None or edge.subgraph == subgraph:
                yield edge

    def edge_count(self, subgraph: SubgraphKind | None = None) -> int:
        if subgraph is None:
            return len(self._edges)
        return sum(1 for _ in self.iter_edges(subgraph))

    def iter_arch_out(self, node_id: int) -> Iterator[Edge]:
        """Iterate architecture-space edges (specified and propagated) leaving a node."""
        for edge_id in self._arch_out.get(node_id, ()):
            yield self.get_edge(edge_id)

    def iter_impl_out(self, node_id: int) -> Iterator[Edge]:
        """Iterate implementation edges leaving a node."""
        for edge_id in self._impl_out.get(node_id, ()):
            yield self.get_edge(edge_id)

    def find_edge_ids(
        self,
        subgraph: SubgraphKind,
        source: int,
        target: int,
        kind: EdgeKindLike,
    ) -> list[int]:
        """Look up architecture-space edges by exact (source, target, kind).

        Returns:
            Matching handles in creation order (empty if none). Only
            ARCHITECTURE and PROPAGATED edges are indexed.
        """
        return list(self._triple_index.get((subgraph, source, target, EdgeKind.of(kind)), ()))

    # ─────────────────────────────────────────────────────────────────────────
    # Provenance
    # ─────────────────────────────────────────────────────────────────────────

    def provenance(self, prop_edge_id: int) -> frozenset[int]:
        """Implementation edges that produced a propagated edge."""
        return frozenset(self._propagation_table.get(prop_edge_id, ()))

    def propagated_edge_for(self, impl_edge_id: int) -> int | None:
        """The propagated edge an implementation edge projects onto, if any."""
        return self._propagated_by.get(impl_edge_id)

    def lifted_from(self, arch_edge_id: int) -> frozenset[int]:
        """Implementation edges whose projection lifted onto an architecture edge."""
        return frozenset(self._lift_table.get(arch_edge_id, ()))

    def iter_propagation_table(self) -> Iterator[tuple[int, frozenset[int]]]:
        for prop_id, impls in self._propagation_table.items():
            yield prop_id, frozenset(impls)

    # ─────────────────────────────────────────────────────────────────────────
    # Transient state resets
    # ─────────────────────────────────────────────────────────────────────────

    def clear_propagated_edges(self) -> None:
        """Remove every propagated edge and all provenance written by a prior run."""
        prop_ids = [e.id for e in self._edges.values() if e.subgraph == SubgraphKind.PROPAGATED]
        for edge_id in prop_ids:
            self._remove_edge(edge_id)
        self._propagation_table.clear()
        self._propagated_by.clear()
        self._lift_table.clear()
        if prop_ids:
            logger.debug("Cleared %d propagated edges", len(prop_ids))

    def init_states(self) -> None:
        """Reset classification: architecture edges SPECIFIED, implementation UNDEFINED."""
        for edge in self._edges.values():
            if edge.subgraph == SubgraphKind.ARCHITECTURE:
                edge.state = EdgeState.SPECIFIED
                edge.counter = 0
            elif edge.subgraph == SubgraphKind.IMPLEMENTATION:
                edge.state = EdgeState.UNDEFINED
                edge.counter = 0

    # ─────────────────────────────────────────────────────────────────────────
    # Mapping API
    # ─────────────────────────────────────────────────────────────────────────

    def set_mapping(self, impl_node: int, arch_node: int) -> None:
        """Strict mapping insert (see MappingTable.set_mapping)."""
        self.mapping.set_mapping(impl_node, arch_node)

    def set_mapping_overwrite(self, impl_node: int, arch_node: int) -> int | None:
        """Permissive mapping insert (see MappingTable.set_mapping_overwrite)."""
        return self.mapping.set_mapping_overwrite(impl_node, arch_node)

    def get_arch_node(self, impl_node: int) -> int | None:
        return self.mapping.get_arch_node(impl_node)

    def is_mapped(self, impl_node: int) -> bool:
        return self.mapping.is_mapped(impl_node)

    def remove_mapping(self, impl_node: int) -> int | None:
        return self.mapping.remove_mapping(impl_node)

    def clear_mappings(self) -> None:
        self.mapping.clear_mappings()

    def validate_all_mappings(self) -> None:
        self.mapping.validate_all_mappings()

    def mapping_len(self) -> int:
        return self.mapping.mapping_len()

    def iter_mapping(self) -> Iterator[tuple[int, int]]:
        return self.mapping.iter_mapping()

    def unmapped_impl_nodes(self) -> Iterator[GraphNode]:
        """Iterate implementation nodes that have no mapping entry."""
        for node in self.iter_nodes(SubgraphKind.IMPLEMENTATION):
            if node.id not in self.mapping:
                yield node

    # ─────────────────────────────────────────────────────────────────────────
    # Analysis API (delegates to reflexion.analysis)
    # ─────────────────────────────────────────────────────────────────────────

    def get_or_create_propagated_edge(self, source: int, target: int, kind: EdgeKindLike) -> int:
        from reflexion.analysis.propagation import get_or_create_propagated_edge

        return get_or_create_propagated_edge(self, source, target, kind)

    def propagate_impl_edge(self, edge_id: int) -> int | None:
        from reflexion.analysis.propagation import propagate_impl_edge

        return propagate_impl_edge(self, edge_id)

    def lift_exact(self, from_arch: int, to_arch: int, kind: EdgeKindLike) -> int | None:
        from reflexion.analysis.lifting import lift_exact

        return lift_exact(self, from_arch, to_arch, kind)

    def propagate_and_lift(self, edge_id: int) -> None:
        from reflexion.analysis.lifting import propagate_and_lift

        propagate_and_lift(self, edge_id)

    def run_from_scratch(self) -> None:
        from reflexion.analysis.classify import run_from_scratch

        run_from_scratch(self)

    def finalize_architecture_states(self) -> None:
        from reflexion.analysis.classify import finalize_architecture_states

        finalize_architecture_states(self)

    def count_violations(self) -> int:
        from reflexion.analysis.classify import count_violations

        return count_violations(self)

    def iter_violations(self) -> Iterator[Edge]:
        from reflexion.analysis.classify import iter_violations

        return iter_violations(self)

    def check_invariants(self) -> None:
        from reflexion.analysis.classify import check_invariants

        check_invariants(self)

    def summary(self) -> ConformanceSummary:
        from reflexion.analysis.classify import summarize

        return summarize(self)

    def add_impl_edge_and_recompute(self, edge: Edge) -> int:
        from reflexion.analysis.delta import add_impl_edge_and_recompute

        return add_impl_edge_and_recompute(self, edge)

    def remove_impl_edge_and_recompute(self, edge_id: int) -> None:
        from reflexion.analysis.delta import remove_impl_edge_and_recompute

        remove_impl_edge_and_recompute(self, edge_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Comparison and copying
    # ─────────────────────────────────────────────────────────────────────────

    def snapshot(self) -> dict[str, Any]:
        """Return a canonical, comparable view of all classification results.

        Edges are keyed by (source, target, kind name, ordinal), where the
        ordinal counts earlier edges of the same subgraph with the same
        triple, rather than by handle: propagated handles are regenerated
        on every full recompute and shift the handles of edges added
        afterwards. Provenance is expressed with the same keys.
        """
        keys: dict[int, tuple[int, int, str, int]] = {}
        seen: dict[tuple[SubgraphKind, int, int, str], int] = {}
        for edge in self._edges.values():
            triple = (edge.subgraph, edge.source, edge.target, edge.kind.name)
            ordinal = seen.get(triple, 0)
            seen[triple] = ordinal + 1
            keys[edge.id] = (edge.source, edge.target, edge.kind.name, ordinal)

        result: dict[str, dict[tuple[int, int, str, int], tuple[Any, ...]]] = {
            subgraph.value: {} for subgraph in SubgraphKind
        }
        for edge in self._edges.values():
            if edge.subgraph == SubgraphKind.PROPAGATED:
                contributors = self._propagation_table.get(edge.id, ())
            elif edge.subgraph == SubgraphKind.ARCHITECTURE:
                contributors = self._lift_table.get(edge.id, ())
            else:
                contributors = ()
            result[edge.subgraph.value][keys[edge.id]] = (
                edge.state,
                edge.counter,
                tuple(sorted(keys[eid] for eid in contributors)),
            )
        return result

    def clone(self) -> ReflexionGraph:
        """Create an independent deep copy of this graph."""
        import copy

        return copy.deepcopy(self)


__all__ = ["ReflexionGraph"]
