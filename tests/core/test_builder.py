"""Tests for ReflexionGraph - node/edge store, adjacency and indexes."""

import pytest

from reflexion.errors import (
    EdgeNotFoundError,
    NodeNotFoundError,
    ReflexionError,
    ReservedSubgraphError,
    SubgraphMismatchError,
)
from reflexion.graph import EdgeKind, EdgeState, ReflexionGraph, SubgraphKind
from tests.core.graph_test_helpers import subgraph_string


class TestNodes:
    """Tests for node creation and lookup."""

    def test_add_node_returns_distinct_handles(self, graph):
        a = graph.add_node("UI", SubgraphKind.ARCHITECTURE)
        b = graph.add_node("LoginPage", SubgraphKind.IMPLEMENTATION)
        assert a != b
        assert graph.node_count() == 2

    def test_get_node(self, graph):
        node_id = graph.add_node("UI", SubgraphKind.ARCHITECTURE)
        node = graph.get_node(node_id)
        assert node.id == node_id
        assert node.label == "UI"
        assert node.subgraph == SubgraphKind.ARCHITECTURE
        assert node.parent is None

    def test_get_missing_node_raises(self, graph):
        with pytest.raises(NodeNotFoundError) as exc_info:
            graph.get_node(42)
        assert exc_info.value.node_id == 42

    def test_propagated_nodes_rejected(self, graph):
        with pytest.raises(ReservedSubgraphError):
            graph.add_node("X", SubgraphKind.PROPAGATED)

    def test_parent_in_same_subgraph(self, graph):
        module = graph.add_node("auth", SubgraphKind.IMPLEMENTATION)
        cls = graph.add_node("LoginPage", SubgraphKind.IMPLEMENTATION, parent=module)
        assert graph.get_node(cls).parent == module
        assert [n.id for n in graph.iter_children(module)] == [cls]

    def test_parent_in_other_subgraph_rejected(self, graph):
        arch = graph.add_node("UI", SubgraphKind.ARCHITECTURE)
        with pytest.raises(SubgraphMismatchError) as exc_info:
            graph.add_node("LoginPage", SubgraphKind.IMPLEMENTATION, parent=arch)
        err = exc_info.value
        assert err.handle == arch
        assert err.expected == SubgraphKind.IMPLEMENTATION
        assert err.found == SubgraphKind.ARCHITECTURE

    def test_missing_parent_rejected(self, graph):
        with pytest.raises(NodeNotFoundError):
            graph.add_node("LoginPage", SubgraphKind.IMPLEMENTATION, parent=7)

    def test_iter_nodes_by_subgraph(self, model):
        model.arch("UI", "Service")
        model.impl("LoginPage")
        labels = [n.label for n in model.graph.iter_nodes(SubgraphKind.ARCHITECTURE)]
        assert labels == ["UI", "Service"]


class TestEdges:
    """Tests for edge creation, typing and adjacency."""

    def test_add_architecture_edge(self, model):
        model.arch("UI", "Service")
        edge_id = model.spec("UI", "Service")
        edge = model.graph.get_edge(edge_id)
        assert edge.subgraph == SubgraphKind.ARCHITECTURE
        assert edge.kind == EdgeKind.CALLS
        assert edge.state == EdgeState.UNDEFINED
        assert [e.id for e in model.graph.iter_arch_out(model.nodes["UI"])] == [edge_id]

    def test_add_implementation_edge(self, model):
        model.impl("LoginPage", "UserService")
        edge_id = model.code("LoginPage", "UserService")
        assert [e.id for e in model.graph.iter_impl_out(model.nodes["LoginPage"])] == [edge_id]
        assert list(model.graph.iter_arch_out(model.nodes["LoginPage"])) == []

    def test_architecture_edge_with_impl_endpoint_rejected(self, model):
        model.arch("UI")
        model.impl("LoginPage")
        with pytest.raises(SubgraphMismatchError) as exc_info:
            model.graph.add_edge(
                model.nodes["UI"], model.nodes["LoginPage"], "calls", SubgraphKind.ARCHITECTURE
            )
        assert exc_info.value.handle == model.nodes["LoginPage"]
        assert exc_info.value.expected == SubgraphKind.ARCHITECTURE

    def test_implementation_edge_with_arch_endpoint_rejected(self, model):
        model.arch("UI")
        model.impl("LoginPage")
        with pytest.raises(SubgraphMismatchError):
            model.graph.add_edge(
                model.nodes["LoginPage"], model.nodes["UI"], "calls", SubgraphKind.IMPLEMENTATION
            )

    def test_propagated_edges_cannot_be_added_directly(self, model):
        model.arch("UI", "Service")
        with pytest.raises(ReservedSubgraphError):
            model.graph.add_edge(
                model.nodes["UI"], model.nodes["Service"], "calls", SubgraphKind.PROPAGATED
            )

    def test_missing_endpoint_rejected(self, graph):
        a = graph.add_node("UI", SubgraphKind.ARCHITECTURE)
        with pytest.raises(NodeNotFoundError):
            graph.add_edge(a, 99, "calls", SubgraphKind.ARCHITECTURE)

    def test_get_missing_edge_raises(self, graph):
        with pytest.raises(EdgeNotFoundError) as exc_info:
            graph.get_edge(5)
        assert exc_info.value.edge_id == 5

    def test_find_edge_ids_by_triple(self, model):
        model.arch("UI", "Service")
        first = model.spec("UI", "Service")
        second = model.spec("UI", "Service")
        model.spec("UI", "Service", "depends-on")
        ids = model.graph.find_edge_ids(
            SubgraphKind.ARCHITECTURE, model.nodes["UI"], model.nodes["Service"], "calls"
        )
        assert ids == [first, second]

    def test_edge_handles_never_reused(self, model):
        model.impl("A", "B")
        first = model.code("A", "B")
        model.graph.remove_impl_edge_and_recompute(first)
        second = model.code("A", "B")
        assert second != first

    def test_edge_count_by_subgraph(self, layered):
        g = layered.graph
        assert g.edge_count(SubgraphKind.ARCHITECTURE) == 3
        assert g.edge_count(SubgraphKind.IMPLEMENTATION) == 5
        assert g.edge_count(SubgraphKind.PROPAGATED) == 0


class TestResets:
    """Tests for clearing transient classification state."""

    def test_clear_propagated_edges(self, layered):
        g = layered.graph
        g.run_from_scratch()
        assert g.edge_count(SubgraphKind.PROPAGATED) == 3

        g.clear_propagated_edges()

        assert g.edge_count(SubgraphKind.PROPAGATED) == 0
        assert list(g.iter_propagation_table()) == []
        ui_out = list(g.iter_arch_out(layered.nodes["UI"]))
        assert all(e.subgraph == SubgraphKind.ARCHITECTURE for e in ui_out)

    def test_init_states(self, layered):
        g = layered.graph
        g.run_from_scratch()
        g.init_states()
        assert {e.state for e in g.iter_edges(SubgraphKind.ARCHITECTURE)} == {EdgeState.SPECIFIED}
        assert {e.counter for e in g.iter_edges(SubgraphKind.ARCHITECTURE)} == {0}
        assert {e.state for e in g.iter_edges(SubgraphKind.IMPLEMENTATION)} == {
            EdgeState.UNDEFINED
        }


class TestClone:
    """Tests for ReflexionGraph.clone()."""

    def test_clone_is_independent(self, layered):
        g = layered.graph
        g.run_from_scratch()
        cloned = g.clone()

        assert cloned is not g
        assert cloned.snapshot() == g.snapshot()

        cloned.init_states()
        assert cloned.snapshot() != g.snapshot()

    def test_clone_mapping_validates_against_clone(self, layered):
        cloned = layered.graph.clone()
        extra = cloned.add_node("Cache", SubgraphKind.ARCHITECTURE)
        cloned.set_mapping_overwrite(layered.nodes["Logger"], extra)
        assert cloned.get_arch_node(layered.nodes["Logger"]) == extra
        assert not layered.graph.has_node(extra)

    def test_clone_preserves_classification_strings(self, layered):
        g = layered.graph
        g.run_from_scratch()
        cloned = g.clone()
        for subgraph in SubgraphKind:
            assert subgraph_string(cloned, subgraph) == subgraph_string(g, subgraph)


def test_default_config():
    g = ReflexionGraph()
    assert g.config.validate_mappings_before_run is False
    assert g.config.check_invariants_after_run is False


def test_reserved_subgraph_error_is_a_reflexion_error(graph):
    with pytest.raises(ReflexionError):
        graph.add_node("X", SubgraphKind.PROPAGATED)
