"""Tests for graph serialization."""

import json

from reflexion.graph import serialize_graph
from reflexion.graph.serialize import serialize_edge, serialize_node


class TestSerializeNode:
    def test_root_node(self, model):
        model.arch("UI")
        node = model.graph.get_node(model.nodes["UI"])
        assert serialize_node(node) == {
            "id": model.nodes["UI"],
            "label": "UI",
            "subgraph": "architecture",
        }

    def test_child_node_includes_parent(self, model):
        model.impl("auth")
        model.impl("LoginPage", parent="auth")
        node = model.graph.get_node(model.nodes["LoginPage"])
        assert serialize_node(node)["parent"] == model.nodes["auth"]


class TestSerializeEdge:
    def test_architecture_edge_lists_contributors(self, converged_model):
        g = converged_model.graph
        arch = next(e for e in g.iter_edges() if e.subgraph.value == "architecture")
        impl = next(e for e in g.iter_edges() if e.subgraph.value == "implementation")

        data = serialize_edge(g, arch)

        assert data["state"] == "convergent"
        assert data["kind"] == "depends-on"
        assert data["counter"] == 1
        assert data["contributors"] == [impl.id]

    def test_propagated_edge_lists_provenance(self, converged_model):
        g = converged_model.graph
        prop = next(e for e in g.iter_edges() if e.subgraph.value == "propagated")
        impl = next(e for e in g.iter_edges() if e.subgraph.value == "implementation")

        data = serialize_edge(g, prop)

        assert data["state"] == "allowed"
        assert data["provenance"] == [impl.id]

    def test_implementation_edge_has_no_counter(self, converged_model):
        g = converged_model.graph
        impl = next(e for e in g.iter_edges() if e.subgraph.value == "implementation")
        assert "counter" not in serialize_edge(g, impl)


class TestSerializeGraph:
    def test_is_json_compatible(self, layered):
        layered.graph.run_from_scratch()
        data = serialize_graph(layered.graph)
        assert json.loads(json.dumps(data)) == data

    def test_metadata(self, layered):
        g = layered.graph
        g.run_from_scratch()
        meta = serialize_graph(g)["metadata"]
        assert meta["node_count"] == 9
        assert meta["edge_count"] == 11
        assert meta["violation_count"] == 3
        assert meta["unmapped"] == 1
        assert meta["unmapped_nodes"] == 1

    def test_mapping_and_violations(self, layered):
        g, n = layered.graph, layered.nodes
        g.run_from_scratch()
        data = serialize_graph(g)
        assert {"implementation": n["LoginPage"], "architecture": n["UI"]} in data["mapping"]
        assert data["violations"] == [e.id for e in g.iter_violations()]
