"""Tests for incremental add/remove of implementation edges."""

import pytest

from reflexion.errors import EdgeNotFoundError, SubgraphMismatchError
from reflexion.graph import Edge, EdgeKind, EdgeState, SubgraphKind
from tests.core.graph_test_helpers import ModelBuilder, layered_model


class TestAddRemoveRoundTrip:
    """Incremental updates against a converged baseline."""

    def test_add_then_remove_restores_baseline(self, converged_model):
        m = converged_model
        g = m.graph
        arch_id = next(g.iter_edges(SubgraphKind.ARCHITECTURE)).id
        impl_ok = next(g.iter_edges(SubgraphKind.IMPLEMENTATION)).id
        baseline = g.snapshot()

        # Reverse direction: Service -> UI is not specified.
        divergent_id = g.add_impl_edge_and_recompute(
            m.impl_edge("UserService", "LoginPage", "depends-on")
        )

        assert g.edge_state(divergent_id) == EdgeState.DIVERGENT
        assert g.edge_state(arch_id) == EdgeState.CONVERGENT
        assert g.edge_counter(arch_id) == 1
        assert g.edge_state(impl_ok) == EdgeState.ALLOWED

        g.remove_impl_edge_and_recompute(divergent_id)

        assert g.snapshot() == baseline
        assert not g.has_edge(divergent_id)

    def test_add_converging_edge_bumps_counter(self, converged_model):
        m = converged_model
        g = m.graph
        m.impl("ProfilePage")
        m.map("ProfilePage", "UI")
        arch_id = next(g.iter_edges(SubgraphKind.ARCHITECTURE)).id

        g.add_impl_edge_and_recompute(m.impl_edge("ProfilePage", "UserService", "depends-on"))

        assert g.edge_counter(arch_id) == 2
        assert g.count_violations() == 0

    def test_removing_last_contributor_makes_architecture_absent(self, converged_model):
        g = converged_model.graph
        arch_id = next(g.iter_edges(SubgraphKind.ARCHITECTURE)).id
        impl_id = next(g.iter_edges(SubgraphKind.IMPLEMENTATION)).id

        g.remove_impl_edge_and_recompute(impl_id)

        assert g.edge_state(arch_id) == EdgeState.ABSENT
        assert g.edge_counter(arch_id) == 0
        assert g.edge_count(SubgraphKind.PROPAGATED) == 0


class TestEquivalenceWithFullBuild:
    """Incremental results equal a from-scratch build of the same graph."""

    def test_add_matches_full_build(self):
        incremental = layered_model()
        incremental.graph.run_from_scratch()
        incremental.graph.add_impl_edge_and_recompute(
            incremental.impl_edge("ProfilePage", "Repo", "imports")
        )

        full = layered_model()
        full.code("ProfilePage", "Repo", "imports")
        full.graph.run_from_scratch()

        assert incremental.graph.snapshot() == full.graph.snapshot()

    def test_remove_matches_full_build(self):
        incremental = layered_model()
        extra = incremental.code("ProfilePage", "Repo")
        incremental.graph.run_from_scratch()
        incremental.graph.remove_impl_edge_and_recompute(extra)

        full = layered_model()
        full.graph.run_from_scratch()

        assert incremental.graph.snapshot() == full.graph.snapshot()


class TestDeltaErrors:
    """Contract errors from the incremental API."""

    def test_add_rejects_non_implementation_edge(self, converged_model):
        m = converged_model
        edge = Edge(m.nodes["UI"], m.nodes["Service"], EdgeKind.CALLS, SubgraphKind.ARCHITECTURE)
        with pytest.raises(SubgraphMismatchError) as exc_info:
            m.graph.add_impl_edge_and_recompute(edge)
        assert exc_info.value.found == SubgraphKind.ARCHITECTURE

    def test_add_rejects_architecture_endpoints(self, converged_model):
        m = converged_model
        edge = Edge(
            m.nodes["UI"], m.nodes["Service"], EdgeKind.CALLS, SubgraphKind.IMPLEMENTATION
        )
        with pytest.raises(SubgraphMismatchError):
            m.graph.add_impl_edge_and_recompute(edge)

    def test_remove_rejects_architecture_edge(self, converged_model):
        g = converged_model.graph
        arch_id = next(g.iter_edges(SubgraphKind.ARCHITECTURE)).id
        with pytest.raises(SubgraphMismatchError):
            g.remove_impl_edge_and_recompute(arch_id)
        assert g.has_edge(arch_id)

    def test_remove_missing_edge(self):
        m = ModelBuilder()
        with pytest.raises(EdgeNotFoundError):
            m.graph.remove_impl_edge_and_recompute(3)
