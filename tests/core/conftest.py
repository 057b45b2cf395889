"""Pytest fixtures for core tests."""

import pytest


@pytest.fixture
def graph():
    """Empty ReflexionGraph."""
    from reflexion.graph import ReflexionGraph

    return ReflexionGraph()


@pytest.fixture
def model():
    """Fresh label-based model builder."""
    from tests.core.graph_test_helpers import ModelBuilder

    return ModelBuilder()


@pytest.fixture
def converged_model():
    """UI -> Service specified and implemented by LoginPage -> UserService."""
    from tests.core.graph_test_helpers import ModelBuilder

    m = ModelBuilder()
    m.arch("UI", "Service")
    m.impl("LoginPage", "UserService")
    m.spec("UI", "Service", "depends-on")
    m.code("LoginPage", "UserService", "depends-on")
    m.map("LoginPage", "UI")
    m.map("UserService", "Service")
    m.graph.run_from_scratch()
    return m


@pytest.fixture
def layered():
    """Layered model mixing convergent, divergent, absent and unmapped edges."""
    from tests.core.graph_test_helpers import layered_model

    return layered_model()
