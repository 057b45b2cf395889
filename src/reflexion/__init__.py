"""
reflexion - Reflexion Model engine for architecture conformance checking

Compares a declared architecture graph against an implementation graph
extracted from a real system. Implementation relations are projected
through an explicit node mapping and every relation is classified as
convergent, divergent or absent.
"""

import logging
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("reflexion")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed

from reflexion.analysis import ConformanceSummary
from reflexion.config import EngineConfig
from reflexion.errors import (
    ConfigError,
    EdgeNotFoundError,
    InvariantViolationError,
    MappingConflictError,
    NodeNotFoundError,
    ReflexionError,
    ReservedSubgraphError,
    SubgraphMismatchError,
)
from reflexion.graph import Edge, EdgeKind, EdgeState, GraphNode, ReflexionGraph, SubgraphKind
from reflexion.logging_setup import configure_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "ConformanceSummary",
    "EngineConfig",
    "ReflexionGraph",
    "GraphNode",
    "Edge",
    "EdgeKind",
    "EdgeState",
    "SubgraphKind",
    "configure_logging",
    "ReflexionError",
    "EdgeNotFoundError",
    "NodeNotFoundError",
    "SubgraphMismatchError",
    "MappingConflictError",
    "ReservedSubgraphError",
    "InvariantViolationError",
    "ConfigError",
]
