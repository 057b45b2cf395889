"""Analysis module - Propagation, lifting and classification.

Exports:
- propagate_impl_edge / get_or_create_propagated_edge: Projection into architecture space
- lift_exact / propagate_and_lift: Convergence and divergence decisions
- run_from_scratch: Full recompute orchestrator
- finalize_architecture_states, count_violations, iter_violations, summarize
- check_invariants: Consistency check of a classified graph
- add_impl_edge_and_recompute / remove_impl_edge_and_recompute: Incremental updates
"""

from reflexion.analysis.classify import (
    ConformanceSummary,
    check_invariants,
    count_violations,
    finalize_architecture_states,
    iter_violations,
    run_from_scratch,
    summarize,
)
from reflexion.analysis.delta import add_impl_edge_and_recompute, remove_impl_edge_and_recompute
from reflexion.analysis.lifting import lift_exact, propagate_and_lift
from reflexion.analysis.propagation import get_or_create_propagated_edge, propagate_impl_edge

__all__ = [
    "ConformanceSummary",
    "get_or_create_propagated_edge",
    "propagate_impl_edge",
    "lift_exact",
    "propagate_and_lift",
    "run_from_scratch",
    "finalize_architecture_states",
    "count_violations",
    "iter_violations",
    "summarize",
    "check_invariants",
    "add_impl_edge_and_recompute",
    "remove_impl_edge_and_recompute",
]
