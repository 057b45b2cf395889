"""Classification - Full reflexion analysis over the whole graph.

``run_from_scratch`` is the orchestrator: it discards the synthetic state
of any prior run, resets edge states, propagates and lifts every
implementation edge, then finalizes architecture edge states. The result
depends only on the graph and the mapping, never on processing order.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from reflexion.analysis.lifting import propagate_and_lift
from reflexion.errors import InvariantViolationError
from reflexion.graph.GraphNode import SubgraphKind
from reflexion.graph.relations import Edge, EdgeState

if TYPE_CHECKING:
    from reflexion.graph.builder import ReflexionGraph

logger = logging.getLogger(__name__)


@dataclass
class ConformanceSummary:
    """Aggregated outcome of a classification run.

    Attributes:
        states: Edge count per (subgraph, state).
        violations: Number of DIVERGENT or ABSENT edges.
        convergent: Architecture edges that are implemented.
        absent: Architecture edges that are not implemented.
        divergent: Implementation edges with no matching architecture edge.
        allowed: Implementation edges that match an architecture edge.
        unmapped: Implementation edges with an unmapped endpoint.
        mapped_nodes: Number of mapping entries.
        unmapped_nodes: Implementation nodes without a mapping entry.
    """

    states: dict[tuple[SubgraphKind, EdgeState], int] = field(default_factory=dict)
    violations: int = 0
    convergent: int = 0
    absent: int = 0
    divergent: int = 0
    allowed: int = 0
    unmapped: int = 0
    mapped_nodes: int = 0
    unmapped_nodes: int = 0

    def count(self, subgraph: SubgraphKind, state: EdgeState) -> int:
        return self.states.get((subgraph, state), 0)

    @property
    def conforms(self) -> bool:
        """True when no edge is in a violating state."""
        return self.violations == 0


def run_from_scratch(graph: ReflexionGraph) -> None:
    """Run a full reflexion analysis.

    - Drops propagated edges and provenance from any previous run
    - Resets states and counters
    - Propagates and lifts every implementation edge
    - Finalizes architecture edge states (ABSENT / CONVERGENT)

    Running twice without mutating the graph yields identical states and
    counters.

    Raises:
        NodeNotFoundError, SubgraphMismatchError: If pre-run mapping
            validation is enabled and a mapping entry is invalid.
        InvariantViolationError: If post-run checking is enabled and fails.
    """
    if graph.config.validate_mappings_before_run:
        graph.mapping.validate_all_mappings()

    graph.clear_propagated_edges()
    graph.init_states()

    impl_edge_ids = [e.id for e in graph.iter_edges(SubgraphKind.IMPLEMENTATION)]
    for edge_id in impl_edge_ids:
        propagate_and_lift(graph, edge_id)

    finalize_architecture_states(graph)

    if graph.config.check_invariants_after_run:
        check_invariants(graph)

    logger.info(
        "Classified %d implementation edges: %d violations",
        len(impl_edge_ids),
        count_violations(graph),
    )


def finalize_architecture_states(graph: ReflexionGraph) -> None:
    """Normalize architecture edges still SPECIFIED after lifting.

    - SPECIFIED with counter == 0 -> ABSENT
    - SPECIFIED with counter > 0 -> CONVERGENT

    Lifting already marks every matched architecture edge CONVERGENT, so
    the second case only arises when counters were changed outside a
    run; it is logged as a warning.
    """
    for edge in graph.iter_edges(SubgraphKind.ARCHITECTURE):
        if edge.state != EdgeState.SPECIFIED:
            continue
        if edge.counter == 0:
            edge.state = EdgeState.ABSENT
        else:
            logger.warning(
                "Architecture edge %d was SPECIFIED with counter %d; marking CONVERGENT",
                edge.id,
                edge.counter,
            )
            edge.state = EdgeState.CONVERGENT


def iter_violations(graph: ReflexionGraph) -> Iterator[Edge]:
    """Iterate DIVERGENT and ABSENT edges in creation order."""
    for edge in graph.iter_edges():
        if edge.state.is_violation():
            yield edge


def count_violations(graph: ReflexionGraph) -> int:
    """Number of edges whose state is DIVERGENT or ABSENT."""
    return sum(1 for _ in iter_violations(graph))


def summarize(graph: ReflexionGraph) -> ConformanceSummary:
    """Aggregate edge states into a ConformanceSummary."""
    states = Counter((e.subgraph, e.state) for e in graph.iter_edges())
    return ConformanceSummary(
        states=dict(states),
        violations=count_violations(graph),
        convergent=states[(SubgraphKind.ARCHITECTURE, EdgeState.CONVERGENT)],
        absent=states[(SubgraphKind.ARCHITECTURE, EdgeState.ABSENT)],
        divergent=states[(SubgraphKind.IMPLEMENTATION, EdgeState.DIVERGENT)],
        allowed=states[(SubgraphKind.IMPLEMENTATION, EdgeState.ALLOWED)],
        unmapped=states[(SubgraphKind.IMPLEMENTATION, EdgeState.UNMAPPED)],
        mapped_nodes=graph.mapping_len(),
        unmapped_nodes=sum(1 for _ in graph.unmapped_impl_nodes()),
    )


def check_invariants(graph: ReflexionGraph) -> None:
    """Verify structural and counting invariants of a classified graph.

    Checks:
    - Edge endpoints exist and belong to the subgraph the edge requires
    - Propagation table references only existing propagated and
      implementation edges
    - Propagated and architecture counters equal their provenance size
    - No architecture edge is left SPECIFIED with a positive counter

    Raises:
        InvariantViolationError: On the first breach found.
    """
    for edge in graph.iter_edges():
        expected = (
            SubgraphKind.ARCHITECTURE
            if edge.subgraph.in_architecture_space
            else SubgraphKind.IMPLEMENTATION
        )
        for endpoint in (edge.source, edge.target):
            if not graph.has_node(endpoint):
                raise InvariantViolationError(f"Edge {edge.id} references missing node {endpoint}")
            if graph.node_subgraph(endpoint) != expected:
                raise InvariantViolationError(
                    f"Edge {edge.id} ({edge.subgraph.value}) has endpoint {endpoint} "
                    f"outside the {expected.value} subgraph"
                )

    for prop_id, impls in graph.iter_propagation_table():
        if not graph.has_edge(prop_id) or graph.get_edge(prop_id).subgraph != SubgraphKind.PROPAGATED:
            raise InvariantViolationError(f"Propagation table references non-propagated edge {prop_id}")
        for impl_id in impls:
            if (
                not graph.has_edge(impl_id)
                or graph.get_edge(impl_id).subgraph != SubgraphKind.IMPLEMENTATION
            ):
                raise InvariantViolationError(
                    f"Propagation table entry {prop_id} references non-implementation edge {impl_id}"
                )

    for edge in graph.iter_edges(SubgraphKind.PROPAGATED):
        provenance = graph.provenance(edge.id)
        if edge.counter != len(provenance):
            raise InvariantViolationError(
                f"Propagated edge {edge.id} counter {edge.counter} != provenance size {len(provenance)}"
            )

    for edge in graph.iter_edges(SubgraphKind.ARCHITECTURE):
        contributors = graph.lifted_from(edge.id)
        if edge.counter != len(contributors):
            raise InvariantViolationError(
                f"Architecture edge {edge.id} counter {edge.counter} != contributors {len(contributors)}"
            )
        if edge.state == EdgeState.SPECIFIED and edge.counter > 0:
            raise InvariantViolationError(
                f"Architecture edge {edge.id} is SPECIFIED but has {edge.counter} contributors"
            )


__all__ = [
    "ConformanceSummary",
    "run_from_scratch",
    "finalize_architecture_states",
    "iter_violations",
    "count_violations",
    "summarize",
    "check_invariants",
]
