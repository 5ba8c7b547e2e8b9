"""
Simulation runner for the routesim protocol simulator.

The runner picks an engine for a protocol name, runs it to completion and
packages what the run produced. It is the single call a front end needs
before handing the trace to playback. A run is synchronous; a front end
that must stay responsive runs it on a worker and passes the result back
to its own thread.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from routesim.engine.base import RoutingEngine, RoutingTable
from routesim.engine.distance_vector import DEFAULT_MAX_ITERATIONS, DistanceVectorEngine
from routesim.engine.event_bus import EventBus
from routesim.engine.events import ProtocolEvent
from routesim.engine.link_state import LinkStateEngine

if TYPE_CHECKING:
    from routesim.topology.model import Graph

PROTOCOL_ALIASES = {
    "dv": "distance-vector",
    "distance-vector": "distance-vector",
    "distance_vector": "distance-vector",
    "ls": "link-state",
    "link-state": "link-state",
    "link_state": "link-state",
}


@dataclass(frozen=True)
class SimulationResult:
    """
    Everything one engine run produced.
    """

    protocol: str
    converged: bool
    converged_iteration: int
    events: tuple[ProtocolEvent, ...]
    logs: tuple[str, ...]
    tables: dict[str, RoutingTable] = field(default_factory=dict)

    def routing_table(self, node_id: str) -> RoutingTable:
        return dict(self.tables.get(node_id, {}))


def resolve_protocol(name: str) -> str:
    """
    Map a protocol name or alias to its canonical name.
    """
    canonical = PROTOCOL_ALIASES.get(name.strip().lower())
    if canonical is None:
        raise ValueError(
            f"Unknown protocol {name!r}; expected one of {sorted(PROTOCOL_ALIASES)}"
        )
    return canonical


def create_engine(
    graph: Graph,
    protocol: str,
    event_bus: EventBus | None = None,
) -> RoutingEngine:
    if resolve_protocol(protocol) == "distance-vector":
        return DistanceVectorEngine(graph, event_bus)
    return LinkStateEngine(graph, event_bus)


def run_protocol(
    graph: Graph,
    protocol: str,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    event_bus: EventBus | None = None,
) -> SimulationResult:
    """
    Run ``protocol`` over ``graph`` and collect its tables, events and logs.

    Args:
        graph: Topology to simulate
        protocol: "dv" / "distance-vector" or "ls" / "link-state"
        max_iterations: Round bound for distance vector (ignored by link state)
        event_bus: Optional bus that sees every event as it is created

    Returns:
        SimulationResult for the run
    """
    engine = create_engine(graph, protocol, event_bus)

    if isinstance(engine, DistanceVectorEngine):
        converged = engine.run_with_logging(max_iterations)
    else:
        converged = engine.run_with_logging()

    return SimulationResult(
        protocol=engine.protocol_name,
        converged=converged,
        converged_iteration=engine.get_converged_iteration(),
        events=tuple(engine.get_events()),
        logs=tuple(engine.get_logs()),
        tables=engine.get_routing_tables(),
    )
