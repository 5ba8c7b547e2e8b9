"""
Shared run state for the routing engines.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from routesim.engine.event_bus import EventBus
from routesim.engine.events import ProtocolEvent
from routesim.engine.routing_table import RoutingTableEntry

if TYPE_CHECKING:
    from routesim.topology.model import Graph


NOT_CONVERGED = -1

RoutingTable = dict[str, RoutingTableEntry]


class RoutingEngine:
    """
    Base class for a protocol engine.

    An engine reads the topology it was built with, and owns its working
    routing tables together with the logs and events of its latest run.
    Getters hand out copies, so nothing a caller does to a returned list
    or mapping can reach the engine's state.

    Subclasses implement ``run_with_logging``.
    """

    protocol_name = "routing"

    def __init__(self, graph: Graph, event_bus: EventBus | None = None) -> None:
        self.graph = graph
        self.event_bus = event_bus
        self._tables: dict[str, RoutingTable] = {}
        self._logs: list[str] = []
        self._events: list[ProtocolEvent] = []
        self._converged_iteration: int = NOT_CONVERGED

    def run_with_logging(self, *args, **kwargs) -> bool:
        raise NotImplementedError("Subclasses must implement run_with_logging()")

    # ---------------------------------------------------------------- getters

    def get_logs(self) -> list[str]:
        return list(self._logs)

    def get_events(self) -> list[ProtocolEvent]:
        return list(self._events)

    def get_routing_table(self, node_id: str) -> RoutingTable:
        """
        Return a copy of ``node_id``'s table, or an empty mapping if the
        node was not part of the last run.
        """
        return dict(self._tables.get(node_id, {}))

    def get_routing_tables(self) -> dict[str, RoutingTable]:
        return {node_id: dict(table) for node_id, table in self._tables.items()}

    def get_converged_iteration(self) -> int:
        """
        Return the round in which the run converged, or NOT_CONVERGED.
        """
        return self._converged_iteration

    # -------------------------------------------------------------- internals

    def _reset(self) -> None:
        self._tables = {}
        self._logs = []
        self._events = []
        self._converged_iteration = NOT_CONVERGED

    def _log(self, line: str) -> None:
        self._logs.append(line)

    def _emit(self, event: ProtocolEvent) -> None:
        self._events.append(event)
        if self.event_bus is not None:
            self.event_bus.publish(event)

    def _note(self, text: str) -> None:
        """
        Record ``text`` both as a log line and as an INFO event.
        """
        self._log(text)
        self._emit(ProtocolEvent.info(text))

    def _empty_table(self, nodes: list[str], owner: str) -> RoutingTable:
        return {
            node_id: (
                RoutingTableEntry.self_entry(owner)
                if node_id == owner
                else RoutingTableEntry.unreachable(node_id)
            )
            for node_id in nodes
        }
