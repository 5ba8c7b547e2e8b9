"""
Distance Vector engine.

Simulates synchronous rounds of routing-vector exchange. In every round
each node receives the vectors its neighbors held at the start of the
round and relaxes its own table against them (Bellman-Ford). Rounds
repeat until one changes nothing or the iteration bound runs out.

Relaxation reads only the pre-round snapshot, so the order in which
nodes are visited within a round never changes the outcome.
"""

from __future__ import annotations

import logging

from routesim.engine.base import RoutingEngine
from routesim.engine.events import ProtocolEvent
from routesim.engine.routing_table import (
    INFINITY,
    RoutingTableEntry,
    clamp_cost,
    format_cost,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 50


class DistanceVectorEngine(RoutingEngine):
    """
    Round-based distance-vector simulation over the links that are up.
    """

    protocol_name = "distance-vector"

    def run_with_logging(self, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> bool:
        """
        Run the protocol, recording logs and events.

        Returns True if a round without changes happened within
        ``max_iterations`` rounds. Running out of rounds is reported with
        an INFO event and a False result, not an exception.
        """
        if isinstance(max_iterations, bool) or not isinstance(max_iterations, int):
            raise ValueError(f"max_iterations must be an integer, got {max_iterations!r}")
        if max_iterations < 0:
            raise ValueError(f"max_iterations must be non-negative, got {max_iterations}")

        self._reset()

        adjacency = self.graph.up_adjacency()
        nodes = list(adjacency)

        for node_id in nodes:
            table = self._empty_table(nodes, node_id)
            for neighbor_id, (cost, _) in adjacency[node_id].items():
                table[neighbor_id] = RoutingTableEntry(neighbor_id, neighbor_id, cost)
            self._tables[node_id] = table

        self._note("Distance Vector: initialization complete.")

        for iteration in range(1, max_iterations + 1):
            self._log(f"Iteration {iteration} begins.")
            self._emit(ProtocolEvent.iteration_start(iteration))

            changed = self._run_round(iteration, nodes, adjacency)

            self._log(
                f"Iteration {iteration} ends. "
                + ("Changes occurred." if changed else "No changes.")
            )
            self._emit(ProtocolEvent.iteration_end(iteration))

            if not changed:
                self._converged_iteration = iteration
                self._log(f"Converged after {iteration} iterations.")
                self._emit(ProtocolEvent.converged(iteration))
                LOGGER.debug("distance vector converged in %d rounds over %d nodes",
                             iteration, len(nodes))
                return True

        self._note(f"Reached max iterations ({max_iterations}) without full convergence.")
        LOGGER.debug("distance vector did not converge within %d rounds", max_iterations)
        return False

    def _run_round(
        self,
        iteration: int,
        nodes: list[str],
        adjacency: dict[str, dict[str, tuple[int, str]]],
    ) -> bool:
        # cost-only vectors as they stood when the round began
        snapshot = {
            node_id: {dest: entry.cost for dest, entry in self._tables[node_id].items()}
            for node_id in nodes
        }

        changed = False
        for node_id in nodes:
            neighbors = adjacency[node_id]
            table = self._tables[node_id]

            for neighbor_id, (_, edge_id) in neighbors.items():
                self._emit(
                    ProtocolEvent.message_send(
                        neighbor_id,
                        node_id,
                        edge_id,
                        iteration,
                        f"Routing vector from {neighbor_id} to {node_id}",
                    )
                )

            for neighbor_id, (link_cost, edge_id) in neighbors.items():
                for dest, reported in snapshot[neighbor_id].items():
                    if reported >= INFINITY:
                        continue

                    candidate = clamp_cost(link_cost + reported)
                    current = table[dest]
                    if candidate >= current.cost:
                        continue

                    table[dest] = RoutingTableEntry(dest, neighbor_id, candidate)
                    changed = True

                    old = format_cost(current.cost)
                    self._log(
                        f"Node {node_id}: updated route to {dest} via {neighbor_id} "
                        f"(cost {old} -> {candidate})."
                    )
                    self._emit(
                        ProtocolEvent.table_update(
                            node_id,
                            dest,
                            neighbor_id,
                            current.cost,
                            candidate,
                            edge_id,
                            iteration,
                            f"{node_id} updated: {dest} via {neighbor_id} ({old} -> {candidate})",
                        )
                    )

        return changed
