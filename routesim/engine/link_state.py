"""
Link State engine.

Every node is assumed to hold the full topology, as it would after LSA
flooding completes. The engine runs Dijkstra once per source, in node
insertion order, and emits a table update each time a destination's
distance is finalized.

Link-state convergence is a single global round: once every source has
been processed, all tables are final.
"""

from __future__ import annotations

import heapq
import logging
from itertools import count

from routesim.engine.base import RoutingEngine
from routesim.engine.events import ProtocolEvent
from routesim.engine.routing_table import INFINITY, RoutingTableEntry, clamp_cost

LOGGER = logging.getLogger(__name__)


class LinkStateEngine(RoutingEngine):
    """
    Per-source shortest-path computation over the links that are up.
    """

    protocol_name = "link-state"

    def run_with_logging(self) -> bool:
        """
        Run Dijkstra from every node, recording logs and events.

        Always returns True; link state has no failure mode on a valid
        topology.
        """
        self._reset()

        adjacency = self.graph.up_adjacency()
        nodes = list(adjacency)

        self._note("Link State: starting Dijkstra from every node.")

        for iteration, source in enumerate(nodes, start=1):
            self._log(f"Dijkstra source: {source}")
            self._emit(ProtocolEvent.iteration_start(iteration))

            # any up link touching the source, for the flood animation
            flood_edge = next((edge_id for _, edge_id in adjacency[source].values()), None)
            self._emit(
                ProtocolEvent.message_send(
                    source, None, flood_edge, iteration, f"LSA flood from {source}"
                )
            )

            self._tables[source] = self._dijkstra(source, iteration, nodes, adjacency)

            self._emit(ProtocolEvent.iteration_end(iteration))

        self._converged_iteration = 1
        self._log("Link State: completed Dijkstra for all nodes.")
        self._emit(ProtocolEvent.converged(1))
        LOGGER.debug("link state computed %d shortest-path trees", len(nodes))
        return True

    def _dijkstra(
        self,
        source: str,
        iteration: int,
        nodes: list[str],
        adjacency: dict[str, dict[str, tuple[int, str]]],
    ) -> dict[str, RoutingTableEntry]:
        table = self._empty_table(nodes, source)
        dist = {source: 0}
        prev: dict[str, str] = {}
        finalized: set[str] = set()

        # (distance, push order, node); push order keeps ties deterministic
        sequence = count()
        heap: list[tuple[int, int, str]] = [(0, next(sequence), source)]

        while heap:
            distance, _, node_id = heapq.heappop(heap)
            if node_id in finalized:
                continue
            finalized.add(node_id)

            if node_id != source:
                next_hop = _next_hop(prev, source, node_id)
                table[node_id] = RoutingTableEntry(node_id, next_hop, distance)

                via_edge = adjacency[prev[node_id]][node_id][1]
                self._emit(
                    ProtocolEvent.table_update(
                        source,
                        node_id,
                        next_hop,
                        INFINITY,
                        distance,
                        via_edge,
                        iteration,
                        f"{source} -> {node_id}: nextHop={next_hop} cost={distance}",
                    )
                )
                self._log(
                    f"Dijkstra[{source}]: finalized {node_id} (cost={distance}) nextHop={next_hop}"
                )

            for neighbor_id, (link_cost, _) in adjacency[node_id].items():
                if neighbor_id in finalized:
                    continue
                candidate = clamp_cost(distance + link_cost)
                if candidate < dist.get(neighbor_id, INFINITY):
                    dist[neighbor_id] = candidate
                    prev[neighbor_id] = node_id
                    heapq.heappush(heap, (candidate, next(sequence), neighbor_id))

        return table


def _next_hop(prev: dict[str, str], source: str, dest: str) -> str:
    """
    Walk the predecessor chain back from ``dest`` and return the node right
    after ``source`` on the path.
    """
    hop = dest
    while prev[hop] != source:
        hop = prev[hop]
    return hop
