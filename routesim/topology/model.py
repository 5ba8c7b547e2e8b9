"""
Topology model for the routesim protocol simulator.

The model is the network description handed to the routing engines. It
owns nodes and links, keeps them in insertion order so that every run over
the same topology emits the same event sequence, and rejects malformed
input at the boundary so that the engines never see it.

Engines read the model. They never change it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from routesim.engine.routing_table import INFINITY


class TopologyError(ValueError):
    """
    Raised when a topology operation would break a model invariant.
    """


def _check_id(kind: str, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise TopologyError(f"{kind} id must be a non-empty string")


def _check_cost(cost: int) -> None:
    # bool is an int subclass; a True cost is an authoring mistake
    if isinstance(cost, bool) or not isinstance(cost, int):
        raise TopologyError(f"Link cost must be an integer, got {cost!r}")
    if cost < 1:
        raise TopologyError(f"Link cost must be at least 1, got {cost}")
    if cost >= INFINITY:
        raise TopologyError(f"Link cost must be below {INFINITY}, got {cost}")


class Node:
    """
    A router in the topology.

    Besides its id, a node carries an optional canvas position and a
    neighbor-id to edge-id mapping for quick adjacency lookups. The mapping
    is maintained by the owning Graph.
    """

    def __init__(self, node_id: str, x: int = 0, y: int = 0) -> None:
        self.id = node_id
        self.x = x
        self.y = y
        self._neighbor_edges: dict[str, str] = {}

    def set_position(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def add_neighbor(self, neighbor_id: str, edge_id: str) -> None:
        self._neighbor_edges[neighbor_id] = edge_id

    def remove_neighbor(self, neighbor_id: str) -> None:
        self._neighbor_edges.pop(neighbor_id, None)

    def has_neighbor(self, neighbor_id: str) -> bool:
        return neighbor_id in self._neighbor_edges

    def neighbor_ids(self) -> tuple[str, ...]:
        return tuple(self._neighbor_edges)

    def edge_id_for(self, neighbor_id: str) -> str | None:
        """
        Return the id of the link towards ``neighbor_id``, if any.
        """
        return self._neighbor_edges.get(neighbor_id)

    @property
    def neighbors(self) -> Mapping[str, str]:
        """
        Read-only view of the neighbor-id to edge-id mapping.
        """
        return MappingProxyType(self._neighbor_edges)

    def __repr__(self) -> str:
        return f"Node({self.id!r})"


class Edge:
    """
    An undirected link between two nodes.

    A link that is down stays in the topology but is ignored by every
    adjacency computation.
    """

    def __init__(self, edge_id: str, a: str, b: str, cost: int, up: bool = True) -> None:
        self.id = edge_id
        self.a = a
        self.b = b
        self.cost = cost
        self.up = up

    def other(self, node_id: str) -> str | None:
        """
        Return the endpoint opposite ``node_id``, or None if it is not an endpoint.
        """
        if node_id == self.a:
            return self.b
        if node_id == self.b:
            return self.a
        return None

    def connects(self, x: str, y: str) -> bool:
        return (self.a == x and self.b == y) or (self.a == y and self.b == x)

    def __repr__(self) -> str:
        state = "up" if self.up else "down"
        return f"Edge({self.id!r}, {self.a!r}<->{self.b!r}, cost={self.cost}, {state})"


class Graph:
    """
    Container for the nodes and links of one topology.

    Both collections are keyed by id and keep insertion order. Every
    mutating operation validates its input and raises TopologyError
    instead of leaving the graph half-updated.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}

    # ------------------------------------------------------------------ nodes

    def add_node(self, node_id: str, x: int = 0, y: int = 0) -> Node:
        _check_id("Node", node_id)
        if node_id in self._nodes:
            raise TopologyError(f"Duplicate node id: {node_id}")

        node = Node(node_id, x, y)
        self._nodes[node_id] = node
        return node

    def remove_node(self, node_id: str) -> None:
        """
        Remove a node together with every link that touches it.

        Remaining nodes lose their neighbor entry for the removed node, so
        no dangling references survive.
        """
        if node_id not in self._nodes:
            raise TopologyError(f"Unknown node id: {node_id}")

        incident = [e.id for e in self._edges.values() if node_id in (e.a, e.b)]
        for edge_id in incident:
            self.remove_edge(edge_id)

        del self._nodes[node_id]
        for node in self._nodes.values():
            node.remove_neighbor(node_id)

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes.values())

    @property
    def node_ids(self) -> tuple[str, ...]:
        return tuple(self._nodes)

    # ------------------------------------------------------------------ edges

    def add_edge(self, edge_id: str, a: str, b: str, cost: int) -> Edge:
        _check_id("Edge", edge_id)
        if edge_id in self._edges:
            raise TopologyError(f"Duplicate edge id: {edge_id}")
        for endpoint in (a, b):
            if endpoint not in self._nodes:
                raise TopologyError(f"Edge {edge_id} references unknown node: {endpoint}")
        if a == b:
            raise TopologyError(f"Edge {edge_id} would connect {a} to itself")
        _check_cost(cost)

        existing = self.find_edge_between(a, b)
        if existing is not None:
            raise TopologyError(
                f"Nodes {a} and {b} are already linked by edge {existing.id}"
            )

        edge = Edge(edge_id, a, b, cost)
        self._edges[edge_id] = edge
        self._nodes[a].add_neighbor(b, edge_id)
        self._nodes[b].add_neighbor(a, edge_id)
        return edge

    def remove_edge(self, edge_id: str) -> None:
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            raise TopologyError(f"Unknown edge id: {edge_id}")

        self._nodes[edge.a].remove_neighbor(edge.b)
        self._nodes[edge.b].remove_neighbor(edge.a)

    def get_edge(self, edge_id: str) -> Edge | None:
        return self._edges.get(edge_id)

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges.values())

    def find_edge_between(self, a: str, b: str) -> Edge | None:
        """
        Return the link between two nodes in either orientation, or None.
        """
        node = self._nodes.get(a)
        if node is None:
            return None
        edge_id = node.edge_id_for(b)
        return self._edges.get(edge_id) if edge_id is not None else None

    def set_edge_up(self, edge_id: str, up: bool) -> None:
        """
        Mark a link up or down. Down links stay in the graph.
        """
        edge = self._require_edge(edge_id)
        edge.up = bool(up)

    def set_edge_cost(self, edge_id: str, cost: int) -> None:
        edge = self._require_edge(edge_id)
        _check_cost(cost)
        edge.cost = cost

    # -------------------------------------------------------------- adjacency

    def up_adjacency(self) -> dict[str, dict[str, tuple[int, str]]]:
        """
        Build ``{node: {neighbor: (cost, edge_id)}}`` over links that are up.

        Every node appears as a key, isolated ones with an empty mapping.
        The result is a fresh structure; callers may keep it across later
        topology changes.
        """
        adjacency: dict[str, dict[str, tuple[int, str]]] = {
            node_id: {} for node_id in self._nodes
        }
        for node_id, node in self._nodes.items():
            for neighbor_id, edge_id in node.neighbors.items():
                edge = self._edges[edge_id]
                if edge.up:
                    adjacency[node_id][neighbor_id] = (edge.cost, edge_id)
        return adjacency

    def _require_edge(self, edge_id: str) -> Edge:
        edge = self._edges.get(edge_id)
        if edge is None:
            raise TopologyError(f"Unknown edge id: {edge_id}")
        return edge

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(tuple(self._nodes.values()))

    def __repr__(self) -> str:
        return f"Graph(nodes={list(self._nodes)}, edges={list(self._edges)})"
