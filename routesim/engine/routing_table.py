"""
Routing table rows shared by both routing engines.
"""

from __future__ import annotations

from dataclasses import dataclass

# Large but finite so that cost sums never overflow into nonsense.
INFINITY = 1_000_000_000


def clamp_cost(cost: int) -> int:
    return min(cost, INFINITY)


def format_cost(cost: int | None) -> str:
    if cost is None:
        return "?"
    return "INF" if cost >= INFINITY else str(cost)


@dataclass(frozen=True)
class RoutingTableEntry:
    """
    One row of a routing table: destination, next hop and cost.

    A cost of INFINITY means the destination is currently unreachable,
    in which case the next hop is None.
    """

    destination: str
    next_hop: str | None
    cost: int

    @classmethod
    def self_entry(cls, node_id: str) -> RoutingTableEntry:
        return cls(node_id, node_id, 0)

    @classmethod
    def unreachable(cls, destination: str) -> RoutingTableEntry:
        return cls(destination, None, INFINITY)

    @property
    def is_unreachable(self) -> bool:
        return self.cost >= INFINITY

    def __str__(self) -> str:
        return (
            f"RTEntry[dst={self.destination}, next={self.next_hop}, "
            f"cost={format_cost(self.cost)}]"
        )
