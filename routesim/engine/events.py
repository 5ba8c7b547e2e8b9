"""
Protocol events emitted by the routing engines.

An event describes one visible step of a simulation run: a routing
message on a link, a table change, an iteration boundary, convergence or
a free-form note. Events are created once by an engine and never change
afterwards, so the same instance can sit in the engine's trace, on the
event bus and in the playback queue at the same time.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from routesim.engine.routing_table import format_cost


class EventKind(Enum):
    ITERATION_START = "iteration_start"
    ITERATION_END = "iteration_end"
    MESSAGE_SEND = "message_send"
    TABLE_UPDATE = "table_update"
    CONVERGED = "converged"
    INFO = "info"


_ROUND_KINDS = {EventKind.ITERATION_START, EventKind.ITERATION_END, EventKind.CONVERGED}


@dataclass(frozen=True)
class ProtocolEvent:
    """
    Immutable tagged record of one protocol step.

    Only the fields that matter for ``kind`` are set; construction fails
    if one of them is missing. Prefer the named constructors over calling
    the class directly.

    For TABLE_UPDATE, ``target`` is the node whose table changed. For
    MESSAGE_SEND, ``target`` may be None when a message is flooded to the
    whole network.
    """

    kind: EventKind
    source: str | None = None
    target: str | None = None
    destination: str | None = None
    next_hop: str | None = None
    old_cost: int | None = None
    new_cost: int | None = None
    edge_id: str | None = None
    iteration: int = 0
    message: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.kind, EventKind):
            raise ValueError(f"Unknown event kind: {self.kind!r}")

        if self.kind is EventKind.INFO:
            if not self.message:
                raise ValueError("INFO events need a message")
            return

        if self.iteration < 1:
            raise ValueError(
                f"{self.kind.name} events need an iteration >= 1, got {self.iteration}"
            )

        if self.kind is EventKind.MESSAGE_SEND and self.source is None:
            raise ValueError("MESSAGE_SEND events need a source node")

        if self.kind is EventKind.TABLE_UPDATE:
            missing = [
                name
                for name in ("target", "destination", "new_cost")
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(f"TABLE_UPDATE events need {', '.join(missing)}")

    # ------------------------------------------------------------ constructors

    @classmethod
    def iteration_start(cls, iteration: int) -> ProtocolEvent:
        return cls(EventKind.ITERATION_START, iteration=iteration,
                   message=f"Iteration {iteration} start")

    @classmethod
    def iteration_end(cls, iteration: int) -> ProtocolEvent:
        return cls(EventKind.ITERATION_END, iteration=iteration,
                   message=f"Iteration {iteration} end")

    @classmethod
    def converged(cls, iteration: int) -> ProtocolEvent:
        return cls(EventKind.CONVERGED, iteration=iteration,
                   message=f"Converged at iteration {iteration}")

    @classmethod
    def info(cls, text: str) -> ProtocolEvent:
        return cls(EventKind.INFO, message=text)

    @classmethod
    def message_send(
        cls,
        source: str,
        target: str | None,
        edge_id: str | None,
        iteration: int,
        text: str = "",
    ) -> ProtocolEvent:
        return cls(
            EventKind.MESSAGE_SEND,
            source=source,
            target=target,
            edge_id=edge_id,
            iteration=iteration,
            message=text,
        )

    @classmethod
    def table_update(
        cls,
        node: str,
        destination: str,
        next_hop: str | None,
        old_cost: int | None,
        new_cost: int,
        edge_id: str | None,
        iteration: int,
        text: str = "",
    ) -> ProtocolEvent:
        return cls(
            EventKind.TABLE_UPDATE,
            target=node,
            destination=destination,
            next_hop=next_hop,
            old_cost=old_cost,
            new_cost=new_cost,
            edge_id=edge_id,
            iteration=iteration,
            message=text,
        )

    # ----------------------------------------------------------------- views

    @property
    def is_round_marker(self) -> bool:
        return self.kind in _ROUND_KINDS

    def to_dict(self) -> dict[str, Any]:
        """
        Return a JSON-ready mapping of the event.
        """
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    def __str__(self) -> str:
        if self.kind is EventKind.MESSAGE_SEND:
            return (
                f"[MSG] {self.source} -> {self.target} (edge={self.edge_id}) "
                f"iter={self.iteration} {self.message}"
            ).rstrip()
        if self.kind is EventKind.TABLE_UPDATE:
            return (
                f"[UPDATE] {self.target}: dest={self.destination} via={self.next_hop} "
                f"old={format_cost(self.old_cost)} new={format_cost(self.new_cost)} "
                f"iter={self.iteration} {self.message}"
            ).rstrip()
        return f"[{self.kind.name}] {self.message}".rstrip()
