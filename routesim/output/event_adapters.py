# routesim/output/event_adapters.py
"""Per-kind adapters turning protocol events into readable trace lines.

Lines are prefixed with the iteration when the event belongs to one, so a
printed trace reads in rounds the same way the playback does.
"""

from __future__ import annotations
from typing import Iterable

from routesim.engine.events import EventKind, ProtocolEvent
from routesim.engine.routing_table import format_cost
from .base import Adapter


def _prefix(event: ProtocolEvent) -> str:
    return f"[iter {event.iteration}]" if event.iteration else "[-]"


class MessageSendAdapter(Adapter):
    """Render MESSAGE_SEND events as link traffic."""

    def transform(self, event: ProtocolEvent) -> Iterable[str]:
        target = event.target if event.target is not None else "*"
        edge = f" over {event.edge_id}" if event.edge_id else ""
        line = f"{_prefix(event)} MSG {event.source} -> {target}{edge}"
        if event.message:
            line += f": {event.message}"
        return [line]


class TableUpdateAdapter(Adapter):
    """Render TABLE_UPDATE events as route changes."""

    def transform(self, event: ProtocolEvent) -> Iterable[str]:
        via = event.next_hop if event.next_hop is not None else "-"
        return [
            f"{_prefix(event)} UPDATE {event.target}: {event.destination} via {via} "
            f"({format_cost(event.old_cost)} -> {format_cost(event.new_cost)})"
        ]


class LifecycleAdapter(Adapter):
    """Render iteration boundaries, convergence and notes."""

    LABELS = {
        EventKind.ITERATION_START: "BEGIN",
        EventKind.ITERATION_END: "END",
        EventKind.CONVERGED: "CONVERGED",
        EventKind.INFO: "INFO",
    }

    def transform(self, event: ProtocolEvent) -> Iterable[str]:
        label = self.LABELS.get(event.kind)
        if label is None:
            return []
        return [f"{_prefix(event)} {label} {event.message}".rstrip()]
