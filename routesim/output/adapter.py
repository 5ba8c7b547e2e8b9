# routesim/output/adapter.py
from __future__ import annotations
from pathlib import Path
from typing import Iterable, Mapping
import sys

from routesim.engine.events import EventKind, ProtocolEvent
from routesim.engine.routing_table import RoutingTableEntry, format_cost
from .event_adapters import LifecycleAdapter, MessageSendAdapter, TableUpdateAdapter


class EventAdapter:
    """Dispatch events to the proper per-kind adapter."""

    def __init__(self):
        lifecycle = LifecycleAdapter()
        self.adapters = {
            # Link traffic
            EventKind.MESSAGE_SEND: MessageSendAdapter(),

            # Route changes
            EventKind.TABLE_UPDATE: TableUpdateAdapter(),

            # Round boundaries and notes
            EventKind.ITERATION_START: lifecycle,
            EventKind.ITERATION_END: lifecycle,
            EventKind.CONVERGED: lifecycle,
            EventKind.INFO: lifecycle,
        }

    def transform(self, event: ProtocolEvent) -> list[str]:
        adapter = self.adapters.get(event.kind)
        if adapter:
            return list(adapter.transform(event))
        return []


def format_routing_table(node_id: str, table: Mapping[str, RoutingTableEntry]) -> list[str]:
    """Render one node's table as aligned text rows."""
    rows = [("Destination", "Next hop", "Cost")]
    for entry in table.values():
        rows.append((
            entry.destination,
            entry.next_hop if entry.next_hop is not None else "-",
            format_cost(entry.cost),
        ))

    widths = [max(len(row[col]) for row in rows) for col in range(3)]
    lines = [f"Routing table for {node_id}:"]
    for row in rows:
        lines.append("  " + "  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())
    return lines


def write_event_log(events: Iterable[ProtocolEvent], output_file_path: str | Path) -> None:
    adapter = EventAdapter()
    output_file = Path(output_file_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with output_file.open("w", encoding="utf-8") as f:
        for event in events:
            try:
                for line in adapter.transform(event):
                    if line:
                        f.write(line + "\n")
            except Exception as e:
                print(f"Warning: failed to transform event {event!r}: {e}", file=sys.stderr)
