# routesim/cli.py

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List
import signal

from routesim.engine.clock import PlaybackClock
from routesim.engine.distance_vector import DEFAULT_MAX_ITERATIONS
from routesim.engine.event_bus import EventBus
from routesim.engine.events import ProtocolEvent
from routesim.engine.playback import DEFAULT_DELAY_MS, EventPlayer
from routesim.engine.simulation_engine import run_protocol
from routesim.output.adapter import EventAdapter, format_routing_table, write_event_log
from routesim.topology.loader import load_topology


class _PrintingListener:
    """Playback listener that prints each dispatched event."""

    def __init__(self, adapter: EventAdapter) -> None:
        self.adapter = adapter
        self.done = False

    def on_event(self, event: ProtocolEvent, index: int, total: int) -> None:
        for line in self.adapter.transform(event):
            print(f"({index + 1}/{total}) {line}")

    def on_finished(self) -> None:
        self.done = True


def main(argv: list[str] | None = None) -> int | None:
    parser = argparse.ArgumentParser(
        prog="routesim.cli",
        description="Simulate distance-vector or link-state routing over a YAML topology",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "topology",
        type=Path,
        help="Path to the topology YAML file",
    )
    parser.add_argument(
        "--protocol",
        choices=["dv", "ls"],
        default="dv",
        help="Routing protocol: 'dv' for distance vector, 'ls' for link state",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=DEFAULT_MAX_ITERATIONS,
        help="Round bound for distance vector",
    )
    parser.add_argument(
        "--output",
        choices=["cli", "json"],
        default="cli",
        help="Output mode: 'cli' prints the event trace to stdout; 'json' dumps events and tables to a JSON file",
    )
    parser.add_argument(
        "--json-file",
        type=Path,
        default=Path("simulation_output.json"),
        help="Path to JSON output file if --output=json",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write the rendered event trace to this file",
    )
    parser.add_argument(
        "--tables",
        action="store_true",
        help="Print the final routing table of every node",
    )
    parser.add_argument(
        "--logs",
        action="store_true",
        help="Print the engine's step log instead of the event trace",
    )
    parser.add_argument(
        "--playback",
        action="store_true",
        help="Replay the event trace in real time instead of printing it at once",
    )
    parser.add_argument(
        "--delay",
        type=int,
        default=DEFAULT_DELAY_MS,
        help="Milliseconds between events during --playback",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.topology.exists():
        print(f"Topology file not found: {args.topology}", file=sys.stderr)
        return 1

    try:
        graph = load_topology(args.topology)
    except Exception as exc:
        print(f"Failed to load topology: {exc}", file=sys.stderr)
        return 2

    # Count events as they leave the engine
    event_bus = EventBus()
    published: List[ProtocolEvent] = []
    event_bus.subscribe(published.append)

    try:
        result = run_protocol(graph, args.protocol, args.max_iterations, event_bus=event_bus)
    except Exception as exc:
        print(f"Simulation failed: {exc}", file=sys.stderr)
        return 3
    finally:
        event_bus.close()

    if not result.converged:
        print(
            f"[WARN] {result.protocol} did not converge within {args.max_iterations} iterations",
            file=sys.stderr,
        )

    if args.log_file is not None:
        try:
            write_event_log(result.events, args.log_file)
        except OSError as exc:
            print(f"Failed to write log file: {exc}", file=sys.stderr)
            return 4

    if args.output == "json":
        payload: dict[str, Any] = {
            "protocol": result.protocol,
            "converged": result.converged,
            "converged_iteration": result.converged_iteration,
            "events": [event.to_dict() for event in result.events],
            "logs": list(result.logs),
            "tables": {
                node_id: [
                    {"destination": e.destination, "next_hop": e.next_hop, "cost": e.cost}
                    for e in table.values()
                ]
                for node_id, table in result.tables.items()
            },
        }
        try:
            args.json_file.parent.mkdir(parents=True, exist_ok=True)
            with args.json_file.open("w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            print(f"Simulation JSON dumped to {args.json_file} ({len(published)} events)")
        except Exception as exc:
            print(f"Failed to write JSON file: {exc}", file=sys.stderr)
            return 4
        return 0

    adapter = EventAdapter()

    if args.logs:
        for line in result.logs:
            print(line)
    elif args.playback:
        listener = _PrintingListener(adapter)
        clock = PlaybackClock()
        player = EventPlayer(result.events, listener, clock=clock, delay_ms=args.delay)
        player.play()
        clock.run_realtime(until=lambda: listener.done)
    else:
        for event in result.events:
            for line in adapter.transform(event):
                print(line)

    if args.tables:
        for node_id, table in result.tables.items():
            print()
            for line in format_routing_table(node_id, table):
                print(line)

    return 0  # success


if __name__ == "__main__":

    signal.signal(signal.SIGPIPE, signal.SIG_DFL)  # Ignore broken pipe
    sys.exit(main())
