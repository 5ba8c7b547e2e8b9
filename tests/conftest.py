"""Test configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from routesim.engine.clock import PlaybackClock  # noqa: E402
from routesim.engine.events import ProtocolEvent  # noqa: E402
from routesim.topology.model import Graph  # noqa: E402


class RecordingListener:
    """Playback listener that remembers every callback."""

    def __init__(self):
        self.events = []
        self.finished = 0

    def on_event(self, event, index, total):
        self.events.append((event, index, total))

    def on_finished(self):
        self.finished += 1

    @property
    def indices(self):
        return [index for _, index, _ in self.events]


@pytest.fixture
def sample_graph() -> Graph:
    """A-B(1), B-C(3), A-C(7), C-D(2): A reaches D cheapest via B and C."""
    graph = Graph()
    for node_id in ("A", "B", "C", "D"):
        graph.add_node(node_id)
    graph.add_edge("e1", "A", "B", 1)
    graph.add_edge("e2", "B", "C", 3)
    graph.add_edge("e3", "A", "C", 7)
    graph.add_edge("e4", "C", "D", 2)
    return graph


@pytest.fixture
def ring_graph() -> Graph:
    """Six-node ring with one chord and distinct costs."""
    graph = Graph()
    for node_id in ("R1", "R2", "R3", "R4", "R5", "R6"):
        graph.add_node(node_id)
    graph.add_edge("r12", "R1", "R2", 2)
    graph.add_edge("r23", "R2", "R3", 5)
    graph.add_edge("r34", "R3", "R4", 1)
    graph.add_edge("r45", "R4", "R5", 4)
    graph.add_edge("r56", "R5", "R6", 3)
    graph.add_edge("r61", "R6", "R1", 9)
    graph.add_edge("r25", "R2", "R5", 6)
    return graph


@pytest.fixture
def clock() -> PlaybackClock:
    return PlaybackClock()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def five_events() -> list[ProtocolEvent]:
    return [ProtocolEvent.info(f"event {i}") for i in range(5)]


@pytest.fixture
def topology_file(tmp_path) -> Path:
    path = tmp_path / "topology.yaml"
    path.write_text(
        """
id: sample
nodes:
  - id: A
    x: 100
    y: 200
  - B
  - C
  - D
edges:
  - {id: e1, from: A, to: B, cost: 1}
  - {id: e2, from: B, to: C, cost: 3}
  - {id: e3, from: A, to: C, cost: 7}
  - {id: e4, from: C, to: D, cost: 2}
""",
        encoding="utf-8",
    )
    return path
