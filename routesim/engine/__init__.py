"""
Routing engines, protocol events and playback.
"""

from routesim.engine.base import NOT_CONVERGED, RoutingEngine
from routesim.engine.clock import PlaybackClock
from routesim.engine.distance_vector import DEFAULT_MAX_ITERATIONS, DistanceVectorEngine
from routesim.engine.event_bus import EventBus
from routesim.engine.events import EventKind, ProtocolEvent
from routesim.engine.link_state import LinkStateEngine
from routesim.engine.playback import EventPlayer, PlaybackListener, PlaybackState
from routesim.engine.routing_table import INFINITY, RoutingTableEntry
from routesim.engine.simulation_engine import SimulationResult, run_protocol

__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "INFINITY",
    "NOT_CONVERGED",
    "DistanceVectorEngine",
    "EventBus",
    "EventKind",
    "EventPlayer",
    "LinkStateEngine",
    "PlaybackClock",
    "PlaybackListener",
    "PlaybackState",
    "ProtocolEvent",
    "RoutingEngine",
    "RoutingTableEntry",
    "SimulationResult",
    "run_protocol",
]
