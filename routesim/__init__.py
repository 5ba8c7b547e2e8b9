"""
routesim: distance-vector and link-state routing simulator core.

This package contains the topology model, the two protocol engines and
the playback scheduler. The engine side provides:
- DistanceVectorEngine
- LinkStateEngine
- EventPlayer
- EventBus

Engines produce final routing tables plus an ordered trace of protocol
events that a front end can replay at its own pace.
"""

from routesim.topology.model import Edge, Graph, Node, TopologyError

# Expose core engine components
from routesim.engine.distance_vector import DistanceVectorEngine
from routesim.engine.event_bus import EventBus
from routesim.engine.events import EventKind, ProtocolEvent
from routesim.engine.link_state import LinkStateEngine
from routesim.engine.playback import EventPlayer, PlaybackState
from routesim.engine.routing_table import INFINITY, RoutingTableEntry
from routesim.engine.simulation_engine import run_protocol
