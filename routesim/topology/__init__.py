"""
Topology model and loader.
"""

from routesim.topology.loader import build_topology, load_topology
from routesim.topology.model import Edge, Graph, Node, TopologyError

__all__ = [
    "Edge",
    "Graph",
    "Node",
    "TopologyError",
    "build_topology",
    "load_topology",
]
