"""
Topology description loader for the routesim protocol simulator.

Responsibilities:

- Load a topology description from YAML
- Validate its structure before any node or link is created
- Build a Graph through the model's own validated operations

The loader only reads. Saving topologies is left to whoever owns the
editing surface.
"""

from pathlib import Path
from typing import Any

import yaml

from routesim.topology.model import Graph


def load_topology(path: Path) -> Graph:
    """
    Load a YAML topology description from disk.
    """
    with Path(path).open("r", encoding="utf-8") as fh:
        document = yaml.safe_load(fh)

    return build_topology(document)


def build_topology(document: Any) -> Graph:
    """
    Build a Graph from an already parsed topology mapping.

    Nodes may be given as bare ids or as mappings with ``id``, ``x`` and
    ``y``. Links need ``from`` and ``to``; ``id`` defaults to ``e<n>``,
    ``cost`` to 1 and ``up`` to true.
    Ids may be strings or integers; integers are used as their decimal text.
    """
    if not isinstance(document, dict):
        raise ValueError("Topology file must be a YAML mapping (dict)")

    if "nodes" not in document:
        raise ValueError("Topology is missing a 'nodes' section")

    nodes = document["nodes"]
    edges = document.get("edges") or []

    if not isinstance(nodes, list):
        raise ValueError("'nodes' must be a list of nodes")
    if not isinstance(edges, list):
        raise ValueError("'edges' must be a list of links")

    graph = Graph()

    for position, entry in enumerate(nodes):
        if _is_scalar_id(entry):
            graph.add_node(str(entry))
        elif isinstance(entry, dict) and _is_scalar_id(entry.get("id")):
            graph.add_node(
                str(entry["id"]),
                int(entry.get("x", 0)),
                int(entry.get("y", 0)),
            )
        else:
            raise ValueError(f"Node entry {position} must be an id or a mapping with 'id'")

    for position, entry in enumerate(edges, start=1):
        if not isinstance(entry, dict):
            raise ValueError(f"Edge entry {position} must be a mapping")
        if "from" not in entry or "to" not in entry:
            raise ValueError(f"Edge entry {position} needs both 'from' and 'to'")
        for key in ("id", "from", "to"):
            if key in entry and not _is_scalar_id(entry[key]):
                raise ValueError(f"Edge entry {position} has an invalid '{key}': {entry[key]!r}")

        edge = graph.add_edge(
            str(entry.get("id", f"e{position}")),
            str(entry["from"]),
            str(entry["to"]),
            entry.get("cost", 1),
        )
        if not entry.get("up", True):
            graph.set_edge_up(edge.id, False)

    return graph


def _is_scalar_id(value: Any) -> bool:
    # YAML reads `1` as int and `yes` as bool; only the former is an id
    return isinstance(value, (str, int)) and not isinstance(value, bool)
