# routesim/output/base.py
from __future__ import annotations
from typing import Iterable

from routesim.engine.events import ProtocolEvent


class Adapter:
    """Base adapter for transforming protocol events into trace lines."""

    def transform(self, event: ProtocolEvent) -> Iterable[str]:
        """Override in subclasses."""
        return []
