# routesim/output/__init__.py
from .base import Adapter
from .adapter import EventAdapter, format_routing_table, write_event_log
from .event_adapters import LifecycleAdapter, MessageSendAdapter, TableUpdateAdapter

__all__ = [
    "Adapter",
    "EventAdapter",
    "format_routing_table",
    "write_event_log",
    "LifecycleAdapter",
    "MessageSendAdapter",
    "TableUpdateAdapter",
]
