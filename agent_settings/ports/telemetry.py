"""Telemetry Port Interface.

Contract: Log structured events. Resolver lifecycle events (layer reads, dropped keys,
resolution results) go through this port so sinks can be swapped without touching the resolver.
"""
from __future__ import annotations
from typing import Protocol, Any

class Telemetry(Protocol):
    def log(self, event: str, **fields: Any) -> None: ...
