"""Test fixtures for in-memory implementations."""

from .in_memory_node import (
    InMemoryNode,
    InMemoryReportMutations,
    SendFundsCall,
    make_public_key,
    route_with_capacity,
)

__all__ = [
    "InMemoryNode",
    "InMemoryReportMutations",
    "SendFundsCall",
    "make_public_key",
    "route_with_capacity",
]
