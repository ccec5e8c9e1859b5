"""
Delivery sink interface for DMAP exports.

A sink receives finished export files, one name + byte blob at a time,
and completes when the file has been handed over, optionally reporting
the name it was actually stored under. The exporter assumes
nothing else about it; errors raised by a sink propagate to the caller
untouched.

Concrete implementations:
    - LocalDirectorySink (files written under a directory)
    - MemorySink         (kept in a list; tests and HTTP responses)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class DeliveredFile:
    """A file handed to a sink."""

    name: str
    data: bytes


@runtime_checkable
class DeliverySink(Protocol):
    """
    Interface used by ProjectExporter to hand files to the user.
    """

    async def deliver(self, name: str, data: bytes) -> Optional[str]:
        """
        Deliver one named byte blob; return once it is accepted.

        A sink that stores the file under a different name (to avoid
        clobbering an existing one) returns that name; None means the
        requested name was used.
        """
        raise NotImplementedError


__all__ = [
    "DeliveredFile",
    "DeliverySink",
]
