"""Connection handle contract expected from the transport layer."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """A bidirectional text channel to one endpoint.

    Handles are compared by identity and used as dictionary keys, so the
    transport must hand the router the same object for every event of a
    given socket. ``send`` and ``close`` must not raise when the peer is
    already gone.
    """

    @property
    def is_open(self) -> bool: ...

    async def send(self, text: str) -> None: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...


__all__ = ["Connection"]
