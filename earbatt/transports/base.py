"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol


class Channel(Protocol):
    async def write(self, payload: bytes) -> None:
        """Write the whole payload to the peer."""

    async def read(self, max_bytes: int) -> bytes:
        """Read up to ``max_bytes``; an empty result means the peer closed."""

    async def close(self) -> None:
        """Release the underlying socket."""

    async def __aenter__(self) -> Channel: ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...


class Adapter(Protocol):
    async def power_on(self) -> None:
        """Ensure the adapter is powered."""

    async def device_addresses(self) -> list[str]:
        """Return the hardware addresses the adapter already knows."""


class Transport(Protocol):
    async def default_adapter(self) -> Adapter:
        """Return the host's default Bluetooth adapter."""

    async def open_channel(self, address: str, channel: int, *, timeout_s: float = 5.0) -> Channel:
        """Open an RFCOMM byte stream to ``address`` on ``channel``."""
