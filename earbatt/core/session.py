"""Connection establishment with bounded retry."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from earbatt.core.errors import (
    AdapterUnavailableError,
    ConnectionExhaustedError,
    DeviceNotFoundError,
    TransportError,
)
from earbatt.core.model import Settings
from earbatt.transports.base import Adapter, Channel, Transport

Sleep = Callable[[float], Awaitable[object]]
LOGGER = logging.getLogger(__name__)


def _address_bytes(address: str) -> bytes | None:
    try:
        return bytes.fromhex(address.replace(":", ""))
    except ValueError:
        return None


async def acquire_powered_adapter(transport: Transport) -> Adapter:
    adapter = await transport.default_adapter()
    if adapter is None:
        raise AdapterUnavailableError("No Bluetooth adapter available.")
    await adapter.power_on()
    return adapter


async def resolve_address(adapter: Adapter, prefix: bytes) -> str:
    for address in await adapter.device_addresses():
        raw = _address_bytes(address)
        if raw is not None and raw[:3] == prefix[:3]:
            return address
    raise DeviceNotFoundError(
        "Couldn't find any Ear devices connected. Make sure you're paired with your Ear."
    )


async def open_channel(transport: Transport, address: str, channel: int, *, timeout_s: float = 5.0) -> Channel:
    return await transport.open_channel(address, channel, timeout_s=timeout_s)


async def connect(transport: Transport, settings: Settings) -> Channel:
    adapter = await acquire_powered_adapter(transport)
    address = await resolve_address(adapter, settings.address_prefix)
    LOGGER.debug("Connecting to %s on channel %d", address, settings.channel)
    return await open_channel(transport, address, settings.channel, timeout_s=settings.timeout_s)


async def connect_with_retry(
    transport: Transport,
    settings: Settings,
    *,
    sleep: Sleep = asyncio.sleep,
) -> Channel:
    """Run the full connect sequence, backing off ``attempt * backoff_s`` between tries."""
    if settings.attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {settings.attempts}")
    last_error: TransportError | None = None
    for attempt in range(1, settings.attempts + 1):
        try:
            return await connect(transport, settings)
        except TransportError as exc:
            last_error = exc
            LOGGER.warning("Attempt %d/%d failed: %s", attempt, settings.attempts, exc)
        if attempt < settings.attempts:
            await sleep(attempt * settings.backoff_s)

    raise ConnectionExhaustedError(f"Failed to connect to Ear: {last_error}") from last_error
