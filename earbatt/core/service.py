"""Service layer used by the CLI and the public API."""

from __future__ import annotations

import asyncio
import logging
import socket

from earbatt.core.config import load_settings
from earbatt.core.model import DeviceRecord, Settings
from earbatt.core.protocol import REQUEST_FRAME, decode, read_response
from earbatt.core.session import Sleep, connect_with_retry
from earbatt.transports.base import Transport
from earbatt.transports.bluez import BluezTransport

LOGGER = logging.getLogger(__name__)


class BatteryService:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        transport: Transport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if settings is None:
            loaded = load_settings()
            settings = loaded.settings
            self.config_source = loaded.source
        else:
            self.config_source = None
        self.settings = settings
        self.runtime_warnings = _runtime_warnings()
        self.transport = transport or BluezTransport(timeout_s=settings.timeout_s)
        self._sleep = sleep

    async def query_battery(self) -> list[DeviceRecord]:
        channel = await connect_with_retry(self.transport, self.settings, sleep=self._sleep)
        async with channel:
            await channel.write(REQUEST_FRAME)
            response = await read_response(channel)
        LOGGER.debug("Received %d bytes: %s", len(response), response.hex())
        return decode(response)

    def read_battery(self) -> list[DeviceRecord]:
        return asyncio.run(self.query_battery())


def _runtime_warnings() -> tuple[str, ...]:
    warnings: list[str] = []
    if not hasattr(socket, "AF_BLUETOOTH") or not hasattr(socket, "BTPROTO_RFCOMM"):
        warnings.append(
            "Python runtime missing AF_BLUETOOTH/BTPROTO_RFCOMM; battery queries will fail."
        )
    return tuple(warnings)
