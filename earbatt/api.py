"""Stable public API for building tooling on top of earbatt.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from earbatt.core.device import classify
from earbatt.core.errors import (
    AdapterUnavailableError,
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    ConnectionExhaustedError,
    ConnectionFailedError,
    DecodeError,
    DeviceNotFoundError,
    EarbattError,
    ShortResponseError,
    TransportError,
    TransportSendError,
    TransportTimeoutError,
    UnexpectedResponseError,
)
from earbatt.core.model import DeviceKind, DeviceRecord, Settings
from earbatt.core.protocol import decode
from earbatt.core.service import BatteryService
from earbatt.transports.base import Transport

__all__ = [
    "EarbattError",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "TransportError",
    "AdapterUnavailableError",
    "DeviceNotFoundError",
    "ConnectionFailedError",
    "ConnectionExhaustedError",
    "TransportSendError",
    "TransportTimeoutError",
    "DecodeError",
    "UnexpectedResponseError",
    "ShortResponseError",
    "DeviceKind",
    "DeviceRecord",
    "Settings",
    "classify",
    "decode",
    "Client",
]


class Client:
    """Public client for reading battery status from Ear earbuds.

    A `Client` wraps settings loading, adapter access, connection retry and
    response decoding behind a stable API intended for third-party tools
    (status bars, scripts, services).
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._service = BatteryService(settings=settings, transport=transport)

    @property
    def settings(self) -> Settings:
        return self._service.settings

    @property
    def runtime_warnings(self) -> tuple[str, ...]:
        return self._service.runtime_warnings

    def battery(self) -> list[DeviceRecord]:
        return self._service.read_battery()

    async def battery_async(self) -> list[DeviceRecord]:
        return await self._service.query_battery()
