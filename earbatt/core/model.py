"""Core data models used across config, session, decoder, and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DeviceKind(str, Enum):
    LEFT_EARBUD = "LeftEar"
    RIGHT_EARBUD = "RightEar"
    CASE = "Case"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class DeviceRecord:
    kind: DeviceKind
    battery_level: int
    recharging: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "device_type": self.kind.value,
            "recharging": self.recharging,
            "battery_level": self.battery_level,
        }


@dataclass(frozen=True)
class Settings:
    address_prefix: bytes = bytes((0x2C, 0xBE, 0xEB))
    channel: int = 15
    attempts: int = 3
    backoff_s: float = 0.5
    timeout_s: float = 5.0

    @property
    def address_prefix_str(self) -> str:
        return ":".join(f"{b:02X}" for b in self.address_prefix)
