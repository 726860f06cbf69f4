"""Role code to device kind mapping."""

from __future__ import annotations

from earbatt.core.model import DeviceKind

_ROLE_CODES = {
    2: DeviceKind.LEFT_EARBUD,
    3: DeviceKind.RIGHT_EARBUD,
    4: DeviceKind.CASE,
}


def classify(role_code: int) -> DeviceKind:
    return _ROLE_CODES.get(role_code, DeviceKind.UNKNOWN)
