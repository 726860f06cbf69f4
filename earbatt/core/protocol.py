"""Wire constants and battery response decoding for the Ear protocol."""

from __future__ import annotations

import logging

from earbatt.core.device import classify
from earbatt.core.errors import ShortResponseError, TransportTimeoutError, UnexpectedResponseError
from earbatt.core.model import DeviceRecord
from earbatt.transports.base import Channel

REQUEST_FRAME = bytes.fromhex("55600107c0000001acdf")
BATTERY_STATUS_2 = 0x4007
RESPONSE_CAPACITY = 17

RECHARGING_MASK = 0x80
BATTERY_MASK = 0x7F

_COMMAND_SLICE = slice(3, 5)
_COUNT_OFFSET = 8
_ENTRIES_OFFSET = 9
_ENTRY_SIZE = 2

LOGGER = logging.getLogger(__name__)


def _command_code(buffer: bytes) -> int:
    return int.from_bytes(buffer[_COMMAND_SLICE], "little")


def frame_length(buffer: bytes) -> int | None:
    """Return how many bytes of ``buffer`` are needed to decode it.

    Trailing bytes after the last device entry are not counted. ``None`` means
    the header has not fully arrived yet.
    """
    if len(buffer) < _COMMAND_SLICE.stop:
        return None
    if _command_code(buffer) != BATTERY_STATUS_2:
        return len(buffer)
    if len(buffer) <= _COUNT_OFFSET:
        return None
    expected = _ENTRIES_OFFSET + _ENTRY_SIZE * buffer[_COUNT_OFFSET]
    return min(expected, RESPONSE_CAPACITY)


def decode(buffer: bytes) -> list[DeviceRecord]:
    if len(buffer) < _COMMAND_SLICE.stop:
        raise ShortResponseError(
            f"Response of {len(buffer)} bytes is too short to carry a command code"
        )

    command = _command_code(buffer)
    if command != BATTERY_STATUS_2:
        LOGGER.debug("Unexpected response command 0x%04x", command)
        raise UnexpectedResponseError(command=command)

    if len(buffer) <= _COUNT_OFFSET:
        raise ShortResponseError(
            f"Response of {len(buffer)} bytes is too short to carry a device count"
        )

    count = buffer[_COUNT_OFFSET]
    needed = _ENTRIES_OFFSET + _ENTRY_SIZE * count
    if len(buffer) < needed:
        raise ShortResponseError(
            f"Response declares {count} devices ({needed} bytes) but only {len(buffer)} bytes arrived"
        )

    records: list[DeviceRecord] = []
    for index in range(count):
        offset = _ENTRIES_OFFSET + _ENTRY_SIZE * index
        status = buffer[offset + 1]
        records.append(
            DeviceRecord(
                kind=classify(buffer[offset]),
                battery_level=status & BATTERY_MASK,
                recharging=bool(status & RECHARGING_MASK),
            )
        )
    return records


async def read_response(channel: Channel) -> bytes:
    """Read one response frame, stopping once its declared length has arrived."""
    buffer = bytearray()
    while len(buffer) < RESPONSE_CAPACITY:
        try:
            chunk = await channel.read(RESPONSE_CAPACITY - len(buffer))
        except TransportTimeoutError:
            if not buffer:
                raise
            LOGGER.debug("Read timed out with %d bytes buffered", len(buffer))
            break
        if not chunk:
            break
        buffer += chunk
        expected = frame_length(bytes(buffer))
        if expected is not None and len(buffer) >= expected:
            break
    return bytes(buffer)
