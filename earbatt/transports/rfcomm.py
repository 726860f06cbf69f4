"""RFCOMM channel implementation using Python sockets."""

from __future__ import annotations

import asyncio
import socket

from earbatt.core.errors import (
    ConnectionFailedError,
    TransportSendError,
    TransportTimeoutError,
)


class RFCOMMChannel:
    """Blocking RFCOMM socket driven from worker threads.

    The event loop cannot resolve Bluetooth addresses, so connect and I/O run
    through ``asyncio.to_thread`` on a socket with a timeout set.
    """

    def __init__(self, bt_socket: socket.socket, *, address: str, channel: int) -> None:
        self._socket = bt_socket
        self.address = address
        self.channel = channel

    @classmethod
    async def open(cls, address: str, channel: int, *, timeout_s: float = 5.0) -> RFCOMMChannel:
        try:
            af_bluetooth = socket.AF_BLUETOOTH
            btproto_rfcomm = socket.BTPROTO_RFCOMM
        except AttributeError as exc:
            raise ConnectionFailedError(
                "This Python build does not expose Bluetooth socket APIs (AF_BLUETOOTH/BTPROTO_RFCOMM)."
            ) from exc

        try:
            bt_socket = socket.socket(
                af_bluetooth,
                socket.SOCK_STREAM,
                btproto_rfcomm,
            )
        except OSError as exc:
            raise ConnectionFailedError(f"Could not create RFCOMM socket: {exc}") from exc
        bt_socket.settimeout(timeout_s)

        try:
            await asyncio.to_thread(bt_socket.connect, (address, channel))
        except TimeoutError as exc:
            bt_socket.close()
            raise ConnectionFailedError(
                f"RFCOMM connect timed out for {address} on channel {channel}"
            ) from exc
        except OSError as exc:
            bt_socket.close()
            raise ConnectionFailedError(
                f"RFCOMM connect failed for {address} on channel {channel}: {exc}"
            ) from exc

        return cls(bt_socket, address=address, channel=channel)

    async def write(self, payload: bytes) -> None:
        try:
            await asyncio.to_thread(self._socket.sendall, payload)
        except OSError as exc:
            raise TransportSendError(f"RFCOMM send failed: {exc}") from exc

    async def read(self, max_bytes: int) -> bytes:
        try:
            return await asyncio.to_thread(self._socket.recv, max_bytes)
        except TimeoutError as exc:
            raise TransportTimeoutError("RFCOMM receive timed out") from exc
        except OSError as exc:
            raise TransportSendError(f"RFCOMM receive failed: {exc}") from exc

    async def close(self) -> None:
        self._socket.close()

    async def __aenter__(self) -> RFCOMMChannel:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
