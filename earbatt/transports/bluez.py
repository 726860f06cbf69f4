"""BlueZ adapter access through ``bluetoothctl``."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence

from earbatt.core.errors import AdapterUnavailableError
from earbatt.transports.rfcomm import RFCOMMChannel

_DEVICE_LINE_RE = re.compile(r"^Device\s+([0-9A-F:]{17})\s+(.+)$", re.IGNORECASE)
_NO_CONTROLLER = "no default controller available"
LOGGER = logging.getLogger(__name__)


async def _run_bluetoothctl(*args: str, timeout_s: float = 5.0) -> tuple[int, str, str]:
    cmd: Sequence[str] = ("bluetoothctl", *args)
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise AdapterUnavailableError(
            "bluetoothctl not found. Install BlueZ and ensure bluetoothd is running."
        ) from exc
    except OSError as exc:
        raise AdapterUnavailableError(f"Could not run bluetoothctl: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout_s)
    except asyncio.TimeoutError as exc:
        # bluetoothctl blocks forever while bluetoothd is down
        process.kill()
        await process.wait()
        raise AdapterUnavailableError(
            f"{' '.join(cmd)} did not finish within {timeout_s}s. Is bluetoothd running?"
        ) from exc

    LOGGER.debug("%s exited with %s", " ".join(cmd), process.returncode)
    return (
        process.returncode if process.returncode is not None else -1,
        stdout.decode(errors="replace"),
        stderr.decode(errors="replace"),
    )


def _parse_device_lines(output: str) -> list[str]:
    seen: set[str] = set()
    addresses: list[str] = []
    for line in output.splitlines():
        match = _DEVICE_LINE_RE.match(line.strip())
        if not match:
            continue
        mac = match.group(1).upper()
        if mac in seen:
            continue
        seen.add(mac)
        addresses.append(mac)
    return addresses


class BluezAdapter:
    def __init__(self, *, timeout_s: float = 5.0) -> None:
        self.timeout_s = timeout_s

    async def power_on(self) -> None:
        returncode, stdout, stderr = await _run_bluetoothctl("power", "on", timeout_s=self.timeout_s)
        combined = f"{stdout}\n{stderr}"
        if returncode != 0 or "succeeded" not in combined:
            details = (stderr or stdout).strip() or f"exit status {returncode}"
            raise AdapterUnavailableError(f"Could not power on Bluetooth adapter: {details}")

    async def device_addresses(self) -> list[str]:
        errors: list[str] = []
        for args in (("devices",), ("paired-devices",)):
            returncode, stdout, stderr = await _run_bluetoothctl(*args, timeout_s=self.timeout_s)
            if returncode != 0:
                if stderr.strip():
                    errors.append(f"bluetoothctl {' '.join(args)} -> {stderr.strip()}")
                continue
            addresses = _parse_device_lines(stdout)
            if addresses:
                return addresses
        if errors:
            LOGGER.warning("Device listing failed: %s", " | ".join(errors))
        return []


class BluezTransport:
    def __init__(self, *, timeout_s: float = 5.0) -> None:
        self.timeout_s = timeout_s

    async def default_adapter(self) -> BluezAdapter:
        returncode, stdout, stderr = await _run_bluetoothctl("show", timeout_s=self.timeout_s)
        if returncode != 0 or _NO_CONTROLLER in f"{stdout}\n{stderr}".lower():
            raise AdapterUnavailableError(
                "No Bluetooth adapter available. Ensure a working D-Bus/BlueZ session."
            )
        return BluezAdapter(timeout_s=self.timeout_s)

    async def open_channel(self, address: str, channel: int, *, timeout_s: float = 5.0) -> RFCOMMChannel:
        return await RFCOMMChannel.open(address, channel, timeout_s=timeout_s)
