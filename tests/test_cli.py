from __future__ import annotations

import json

from typer.testing import CliRunner

from earbatt import cli
from earbatt.core.errors import ConnectionExhaustedError, ShortResponseError, UnexpectedResponseError
from earbatt.core.model import DeviceKind, DeviceRecord, Settings


class FakeService:
    records = [
        DeviceRecord(kind=DeviceKind.LEFT_EARBUD, battery_level=50, recharging=False),
        DeviceRecord(kind=DeviceKind.RIGHT_EARBUD, battery_level=42, recharging=True),
    ]

    def __init__(self) -> None:
        self.settings = Settings()
        self.config_source = None
        self.runtime_warnings = ()

    def read_battery(self):
        return self.records


runner = CliRunner()


def test_battery_command_prints_pretty_json(monkeypatch):
    monkeypatch.setattr(cli, "BatteryService", FakeService)
    result = runner.invoke(cli.app, ["battery"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == [
        {"device_type": "LeftEar", "recharging": False, "battery_level": 50},
        {"device_type": "RightEar", "recharging": True, "battery_level": 42},
    ]
    assert '\n  {\n    "device_type": "LeftEar",' in result.stdout


def test_unexpected_response_prints_error_object(monkeypatch):
    class NoEarService(FakeService):
        def read_battery(self):
            raise UnexpectedResponseError(command=0)

    monkeypatch.setattr(cli, "BatteryService", NoEarService)
    result = runner.invoke(cli.app, ["battery"])
    assert result.exit_code == 0
    assert result.stdout.strip() == '{"error":"Ear 2 not detected"}'


def test_connection_failure_is_fatal_and_clean(monkeypatch):
    class OfflineService(FakeService):
        def read_battery(self):
            raise ConnectionExhaustedError("Failed to connect to Ear: refused")

    monkeypatch.setattr(cli, "BatteryService", OfflineService)
    result = runner.invoke(cli.app, ["battery"])
    assert result.exit_code == 1
    assert "Error: Failed to connect to Ear: refused" in result.stderr
    assert result.stdout == ""
    assert "Traceback" not in result.stderr


def test_short_response_is_reported_as_error(monkeypatch):
    class TruncatedService(FakeService):
        def read_battery(self):
            raise ShortResponseError("Response declares 3 devices (15 bytes) but only 11 bytes arrived")

    monkeypatch.setattr(cli, "BatteryService", TruncatedService)
    result = runner.invoke(cli.app, ["battery"])
    assert result.exit_code == 1
    assert "only 11 bytes arrived" in result.stderr


def test_options_override_settings(monkeypatch):
    seen: list[Settings] = []

    class CapturingService(FakeService):
        def read_battery(self):
            seen.append(self.settings)
            return []

    monkeypatch.setattr(cli, "BatteryService", CapturingService)
    result = runner.invoke(cli.app, ["battery", "--prefix", "aa:bb:cc", "--channel", "3"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == []
    assert seen[0].address_prefix == bytes((0xAA, 0xBB, 0xCC))
    assert seen[0].channel == 3


def test_invalid_prefix_option_is_clean_error(monkeypatch):
    monkeypatch.setattr(cli, "BatteryService", FakeService)
    result = runner.invoke(cli.app, ["battery", "--prefix", "zz"])
    assert result.exit_code == 1
    assert "Error:" in result.stderr


def test_config_command(monkeypatch):
    monkeypatch.setattr(cli, "BatteryService", FakeService)
    result = runner.invoke(cli.app, ["config"])
    assert result.exit_code == 0
    assert "address_prefix: 2C:BE:EB" in result.stdout
    assert "channel: 15" in result.stdout
    assert "backoff_ms: 500" in result.stdout


def test_runtime_warning_is_printed(monkeypatch):
    class WarnService(FakeService):
        def __init__(self) -> None:
            super().__init__()
            self.runtime_warnings = ("Python runtime missing AF_BLUETOOTH/BTPROTO_RFCOMM",)

    monkeypatch.setattr(cli, "BatteryService", WarnService)
    result = runner.invoke(cli.app, ["battery"])
    assert result.exit_code == 0
    assert "Warning: Python runtime missing AF_BLUETOOTH/BTPROTO_RFCOMM" in result.stderr


def test_out_of_range_channel_rejected_before_connecting(monkeypatch):
    class NeverCalledService(FakeService):
        def read_battery(self):
            raise AssertionError("should not connect")

    monkeypatch.setattr(cli, "BatteryService", NeverCalledService)
    result = runner.invoke(cli.app, ["battery", "--channel", "31"])
    assert result.exit_code == 2
