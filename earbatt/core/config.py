"""Settings loading and validation for the YAML config file."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from earbatt.core.errors import ConfigLoadError, ConfigValidationError
from earbatt.core.model import Settings

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    source: Path | None


def _load_schema_validator() -> Any:
    schema_text = resources.files("earbatt.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def config_path() -> Path:
    override = os.environ.get("EARBATT_CONFIG")
    if override:
        return Path(override)
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "earbatt/config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")
    return loaded


def parse_address_prefix(value: str) -> bytes:
    normalized = value.strip().replace(":", "")
    try:
        prefix = bytes.fromhex(normalized)
    except ValueError as exc:
        raise ConfigValidationError(f"Address prefix '{value}' is not valid hex") from exc
    if len(prefix) != 3:
        raise ConfigValidationError(f"Address prefix '{value}' must be exactly 3 bytes")
    return prefix


def _build_settings(doc: dict[str, Any], source: Path) -> Settings:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    defaults = Settings()
    retry = doc.get("retry", {})
    return Settings(
        address_prefix=parse_address_prefix(doc["address_prefix"])
        if "address_prefix" in doc
        else defaults.address_prefix,
        channel=int(doc.get("channel", defaults.channel)),
        attempts=int(retry.get("attempts", defaults.attempts)),
        backoff_s=int(retry["backoff_ms"]) / 1000 if "backoff_ms" in retry else defaults.backoff_s,
        timeout_s=float(doc.get("timeout_s", defaults.timeout_s)),
    )


def load_settings(path: Path | None = None) -> LoadedSettings:
    path = path or config_path()
    if not path.exists():
        LOGGER.debug("No config file at %s, using defaults", path)
        return LoadedSettings(settings=Settings(), source=None)

    settings = _build_settings(_read_yaml(path), path)
    LOGGER.debug("Loaded settings from %s", path)
    return LoadedSettings(settings=settings, source=path)
