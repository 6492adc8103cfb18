"""Server configuration loading for nodectl.

The configuration is a YAML document validated against the packaged
``config.schema.json``. It is the provider of the match-key set consumed by
``set-node-hw-info``; the loader guarantees that set is never empty.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from nodectl.core.errors import ConfigError
from nodectl.core.model import MatchKeySet
from nodectl.core.schema import validate_config

DEFAULT_MATCH_KEYS = ("serial", "asset", "uuid")
DEFAULT_BUSY_TIMEOUT_S = 5.0
CONFIG_ENV = "NODECTL_CONFIG"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class AuthSettings:
    enabled: bool = False
    permissions: tuple[str, ...] = ()


@dataclass(frozen=True)
class Settings:
    match_keys: MatchKeySet
    database: Path
    busy_timeout_s: float = DEFAULT_BUSY_TIMEOUT_S
    auth: AuthSettings = AuthSettings()
    source: Path | None = None


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override)
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "nodectl/config.yaml"


def default_database_path() -> Path:
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_data / "nodectl/nodes.db"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at root")
    return loaded


def build_settings(doc: dict[str, Any], source: Path | None = None) -> Settings:
    validate_config(doc, source=source or "<config>")

    database = doc.get("database")
    if database is None:
        database_path = default_database_path()
    else:
        database_path = Path(database).expanduser()
        if source is not None and not database_path.is_absolute():
            database_path = source.parent / database_path

    auth_doc = doc.get("auth", {})
    return Settings(
        match_keys=MatchKeySet(keys=tuple(doc.get("match_nodes_on", DEFAULT_MATCH_KEYS))),
        database=database_path,
        busy_timeout_s=float(doc.get("busy_timeout_s", DEFAULT_BUSY_TIMEOUT_S)),
        auth=AuthSettings(
            enabled=auth_doc.get("enabled", False),
            permissions=tuple(auth_doc.get("permissions", [])),
        ),
        source=source,
    )


def load_config(path: Path | None = None) -> Settings:
    config_path = path or default_config_path()
    if not config_path.exists():
        if path is not None:
            raise ConfigError(f"Config file {config_path} does not exist")
        LOGGER.warning("No config file at %s, using defaults", config_path)
        return build_settings({})

    doc = _read_yaml(config_path)
    settings = build_settings(doc, source=config_path)
    LOGGER.debug("Loaded config from %s (match keys: %s)", config_path, settings.match_keys.describe())
    return settings
