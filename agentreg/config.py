"""Runtime settings — defaults, an optional YAML file, then environment overrides.

Example ``~/.agentreg/config.yaml``::

    store:
      storage_key: unified_agent_data
      enable_persistence: true
      enable_events: true
      seed_on_empty: true
    query:
      cache_ttl_seconds: 300
      default_page_size: 12
      invalidate_on_write: false
    ledger:
      gateway: simulated
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from agentreg.errors import ConfigError
from agentreg.ledger.gateway import GATEWAYS
from agentreg.store.snapshot import DEFAULT_STORAGE_KEY

CONFIG_FILENAME = "config.yaml"


def default_home() -> Path:
    return Path.home() / ".agentreg"


@dataclass
class Settings:
    home: Path = field(default_factory=default_home)
    storage_key: str = DEFAULT_STORAGE_KEY
    enable_persistence: bool = True
    enable_events: bool = True
    seed_on_empty: bool = True
    cache_ttl_seconds: float = 300.0
    default_page_size: int = 12
    invalidate_on_write: bool = False
    ledger_gateway: str = "simulated"

    def __post_init__(self) -> None:
        self.home = Path(self.home).expanduser()
        if not self.storage_key:
            raise ConfigError("storage_key must not be empty")
        if self.cache_ttl_seconds < 0:
            raise ConfigError("cache_ttl_seconds must be >= 0")
        if self.default_page_size < 1:
            raise ConfigError("default_page_size must be >= 1")
        if self.ledger_gateway not in GATEWAYS:
            raise ConfigError(
                f"Unknown ledger gateway '{self.ledger_gateway}'; "
                f"expected one of: {', '.join(sorted(GATEWAYS))}"
            )

    @property
    def config_path(self) -> Path:
        return self.home / CONFIG_FILENAME


# section -> {yaml key: Settings field}
_SECTIONS: dict[str, dict[str, str]] = {
    "store": {
        "storage_key": "storage_key",
        "enable_persistence": "enable_persistence",
        "enable_events": "enable_events",
        "seed_on_empty": "seed_on_empty",
    },
    "query": {
        "cache_ttl_seconds": "cache_ttl_seconds",
        "default_page_size": "default_page_size",
        "invalidate_on_write": "invalidate_on_write",
    },
    "ledger": {"gateway": "ledger_gateway"},
}

_ENV: dict[str, tuple[str, type]] = {
    "AGENTREG_STORAGE_KEY": ("storage_key", str),
    "AGENTREG_CACHE_TTL": ("cache_ttl_seconds", float),
    "AGENTREG_PAGE_SIZE": ("default_page_size", int),
    "AGENTREG_LEDGER_GATEWAY": ("ledger_gateway", str),
}


def _from_yaml(data: Any, path: Path) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{path}: top level must be a mapping")
    values: dict[str, Any] = {}
    for section, keys in _SECTIONS.items():
        block = data.get(section) or {}
        if not isinstance(block, Mapping):
            raise ConfigError(f"{path}: section '{section}' must be a mapping")
        unknown = sorted(set(block) - set(keys))
        if unknown:
            raise ConfigError(f"{path}: unknown key(s) in '{section}': {', '.join(unknown)}")
        for key, attr in keys.items():
            if key in block:
                values[attr] = block[key]
    return values


def load_settings(
    config_path: Optional[str | Path] = None,
    *,
    home: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build settings from defaults, ``<home>/config.yaml`` and the environment.

    ``home`` wins over ``AGENTREG_HOME``; environment variables win over the
    file. A missing config file is not an error.
    """
    env = os.environ if env is None else env
    home_path = Path(home or env.get("AGENTREG_HOME") or default_home()).expanduser()
    path = Path(config_path) if config_path else home_path / CONFIG_FILENAME

    values: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Could not read config file {path}: {exc}") from exc
        values.update(_from_yaml(data, path))

    for var, (attr, cast) in _ENV.items():
        raw = env.get(var)
        if raw is None or raw == "":
            continue
        try:
            values[attr] = cast(raw)
        except ValueError:
            raise ConfigError(f"{var}={raw!r} is not a valid {cast.__name__}") from None

    return Settings(home=home_path, **values)


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    data = {f.name: getattr(settings, f.name) for f in fields(settings)}
    data["home"] = str(settings.home)
    return data
