"""Data Collector endpoint and chef-load run configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

_REQUIRED_TOP_LEVEL_KEYS = {"chef_server_url", "data_collector"}
_REQUIRED_DATA_COLLECTOR_KEYS = {"url", "token"}


class ConfigValidationError(ValueError):
    """Raised when a chef-load configuration file is invalid."""


@dataclass(frozen=True)
class DataCollectorConfig:
    """Connection settings for one Data Collector endpoint."""

    token: str
    url: str
    skip_ssl_verify: bool = False
    timeout_s: float = 5.0


@dataclass(frozen=True)
class ChefLoadConfig:
    """Run-level settings shared by every simulated client run."""

    chef_server_url: str
    data_collector_url: str
    data_collector_token: str
    chef_environment: str = "_default"
    skip_ssl_verify: bool = False
    data_collector_timeout_s: float = 5.0

    def data_collector_config(self) -> DataCollectorConfig:
        """Return the endpoint config used to build a transport client."""
        return DataCollectorConfig(
            token=self.data_collector_token,
            url=self.data_collector_url,
            skip_ssl_verify=self.skip_ssl_verify,
            timeout_s=self.data_collector_timeout_s,
        )


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigValidationError(f"Config not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Config is not valid YAML: {path}") from exc

    if not isinstance(payload, dict):
        raise ConfigValidationError(f"Config is not a mapping: {path}")

    return payload


def _require_keys(name: str, payload: dict[str, Any], keys: set[str]) -> None:
    missing = sorted(keys - payload.keys())
    if missing:
        raise ConfigValidationError(f"{name} missing keys: {', '.join(missing)}")


def _require_str(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigValidationError(f"{name} must be a non-empty string")
    return value.strip()


def load_config(path: Path) -> ChefLoadConfig:
    """Load and validate a chef-load YAML config file."""
    payload = _load_yaml(path)
    _require_keys("config", payload, _REQUIRED_TOP_LEVEL_KEYS)

    collector = payload["data_collector"]
    if not isinstance(collector, dict):
        raise ConfigValidationError(f"data_collector section must be mapping: {path}")
    _require_keys("data_collector", collector, _REQUIRED_DATA_COLLECTOR_KEYS)

    skip_ssl_verify = collector.get("skip_ssl_verify", False)
    if not isinstance(skip_ssl_verify, bool):
        raise ConfigValidationError("data_collector.skip_ssl_verify must be a boolean")

    timeout_s = collector.get("timeout_s", 5.0)
    if isinstance(timeout_s, bool) or not isinstance(timeout_s, (int, float)) or timeout_s <= 0:
        raise ConfigValidationError("data_collector.timeout_s must be a positive number")

    return ChefLoadConfig(
        chef_server_url=_require_str("chef_server_url", payload["chef_server_url"]),
        data_collector_url=_require_str("data_collector.url", collector["url"]),
        data_collector_token=_require_str("data_collector.token", collector["token"]),
        chef_environment=_require_str(
            "chef_environment",
            payload.get("chef_environment", "_default"),
        ),
        skip_ssl_verify=skip_ssl_verify,
        data_collector_timeout_s=float(timeout_s),
    )
