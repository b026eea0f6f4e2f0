from __future__ import annotations

from pathlib import Path

import pytest

from src.datacollector.config import ChefLoadConfig, ConfigValidationError, load_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "chef-load.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_reads_defaults(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
chef_server_url: https://chef.example.com/organizations/acme
data_collector:
  url: https://automate.example.com/data-collector/v0/
  token: secret-token
""",
    )

    config = load_config(path)

    assert config.chef_server_url == "https://chef.example.com/organizations/acme"
    assert config.chef_environment == "_default"
    assert config.skip_ssl_verify is False
    assert config.data_collector_timeout_s == 5.0


def test_load_config_reads_overrides(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
chef_server_url: https://chef.example.com
chef_environment: production
data_collector:
  url: https://automate.example.com/data-collector/v0/
  token: secret-token
  skip_ssl_verify: true
  timeout_s: 2
""",
    )

    config = load_config(path)
    endpoint = config.data_collector_config()

    assert config.chef_environment == "production"
    assert endpoint.skip_ssl_verify is True
    assert endpoint.timeout_s == 2.0
    assert endpoint.token == "secret-token"
    assert endpoint.url == "https://automate.example.com/data-collector/v0/"


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigValidationError, match="not found"):
        load_config(tmp_path / "missing.yaml")


def test_load_config_missing_keys(tmp_path: Path) -> None:
    path = _write(tmp_path, "chef_server_url: https://chef.example.com\n")

    with pytest.raises(ConfigValidationError, match="data_collector"):
        load_config(path)


@pytest.mark.parametrize(
    "collector",
    [
        "  url: https://automate.example.com/\n  token: ''\n",
        "  url: https://automate.example.com/\n  token: t\n  skip_ssl_verify: 'yes'\n",
        "  url: https://automate.example.com/\n  token: t\n  timeout_s: 0\n",
    ],
)
def test_load_config_rejects_bad_values(tmp_path: Path, collector: str) -> None:
    path = _write(tmp_path, f"chef_server_url: https://chef.example.com\ndata_collector:\n{collector}")

    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_chef_load_config_verifies_tls_by_default() -> None:
    config = ChefLoadConfig(
        chef_server_url="https://chef.example.com",
        data_collector_url="https://automate.example.com/data-collector/v0/",
        data_collector_token="t",
    )

    assert config.data_collector_config().skip_ssl_verify is False
