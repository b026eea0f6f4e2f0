from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

import pytest

from src.datacollector import app
from src.datacollector.client import DataCollectorTransportError
from src.datacollector.events import RunReport


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "chef-load.yaml"
    path.write_text(
        "chef_server_url: https://chef.example.com\n"
        "chef_environment: staging\n"
        "data_collector:\n"
        "  url: https://collector.test/data-collector/v0/\n"
        "  token: secret-token\n",
        encoding="utf-8",
    )
    return path


def _args(config: Path, **overrides: Any) -> argparse.Namespace:
    values: dict[str, Any] = {
        "command": "report-run",
        "config": config,
        "node_name": "node1",
        "org": "acme",
        "run_list": ["role[base]", "recipe[nginx@2.7.6]"],
        "run_list_version": [],
        "duration_s": 30.0,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


def test_parse_args_report_run() -> None:
    args = app.parse_args(
        ["report-run", "--config", "cfg.yaml", "--node-name", "node1", "--org", "acme"]
    )

    assert args.command == "report-run"
    assert args.config == Path("cfg.yaml")
    assert args.run_list == ["recipe[chef-client]"]
    assert args.duration_s == 30.0


def test_parse_args_serve() -> None:
    args = app.parse_args(["serve", "--port", "9000", "--token", "t"])

    assert args.command == "serve"
    assert args.port == 9000
    assert args.token == "t"


def test_run_report_emits_json(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    captured: dict[str, Any] = {}

    def _fake_report_run(**kwargs: Any) -> RunReport:
        captured.update(kwargs)
        return RunReport(
            node_name=kwargs["node_name"],
            run_id=str(kwargs["run_uuid"]),
            start_time="2024-01-01T00:00:00Z",
            end_time="2024-01-01T00:00:30Z",
        )

    monkeypatch.setattr("src.datacollector.app.report_run", _fake_report_run)

    exit_code = app.run_report(_args(_write_config(tmp_path)))

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["node_name"] == "node1"
    assert payload["run_id"] == str(captured["run_uuid"])
    assert captured["node"]["chef_environment"] == "staging"
    assert captured["run_list"].to_string_list() == ["role[base]", "recipe[nginx@2.7.6]"]
    assert (captured["end_time"] - captured["start_time"]).total_seconds() == 30.0


def test_run_report_returns_error_code_on_delivery_failure(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    def _failing_report_run(**kwargs: Any) -> RunReport:
        raise DataCollectorTransportError("connection refused")

    monkeypatch.setattr("src.datacollector.app.report_run", _failing_report_run)

    assert app.run_report(_args(_write_config(tmp_path))) == 1


def test_run_report_rejects_invalid_run_list(tmp_path: Path) -> None:
    assert app.run_report(_args(_write_config(tmp_path), run_list=["thing[x]"])) == 2


def test_run_report_rejects_missing_config(tmp_path: Path) -> None:
    assert app.run_report(_args(tmp_path / "missing.yaml")) == 2


def test_parse_args_collects_run_list_versions() -> None:
    args = app.parse_args(
        [
            "report-run",
            "--config",
            "cfg.yaml",
            "--node-name",
            "node1",
            "--org",
            "acme",
            "--run-list",
            "recipe[nginx]",
            "recipe[ntp]",
            "--run-list-version",
            "nginx=2.7.6",
            "--run-list-version",
            "ntp=1.1.0",
        ]
    )

    assert args.run_list_version == ["nginx=2.7.6", "ntp=1.1.0"]


def test_run_report_pins_versions_in_expanded_run_list(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    captured: dict[str, Any] = {}

    def _fake_report_run(**kwargs: Any) -> RunReport:
        captured.update(kwargs)
        return RunReport(node_name="node1", run_id="r", start_time="s", end_time="e")

    monkeypatch.setattr("src.datacollector.app.report_run", _fake_report_run)

    exit_code = app.run_report(
        _args(
            _write_config(tmp_path),
            run_list=["role[base]", "recipe[nginx]"],
            run_list_version=["nginx=2.7.6"],
        )
    )

    assert exit_code == 0
    assert captured["run_list"].to_string_list() == ["role[base]", "recipe[nginx]"]
    expanded = list(captured["expanded_run_list"].expanded_items())
    assert [item.version for item in expanded] == ["", "2.7.6"]


@pytest.mark.parametrize("pin", ["nginx", "=2.7.6", "nginx=", "missing=1.0.0"])
def test_run_report_rejects_bad_version_pins(tmp_path: Path, pin: str) -> None:
    args = _args(_write_config(tmp_path), run_list=["recipe[nginx]"], run_list_version=[pin])

    assert app.run_report(args) == 2
