"""CLI for sending synthetic run messages and serving a local receiver."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import uuid4

from src.datacollector.client import DataCollectorError
from src.datacollector.config import load_config
from src.datacollector.events import report_run
from src.datacollector.runlist import RunList, parse_run_list

LOGGER = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="chef-load-dc",
        description="Report simulated Chef client runs to a Data Collector",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser(
        "report-run",
        help="Send one run_start/run_converge pair and print a JSON summary",
    )
    report.add_argument("--config", type=Path, required=True)
    report.add_argument("--node-name", required=True)
    report.add_argument("--org", required=True)
    report.add_argument("--run-list", nargs="*", default=["recipe[chef-client]"])
    report.add_argument(
        "--run-list-version",
        action="append",
        default=[],
        metavar="RECIPE=VERSION",
        help="Pin a recipe version in the expanded run list (repeatable)",
    )
    report.add_argument("--duration-s", type=float, default=30.0)

    serve = subparsers.add_parser("serve", help="Run a local Data Collector receiver")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8095)
    serve.add_argument("--token", default=None)

    return parser.parse_args(argv)


def _synthetic_node(node_name: str, environment: str, run_list: RunList) -> dict[str, Any]:
    return {
        "name": node_name,
        "chef_environment": environment,
        "json_class": "Chef::Node",
        "chef_type": "node",
        "run_list": run_list.to_string_list(),
        "automatic": {},
        "normal": {},
        "default": {},
        "override": {},
    }


def _parse_version_pins(entries: list[str]) -> dict[str, str]:
    pins: dict[str, str] = {}
    for entry in entries:
        name, sep, version = entry.partition("=")
        if not sep or not name.strip() or not version.strip():
            raise ValueError(f"--run-list-version expects RECIPE=VERSION, got {entry!r}")
        pins[name.strip()] = version.strip()
    return pins


def run_report(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
        run_list = parse_run_list(args.run_list)
        expanded_run_list = run_list.with_versions(_parse_version_pins(args.run_list_version))
    except ValueError as exc:
        LOGGER.error("Invalid input: %s", exc)
        return 2

    start_time = datetime.now(UTC)
    try:
        summary = report_run(
            node=_synthetic_node(args.node_name, config.chef_environment, run_list),
            node_name=args.node_name,
            org_name=args.org,
            run_list=run_list,
            expanded_run_list=expanded_run_list,
            run_uuid=uuid4(),
            node_uuid=uuid4(),
            start_time=start_time,
            end_time=start_time + timedelta(seconds=args.duration_s),
            config=config,
        )
    except DataCollectorError as exc:
        LOGGER.error("Run report failed: %s", exc)
        return 1

    print(json.dumps(asdict(summary), indent=2, sort_keys=True))
    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from src.datacollector.receiver import create_app

    uvicorn.run(create_app(token=args.token), host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = parse_args(argv)

    if args.command == "report-run":
        return run_report(args)
    if args.command == "serve":
        return run_serve(args)

    raise ValueError(f"Unsupported command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
