"""Run lifecycle emitters for simulated Chef client runs."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from src.datacollector.client import DataCollectorClient
from src.datacollector.config import ChefLoadConfig
from src.datacollector.runlist import RunList, RunListItem
from src.datacollector.schema import (
    ExpandedRunList,
    ExpandedRunListItem,
    RunConvergeEvent,
    RunEvent,
    RunStartEvent,
    format_timestamp,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunReport:
    """Outcome of reporting one simulated run's start/converge pair."""

    node_name: str
    run_id: str
    start_time: str
    end_time: str


def expand_run_list(items: Iterable[RunListItem]) -> list[ExpandedRunListItem]:
    """Convert run list items into wire records, keeping execution order."""
    return [
        ExpandedRunListItem(
            type=item.item_type,
            name=item.name,
            version=item.version or None,
            skipped=False,
        )
        for item in items
    ]


def build_run_start_event(
    *,
    node_name: str,
    org_name: str,
    run_uuid: UUID,
    node_uuid: UUID,
    start_time: datetime,
    config: ChefLoadConfig,
) -> RunStartEvent:
    return RunStartEvent(
        chef_server_fqdn=config.chef_server_url,
        entity_uuid=node_uuid,
        id=run_uuid,
        node_name=node_name,
        organization=org_name,
        run_id=run_uuid,
        start_time=start_time,
    )


def build_run_converge_event(
    *,
    node: Any,
    node_name: str,
    org_name: str,
    run_list: RunList,
    expanded_run_list: RunList,
    run_uuid: UUID,
    node_uuid: UUID,
    start_time: datetime,
    end_time: datetime,
    config: ChefLoadConfig,
) -> RunConvergeEvent:
    return RunConvergeEvent(
        chef_server_fqdn=config.chef_server_url,
        entity_uuid=node_uuid,
        id=run_uuid,
        node_name=node_name,
        organization=org_name,
        run_id=run_uuid,
        start_time=start_time,
        end_time=end_time,
        run_list=run_list.to_string_list(),
        expanded_run_list=ExpandedRunList(
            id=config.chef_environment,
            run_list=expand_run_list(expanded_run_list.expanded_items()),
        ),
        node=node,
    )


def _deliver(event: RunEvent, config: ChefLoadConfig) -> None:
    client = DataCollectorClient(config.data_collector_config())
    client.update(event)
    LOGGER.debug("Delivered %s for run %s", event.message_type, event.run_id)


def report_run_start(
    *,
    node_name: str,
    org_name: str,
    run_uuid: UUID,
    node_uuid: UUID,
    start_time: datetime,
    config: ChefLoadConfig,
) -> None:
    """Send a `run_start` message; delivery errors propagate to the caller."""
    event = build_run_start_event(
        node_name=node_name,
        org_name=org_name,
        run_uuid=run_uuid,
        node_uuid=node_uuid,
        start_time=start_time,
        config=config,
    )
    _deliver(event, config)


def report_run_converge(
    *,
    node: Any,
    node_name: str,
    org_name: str,
    run_list: RunList,
    expanded_run_list: RunList,
    run_uuid: UUID,
    node_uuid: UUID,
    start_time: datetime,
    end_time: datetime,
    config: ChefLoadConfig,
) -> None:
    """Send a successful `run_converge` message for a finished run."""
    event = build_run_converge_event(
        node=node,
        node_name=node_name,
        org_name=org_name,
        run_list=run_list,
        expanded_run_list=expanded_run_list,
        run_uuid=run_uuid,
        node_uuid=node_uuid,
        start_time=start_time,
        end_time=end_time,
        config=config,
    )
    _deliver(event, config)


def report_run(
    *,
    node: Any,
    node_name: str,
    org_name: str,
    run_list: RunList,
    expanded_run_list: RunList,
    run_uuid: UUID,
    node_uuid: UUID,
    start_time: datetime,
    end_time: datetime,
    config: ChefLoadConfig,
) -> RunReport:
    """Report both lifecycle messages for one run; converge is skipped if start fails."""
    report_run_start(
        node_name=node_name,
        org_name=org_name,
        run_uuid=run_uuid,
        node_uuid=node_uuid,
        start_time=start_time,
        config=config,
    )
    report_run_converge(
        node=node,
        node_name=node_name,
        org_name=org_name,
        run_list=run_list,
        expanded_run_list=expanded_run_list,
        run_uuid=run_uuid,
        node_uuid=node_uuid,
        start_time=start_time,
        end_time=end_time,
        config=config,
    )
    return RunReport(
        node_name=node_name,
        run_id=str(run_uuid),
        start_time=format_timestamp(start_time),
        end_time=format_timestamp(end_time),
    )
