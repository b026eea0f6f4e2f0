"""Wire schemas for Data Collector run lifecycle messages."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_serializer,
    model_serializer,
)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
MESSAGE_VERSION = "1.0.0"
MESSAGE_SOURCE = "chef_client"


def format_timestamp(value: datetime) -> str:
    """Render a datetime as UTC second-precision with a literal Z suffix.

    Naive datetimes are taken to already be in UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


class ExpandedRunListItem(BaseModel):
    """Resolved run list entry; `version` is omitted when nothing is pinned."""

    model_config = ConfigDict(extra="forbid")

    type: str
    name: str
    version: str | None = None
    skipped: bool = False

    @model_serializer(mode="wrap")
    def _omit_unpinned_version(
        self,
        handler: SerializerFunctionWrapHandler,
    ) -> dict[str, Any]:
        data = handler(self)
        if data.get("version") is None:
            data.pop("version", None)
        return data


class ExpandedRunList(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    run_list: list[ExpandedRunListItem] = Field(default_factory=list)


class _RunEvent(BaseModel):
    """Fields shared by every run lifecycle message."""

    model_config = ConfigDict(extra="forbid", ser_json_inf_nan="constants")

    chef_server_fqdn: str
    entity_uuid: UUID
    id: UUID
    message_version: Literal["1.0.0"] = MESSAGE_VERSION
    node_name: str
    organization: str
    run_id: UUID
    source: Literal["chef_client"] = MESSAGE_SOURCE
    start_time: datetime

    @field_serializer("start_time")
    def _serialize_start_time(self, value: datetime) -> str:
        return format_timestamp(value)


class RunStartEvent(_RunEvent):
    """`run_start` message sent when a simulated client run begins."""

    message_type: Literal["run_start"] = "run_start"


class RunConvergeEvent(_RunEvent):
    """`run_converge` message sent when a simulated client run finishes.

    Only successful runs are modeled and resource tracking is never populated,
    so `status` and the resource fields are fixed.
    """

    message_type: Literal["run_converge"] = "run_converge"
    end_time: datetime
    status: Literal["success"] = "success"
    run_list: list[str]
    expanded_run_list: ExpandedRunList
    node: Any
    resources: list[Any] = Field(default_factory=list)
    total_resource_count: int = 0
    updated_resource_count: int = 0

    @field_serializer("end_time")
    def _serialize_end_time(self, value: datetime) -> str:
        return format_timestamp(value)


RunEvent = RunStartEvent | RunConvergeEvent
