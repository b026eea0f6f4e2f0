"""Local Data Collector stand-in that records run messages in memory."""

from __future__ import annotations

import threading
from typing import Annotated, Any

from fastapi import Body, FastAPI, Header, HTTPException
from pydantic import Field, TypeAdapter, ValidationError

from src.datacollector.client import AUTH_HEADER_VALUE
from src.datacollector.schema import RunEvent

INGEST_PATH = "/data-collector/v0/"

_RUN_EVENT_ADAPTER: TypeAdapter[RunEvent] = TypeAdapter(
    Annotated[RunEvent, Field(discriminator="message_type")]
)


class EventLog:
    """Thread-safe list of accepted message bodies."""

    def __init__(self) -> None:
        self._events: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def append(self, payload: dict[str, Any]) -> None:
        with self._lock:
            self._events.append(payload)

    def snapshot(self, message_type: str | None = None) -> list[dict[str, Any]]:
        with self._lock:
            events = list(self._events)
        if message_type is None:
            return events
        return [event for event in events if event.get("message_type") == message_type]


def create_app(token: str | None = None) -> FastAPI:
    """Create a receiver app; when `token` is set, requests must present it."""
    log = EventLog()

    app = FastAPI(title="chef-load Data Collector receiver", version="0.1.0")
    app.state.events = log

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/events")
    def events(message_type: str | None = None) -> list[dict[str, Any]]:
        return log.snapshot(message_type)

    @app.post(INGEST_PATH)
    def ingest(
        payload: Annotated[dict[str, Any], Body()],
        x_data_collector_auth: Annotated[str | None, Header()] = None,
        x_data_collector_token: Annotated[str | None, Header()] = None,
    ) -> dict[str, str]:
        if x_data_collector_auth != AUTH_HEADER_VALUE:
            raise HTTPException(status_code=400, detail="unsupported x-data-collector-auth")
        if token is not None and x_data_collector_token != token:
            raise HTTPException(status_code=401, detail="invalid x-data-collector-token")
        try:
            event = _RUN_EVENT_ADAPTER.validate_python(payload)
        except ValidationError as exc:
            raise HTTPException(
                status_code=422,
                detail=exc.errors(include_url=False, include_context=False),
            ) from exc
        log.append(payload)
        return {"status": "accepted", "message_type": event.message_type}

    return app
