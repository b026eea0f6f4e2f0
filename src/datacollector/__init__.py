"""Chef client run reporting for the Data Collector ingestion endpoint."""

from src.datacollector.client import (
    DataCollectorClient,
    DataCollectorConfigError,
    DataCollectorError,
    DataCollectorResponseError,
    DataCollectorTimeoutError,
    DataCollectorTransportError,
    PayloadEncodingError,
)
from src.datacollector.config import (
    ChefLoadConfig,
    ConfigValidationError,
    DataCollectorConfig,
    load_config,
)
from src.datacollector.events import (
    RunReport,
    build_run_converge_event,
    build_run_start_event,
    expand_run_list,
    report_run,
    report_run_converge,
    report_run_start,
)
from src.datacollector.runlist import RunList, RunListItem, parse_run_list
from src.datacollector.schema import (
    ExpandedRunList,
    ExpandedRunListItem,
    RunConvergeEvent,
    RunStartEvent,
    format_timestamp,
)

__all__ = [
    "ChefLoadConfig",
    "ConfigValidationError",
    "DataCollectorClient",
    "DataCollectorConfig",
    "DataCollectorConfigError",
    "DataCollectorError",
    "DataCollectorResponseError",
    "DataCollectorTimeoutError",
    "DataCollectorTransportError",
    "ExpandedRunList",
    "ExpandedRunListItem",
    "PayloadEncodingError",
    "RunConvergeEvent",
    "RunList",
    "RunListItem",
    "RunReport",
    "RunStartEvent",
    "build_run_converge_event",
    "build_run_start_event",
    "expand_run_list",
    "format_timestamp",
    "load_config",
    "parse_run_list",
    "report_run",
    "report_run_converge",
    "report_run_start",
]
