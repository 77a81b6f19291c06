from qnls.stats.collector import (
    RECORD_COLUMNS,
    RequestRecord,
    StatisticsCollector,
    WarmupEnd,
    links_frame,
    nodes_frame,
    records_frame,
)

__all__ = [
    "RECORD_COLUMNS",
    "RequestRecord",
    "StatisticsCollector",
    "WarmupEnd",
    "links_frame",
    "nodes_frame",
    "records_frame",
]
