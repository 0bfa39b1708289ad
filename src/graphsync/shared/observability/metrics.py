# Prometheus metrics for graph -> search index synchronization

from prometheus_client import Counter, Histogram, Info, generate_latest

from ..config import Settings
from .logging import get_logger

logger = get_logger(__name__)

# ===== Translation metrics =====
translations_total = Counter(
    "graphsync_translations_total",
    "Total transaction snapshots translated into bulk operations",
    ["status"],  # status: ok, empty, error
)

translation_duration_seconds = Histogram(
    "graphsync_translation_duration_seconds",
    "Time spent translating one transaction snapshot",
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)

operations_total = Counter(
    "graphsync_operations_total",
    "Total search index operations produced after merge",
    ["kind"],  # kind: index, update, delete
)

# ===== Dispatch metrics =====
bulk_requests_total = Counter(
    "graphsync_bulk_requests_total",
    "Total bulk requests handed to the search transport",
    ["mode", "status"],  # mode: sync, async; status: success, failure, error
)

bulk_item_failures_total = Counter(
    "graphsync_bulk_item_failures_total",
    "Total individual bulk items rejected by the search index",
    ["index"],
)

service_info = Info("graphsync_service", "graph-search-sync service information")


def setup_metrics(settings: Settings) -> None:
    """
    Setup Prometheus metrics collection.

    Args:
        settings: Application settings
    """
    logger.info("Setting up Prometheus metrics")
    service_info.info({"version": "0.1.0", "environment": settings.env})


def get_metrics() -> bytes:
    """
    Get current metrics in Prometheus exposition format.

    Returns:
        Metrics as bytes
    """
    return generate_latest()
