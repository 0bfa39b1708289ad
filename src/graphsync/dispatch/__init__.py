"""
Delivery of translated operations to the search index.
"""

from graphsync.dispatch.adapter import DispatchAdapter
from graphsync.dispatch.transport import (
    BulkItemResult,
    BulkRequest,
    BulkResult,
    BulkTransport,
    HttpBulkTransport,
    TransportError,
)

__all__ = [
    "BulkItemResult",
    "BulkRequest",
    "BulkResult",
    "BulkTransport",
    "DispatchAdapter",
    "HttpBulkTransport",
    "TransportError",
]
