"""
Search transport: executes one bulk request against an Elasticsearch
compatible ``_bulk`` endpoint.

The transport is shared by every transaction in the process, so
implementations must be safe to call from many threads at once.
``HttpBulkTransport`` relies on ``httpx.Client`` (thread-safe) and a
``ThreadPoolExecutor`` for fire-and-forget submissions.
"""

from __future__ import annotations

import contextvars
import json
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

import httpx

from graphsync.indexing.operations import CandidateOperation, OperationKind
from graphsync.shared.observability import get_logger

logger = get_logger(__name__)

CompletionCallback = Callable[[Optional["BulkResult"], Optional[BaseException]], None]


class TransportError(RuntimeError):
    """Raised when the search cluster cannot be reached or answers garbage."""


# Assigns each top-level field wholesale: nested objects such as
# ``properties`` are replaced, never merged key by key.
REPLACE_FIELDS_SCRIPT = (
    "for (entry in params.doc.entrySet()) "
    "{ ctx._source[entry.getKey()] = entry.getValue(); }"
)


def update_line(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Body line for an ``update`` action.

    Every field of ``body`` (``properties`` included) replaces the stored
    field, so the document ends up matching ``body`` exactly for those keys.
    A document missing from the index is created from ``body``.
    """
    return {
        "script": {
            "lang": "painless",
            "source": REPLACE_FIELDS_SCRIPT,
            "params": {"doc": body},
        },
        "upsert": body,
    }


@dataclass
class BulkRequest:
    operations: List[CandidateOperation] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.operations)

    def to_ndjson(self, include_type: bool = False) -> str:
        """
        Render the request as an Elasticsearch ``_bulk`` body.

        Args:
            include_type: Emit ``_type`` in action lines. Only clusters that
                still have mapping types (6.x and older) accept it.
        """
        lines: List[str] = []
        for op in self.operations:
            meta: Dict[str, Any] = {"_index": op.index, "_id": op.doc_id}
            if include_type:
                meta["_type"] = op.doc_type
            lines.append(json.dumps({op.kind.value: meta}, default=str))
            if op.kind is OperationKind.INDEX:
                lines.append(json.dumps(op.body, default=str))
            elif op.kind is OperationKind.UPDATE:
                lines.append(json.dumps(update_line(op.body), default=str))
        # _bulk requires a trailing newline
        return "\n".join(lines) + "\n"


@dataclass
class BulkItemResult:
    kind: str
    index: Optional[str]
    doc_id: Optional[str]
    status: int
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        if self.error is not None:
            return False
        # Deleting a document that is already gone is not a failure
        return self.status < 300 or (self.kind == "delete" and self.status == 404)


@dataclass
class BulkResult:
    succeeded: bool
    error_message: Optional[str] = None
    items: List[BulkItemResult] = field(default_factory=list)
    status_code: Optional[int] = None

    @property
    def failed_items(self) -> List[BulkItemResult]:
        return [item for item in self.items if not item.succeeded]

    @classmethod
    def from_response(cls, status_code: int, payload: Dict[str, Any]) -> "BulkResult":
        items = []
        for entry in payload.get("items") or ():
            for kind, detail in entry.items():
                error = detail.get("error")
                if isinstance(error, dict):
                    error = f"{error.get('type')}: {error.get('reason')}"
                items.append(
                    BulkItemResult(
                        kind=kind,
                        index=detail.get("_index"),
                        doc_id=detail.get("_id"),
                        status=int(detail.get("status", status_code)),
                        error=error,
                    )
                )
        failed = [item for item in items if not item.succeeded]
        error_message = None
        if payload.get("errors") or failed:
            error_message = f"{len(failed)} of {len(items)} bulk items failed"
        return cls(
            succeeded=error_message is None,
            error_message=error_message,
            items=items,
            status_code=status_code,
        )


class BulkTransport(Protocol):
    def execute(self, request: BulkRequest) -> BulkResult: ...

    def execute_async(
        self, request: BulkRequest, callback: CompletionCallback
    ) -> Future: ...

    def close(self) -> None: ...


class HttpBulkTransport:
    """httpx-backed transport for the Elasticsearch ``_bulk`` API."""

    def __init__(
        self,
        host_name: str,
        read_timeout: float = 60.0,
        max_workers: int = 4,
        include_type: bool = False,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.host_name = host_name.rstrip("/")
        self.include_type = include_type
        self._client = client or httpx.Client(
            base_url=self.host_name,
            timeout=httpx.Timeout(read_timeout, connect=10.0),
        )
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="graphsync-bulk"
        )

    def execute(self, request: BulkRequest) -> BulkResult:
        """
        POST one bulk request and parse the per-item outcome.

        Raises:
            TransportError: On connection failures or a non-JSON success body
        """
        logger.debug("bulk_request_sent", host=self.host_name, operations=len(request))
        try:
            response = self._client.post(
                "/_bulk",
                content=request.to_ndjson(include_type=self.include_type),
                headers={"Content-Type": "application/x-ndjson"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Bulk request to {self.host_name} failed: {e}") from e

        if response.status_code >= 400:
            return BulkResult(
                succeeded=False,
                error_message=f"HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(
                f"Bulk response from {self.host_name} is not JSON: {response.text[:200]}"
            ) from e
        return BulkResult.from_response(response.status_code, payload)

    def execute_async(
        self, request: BulkRequest, callback: CompletionCallback
    ) -> Future:
        """
        Submit the request to the worker pool.

        The request and its callback run in a copy of the caller's context,
        so completion logs keep the committing transaction's correlation id.
        """
        ctx = contextvars.copy_context()
        return self._executor.submit(
            ctx.run, self._execute_and_report, request, callback
        )

    def _execute_and_report(
        self, request: BulkRequest, callback: CompletionCallback
    ) -> BulkResult:
        try:
            result = self.execute(request)
        except Exception as e:
            callback(None, e)
            raise
        callback(result, None)
        return result

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._client.close()
