"""
Dispatch adapter: hands one transaction's operation set to the search
transport as a single bulk request.

Runs strictly after commit. Outcomes are only logged and counted: nothing is
retried, and nothing is raised back into the committed transaction.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Iterable, Mapping, Optional, Union

from graphsync.dispatch.transport import BulkRequest, BulkResult, BulkTransport
from graphsync.indexing.operations import CandidateOperation, OperationKey
from graphsync.shared.observability import get_logger
from graphsync.shared.observability.metrics import (
    bulk_item_failures_total,
    bulk_requests_total,
)

logger = get_logger(__name__)

Operations = Union[Mapping[OperationKey, CandidateOperation], Iterable[CandidateOperation]]


class DispatchAdapter:
    def __init__(self, transport: BulkTransport, use_async: bool = True):
        self.transport = transport
        self.use_async = use_async

    @property
    def mode(self) -> str:
        return "async" if self.use_async else "sync"

    @staticmethod
    def build_request(operations: Operations) -> BulkRequest:
        """Package operations, in order, into one bulk request."""
        if isinstance(operations, Mapping):
            operations = operations.values()
        return BulkRequest(operations=list(operations))

    def dispatch(self, operations: Operations) -> Optional[Future]:
        """
        Submit the operation set.

        Returns:
            None when there was nothing to send. Otherwise a Future: already
            resolved in synchronous mode (result is the BulkResult, or None
            if the transport raised), pending in asynchronous mode.
        """
        request = self.build_request(operations)
        if not request.operations:
            return None

        if self.use_async:
            try:
                return self.transport.execute_async(request, self._on_complete)
            except Exception as e:
                self.failed(e)
                return None

        future: Future = Future()
        try:
            result = self.transport.execute(request)
        except Exception as e:
            self.failed(e)
            future.set_result(None)
            return future
        self.completed(result)
        future.set_result(result)
        return future

    # ---- completion handling -------------------------------------------

    def _on_complete(
        self, result: Optional[BulkResult], exc: Optional[BaseException]
    ) -> None:
        if exc is not None:
            self.failed(exc)
        else:
            self.completed(result)

    def completed(self, result: BulkResult) -> None:
        if result.succeeded and result.error_message is None:
            bulk_requests_total.labels(mode=self.mode, status="success").inc()
            logger.debug("search_index_update_succeeded", items=len(result.items))
            return

        bulk_requests_total.labels(mode=self.mode, status="failure").inc()
        logger.error(
            "search_index_update_failed",
            error=result.error_message,
            status_code=result.status_code,
        )
        for item in result.failed_items:
            bulk_item_failures_total.labels(index=item.index or "unknown").inc()
            logger.error(
                "search_index_item_rejected",
                kind=item.kind,
                index=item.index,
                doc_id=item.doc_id,
                status=item.status,
                error=item.error,
            )

    def failed(self, exc: BaseException) -> None:
        bulk_requests_total.labels(mode=self.mode, status="error").inc()
        logger.warning(
            "search_index_update_error",
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=exc,
        )
