"""
Transaction event handler: the two boundary calls the database drives.

``before_commit`` translates the snapshot while the transaction is being
finalized (no I/O); ``after_commit`` dispatches the result once the
transaction is durable. A rolled-back transaction never reaches dispatch.
"""

from __future__ import annotations

import time
from concurrent.futures import Future
from typing import Optional

from graphsync.dispatch.adapter import DispatchAdapter
from graphsync.indexing.merge import MergeEngine, OperationSet
from graphsync.indexing.records import TransactionSnapshot
from graphsync.shared.observability import get_logger, new_correlation_id
from graphsync.shared.observability.metrics import (
    operations_total,
    translation_duration_seconds,
    translations_total,
)

logger = get_logger(__name__)


class SearchIndexEventHandler:
    def __init__(self, engine: MergeEngine, adapter: DispatchAdapter):
        self.engine = engine
        self.adapter = adapter

    def set_use_async(self, use_async: bool) -> None:
        self.adapter.use_async = use_async

    def before_commit(self, snapshot: TransactionSnapshot) -> OperationSet:
        """
        Translate one transaction. Never raises: a failure here drops this
        transaction's index traffic but must not block the commit.
        """
        new_correlation_id()
        start = time.perf_counter()
        try:
            operations = self.engine.translate(snapshot)
        except Exception as e:
            translations_total.labels(status="error").inc()
            logger.error("translation_failed", error=str(e), exc_info=True)
            return {}
        finally:
            translation_duration_seconds.observe(time.perf_counter() - start)

        if not operations:
            translations_total.labels(status="empty").inc()
            return operations

        translations_total.labels(status="ok").inc()
        for op in operations.values():
            operations_total.labels(kind=op.kind.value).inc()
        logger.debug("transaction_translated", operations=len(operations))
        return operations

    def after_commit(
        self, snapshot: TransactionSnapshot, operations: OperationSet
    ) -> Optional[Future]:
        if not operations:
            return None
        return self.adapter.dispatch(operations)

    def after_rollback(
        self, snapshot: TransactionSnapshot, operations: OperationSet
    ) -> None:
        pass
