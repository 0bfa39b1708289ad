# Shared fixtures for graph-search-sync tests (no network, no database)

import os
from concurrent.futures import Future
from typing import List, Optional

import pytest

os.environ.setdefault("ENV", "test")

from graphsync.dispatch.transport import BulkRequest, BulkResult  # noqa: E402
from graphsync.indexing.actions import ActionBuilder  # noqa: E402
from graphsync.indexing.index_spec import IndexSpecTable  # noqa: E402
from graphsync.indexing.merge import MergeEngine  # noqa: E402


class FakeTransport:
    """Records bulk requests instead of sending them."""

    def __init__(
        self, result: Optional[BulkResult] = None, error: Optional[Exception] = None
    ):
        self.result = result or BulkResult(succeeded=True)
        self.error = error
        self.requests: List[BulkRequest] = []
        self.async_calls = 0
        self.closed = False

    def execute(self, request: BulkRequest) -> BulkResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result

    def execute_async(self, request: BulkRequest, callback) -> Future:
        self.async_calls += 1
        future: Future = Future()
        try:
            result = self.execute(request)
        except Exception as e:
            callback(None, e)
            future.set_exception(e)
            return future
        callback(result, None)
        future.set_result(result)
        return future

    def close(self) -> None:
        self.closed = True


class FakeDatabase:
    def __init__(self):
        self.handlers = []

    def register_transaction_event_handler(self, handler):
        self.handlers.append(handler)
        return handler

    def unregister_transaction_event_handler(self, handler):
        self.handlers.remove(handler)
        return handler


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def fake_database():
    return FakeDatabase()


@pytest.fixture
def make_engine():
    """Build a MergeEngine from a spec string; returns (engine, table)."""

    def _make(spec: Optional[str], index_all: Optional[str] = None, **flags):
        table = IndexSpecTable.from_spec_string(spec, catch_all_index=index_all, **flags)
        return MergeEngine(ActionBuilder(table)), table

    return _make
