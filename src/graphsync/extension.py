"""
Lifecycle wiring between a graph database host and the search index sync.

The host constructs ``GraphSyncExtension`` with its database handle, calls
``init()`` once it is ready for transaction event handlers and
``shutdown()`` on stop. A bad index spec disables the extension for the
whole process: nothing is registered and nothing is indexed.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from graphsync.dispatch.adapter import DispatchAdapter
from graphsync.dispatch.transport import BulkTransport, HttpBulkTransport
from graphsync.handler import SearchIndexEventHandler
from graphsync.indexing.actions import ActionBuilder
from graphsync.indexing.index_spec import (
    DuplicateIndexSpecError,
    IndexSpecSyntaxError,
    IndexSpecTable,
)
from graphsync.indexing.merge import MergeEngine
from graphsync.shared.config import Config, ElasticsearchConfig, get_config, get_settings
from graphsync.shared.observability import get_logger, setup_metrics

logger = get_logger(__name__)

TransportFactory = Callable[[ElasticsearchConfig], BulkTransport]


class GraphDatabase(Protocol):
    def register_transaction_event_handler(self, handler: Any) -> Any: ...

    def unregister_transaction_event_handler(self, handler: Any) -> Any: ...


def http_transport_factory(es: ElasticsearchConfig) -> BulkTransport:
    return HttpBulkTransport(
        es.host_name,
        read_timeout=es.read_timeout_seconds,
        max_workers=es.max_workers,
        include_type=es.include_type,
    )


def build_engine(table: IndexSpecTable) -> MergeEngine:
    return MergeEngine(ActionBuilder(table))


class GraphSyncExtension:
    def __init__(
        self,
        database: GraphDatabase,
        config: Optional[Config] = None,
        transport_factory: Optional[TransportFactory] = None,
    ):
        self.database = database
        self.config = config or get_config()
        self.transport_factory = transport_factory or http_transport_factory
        self.enabled = True
        self.table: Optional[IndexSpecTable] = None
        self.handler: Optional[SearchIndexEventHandler] = None
        self.transport: Optional[BulkTransport] = None

        indexing = self.config.indexing
        try:
            self.table = IndexSpecTable.from_spec_string(
                indexing.index_spec,
                catch_all_index=indexing.index_all,
                include_id_field=indexing.include_id_field,
                include_labels_field=indexing.include_labels_field,
            )
        except DuplicateIndexSpecError as e:
            logger.error("index_spec_duplicate_binding", error=str(e))
            self.enabled = False
        except IndexSpecSyntaxError as e:
            logger.error("index_spec_syntax_error", error=str(e))
            self.enabled = False

        logger.info(
            "search_index_sync_configured",
            host=self.config.elasticsearch.host_name,
            index_spec=indexing.index_spec,
            index_all=indexing.index_all,
            enabled=self.enabled,
        )

    def init(self) -> None:
        if not self.enabled or self.handler is not None:
            return

        if self.config.monitoring.metrics_enabled:
            setup_metrics(get_settings())

        es = self.config.elasticsearch
        self.transport = self.transport_factory(es)
        adapter = DispatchAdapter(self.transport, use_async=es.use_async)
        self.handler = SearchIndexEventHandler(build_engine(self.table), adapter)
        self.database.register_transaction_event_handler(self.handler)
        logger.info("search_index_sync_connected", host=es.host_name)

    def shutdown(self) -> None:
        if not self.enabled or self.handler is None:
            return

        self.database.unregister_transaction_event_handler(self.handler)
        self.transport.close()
        self.handler = None
        self.transport = None
        logger.info("search_index_sync_disconnected")
