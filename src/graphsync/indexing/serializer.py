from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from graphsync.indexing.index_spec import IndexSpecTable
from graphsync.indexing.records import Record


class DocumentSerializer:
    """Build search documents from records.

    Shape flags are read from the table on every call, so toggling
    ``include_id_field`` / ``include_labels_field`` affects the next document.
    """

    def __init__(self, table: IndexSpecTable):
        self.table = table

    def serialize(
        self, record: Record, properties: Optional[Sequence[str]] = None
    ) -> Dict[str, Any]:
        doc: Dict[str, Any] = {}
        if self.table.include_id_field:
            doc["id"] = record.id
        if self.table.include_labels_field:
            doc["labels"] = list(record.labels)

        # Nested one level down so node properties never collide with id/labels
        if not properties:
            doc["properties"] = dict(record.properties)
        else:
            doc["properties"] = {
                key: record.properties[key]
                for key in properties
                if key in record.properties
            }
        return doc
