"""
Action builder: turns one record and one change category into candidate
search index operations.

Every method returns candidates in a deterministic order: label bindings
first (in label order, then declaration order), catch-all last. The merge
engine relies on nothing but that order within a category.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from graphsync.indexing.index_spec import IndexSpec, IndexSpecTable
from graphsync.indexing.operations import CandidateOperation
from graphsync.indexing.records import Record
from graphsync.indexing.serializer import DocumentSerializer


class ActionBuilder:
    def __init__(
        self, table: IndexSpecTable, serializer: Optional[DocumentSerializer] = None
    ):
        self.table = table
        self.serializer = serializer or DocumentSerializer(table)

    # ---- shared helpers -------------------------------------------------

    def _index_ops(self, record: Record, specs: Iterable[IndexSpec]) -> List[CandidateOperation]:
        ops = [
            CandidateOperation.index_op(
                spec.index_name,
                spec.label,
                record.id,
                self.serializer.serialize(record, spec.properties),
            )
            for spec in specs
        ]
        if self.table.catch_all_index:
            ops.append(
                CandidateOperation.index_op(
                    self.table.catch_all_index,
                    self.table.catch_all_type,
                    record.id,
                    self.serializer.serialize(record),
                )
            )
        return ops

    def _update_ops(self, record: Record, specs: Iterable[IndexSpec]) -> List[CandidateOperation]:
        ops = [
            CandidateOperation.update_op(
                spec.index_name,
                spec.label,
                record.id,
                self.serializer.serialize(record, spec.properties),
            )
            for spec in specs
        ]
        if self.table.catch_all_index:
            ops.append(
                CandidateOperation.update_op(
                    self.table.catch_all_index,
                    self.table.catch_all_type,
                    record.id,
                    self.serializer.serialize(record),
                )
            )
        return ops

    def _delete_ops(self, record: Record, specs: Iterable[IndexSpec]) -> List[CandidateOperation]:
        ops = [
            CandidateOperation.delete_op(spec.index_name, spec.label, record.id)
            for spec in specs
        ]
        if self.table.catch_all_index:
            ops.append(
                CandidateOperation.delete_op(
                    self.table.catch_all_index, self.table.catch_all_type, record.id
                )
            )
        return ops

    # ---- change categories ----------------------------------------------

    def created(self, record: Record) -> List[CandidateOperation]:
        """Index into every index bound to one of the record's labels, plus catch-all."""
        return self._index_ops(record, self.table.matching_specs(record))

    def label_assigned(
        self, record: Record, label: str, deleted: bool = False
    ) -> List[CandidateOperation]:
        """
        Index into the indices bound to the new label. A node deleted in the
        same transaction cannot be indexed, so it gets deletes instead.
        """
        specs = self.table.specs_for(label)
        if deleted:
            return self._delete_ops(record, specs)
        return self._index_ops(record, specs)

    def label_removed(self, record: Record, label: str) -> List[CandidateOperation]:
        """
        Delete from the indices bound to the removed label, plus catch-all.
        Emitted even when other indexed labels remain on the node.
        """
        return self._delete_ops(record, self.table.specs_for(label))

    def property_assigned(self, record: Record) -> List[CandidateOperation]:
        # Full re-index: same id overwrites the stored document
        return self.created(record)

    def property_removed(
        self, record: Record, deleted: bool = False
    ) -> List[CandidateOperation]:
        if deleted:
            return []
        return self._update_ops(record, self.table.matching_specs(record))
