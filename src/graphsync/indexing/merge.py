"""
Merge engine: folds the candidates of every change category of one
transaction into a single operation per (index, document id).

The category order is a contract, not an implementation detail. Later
categories overwrite earlier ones for the same key, so e.g. a node created
and stripped of its only indexed label in one transaction nets to a delete.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, Set

from graphsync.indexing.actions import ActionBuilder
from graphsync.indexing.operations import CandidateOperation, OperationKey
from graphsync.indexing.records import TransactionSnapshot
from graphsync.shared.observability import get_logger

logger = get_logger(__name__)


class ChangeCategory(str, Enum):
    CREATED = "created"
    LABELS_ASSIGNED = "labels_assigned"
    LABELS_REMOVED = "labels_removed"
    PROPERTIES_ASSIGNED = "properties_assigned"
    PROPERTIES_REMOVED = "properties_removed"


CATEGORY_ORDER = (
    ChangeCategory.CREATED,
    ChangeCategory.LABELS_ASSIGNED,
    ChangeCategory.LABELS_REMOVED,
    ChangeCategory.PROPERTIES_ASSIGNED,
    ChangeCategory.PROPERTIES_REMOVED,
)

OperationSet = Dict[OperationKey, CandidateOperation]


class MergeEngine:
    def __init__(self, builder: ActionBuilder):
        self.builder = builder

    def candidates(
        self, category: ChangeCategory, snapshot: TransactionSnapshot
    ) -> Iterator[CandidateOperation]:
        """Yield the candidate operations one category contributes."""
        builder = self.builder

        if category is ChangeCategory.CREATED:
            for record in snapshot.created_nodes():
                yield from builder.created(record)

        elif category is ChangeCategory.LABELS_ASSIGNED:
            for entry in snapshot.assigned_labels():
                yield from builder.label_assigned(
                    entry.record, entry.label, deleted=snapshot.is_deleted(entry.record)
                )

        elif category is ChangeCategory.LABELS_REMOVED:
            for entry in snapshot.removed_labels():
                yield from builder.label_removed(entry.record, entry.label)

        elif category is ChangeCategory.PROPERTIES_ASSIGNED:
            # Every entry of a node re-indexes the same document; once is enough
            seen: Set[str] = set()
            for entry in snapshot.assigned_node_properties():
                if entry.record.id in seen:
                    continue
                seen.add(entry.record.id)
                yield from builder.property_assigned(entry.record)

        elif category is ChangeCategory.PROPERTIES_REMOVED:
            seen = set()
            for entry in snapshot.removed_node_properties():
                if entry.record.id in seen:
                    continue
                seen.add(entry.record.id)
                yield from builder.property_removed(
                    entry.record, deleted=snapshot.is_deleted(entry.record)
                )

        else:
            raise ValueError(f"Unknown change category: {category}")

    def translate(self, snapshot: TransactionSnapshot) -> OperationSet:
        """
        Build the net operation set for one transaction.

        Returns:
            Operations keyed by (index, document id), in the order their final
            candidate was produced. Empty when nothing indexed was touched.
        """
        operations: OperationSet = {}
        for category in CATEGORY_ORDER:
            produced = 0
            for op in self.candidates(category, snapshot):
                # Last writer wins; re-insert so bulk order follows write order
                operations.pop(op.key, None)
                operations[op.key] = op
                produced += 1
            if produced:
                logger.debug(
                    "category_translated", category=category.value, candidates=produced
                )
        return operations
