"""
Translation of graph transaction snapshots into search index operations.
"""

from graphsync.indexing.actions import ActionBuilder
from graphsync.indexing.index_spec import (
    CATCH_ALL_TYPE,
    DuplicateIndexSpecError,
    IndexSpec,
    IndexSpecError,
    IndexSpecSyntaxError,
    IndexSpecTable,
    parse_index_spec,
)
from graphsync.indexing.merge import CATEGORY_ORDER, ChangeCategory, MergeEngine
from graphsync.indexing.operations import CandidateOperation, OperationKey, OperationKind
from graphsync.indexing.records import (
    InMemorySnapshot,
    LabelEntry,
    PropertyEntry,
    Record,
    TransactionSnapshot,
    record_from_node,
)
from graphsync.indexing.serializer import DocumentSerializer

__all__ = [
    "ActionBuilder",
    "CATCH_ALL_TYPE",
    "CATEGORY_ORDER",
    "CandidateOperation",
    "ChangeCategory",
    "DocumentSerializer",
    "DuplicateIndexSpecError",
    "InMemorySnapshot",
    "IndexSpec",
    "IndexSpecError",
    "IndexSpecSyntaxError",
    "IndexSpecTable",
    "LabelEntry",
    "MergeEngine",
    "OperationKey",
    "OperationKind",
    "PropertyEntry",
    "Record",
    "TransactionSnapshot",
    "parse_index_spec",
    "record_from_node",
]
