from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional


class OperationKind(str, Enum):
    INDEX = "index"
    UPDATE = "update"
    DELETE = "delete"


class OperationKey(NamedTuple):
    index: str
    doc_id: str


@dataclass(frozen=True)
class CandidateOperation:
    """One proposed write against the search index, before deduplication."""

    kind: OperationKind
    index: str
    doc_type: str
    doc_id: str
    body: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.kind is OperationKind.DELETE and self.body is not None:
            raise ValueError("delete operations carry no body")
        if self.kind is not OperationKind.DELETE and self.body is None:
            raise ValueError(f"{self.kind.value} operations require a body")

    @property
    def key(self) -> OperationKey:
        return OperationKey(self.index, self.doc_id)

    @classmethod
    def index_op(cls, index: str, doc_type: str, doc_id: str, body: Dict[str, Any]):
        return cls(OperationKind.INDEX, index, doc_type, doc_id, body)

    @classmethod
    def update_op(cls, index: str, doc_type: str, doc_id: str, body: Dict[str, Any]):
        return cls(OperationKind.UPDATE, index, doc_type, doc_id, body)

    @classmethod
    def delete_op(cls, index: str, doc_type: str, doc_id: str):
        return cls(OperationKind.DELETE, index, doc_type, doc_id)
