"""
Records and per-transaction mutation snapshots.

A ``Record`` is the state of one mutated node as observed while the
transaction is being finalized: after the in-memory mutation, before the
change becomes durable. A ``TransactionSnapshot`` is what the database hands
over for one transaction; ``InMemorySnapshot`` is the plain implementation
used by hosts that assemble the change set themselves (and by the tests).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Protocol, Set, Tuple

from neo4j.graph import Node


@dataclass(frozen=True)
class Record:
    id: str
    labels: Tuple[str, ...] = ()
    properties: Mapping[str, Any] = field(default_factory=dict)

    def has_label(self, label: str) -> bool:
        return label in self.labels

    def has_property(self, key: str) -> bool:
        return key in self.properties


@dataclass(frozen=True)
class LabelEntry:
    record: Record
    label: str


@dataclass(frozen=True)
class PropertyEntry:
    record: Record
    key: str
    value: Any = None
    previous_value: Any = None


class TransactionSnapshot(Protocol):
    """What one committed-to-be transaction exposes to the translator."""

    def created_nodes(self) -> Iterable[Record]: ...

    def assigned_labels(self) -> Iterable[LabelEntry]: ...

    def removed_labels(self) -> Iterable[LabelEntry]: ...

    def assigned_node_properties(self) -> Iterable[PropertyEntry]: ...

    def removed_node_properties(self) -> Iterable[PropertyEntry]: ...

    def is_deleted(self, record: Record) -> bool: ...


@dataclass
class InMemorySnapshot:
    created: List[Record] = field(default_factory=list)
    labels_assigned: List[LabelEntry] = field(default_factory=list)
    labels_removed: List[LabelEntry] = field(default_factory=list)
    properties_assigned: List[PropertyEntry] = field(default_factory=list)
    properties_removed: List[PropertyEntry] = field(default_factory=list)
    deleted_ids: Set[str] = field(default_factory=set)

    def created_nodes(self) -> List[Record]:
        return self.created

    def assigned_labels(self) -> List[LabelEntry]:
        return self.labels_assigned

    def removed_labels(self) -> List[LabelEntry]:
        return self.labels_removed

    def assigned_node_properties(self) -> List[PropertyEntry]:
        return self.properties_assigned

    def removed_node_properties(self) -> List[PropertyEntry]:
        return self.properties_removed

    def is_deleted(self, record: Record) -> bool:
        return record.id in self.deleted_ids

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "InMemorySnapshot":
        """
        Build a snapshot from its JSON form.

        Expected shape::

            {
              "nodes": {"42": {"labels": ["Person"], "properties": {"name": "Ann"}}},
              "created": ["42"],
              "assigned_labels": [["42", "Person"]],
              "removed_labels": [],
              "assigned_properties": [["42", "name"]],
              "removed_properties": [["42", "age"]],
              "deleted": []
            }

        Raises:
            KeyError: If an event references a node missing from ``nodes``
        """
        nodes = {
            str(node_id): Record(
                id=str(node_id),
                labels=tuple(body.get("labels") or ()),
                properties=dict(body.get("properties") or {}),
            )
            for node_id, body in (payload.get("nodes") or {}).items()
        }

        def _node(node_id: Any) -> Record:
            key = str(node_id)
            if key not in nodes:
                raise KeyError(f"Snapshot event references unknown node '{key}'")
            return nodes[key]

        return cls(
            created=[_node(n) for n in payload.get("created") or ()],
            labels_assigned=[
                LabelEntry(_node(n), label)
                for n, label in payload.get("assigned_labels") or ()
            ],
            labels_removed=[
                LabelEntry(_node(n), label)
                for n, label in payload.get("removed_labels") or ()
            ],
            properties_assigned=[
                PropertyEntry(_node(n), key, _node(n).properties.get(key))
                for n, key in payload.get("assigned_properties") or ()
            ],
            properties_removed=[
                PropertyEntry(_node(n), key)
                for n, key in payload.get("removed_properties") or ()
            ],
            deleted_ids={str(n) for n in payload.get("deleted") or ()},
        )


def record_from_node(node: Node) -> Record:
    """
    Convert a node read with the official neo4j driver into a Record.

    The driver keeps labels in a frozenset; they are taken in its iteration
    order, which is the order observed for that node.
    """
    return Record(
        id=str(node.element_id),
        labels=tuple(node.labels),
        properties=dict(node.items()),
    )
