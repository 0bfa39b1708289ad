"""
Unit tests for the per-category action builder.
"""

from graphsync.indexing.actions import ActionBuilder
from graphsync.indexing.index_spec import IndexSpecTable
from graphsync.indexing.operations import OperationKind
from graphsync.indexing.records import Record

PERSON = Record("1", ("Person",), {"name": "Ann", "age": 30})


def _builder(spec="idx:Person(name)", index_all=None):
    return ActionBuilder(IndexSpecTable.from_spec_string(spec, catch_all_index=index_all))


def _summary(ops):
    return [(op.kind, op.index, op.doc_type, op.doc_id) for op in ops]


class TestCreated:
    def test_one_index_per_binding(self):
        ops = _builder("i1:Person;i2:Person(name)").created(PERSON)
        assert _summary(ops) == [
            (OperationKind.INDEX, "i1", "Person", "1"),
            (OperationKind.INDEX, "i2", "Person", "1"),
        ]
        assert ops[0].body["properties"] == {"name": "Ann", "age": 30}
        assert ops[1].body["properties"] == {"name": "Ann"}

    def test_catch_all_uses_all_properties(self):
        ops = _builder(index_all="all").created(PERSON)
        catch_all = ops[-1]
        assert (catch_all.index, catch_all.doc_type) == ("all", "node")
        assert catch_all.body["properties"] == {"name": "Ann", "age": 30}

    def test_unindexed_label_only_hits_catch_all(self):
        record = Record("2", ("Company",), {"title": "Acme"})
        assert _builder().created(record) == []
        assert _summary(_builder(index_all="all").created(record)) == [
            (OperationKind.INDEX, "all", "node", "2")
        ]


class TestLabelAssigned:
    def test_restricted_to_assigned_label(self):
        builder = _builder("people:Person;staff:Employee")
        record = Record("1", ("Person", "Employee"), {"name": "Ann"})
        ops = builder.label_assigned(record, "Employee")
        assert _summary(ops) == [(OperationKind.INDEX, "staff", "Employee", "1")]

    def test_deleted_record_gets_deletes(self):
        ops = _builder(index_all="all").label_assigned(PERSON, "Person", deleted=True)
        assert _summary(ops) == [
            (OperationKind.DELETE, "idx", "Person", "1"),
            (OperationKind.DELETE, "all", "node", "1"),
        ]
        assert all(op.body is None for op in ops)


class TestLabelRemoved:
    def test_delete_even_with_other_indexed_labels(self):
        builder = _builder("people:Person;staff:Employee", index_all="all")
        record = Record("1", ("Employee",), {"name": "Ann"})
        ops = builder.label_removed(record, "Person")
        assert _summary(ops) == [
            (OperationKind.DELETE, "people", "Person", "1"),
            (OperationKind.DELETE, "all", "node", "1"),
        ]

    def test_unindexed_label_without_catch_all(self):
        assert _builder().label_removed(PERSON, "Company") == []


class TestProperties:
    def test_assigned_is_full_index(self):
        ops = _builder(index_all="all").property_assigned(PERSON)
        assert {op.kind for op in ops} == {OperationKind.INDEX}
        assert len(ops) == 2

    def test_removed_is_update_with_current_state(self):
        record = Record("1", ("Person",), {"name": "Ann"})
        ops = _builder("idx:Person", index_all="all").property_removed(record)
        assert _summary(ops) == [
            (OperationKind.UPDATE, "idx", "Person", "1"),
            (OperationKind.UPDATE, "all", "node", "1"),
        ]
        assert ops[0].body["properties"] == {"name": "Ann"}

    def test_removed_on_deleted_record_is_nothing(self):
        assert _builder(index_all="all").property_removed(PERSON, deleted=True) == []
