"""
Unit tests for document serialization.
"""

from graphsync.indexing.index_spec import IndexSpecTable
from graphsync.indexing.records import Record
from graphsync.indexing.serializer import DocumentSerializer

RECORD = Record("7", ("Person", "Employee"), {"name": "Ann", "age": 30})


def _serializer(**flags):
    return DocumentSerializer(IndexSpecTable.from_spec_string("idx:Person", **flags))


class TestDocumentSerializer:
    def test_full_document(self):
        doc = _serializer().serialize(RECORD)
        assert doc == {
            "id": "7",
            "labels": ["Person", "Employee"],
            "properties": {"name": "Ann", "age": 30},
        }

    def test_subset_only_keeps_present_properties(self):
        doc = _serializer().serialize(RECORD, ("name", "email"))
        assert doc["properties"] == {"name": "Ann"}
        assert "email" not in doc["properties"]

    def test_empty_subset_means_all(self):
        doc = _serializer().serialize(RECORD, ())
        assert doc["properties"] == {"name": "Ann", "age": 30}

    def test_labels_keep_observed_order(self):
        doc = _serializer().serialize(Record("1", ("Zeta", "Alpha")))
        assert doc["labels"] == ["Zeta", "Alpha"]

    def test_flags_off_leaves_only_properties(self):
        doc = _serializer(include_id_field=False, include_labels_field=False).serialize(
            RECORD
        )
        assert doc == {"properties": {"name": "Ann", "age": 30}}

    def test_toggling_flags_restores_fields(self):
        serializer = _serializer(include_id_field=False, include_labels_field=False)
        assert set(serializer.serialize(RECORD)) == {"properties"}

        serializer.table.include_id_field = True
        serializer.table.include_labels_field = True
        doc = serializer.serialize(RECORD)
        assert doc["id"] == "7"
        assert doc["labels"] == ["Person", "Employee"]

    def test_property_named_id_does_not_collide(self):
        doc = _serializer().serialize(Record("9", ("Person",), {"id": "external"}))
        assert doc["id"] == "9"
        assert doc["properties"]["id"] == "external"
