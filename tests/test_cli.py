"""
Tests for the translate command.
"""

import json

import pytest

from graphsync import cli
from graphsync.shared.config import reload_config


@pytest.fixture(autouse=True)
def _test_env(monkeypatch):
    monkeypatch.setenv("ENV", "test")
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    monkeypatch.delenv("ELASTICSEARCH_INDEX_SPEC", raising=False)
    monkeypatch.delenv("ELASTICSEARCH_INDEX_ALL", raising=False)
    reload_config()


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(
        json.dumps(
            {
                "nodes": {
                    "R": {"labels": ["Person"], "properties": {"name": "Ann", "age": 30}}
                },
                "created": ["R"],
            }
        )
    )
    return path


class TestTranslateCommand:
    def test_prints_bulk_body(self, snapshot_file, capsys):
        code = cli.main(
            [
                "translate",
                str(snapshot_file),
                "--index-spec",
                "idx:Person(name)",
                "--index-all",
                "all",
                "--no-id-field",
                "--no-labels-field",
            ]
        )

        lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        assert code == 0
        assert lines == [
            {"index": {"_index": "idx", "_id": "R"}},
            {"properties": {"name": "Ann"}},
            {"index": {"_index": "all", "_id": "R"}},
            {"properties": {"name": "Ann", "age": 30}},
        ]

    def test_bad_spec_exit_code(self, snapshot_file, capsys):
        code = cli.main(["translate", str(snapshot_file), "--index-spec", "a:B;a:B"])
        assert code == 2
        assert "Invalid index spec" in capsys.readouterr().err

    def test_nothing_indexed_prints_nothing(self, snapshot_file, capsys):
        code = cli.main(["translate", str(snapshot_file), "--index-spec", "orgs:Company"])
        assert code == 0
        assert capsys.readouterr().out == ""
