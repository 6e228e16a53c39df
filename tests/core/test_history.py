"""Tests for metacat.core.history."""

from __future__ import annotations

import json

import pytest

from metacat.core.errors import ValidationError
from metacat.core.history import HistoryLog, HistoryStore
from metacat.core.models import CatalogType
from metacat.core.storage import CatalogStore


@pytest.fixture()
def history(store: CatalogStore) -> HistoryStore:
    return HistoryStore(store)


class TestHistoryStore:
    def test_empty_history(self, history: HistoryStore):
        loaded = history.load(CatalogType.TERM)
        assert loaded["logs"] == []
        assert loaded["totalCount"] == 0

    def test_newest_first(self, history: HistoryStore):
        history.add(CatalogType.VOCABULARY, HistoryLog("add", "a", "사용자"))
        history.add(CatalogType.VOCABULARY, HistoryLog("update", "a", "사용자"))
        logs = history.load(CatalogType.VOCABULARY)["logs"]
        assert [log["action"] for log in logs] == ["update", "add"]

    def test_unknown_action_rejected(self, history: HistoryStore):
        with pytest.raises(ValidationError):
            history.add(CatalogType.TERM, HistoryLog("rename", "a", "b"))

    def test_missing_target_rejected(self, history: HistoryStore):
        with pytest.raises(ValidationError):
            history.add(CatalogType.TERM, HistoryLog("add", "", "b"))

    def test_filename_filter_keeps_unscoped_logs(self, history: HistoryStore):
        history.add(CatalogType.TERM, HistoryLog("add", "1", "a", filename="term.json"))
        history.add(CatalogType.TERM, HistoryLog("add", "2", "b", filename="other.json"))
        history.add(CatalogType.TERM, HistoryLog("add", "3", "c"))
        ids = [log["targetId"] for log in history.load(CatalogType.TERM, "term.json")["logs"]]
        assert ids == ["3", "1"]

    def test_invalid_logs_dropped_on_load(self, history: HistoryStore, store: CatalogStore):
        path = history.path(CatalogType.DOMAIN)
        path.parent.mkdir(parents=True)
        path.write_text(
            json.dumps({"logs": [{"id": "x", "action": "add"}, {"id": "y", "action": "add", "targetId": "t", "targetName": "n", "timestamp": "2024-01-01T00:00:00Z"}]}),
            encoding="utf-8",
        )
        assert history.load(CatalogType.DOMAIN)["totalCount"] == 1

    def test_record_uses_display_name_and_snapshots(self, history: HistoryStore):
        entry = {"id": "e1", "termName": "사용자_이름"}
        history.record(CatalogType.TERM, "update", entry, before={"a": 1}, after={"a": 2})
        (log,) = history.load(CatalogType.TERM)["logs"]
        assert log["targetName"] == "사용자_이름"
        assert log["details"] == {"before": {"a": 1}, "after": {"a": 2}}

    def test_clear_writes_backup(self, history: HistoryStore):
        history.add(CatalogType.TERM, HistoryLog("add", "1", "a"))
        backup = history.clear(CatalogType.TERM)
        assert backup is not None
        assert backup.startswith("history_backup_")
        assert (history.path(CatalogType.TERM).with_name(backup)).is_file()
        assert history.load(CatalogType.TERM)["totalCount"] == 0

    def test_clear_empty_history_skips_backup(self, history: HistoryStore):
        assert history.clear(CatalogType.TERM) is None

    def test_history_file_not_listed_as_catalog_file(self, history: HistoryStore, store: CatalogStore):
        store.load(CatalogType.TERM)
        history.add(CatalogType.TERM, HistoryLog("add", "1", "a"))
        assert store.list_files(CatalogType.TERM) == ["term.json"]
