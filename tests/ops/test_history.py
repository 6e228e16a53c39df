"""Tests for metacat.ops.history."""

from __future__ import annotations

from metacat.ops.history import add_history, clear_history, get_history


def _log(target_id: str, **extra):
    return {"action": "add", "targetId": target_id, "targetName": f"이름{target_id}", **extra}


def test_add_and_get(ctx):
    assert add_history(ctx, "term", _log("1")).success
    assert add_history(ctx, "term", _log("2")).success

    result = get_history(ctx, "term", limit=1)
    assert [log["targetId"] for log in result.data["logs"]] == ["2"]


def test_add_requires_fields(ctx):
    result = add_history(ctx, "term", {"action": "add", "targetId": "1"})
    assert result.status == 400


def test_add_rejects_unknown_action(ctx):
    assert add_history(ctx, "term", {**_log("1"), "action": "rename"}).status == 400


def test_limit_must_be_positive(ctx):
    assert get_history(ctx, "term", limit=0).status == 400


def test_clear_returns_backup_name(ctx):
    add_history(ctx, "domain", _log("1"))
    result = clear_history(ctx, "domain")
    assert result.data["backupFile"].startswith("history_backup_")
    assert get_history(ctx, "domain").data["totalCount"] == 0


def test_unknown_catalog(ctx):
    assert get_history(ctx, "glossary").status == 400
