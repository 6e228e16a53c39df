"""Shared fixtures for metacat tests.

Every test gets its own data directory under ``tmp_path``; nothing touches
the configured ``METACAT_DATA_DIR``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from metacat.core.models import CatalogType
from metacat.core.storage import CatalogStore
from metacat.ops.context import OperationContext
from tests._support import domain, word


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture()
def store(data_dir: Path) -> CatalogStore:
    return CatalogStore(data_dir)


@pytest.fixture()
def ctx(store: CatalogStore) -> OperationContext:
    return OperationContext(store=store)


@pytest.fixture()
def seed(store: CatalogStore):
    """Write entries straight into a catalog file: ``seed("term", [...], "x.json")``."""

    def _seed(catalog: CatalogType | str, entries: list[dict[str, Any]], filename: str | None = None) -> dict[str, Any]:
        payload = store.load(catalog, filename)
        return store.save(catalog, {**payload, "entries": entries}, filename)

    return _seed


@pytest.fixture()
def standard_words() -> list[dict[str, Any]]:
    """사용자/USER, 이름/NAME (formal), 방문자/VSTR, 로그아웃/LGOT, 수/CNT (formal)."""
    return [
        word("사용자", "USER", "User"),
        word("이름", "NAME", "Name", isFormalWord=True, domainCategory="명"),
        word("방문자", "VSTR", "Visitor"),
        word("로그아웃", "LGOT", "Logout"),
        word("수", "CNT", "Count", isFormalWord=True, domainCategory="수량"),
    ]


@pytest.fixture()
def standard_domains() -> list[dict[str, Any]]:
    return [
        domain("명", "VARCHAR", "100", group="문자"),
        domain("수량", "NUMBER", "10", group="숫자"),
    ]


@pytest.fixture()
def standard_catalogs(seed, standard_words, standard_domains):
    """Seed the default vocabulary and domain files."""
    seed(CatalogType.VOCABULARY, standard_words)
    seed(CatalogType.DOMAIN, standard_domains)
    return standard_words, standard_domains
