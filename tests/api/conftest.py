"""API fixtures: an app over a temporary data directory."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from metacat.api.app import create_app
from metacat.api.settings import MetacatAPISettings


@pytest.fixture()
def app(data_dir):
    return create_app(settings=MetacatAPISettings(data_dir=data_dir))


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def api_seed(app):
    """Write entries through the app's own store (keeps its cache coherent)."""
    store = app.state.store

    def _seed(catalog, entries, filename=None):
        payload = store.load(catalog, filename)
        return store.save(catalog, {**payload, "entries": entries}, filename)

    return _seed
