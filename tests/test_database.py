"""Startup against an unreachable MongoDB."""

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from app.core import database as database_module
from app.core.database import Database
from app.main import app


class UnreachableAdmin:
    async def command(self, name):
        raise ServerSelectionTimeoutError("localhost:27017: [Errno 111] Connection refused")


class UnreachableCollection:
    def __init__(self, created):
        self.created = created

    async def create_index(self, keys, **kwargs):
        self.created.append(keys)


class UnreachableClient:
    """Stands in for AsyncIOMotorClient when no server answers."""

    instances = []

    def __init__(self, uri, **kwargs):
        self.kwargs = kwargs
        self.admin = UnreachableAdmin()
        self.created_indexes = []
        self.closed = False
        UnreachableClient.instances.append(self)

    def __getitem__(self, name):
        client = self

        class _Db:
            def __getitem__(self, collection):
                return UnreachableCollection(client.created_indexes)

        return _Db()

    def close(self):
        self.closed = True


@pytest.fixture
def unreachable(monkeypatch):
    UnreachableClient.instances = []
    monkeypatch.setattr(database_module, "AsyncIOMotorClient", UnreachableClient)
    monkeypatch.setattr(Database, "client", None)
    monkeypatch.setattr(Database, "db", None)
    return UnreachableClient


@pytest.mark.asyncio
async def test_connect_raises_before_creating_indexes(unreachable):
    with pytest.raises(ConnectionFailure):
        await Database.connect()

    client = unreachable.instances[0]
    assert client.created_indexes == []
    assert "serverSelectionTimeoutMS" in client.kwargs


def test_app_still_starts_and_reports_setup_guide(unreachable):
    with TestClient(app) as api:
        body = api.get("/api/v1/setup/status").json()

    assert body["connected"] is False
    assert "Connection refused" in body["error"]
    assert body["setup_guide"]
    assert unreachable.instances[0].closed is True
