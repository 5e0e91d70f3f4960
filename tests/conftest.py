from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient

# Make the repository root importable when pytest runs from another directory.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from docstore.database import cosmos_connection  # noqa: E402
from docstore.database.cosmos_connection import (  # noqa: E402
    CosmosConfiguration,
    CosmosConnection,
)
from docstore.database.document_store import DocumentStore  # noqa: E402
from tests.fakes import FakeClient  # noqa: E402

DATABASE_ID = "newDatabase"
CONTAINER_ID = "newContainer"


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> FakeClient:
    """Route every CosmosClient created by the connection to one in-memory client."""
    client = FakeClient()
    created = []

    def _client_factory(endpoint, credential):
        created.append((endpoint, credential))
        return client

    monkeypatch.setattr(cosmos_connection, "CosmosClient", _client_factory)
    client.created = created
    return client


@pytest.fixture
def document_store(fake_client: FakeClient) -> DocumentStore:
    config = CosmosConfiguration(endpoint="https://account.documents.azure.com", key="key")
    store = DocumentStore(CosmosConnection(config))
    store.initialize()
    return store


@pytest.fixture
def container(fake_client: FakeClient):
    return fake_client.add_container(DATABASE_ID, CONTAINER_ID, {"id": "1", "name": "a"})


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch, fake_client: FakeClient):
    monkeypatch.setenv("COSMOS_ENDPOINT", "https://account.documents.azure.com")
    monkeypatch.setenv("COSMOS_KEY", "key")
    monkeypatch.delenv("WATCH_DATABASE", raising=False)
    monkeypatch.delenv("WATCH_CONTAINER", raising=False)

    import application

    with TestClient(application.app) as client:
        yield client
