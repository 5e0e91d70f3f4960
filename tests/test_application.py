import asyncio
import logging

import pytest
from fastapi.testclient import TestClient

import application
from docstore.feed.checkpoint_store import CheckpointStore, MemoryCheckpointStore
from tests.conftest import CONTAINER_ID, DATABASE_ID


class FailingCheckpointStore(CheckpointStore):
    async def load(self, name):
        raise RuntimeError("checkpoint container unavailable")

    async def save(self, name, continuation):
        raise RuntimeError("checkpoint container unavailable")


async def test_watch_changes_logs_each_batch(document_store, container, caplog):
    caplog.set_level(logging.INFO, logger="application")
    watcher = asyncio.create_task(
        application.watch_changes(
            document_store,
            MemoryCheckpointStore(),
            DATABASE_ID,
            CONTAINER_ID,
            poll_interval=0,
        )
    )

    for _ in range(100):
        await asyncio.sleep(0)
        if any("changes in" in record.getMessage() for record in caplog.records):
            break
    watcher.cancel()
    with pytest.raises(asyncio.CancelledError):
        await watcher

    messages = [record.getMessage() for record in caplog.records]
    assert f"✓ 1 changes in {DATABASE_ID}/{CONTAINER_ID}: ['1']" in messages


async def test_watch_changes_logs_failures(document_store, container, caplog):
    caplog.set_level(logging.INFO, logger="application")

    await application.watch_changes(
        document_store,
        FailingCheckpointStore(),
        DATABASE_ID,
        CONTAINER_ID,
        poll_interval=0,
    )

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "checkpoint container unavailable" in errors[0].getMessage()


def test_startup_watcher_runs_when_configured(monkeypatch, fake_client, container):
    monkeypatch.setenv("COSMOS_ENDPOINT", "https://account.documents.azure.com")
    monkeypatch.setenv("COSMOS_KEY", "key")
    monkeypatch.setenv("WATCH_DATABASE", DATABASE_ID)
    monkeypatch.setenv("WATCH_CONTAINER", CONTAINER_ID)
    monkeypatch.setenv("WATCH_POLL_SECONDS", "0")

    with TestClient(application.app) as client:
        assert client.get("/health").status_code == 200

    assert fake_client.closed


@pytest.mark.parametrize("variable", ["COSMOS_ENDPOINT", "COSMOS_KEY"])
def test_startup_requires_endpoint_and_key(monkeypatch, fake_client, variable):
    monkeypatch.setenv("COSMOS_ENDPOINT", "https://account.documents.azure.com")
    monkeypatch.setenv("COSMOS_KEY", "key")
    monkeypatch.setenv(variable, "")

    with pytest.raises(ValueError, match="COSMOS_ENDPOINT and COSMOS_KEY"):
        with TestClient(application.app):
            pass

    assert fake_client.created == []
