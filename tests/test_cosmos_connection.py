import pytest

from docstore.database.cosmos_connection import CosmosConfiguration, CosmosConnection


@pytest.fixture
def config():
    return CosmosConfiguration(endpoint="https://account.documents.azure.com", key="key")


def test_client_before_open_raises(config):
    connection = CosmosConnection(config)

    assert not connection.is_open
    with pytest.raises(RuntimeError):
        connection.get_container("db", "container")


async def test_open_and_close(config, fake_client):
    connection = CosmosConnection(config)

    connection.open()
    assert fake_client.created == [("https://account.documents.azure.com", "key")]
    assert connection.client is fake_client

    await connection.close()
    assert fake_client.closed
    assert not connection.is_open


async def test_create_container_if_not_exists(config, fake_client):
    connection = CosmosConnection(config)
    connection.open()

    container = await connection.create_container_if_not_exists("test", "testContainer")

    assert container.exists
    assert "/id" in container.partition_key["paths"]
    assert await connection.resolve_container("test", "testContainer") is container
