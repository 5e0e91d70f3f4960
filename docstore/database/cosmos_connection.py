"""Connection to an Azure Cosmos DB account.

Holds the async client for the lifetime of the application and resolves
database and container handles from it.
"""

import logging

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from pydantic import BaseModel

logger = logging.getLogger(__name__)

PARTITION_KEY_PATH = "/id"


class CosmosConfiguration(BaseModel):
    """Configuration for CosmosConnection."""

    endpoint: str
    key: str
    checkpoint_database: str = "ItemManager"
    checkpoint_container: str = "Checkpoints"


class CosmosConnection:
    """Explicit connection to a Cosmos DB account.

    Args:
        config (CosmosConfiguration): Endpoint and key of the account.

    """

    def __init__(self, config: CosmosConfiguration) -> None:
        self.config = config
        self._client: CosmosClient | None = None

    def open(self) -> None:
        """Create the client, replacing any previously opened one."""
        logger.info("Opening Cosmos DB client for %s", self.config.endpoint)
        self._client = CosmosClient(self.config.endpoint, credential=self.config.key)

    async def close(self) -> None:
        """Close the underlying client."""
        if self._client:
            await self._client.close()
            self._client = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> CosmosClient:
        if self._client is None:
            raise RuntimeError("CosmosConnection not opened, call open() first")
        return self._client

    def get_container(self, database_id: str, container_id: str) -> ContainerProxy:
        """Address a container without contacting the service.

        Args:
            database_id (str): Name of the database.
            container_id (str): Name of the container.

        Returns:
            ContainerProxy: The container handle.

        """
        database = self.client.get_database_client(database_id)
        return database.get_container_client(container_id)

    async def resolve_container(
        self, database_id: str, container_id: str
    ) -> ContainerProxy | None:
        """Address a container and probe that it exists.

        Args:
            database_id (str): Name of the database.
            container_id (str): Name of the container.

        Returns:
            ContainerProxy | None: The container handle, or None if the
            database or container does not exist.

        """
        container = self.get_container(database_id, container_id)
        try:
            await container.read()
        except CosmosResourceNotFoundError:
            logger.warning("Container %s/%s does not exist", database_id, container_id)
            return None
        return container

    async def create_container_if_not_exists(
        self, database_id: str, container_id: str
    ) -> ContainerProxy:
        """Create the database and container if missing, partitioned on /id.

        Args:
            database_id (str): Name of the database.
            container_id (str): Name of the container.

        Returns:
            ContainerProxy: The container handle.

        """
        database = await self.client.create_database_if_not_exists(id=database_id)
        container = await database.create_container_if_not_exists(
            id=container_id, partition_key=PartitionKey(path=PARTITION_KEY_PATH)
        )
        logger.info("Provisioned container %s/%s", database_id, container_id)
        return container
