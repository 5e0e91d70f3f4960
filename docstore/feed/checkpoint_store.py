"""Stores for change feed continuation tokens."""

import logging
from abc import ABC, abstractmethod

from azure.cosmos.aio import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

logger = logging.getLogger(__name__)

CHECKPOINT_PREFIX = "checkpoint-"


class CheckpointStore(ABC):
    """Abstract base class for change feed checkpoint stores."""

    def __str__(self) -> str:
        """Return the name of the checkpoint store."""
        return self.__class__.__name__

    @abstractmethod
    async def load(self, name: str) -> str | None:
        """Return the continuation token saved under the name, if any.

        Args:
            name (str): The checkpoint name.

        Returns:
            str | None: The continuation token.

        """
        ...

    @abstractmethod
    async def save(self, name: str, continuation: str) -> None:
        """Save the continuation token under the name.

        Args:
            name (str): The checkpoint name.
            continuation (str): The continuation token.

        """
        ...


class MemoryCheckpointStore(CheckpointStore):
    """Keeps checkpoints for the lifetime of the process."""

    def __init__(self) -> None:
        self.tokens: dict[str, str] = {}

    async def load(self, name: str) -> str | None:
        return self.tokens.get(name)

    async def save(self, name: str, continuation: str) -> None:
        self.tokens[name] = continuation


class ContainerCheckpointStore(CheckpointStore):
    """Persists checkpoints as items in a Cosmos DB container partitioned on /id."""

    def __init__(self, container: ContainerProxy) -> None:
        self.container = container

    async def load(self, name: str) -> str | None:
        checkpoint_id = CHECKPOINT_PREFIX + name
        try:
            item = await self.container.read_item(
                item=checkpoint_id, partition_key=checkpoint_id
            )
        except CosmosResourceNotFoundError:
            return None
        return item.get("continuation")

    async def save(self, name: str, continuation: str) -> None:
        await self.container.upsert_item(
            body={"id": CHECKPOINT_PREFIX + name, "continuation": continuation}
        )
        logger.debug("Saved checkpoint %s", name)
