"""DocumentStore provides CRUD operations for Azure Cosmos DB containers.

Every operation delegates to the async Azure Cosmos Python SDK. Writes that
can conflict or destroy data return an ItemOutcome instead of prompting, so
the caller decides how to present the result.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable

from azure.cosmos.aio import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from docstore.database.condition_query import build_condition_query, build_id_query
from docstore.database.cosmos_connection import CosmosConnection
from docstore.database.item_outcome import (
    ITEM_EXISTS_MESSAGE,
    ITEM_MISSING_MESSAGE,
    ItemOutcome,
    OutcomeStatus,
)
from docstore.feed.change_feed import ChangeFeedReader
from docstore.feed.checkpoint_store import CheckpointStore
from docstore.util import merge_items, new_item_id

logger = logging.getLogger(__name__)

Confirmation = Callable[[dict], bool | Awaitable[bool]]


class DocumentStore:
    """Facade for item operations against Cosmos DB containers.

    Args:
        connection (CosmosConnection): The connection used to reach the account.

    """

    def __init__(self, connection: CosmosConnection) -> None:
        self.connection = connection

    def initialize(self) -> None:
        """Open the connection, rebinding any previous client."""
        self.connection.open()

    async def resolve_container(
        self, database_id: str, container_id: str, check_exists: bool = True
    ) -> ContainerProxy | None:
        """Locate a container, optionally probing that it exists.

        Args:
            database_id (str): Name of the database.
            container_id (str): Name of the container.
            check_exists (bool): Whether to confirm existence with a round-trip.

        Returns:
            ContainerProxy | None: The container, or None if it does not exist.

        """
        if not check_exists:
            return self.connection.get_container(database_id, container_id)
        return await self.connection.resolve_container(database_id, container_id)

    async def provision(self, database_id: str, container_id: str) -> ContainerProxy:
        """Create the database and container if they do not exist yet."""
        return await self.connection.create_container_if_not_exists(
            database_id, container_id
        )

    async def list_all(self, container: ContainerProxy) -> list[dict] | None:
        """Read every item in the container.

        Args:
            container (ContainerProxy): The container to read.

        Returns:
            list[dict] | None: All items, or None if the container does not exist.

        """
        try:
            return [item async for item in container.read_all_items()]
        except CosmosResourceNotFoundError:
            logger.warning("Container %s does not exist", container.id)
            return None

    async def find_by_id(self, container: ContainerProxy, item_id: str) -> list[dict]:
        """Query the container for items with the given id.

        Args:
            container (ContainerProxy): The container to query.
            item_id (str): The id to look for.

        Returns:
            list[dict]: Matching items.

        """
        spec = build_id_query(item_id)
        return [
            item
            async for item in container.query_items(
                query=spec["query"], parameters=spec["parameters"]
            )
        ]

    async def find_by_direct_read(
        self, container: ContainerProxy, item_id: str
    ) -> dict | None:
        """Point-read an item by id, which is also its partition key value.

        Args:
            container (ContainerProxy): The container to read from.
            item_id (str): The id of the item.

        Returns:
            dict | None: The item, or None if it does not exist.

        """
        try:
            return await container.read_item(item=item_id, partition_key=item_id)
        except CosmosResourceNotFoundError:
            return None

    async def find_by_condition(
        self, container: ContainerProxy, field: str, operator: str, value
    ) -> list[dict]:
        """Query the container for items matching `field operator value`.

        Args:
            container (ContainerProxy): The container to query.
            field (str): Dotted field path, e.g. ``name`` or ``detail.age``.
            operator (str): Comparison operator, e.g. ``>``, ``<``, ``==``, ``!=``.
            value: The value of the field, bound as a query parameter.

        Returns:
            list[dict]: Matching items.

        Raises:
            InvalidQueryError: If the field or operator is not allowed.

        """
        spec = build_condition_query(field, operator, value)
        return [
            item
            async for item in container.query_items(
                query=spec["query"], parameters=spec["parameters"]
            )
        ]

    async def is_duplicate(self, container: ContainerProxy, item_id: str) -> bool:
        """Check whether an item with the given id is already in the container."""
        items = await self.list_all(container) or []
        return any(item.get("id") == item_id for item in items)

    async def create(self, container: ContainerProxy, item: dict) -> ItemOutcome:
        """Create an item, generating a random id if it has none.

        Args:
            container (ContainerProxy): The container to write to.
            item (dict): The item to create.

        Returns:
            ItemOutcome: ``created`` with the stored item, or ``conflict`` if
            an item with the same id exists.

        """
        if item.get("id"):
            existing = await self.find_by_id(container, item["id"])
            if len(existing) > 0:
                logger.warning("Item %s already exists in %s", item["id"], container.id)
                return ItemOutcome(
                    status=OutcomeStatus.CONFLICT,
                    item=existing[0],
                    message=ITEM_EXISTS_MESSAGE,
                )
        else:
            item = {**item, "id": new_item_id()}

        created = await container.create_item(body=item)
        logger.info("Created item %s in %s", created.get("id"), container.id)
        return ItemOutcome(status=OutcomeStatus.CREATED, item=created)

    async def upsert(self, container: ContainerProxy, item: dict) -> ItemOutcome:
        """Replace the item with the same id, or create it if missing."""
        upserted = await container.upsert_item(body=item)
        logger.info("Upserted item %s in %s", upserted.get("id"), container.id)
        return ItemOutcome(status=OutcomeStatus.UPSERTED, item=upserted)

    async def update(self, container: ContainerProxy, item: dict) -> ItemOutcome:
        """Merge the item over the stored one with the same id.

        Items without an id, or whose id is not stored yet, are created.

        Args:
            container (ContainerProxy): The container to write to.
            item (dict): The full or partial item.

        Returns:
            ItemOutcome: ``updated`` with the merged item, or the outcome of create.

        """
        if item.get("id"):
            existing = await self.find_by_id(container, item["id"])
            if len(existing) > 0:
                merged = merge_items(existing[0], item)
                replaced = await container.replace_item(item=item["id"], body=merged)
                logger.info("Updated item %s in %s", item["id"], container.id)
                return ItemOutcome(status=OutcomeStatus.UPDATED, item=replaced)

        return await self.create(container, item)

    async def delete(
        self,
        container: ContainerProxy,
        item_id: str,
        confirm: Confirmation | None = None,
    ) -> ItemOutcome:
        """Delete an item once the caller confirms it.

        Args:
            container (ContainerProxy): The container to delete from.
            item_id (str): The id of the item.
            confirm (Confirmation | None): Called with the stored item; the
                delete goes ahead only if it returns True. Without it nothing
                is deleted and the outcome asks for confirmation.

        Returns:
            ItemOutcome: ``deleted``, ``cancelled``, ``awaiting_confirmation``
            or ``not_found``.

        """
        existing = await self.find_by_id(container, item_id)
        if len(existing) == 0:
            return ItemOutcome(
                status=OutcomeStatus.NOT_FOUND, message=ITEM_MISSING_MESSAGE
            )

        item = existing[0]
        if confirm is None:
            return ItemOutcome(
                status=OutcomeStatus.AWAITING_CONFIRMATION,
                item=item,
                message=f"Confirm deletion of item {item_id}",
            )

        approved = confirm(item)
        if inspect.isawaitable(approved):
            approved = await approved
        if not approved:
            return ItemOutcome(status=OutcomeStatus.CANCELLED, item=item)

        await container.delete_item(item=item_id, partition_key=item_id)
        logger.info("Deleted item %s from %s", item_id, container.id)
        return ItemOutcome(
            status=OutcomeStatus.DELETED, item=item, message="Item deleted"
        )

    def subscribe_to_changes(
        self,
        database_id: str,
        container_id: str,
        checkpoint_store: CheckpointStore,
        name: str = "default",
        partition_key: str | None = None,
        poll_interval: float = 5.0,
    ) -> ChangeFeedReader:
        """Create a change feed reader for a container.

        Args:
            database_id (str): Name of the database.
            container_id (str): Name of the container.
            checkpoint_store (CheckpointStore): Where continuation tokens are kept.
            name (str): Checkpoint name, one per independent consumer.
            partition_key (str | None): Restrict the feed to one partition key value.
            poll_interval (float): Seconds to wait after an empty poll.

        Returns:
            ChangeFeedReader: A reader resuming from the stored checkpoint.

        """
        container = self.connection.get_container(database_id, container_id)
        return ChangeFeedReader(
            container=container,
            checkpoint_store=checkpoint_store,
            name=name,
            partition_key=partition_key,
            poll_interval=poll_interval,
        )
