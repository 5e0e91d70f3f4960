"""Module for reading the change feed of a Cosmos DB container."""

import asyncio
import logging
from collections.abc import AsyncIterator

from azure.cosmos.aio import ContainerProxy

from docstore.feed.checkpoint_store import CheckpointStore

logger = logging.getLogger(__name__)

FEED_START = "Beginning"


class ChangeFeedReader:
    """Reads inserted and updated items from a container in batches.

    Each read resumes from the continuation token saved in the checkpoint
    store and saves the new token once the batches are collected, so a new
    reader with the same name picks up where the last one stopped.
    """

    def __init__(
        self,
        container: ContainerProxy,
        checkpoint_store: CheckpointStore,
        name: str = "default",
        partition_key: str | None = None,
        max_item_count: int | None = None,
        poll_interval: float = 5.0,
    ) -> None:
        self.container = container
        self.checkpoint_store = checkpoint_store
        self.name = name
        self.partition_key = partition_key
        self.max_item_count = max_item_count
        self.poll_interval = poll_interval

    async def read_pending(self) -> list[list[dict]]:
        """Read every change after the last checkpoint.

        Returns:
            list[list[dict]]: Non-empty batches of changed items, one per page.

        """
        continuation = await self.checkpoint_store.load(self.name)
        options: dict = {}
        if continuation:
            options["continuation"] = continuation
        else:
            options["start_time"] = FEED_START
        if self.partition_key is not None:
            options["partition_key"] = self.partition_key
        if self.max_item_count is not None:
            options["max_item_count"] = self.max_item_count

        batches = []
        pages = self.container.query_items_change_feed(**options).by_page()
        async for page in pages:
            batch = [item async for item in page]
            if batch:
                batches.append(batch)

        new_continuation = pages.continuation_token
        if new_continuation and new_continuation != continuation:
            await self.checkpoint_store.save(self.name, new_continuation)
        count = sum(len(batch) for batch in batches)
        if count:
            logger.info("Read %s changes from %s", count, self.container.id)
        else:
            logger.debug("No changes in %s", self.container.id)
        return batches

    async def batches(self) -> AsyncIterator[list[dict]]:
        """Yield batches of changes forever, polling when the feed is drained."""
        while True:
            pending = await self.read_pending()
            for batch in pending:
                yield batch
            if not pending:
                await asyncio.sleep(self.poll_interval)

