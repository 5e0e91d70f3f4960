"""FastAPI application for managing items in Azure Cosmos DB containers."""

import asyncio
import contextlib
import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request

from api import container_api_router, item_api_router
from api.application_model import AppState
from docstore.database.cosmos_connection import CosmosConfiguration, CosmosConnection
from docstore.database.document_store import DocumentStore
from docstore.feed.checkpoint_store import CheckpointStore, ContainerCheckpointStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()


async def watch_changes(
    document_store: DocumentStore,
    checkpoint_store: CheckpointStore,
    database_id: str,
    container_id: str,
    poll_interval: float,
) -> None:
    """Log every batch of changes made to a container until cancelled."""
    try:
        reader = document_store.subscribe_to_changes(
            database_id,
            container_id,
            checkpoint_store=checkpoint_store,
            name=f"{database_id}-{container_id}-watcher",
            poll_interval=poll_interval,
        )
        async for batch in reader.batches():
            logger.info(
                f"✓ {len(batch)} changes in {database_id}/{container_id}: "
                f"{[item.get('id') for item in batch]}"
            )
    except Exception as e:
        logger.error(f"✗ Error subscribing to changes: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""

    # Startup: Open the Cosmos DB connection
    try:
        config = CosmosConfiguration(
            endpoint=os.getenv("COSMOS_ENDPOINT", ""),
            key=os.getenv("COSMOS_KEY", ""),
            checkpoint_database=os.getenv("CHECKPOINT_DATABASE", "ItemManager"),
            checkpoint_container=os.getenv("CHECKPOINT_CONTAINER", "Checkpoints"),
        )
        if not config.endpoint or not config.key:
            raise ValueError("COSMOS_ENDPOINT and COSMOS_KEY must be set in .env file")

        document_store = DocumentStore(CosmosConnection(config))
        document_store.initialize()
        checkpoints = await document_store.provision(
            config.checkpoint_database, config.checkpoint_container
        )
        checkpoint_store = ContainerCheckpointStore(checkpoints)
        app.state.services = AppState(
            document_store=document_store,
            config=config,
            checkpoint_store=checkpoint_store,
        )
        logger.info(f"✓ Connected to {config.endpoint}")
    except Exception as e:
        logger.error(f"✗ Failed to initialize document store: {e}")
        raise

    watcher = None
    watch_database = os.getenv("WATCH_DATABASE")
    watch_container = os.getenv("WATCH_CONTAINER")
    if watch_database and watch_container:
        watcher = asyncio.create_task(
            watch_changes(
                document_store,
                checkpoint_store,
                watch_database,
                watch_container,
                poll_interval=float(os.getenv("WATCH_POLL_SECONDS", "5")),
            )
        )
        logger.info(f"✓ Watching changes in {watch_database}/{watch_container}")

    yield

    # Shutdown: Stop the watcher and close the connection
    if watcher:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
    await document_store.connection.close()
    logger.info("✓ Disconnected from Cosmos DB")


app = FastAPI(
    title="Cosmos Item Manager",
    description="API for creating, reading, updating and deleting Cosmos DB items",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(container_api_router.router)
app.include_router(item_api_router.router)


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """Health check endpoint."""
    services: AppState = request.app.state.services
    return {
        "status": "healthy",
        "cosmos": (
            "connected" if services.document_store.connection.is_open else "disconnected"
        ),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
