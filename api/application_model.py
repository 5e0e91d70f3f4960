"""Application model definitions."""

from dataclasses import dataclass

from fastapi import HTTPException, Request

from docstore.database.cosmos_connection import CosmosConfiguration
from docstore.database.document_store import DocumentStore
from docstore.feed.checkpoint_store import CheckpointStore


@dataclass
class AppState:
    """Application state holding the document store and its configuration."""

    document_store: DocumentStore
    config: CosmosConfiguration
    checkpoint_store: CheckpointStore


def get_services(request: Request) -> AppState:
    """Dependency to get application services from request."""
    return request.app.state.services


async def get_container_or_404(
    services: AppState, database_id: str, container_id: str
):
    """Resolve a container, raising 404 if it does not exist."""
    container = await services.document_store.resolve_container(
        database_id, container_id
    )
    if container is None:
        raise HTTPException(
            status_code=404,
            detail=f"Container {database_id}/{container_id} does not exist",
        )
    return container
