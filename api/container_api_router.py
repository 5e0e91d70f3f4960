"""API router for container-level endpoints."""

import traceback
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from api.application_model import AppState, get_container_or_404, get_services

router = APIRouter(prefix="/databases/{database_id}/containers/{container_id}")


@router.post("")
async def provision_container(
    services: Annotated[AppState, Depends(get_services)],
    database_id: str,
    container_id: str,
) -> dict[str, str]:
    """Create the database and container if they do not exist.

    Args:
        services: Application services dependency
        database_id: Name of the database
        container_id: Name of the container

    Returns:
        The ids of the provisioned database and container

    """
    try:
        await services.document_store.provision(database_id, container_id)
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to provision container: {str(e)}",
        ) from e
    return {"database": database_id, "container": container_id}


@router.get("/changes")
async def read_changes(
    services: Annotated[AppState, Depends(get_services)],
    database_id: str,
    container_id: str,
    name: str = "default",
    partition_key: str | None = None,
) -> list[list[dict]]:
    """Read the changes made to a container since the last call with this name.

    Args:
        services: Application services dependency
        database_id: Name of the database
        container_id: Name of the container
        name: Checkpoint name of the consumer (default: "default")
        partition_key: Restrict the feed to one partition key value

    Returns:
        Batches of inserted or updated items

    """
    await get_container_or_404(services, database_id, container_id)
    try:
        reader = services.document_store.subscribe_to_changes(
            database_id,
            container_id,
            checkpoint_store=services.checkpoint_store,
            name=f"{database_id}-{container_id}-{name}",
            partition_key=partition_key,
        )
        return await reader.read_pending()
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to read changes: {str(e)}",
        ) from e
