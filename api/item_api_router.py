"""API router for item endpoints."""

import traceback
from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from api.application_model import AppState, get_container_or_404, get_services
from docstore.database.condition_query import ConditionQuery, InvalidQueryError
from docstore.database.item_outcome import ItemOutcome, OutcomeStatus

router = APIRouter(prefix="/databases/{database_id}/containers/{container_id}/items")

OUTCOME_STATUS_CODES = {
    OutcomeStatus.CREATED: 201,
    OutcomeStatus.CONFLICT: 409,
    OutcomeStatus.NOT_FOUND: 404,
    OutcomeStatus.AWAITING_CONFIRMATION: 202,
}


def _with_status(response: Response, outcome: ItemOutcome) -> ItemOutcome:
    response.status_code = OUTCOME_STATUS_CODES.get(outcome.status, 200)
    return outcome


@router.get("")
async def list_items(
    services: Annotated[AppState, Depends(get_services)],
    database_id: str,
    container_id: str,
) -> list[dict]:
    """List every item in the container.

    Args:
        services: Application services dependency
        database_id: Name of the database
        container_id: Name of the container

    Returns:
        All items of the container

    """
    container = await get_container_or_404(services, database_id, container_id)
    try:
        items = await services.document_store.list_all(container)
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list items: {str(e)}",
        ) from e
    if items is None:
        raise HTTPException(status_code=404, detail="Container does not exist")
    return items


@router.post("/query")
async def query_items(
    services: Annotated[AppState, Depends(get_services)],
    database_id: str,
    container_id: str,
    condition: ConditionQuery,
) -> list[dict]:
    """Find items whose field matches a condition, e.g. `name == "a"`."""
    container = await get_container_or_404(services, database_id, container_id)
    try:
        return await services.document_store.find_by_condition(
            container, condition.field, condition.operator, condition.value
        )
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to query items: {str(e)}",
        ) from e


@router.get("/{item_id}")
async def read_item(
    services: Annotated[AppState, Depends(get_services)],
    database_id: str,
    container_id: str,
    item_id: str,
) -> dict:
    """Point-read a single item by id."""
    container = await get_container_or_404(services, database_id, container_id)
    try:
        item = await services.document_store.find_by_direct_read(container, item_id)
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to read item: {str(e)}",
        ) from e
    if item is None:
        raise HTTPException(status_code=404, detail=f"Item {item_id} doesn't exist")
    return item


@router.get("/{item_id}/matches")
async def find_items_by_id(
    services: Annotated[AppState, Depends(get_services)],
    database_id: str,
    container_id: str,
    item_id: str,
) -> list[dict]:
    """Query the items carrying the given id."""
    container = await get_container_or_404(services, database_id, container_id)
    try:
        return await services.document_store.find_by_id(container, item_id)
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to query items: {str(e)}",
        ) from e


@router.get("/{item_id}/duplicate")
async def check_duplicate(
    services: Annotated[AppState, Depends(get_services)],
    database_id: str,
    container_id: str,
    item_id: str,
) -> dict[str, bool]:
    """Check whether an item with the given id already exists."""
    container = await services.document_store.resolve_container(
        database_id, container_id
    )
    if container is None:
        return {"duplicate": False}
    try:
        duplicate = await services.document_store.is_duplicate(container, item_id)
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to check duplicate: {str(e)}",
        ) from e
    return {"duplicate": duplicate}


@router.post("")
async def create_item(
    services: Annotated[AppState, Depends(get_services)],
    response: Response,
    database_id: str,
    container_id: str,
    item: Annotated[dict, Body()],
) -> ItemOutcome:
    """Create an item. Items without an id get a random one.

    Args:
        services: Application services dependency
        response: Response used to set the outcome status code
        database_id: Name of the database
        container_id: Name of the container
        item: The item to create

    Returns:
        The outcome, with status 201 when created or 409 when the id exists

    """
    container = await get_container_or_404(services, database_id, container_id)
    try:
        outcome = await services.document_store.create(container, item)
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create item: {str(e)}",
        ) from e
    return _with_status(response, outcome)


@router.put("")
async def upsert_item(
    services: Annotated[AppState, Depends(get_services)],
    database_id: str,
    container_id: str,
    item: Annotated[dict, Body()],
) -> ItemOutcome:
    """Replace the item with the same id, or create it."""
    container = await get_container_or_404(services, database_id, container_id)
    try:
        return await services.document_store.upsert(container, item)
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to upsert item: {str(e)}",
        ) from e


@router.patch("")
async def update_item(
    services: Annotated[AppState, Depends(get_services)],
    response: Response,
    database_id: str,
    container_id: str,
    item: Annotated[dict, Body()],
) -> ItemOutcome:
    """Merge the item into the stored one with the same id, or create it."""
    container = await get_container_or_404(services, database_id, container_id)
    try:
        outcome = await services.document_store.update(container, item)
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update item: {str(e)}",
        ) from e
    return _with_status(response, outcome)


@router.delete("/{item_id}")
async def delete_item(
    services: Annotated[AppState, Depends(get_services)],
    response: Response,
    database_id: str,
    container_id: str,
    item_id: str,
    confirm: bool = False,
) -> ItemOutcome:
    """Delete an item. Without `confirm=true` the item is only looked up.

    Args:
        services: Application services dependency
        response: Response used to set the outcome status code
        database_id: Name of the database
        container_id: Name of the container
        item_id: The id of the item to delete
        confirm: Whether the caller confirmed the deletion

    Returns:
        The outcome, with status 202 while awaiting confirmation or 404 if missing

    """
    container = await get_container_or_404(services, database_id, container_id)
    try:
        outcome = await services.document_store.delete(
            container,
            item_id,
            confirm=(lambda item: True) if confirm else None,
        )
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete item: {str(e)}",
        ) from e
    return _with_status(response, outcome)
