"""Result types returned by document store write operations."""

from enum import Enum

from pydantic import BaseModel

ITEM_EXISTS_MESSAGE = "Item with the same ID already exists."
ITEM_MISSING_MESSAGE = "Item doesn't exist"


class OutcomeStatus(str, Enum):
    """The outcome of a write against a container."""

    CREATED = "created"
    UPDATED = "updated"
    UPSERTED = "upserted"
    DELETED = "deleted"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CANCELLED = "cancelled"


class ItemOutcome(BaseModel):
    """Represents the result of a create, update, upsert or delete request."""

    status: OutcomeStatus
    item: dict | None = None
    message: str = ""

    @property
    def succeeded(self) -> bool:
        """Return True if the request resulted in a remote write."""
        return self.status in (
            OutcomeStatus.CREATED,
            OutcomeStatus.UPDATED,
            OutcomeStatus.UPSERTED,
            OutcomeStatus.DELETED,
        )
