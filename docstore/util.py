"""Utility functions for the docstore module."""

import uuid


def new_item_id() -> str:
    """Generate a random identifier for an item created without one.

    Returns:
        str: A UUID4 string, e.g. '92fe5b6b-2135-449c-8e4c-d632b041dc45'.

    """
    return str(uuid.uuid4())


def merge_items(existing: dict, incoming: dict) -> dict:
    """Merge an incoming partial item over an existing one.

    The merge is shallow: top-level keys of ``incoming`` win, nested values
    are replaced as a whole.

    Args:
        existing (dict): The stored item.
        incoming (dict): The partial item carrying new values.

    Returns:
        dict: The merged item.

    """
    return {**existing, **incoming}
