"""Builds parameterized Cosmos DB SQL queries for field conditions."""

import re

from pydantic import BaseModel

ITEM_ALIAS = "c"
VALUE_PARAMETER = "@value"
ID_PARAMETER = "@itemId"

ID_QUERY = f"SELECT * FROM {ITEM_ALIAS} WHERE {ITEM_ALIAS}.id = {ID_PARAMETER}"

# Cosmos SQL has no "==" so it is sent as "="
OPERATORS = {
    "=": "=",
    "==": "=",
    "!=": "!=",
    "<>": "<>",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
}

FIELD_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class InvalidQueryError(ValueError):
    """Raised when a field path or operator cannot be placed in a query."""


class ConditionQuery(BaseModel):
    """A single `field operator value` condition against a container."""

    field: str
    operator: str
    value: str | int | float | bool | None = None


def build_condition_query(field: str, operator: str, value) -> dict:
    """Build a query spec for items whose field matches the condition.

    Only ``value`` can be bound as a parameter, so ``field`` and
    ``operator`` are validated before being placed in the query text.

    Args:
        field (str): Dotted path of the field, e.g. ``name`` or ``detail.age``.
        operator (str): One of ``=, ==, !=, <>, <, <=, >, >=``.
        value: The value to compare against.

    Returns:
        dict: ``query`` and ``parameters`` for ``query_items``.

    Raises:
        InvalidQueryError: If the field or operator is not allowed.

    """
    if not FIELD_PATTERN.match(field or ""):
        raise InvalidQueryError(f"Invalid field path: {field!r}")
    if operator not in OPERATORS:
        raise InvalidQueryError(
            f"Invalid operator: {operator!r}. Allowed: {', '.join(OPERATORS)}"
        )
    # reserved words such as value or order are only valid names in bracket form
    path = "".join(f'["{segment}"]' for segment in field.split("."))
    query = (
        f"SELECT * FROM {ITEM_ALIAS} "
        f"WHERE {ITEM_ALIAS}{path} {OPERATORS[operator]} {VALUE_PARAMETER}"
    )
    return {
        "query": query,
        "parameters": [{"name": VALUE_PARAMETER, "value": value}],
    }


def build_id_query(item_id: str) -> dict:
    """Build a query spec for items with the given id."""
    return {
        "query": ID_QUERY,
        "parameters": [{"name": ID_PARAMETER, "value": item_id}],
    }
