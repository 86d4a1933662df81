"""
Classify pymongo errors into the schema-drift / permission taxonomy.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pymongo.errors import OperationFailure, PyMongoError, WriteError

DOCUMENT_VALIDATION_FAILURE = 121
UNAUTHORIZED = 13
BAD_VALUE = 2
INDEX_NOT_FOUND = 27
NO_QUERY_EXECUTION_PLANS = 291
QUERY_EXCEEDED_MEMORY_LIMIT = 292

_INDEX_ERROR_CODES = {BAD_VALUE, INDEX_NOT_FOUND, NO_QUERY_EXECUTION_PLANS, QUERY_EXCEEDED_MEMORY_LIMIT}


def _code(exc: PyMongoError) -> Optional[int]:
    return getattr(exc, "code", None)


def is_unknown_field_error(exc: PyMongoError) -> bool:
    """Collection validator rejected the document (typically an unrecognized field)."""
    if isinstance(exc, WriteError) and _code(exc) == DOCUMENT_VALIDATION_FAILURE:
        return True
    return "document failed validation" in str(exc).lower()


def is_missing_index_error(exc: PyMongoError) -> bool:
    """Query could not run because a supporting index is absent."""
    if not isinstance(exc, OperationFailure):
        return False
    if _code(exc) in _INDEX_ERROR_CODES:
        return True
    message = str(exc).lower()
    return "index" in message or "sort exceeded memory limit" in message


def is_permission_error(exc: PyMongoError) -> bool:
    return isinstance(exc, OperationFailure) and _code(exc) == UNAUTHORIZED


def rejected_fields(exc: PyMongoError) -> List[str]:
    """
    Best-effort extraction of the field names a $jsonSchema validator refused.

    Mongo reports them under errInfo.details as `additionalProperties: [...]`.
    """
    details = getattr(exc, "details", None) or {}
    found: List[str] = []

    def walk(node: Any):
        if isinstance(node, dict):
            for key, value in node.items():
                if key == "additionalProperties" and isinstance(value, list):
                    found.extend(str(v) for v in value)
                else:
                    walk(value)
        elif isinstance(node, list):
            for item in node:
                walk(item)

    walk(details.get("errInfo") if isinstance(details, dict) else None)
    return found
