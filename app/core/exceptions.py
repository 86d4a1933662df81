"""
Custom application exceptions.
"""

from typing import List, Optional

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail=detail, status_code=status.HTTP_401_UNAUTHORIZED)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, detail: str = "Bad request"):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)


class ForbiddenException(AppException):
    """Forbidden action exception."""

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(detail=detail, status_code=status.HTTP_403_FORBIDDEN)


class PermissionDeniedException(ForbiddenException):
    """The database refused the operation for the configured role."""

    def __init__(self, action: str, collection: str):
        self.action = action
        self.collection = collection
        super().__init__(
            detail=(
                f"Permission denied: the database user cannot '{action}' on '{collection}'. "
                f"Grant the '{action}' action on the '{collection}' collection to the application role."
            )
        )


class SchemaDriftException(AppException):
    """An expected field, index or collection is missing from the database."""

    def __init__(self, element: str, collection: str, hint: Optional[str] = None):
        self.element = element
        self.collection = collection
        message = (
            f"Database Schema Error: Missing '{element}' on the '{collection}' collection."
        )
        if hint:
            message = f"{message} {hint}"
        super().__init__(detail=message)


class BackendUnavailableException(AppException):
    """The database could not be reached or is misconfigured."""

    def __init__(self, detail: str = "Cannot connect to the database.", setup_guide: Optional[List[str]] = None):
        self.setup_guide = setup_guide or []
        super().__init__(detail=detail, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
