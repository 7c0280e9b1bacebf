from enum import Enum
from typing import Optional

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    PARENT_NOT_FOUND = "PARENT_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_OPERATION = "INVALID_OPERATION"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class MenuTreeError(Exception):
    """Base class for structural failures raised by the menu service."""

    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR


class ParentNotFoundError(MenuTreeError):
    code = ErrorCode.PARENT_NOT_FOUND

    def __init__(self, parent_id: Optional[str]):
        super().__init__(f"Parent menu not found: {parent_id}")
        self.parent_id = parent_id


def api_error(status_code: int, code: ErrorCode, message: str) -> HTTPException:
    """Build an ``HTTPException`` whose detail renders as ``{error, message}``."""
    return HTTPException(
        status_code=status_code,
        detail={"error": code.value, "message": message},
    )


def menu_not_found() -> HTTPException:
    return api_error(status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND, "Menu not found")


def parent_not_found() -> HTTPException:
    return api_error(
        status.HTTP_404_NOT_FOUND, ErrorCode.PARENT_NOT_FOUND, "Parent menu not found"
    )


def invalid_move() -> HTTPException:
    return api_error(
        status.HTTP_400_BAD_REQUEST,
        ErrorCode.INVALID_OPERATION,
        "Cannot move menu to its own descendant",
    )


def internal_error(message: str) -> HTTPException:
    return api_error(
        status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_SERVER_ERROR, message
    )
