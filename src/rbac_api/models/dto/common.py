"""Shared response DTOs."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every failed request."""

    error: str
    message: str
    details: dict[str, Any] | None = None
    status_code: int
    correlation_id: str | None = None


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class DeleteResponse(MessageResponse):
    """Confirmation of a delete, with the number of association rows removed."""

    associations_removed: int = 0
