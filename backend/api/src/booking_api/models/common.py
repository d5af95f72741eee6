"""Shared API request/response models.

Request bodies use camelCase keys on the wire (``listingId``); snake_case
names are accepted too. Every request carries the session ``token``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "ApiModel",
    "TokenRequest",
    "MessageResponse",
    "ValidationErrorDetail",
    "format_validation_errors",
]


class ApiModel(BaseModel):
    """Base for request bodies with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TokenRequest(ApiModel):
    """Request carrying a session token."""

    token: str = Field(..., min_length=1, description="Session token")


class MessageResponse(BaseModel):
    message: str


class ValidationErrorDetail(BaseModel):
    """Detail of a single validation error."""

    loc: list[str | int] = Field(
        ...,
        description="Path to the field that failed validation",
        examples=[["body", "checkIn"]],
    )
    msg: str = Field(..., examples=["Field required"])
    type: str = Field(..., examples=["missing"])


def format_validation_errors(errors: list[dict[str, Any]]) -> list[ValidationErrorDetail]:
    """Reduce pydantic validation errors to JSON-safe details.

    Args:
        errors: List of error dicts from ``ValidationError.errors()``

    Returns:
        One ValidationErrorDetail per error.
    """
    return [
        ValidationErrorDetail(
            loc=[str(loc) for loc in error.get("loc", [])],
            msg=error.get("msg", ""),
            type=error.get("type", ""),
        )
        for error in errors
    ]
