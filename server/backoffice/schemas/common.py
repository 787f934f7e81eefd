"""Common Pydantic schemas."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class RouteKey(str, Enum):
    """Screen a client should show after a mutation."""
    TRANSACTIONS_INDEX = "transactions.index"
    TRANSACTIONS_TRASH = "transactions.trash"
    TRAVEL_GALLERIES_INDEX = "travel-galleries.index"


class FlashKind(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class Flash(BaseModel):
    """One-line message shown to staff after a mutation."""

    kind: FlashKind = Field(..., description="success or failed")
    message: str = Field(..., description="Human-readable message")


class ActionResponse(BaseModel):
    """Result of a back-office mutation: where to go next and what to show."""

    destination: RouteKey = Field(..., description="Route key of the next screen")
    flash: Flash

    @classmethod
    def from_outcome(cls, outcome, destination: RouteKey) -> "ActionResponse":
        """Build the response for a runner ``Outcome``."""
        return cls(
            destination=destination,
            flash=Flash(
                kind=FlashKind.SUCCESS if outcome.ok else FlashKind.FAILED,
                message=outcome.message,
            ),
        )


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="Path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


class Page(BaseModel):
    """Offset pagination fields shared by the listings."""

    page: int = Field(..., ge=1, description="Current page (1-based)")
    per_page: int = Field(..., ge=1, description="Rows per page")
    total: int = Field(..., ge=0, description="Rows across all pages")
    last_page: int = Field(..., ge=1, description="Number of the last page")
