"""Common model types shared across modules."""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field


class AddressFamily(IntEnum):
    """IP address family."""

    IPV4 = 4
    IPV6 = 6

    @property
    def label(self) -> str:
        return f"IPv{self.value}"


class ErrorDetail(BaseModel):
    """Represents an error that occurred while talking to a target."""

    model_config = {"frozen": True}

    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional error context",
    )

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"
