"""
Base Pydantic Schemas
Common schemas and base classes for request/response models
"""

from datetime import datetime, timezone
from typing import Optional, Any, Dict, List
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
import re


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseSchema(BaseModel):
    """Base schema with common configuration"""
    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        str_strip_whitespace=True,
        use_enum_values=True
    )


class PaginatedResponse(BaseModel):
    """Paginated response wrapper"""
    items: List[Any] = Field(..., description="List of items")
    total: int = Field(..., description="Total number of items")
    skip: int = Field(..., description="Number of items skipped")
    limit: int = Field(..., description="Maximum number of items returned")
    has_next: bool = Field(..., description="Whether there are more items")
    has_prev: bool = Field(..., description="Whether there are previous items")

    @classmethod
    def create(
        cls,
        items: List[Any],
        total: int,
        skip: int,
        limit: int
    ) -> "PaginatedResponse":
        """
        Create paginated response

        Args:
            items: List of items
            total: Total number of items
            skip: Number of items skipped
            limit: Maximum number of items returned

        Returns:
            Paginated response
        """
        return cls(
            items=items,
            total=total,
            skip=skip,
            limit=limit,
            has_next=skip + len(items) < total,
            has_prev=skip > 0
        )


class SuccessResponse(BaseModel):
    """Success response schema"""
    message: str = Field(..., description="Success message")
    data: Optional[Dict[str, Any]] = Field(None, description="Additional data")
    timestamp: datetime = Field(default_factory=_utcnow, description="Response timestamp")


EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def validate_email(v: Any) -> str:
    """Validate email format"""
    if not isinstance(v, str):
        raise ValueError("Email must be a string")

    v = v.strip().lower()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email format")

    return v


def enum_value(v: Any) -> Any:
    """Unwrap enum members so response fields carry the plain value"""
    return v.value if isinstance(v, Enum) else v


def validate_non_empty_string(v: Any) -> str:
    """Validate non-empty string"""
    if not isinstance(v, str):
        raise ValueError("Must be a string")
    if not v.strip():
        raise ValueError("String cannot be empty")
    return v.strip()
