"""
Access-control error taxonomy.

Each verdict is an HTTPException subclass so FastAPI renders it directly.
Bodies are deliberately generic: callers never learn which grant was
missing or whether a resource belongs to another tenant.
"""

from typing import Optional

from fastapi import HTTPException, status


class Unauthenticated(HTTPException):
    """Missing, invalid or expired credential, or the identity no longer exists."""

    def __init__(self, detail: str = "Not authenticated") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    """Authenticated but not entitled to perform the operation."""

    def __init__(self, detail: str = "Access denied") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    """Absent resource or ownership mismatch; the two are indistinguishable."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BadRequest(HTTPException):
    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictOnCreate(HTTPException):
    """Create operation targeting an identity that already exists."""

    def __init__(self, detail: str = "Email already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidRole(HTTPException):
    """A stored role outside ADMIN/OWNER/STAFF. Data invariant violation."""

    def __init__(self, role: Optional[object] = None) -> None:
        self.role = role
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )
