"""
Authentication Schemas
Pydantic models for authentication requests and responses
"""

from typing import Optional
from pydantic import Field, field_validator
from catalog_api.schemas.base import BaseSchema, enum_value, validate_email, validate_non_empty_string


class LoginRequest(BaseSchema):
    """Login request schema"""
    email: str = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")

    @field_validator('email')
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @field_validator('password')
    @classmethod
    def validate_password_not_empty(cls, v):
        return validate_non_empty_string(v)


class TokenResponse(BaseSchema):
    """Token response schema"""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")


class PrincipalProfile(BaseSchema):
    """Authenticated caller with the resolved tenant scope"""
    id: int = Field(..., description="User ID")
    email: str = Field(..., description="User email")
    full_name: str = Field(..., description="User full name")
    role: str = Field(..., description="ADMIN, OWNER or STAFF")
    owner_id: Optional[int] = Field(None, description="Owner of a STAFF account")
    effective_user_id: Optional[int] = Field(None, description="Tenant scope; null means unrestricted")

    normalize_role = field_validator("role", mode="before")(enum_value)


class LoginResponse(BaseSchema):
    """Login response schema"""
    user: PrincipalProfile = Field(..., description="User profile")
    tokens: TokenResponse = Field(..., description="Authentication tokens")
    message: str = Field("Login successful", description="Success message")


class APIKeyStatus(BaseSchema):
    """Whether the caller's account currently has an API key"""
    has_api_key: bool
    prefix: Optional[str] = Field(None, description="First characters of the key")


class APIKeyResponse(BaseSchema):
    """Freshly generated API key, shown once"""
    api_key: str = Field(..., description="API key token (only shown once)")
    message: str = Field("API key generated", description="Success message")
