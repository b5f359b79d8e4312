"""
Security utilities for JWT authentication, API keys and password hashing
"""

from datetime import datetime, timedelta, timezone
import secrets
from typing import Optional, Union, Any
from joserfc import jwt as jose_jwt
from joserfc.jwk import OctKey
from pwdlib import PasswordHash
from pwdlib.hashers.bcrypt import BcryptHasher
import structlog

from catalog_api.core.config import settings
from catalog_api.core.token_validator import IssuerAwareTokenValidator, LocalJWTValidationStrategy

logger = structlog.get_logger()

pwd_context = PasswordHash((BcryptHasher(),))

# JWT Configuration
ALGORITHM = settings.JWT_ALGORITHM
SECRET_KEY = settings.JWT_SECRET_KEY
ACCESS_TOKEN_EXPIRE_MINUTES = settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES

API_KEY_PREFIX = "pk_"

# joserfc key object (reusable)
_jwt_key = OctKey.import_key(SECRET_KEY)

_token_validator = IssuerAwareTokenValidator(
    active_issuer=settings.AUTH_ACTIVE_ISSUER,
    trusted_issuers=settings.trusted_issuers,
    local_strategy=LocalJWTValidationStrategy(
        secret_key=SECRET_KEY,
        algorithm=ALGORITHM,
        issuer=settings.AUTH_LOCAL_ISSUER,
    ),
)


def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict] = None
) -> str:
    """
    Create JWT access token

    Role and ownership are deliberately not trusted from the token; they are
    re-read from storage on every request.

    Args:
        subject: Token subject (user ID)
        expires_delta: Custom expiration time
        additional_claims: Additional claims to include in token

    Returns:
        Encoded JWT token
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "exp": int(expire.timestamp()),
        "sub": str(subject),
        "type": "access",
        "iss": settings.AUTH_LOCAL_ISSUER,
        "iat": int(now.timestamp())
    }

    if additional_claims:
        to_encode.update(additional_claims)

    encoded_jwt = jose_jwt.encode({"alg": ALGORITHM}, to_encode, _jwt_key)

    logger.debug("Access token created", subject=subject, expires=expire)
    return encoded_jwt


def verify_token(token: str, token_type: str = "access") -> str:
    """
    Verify JWT token and return subject

    Raises:
        Unauthenticated: If token is invalid, expired or from an untrusted issuer
    """
    result = _token_validator.validate(token, token_type=token_type)
    return result.subject


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error("Password verification error", error=str(e))
        return False


def get_password_hash(password: str) -> str:
    # Bcrypt has a 72 byte limit
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        password = password_bytes[:72].decode('utf-8', errors='ignore')
        logger.warning("Password truncated to 72 bytes for bcrypt")

    return pwd_context.hash(password)


def generate_api_key() -> str:
    """Opaque machine credential: prefix plus 32 random bytes in hex."""
    return f"{API_KEY_PREFIX}{secrets.token_hex(32)}"
