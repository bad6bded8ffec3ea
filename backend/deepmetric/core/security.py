"""
Security utilities for Deepmetric.

Handles signed credential tokens for issued certificates.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt

from .config import settings


CERTIFICATE_TOKEN_TYPE = "certificate"


def create_signed_token(
    subject: str,
    additional_claims: Optional[Dict[str, Any]] = None
) -> str:
    """
    Create a signed JWT.

    Credentials do not expire, so no ``exp`` claim is set.

    Args:
        subject: The subject of the token (usually a user ID)
        additional_claims: Optional additional claims to include in the token

    Returns:
        str: The encoded JWT token
    """
    to_encode: Dict[str, Any] = {"sub": subject}

    # Add additional claims if provided
    if additional_claims:
        to_encode.update(additional_claims)

    # Add issued at time
    to_encode["iat"] = int(datetime.now(timezone.utc).timestamp())

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT token.

    Args:
        token: The JWT token to verify

    Returns:
        Optional[Dict[str, Any]]: The decoded token payload if valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        return payload
    except JWTError:
        return None


def create_certificate_token(
    user_id: str,
    course_id: str,
    issued_on: str
) -> str:
    """
    Create the credential id printed on a certificate.

    Args:
        user_id: The certificate holder
        course_id: The completed course
        issued_on: Issue date (ISO format)

    Returns:
        str: The signed credential id
    """
    return create_signed_token(
        subject=user_id,
        additional_claims={
            "type": CERTIFICATE_TOKEN_TYPE,
            "course_id": course_id,
            "issued_on": issued_on,
            "iss": settings.CERTIFICATE_ISSUER
        }
    )


def verify_certificate_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify a certificate credential id.

    Args:
        token: The credential id to verify

    Returns:
        Optional[Dict[str, Any]]: The credential claims if valid, None otherwise
    """
    payload = verify_token(token)
    if payload and payload.get("type") == CERTIFICATE_TOKEN_TYPE:
        return payload
    return None
