"""
Bearer tokens for adults and single-use tokens for public RSVPs.

Adults sign in through the identity service; this side verifies its JWTs
(``sub`` = adult id). ``create_access_token`` exists for local tooling and tests.
"""
import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Tuple
from jose import jwt, JWTError
from rsvphub.core.config import settings

ACCESS_TOKEN_TYPE = "access"


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime, "type": ACCESS_TOKEN_TYPE}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Dict:
    """
    Verify signature and expiry.

    Raises:
        ValueError: Expired, malformed, or missing ``sub``
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise ValueError("Token has expired")
    except JWTError as e:
        raise ValueError(f"Invalid token: {e}")

    if "sub" not in payload:
        raise ValueError("Invalid token payload: missing 'sub' field")
    return payload


def adult_id_from_token(token: str) -> int:
    """
    Adult id carried by a valid access token.

    Raises:
        ValueError: Invalid token, wrong token type or non-integer subject
    """
    payload = decode_token(token)
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise ValueError("Invalid token type")
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise ValueError("Invalid token subject")


def hash_public_token(plain_token: str) -> str:
    # only the digest is persisted
    return hashlib.sha256(plain_token.encode()).hexdigest()


def new_public_token() -> Tuple[str, str]:
    """``(plain_token, token_hash)`` for a new public RSVP."""
    plain = secrets.token_hex(32)
    return plain, hash_public_token(plain)
