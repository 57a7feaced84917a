"""Password hashing and the JWTs handed to FastTrack clients.

Access and refresh tokens are both HS256 JWTs signed with ``JWT_SECRET``;
``typ`` tells them apart so a refresh token can never be used as a bearer
credential. The subject is the user id.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from .config import settings

ALGORITHM = "HS256"
AUDIENCE = "fasttrack-clients"
ISSUER = "fasttrack"

ACCESS = "access"
REFRESH = "refresh"


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenPayload(BaseModel):
    sub: str
    exp: datetime
    iat: datetime
    typ: str
    username: str | None = None


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash in the database
        return False


def _sign(claims: dict[str, Any], lifetime: timedelta) -> str:
    issued = datetime.now(tz=timezone.utc)
    body = {
        **claims,
        "iat": int(issued.timestamp()),
        "exp": int((issued + lifetime).timestamp()),
        "aud": AUDIENCE,
        "iss": ISSUER,
    }
    return jwt.encode(body, settings.JWT_SECRET, algorithm=ALGORITHM)


def issue_token_pair(subject: str, username: str | None = None) -> TokenPair:
    claims: dict[str, Any] = {"sub": subject}
    if username:
        claims["username"] = username
    access_ttl = timedelta(minutes=settings.JWT_ACCESS_TTL_MIN)
    return TokenPair(
        access_token=_sign({**claims, "typ": ACCESS}, access_ttl),
        refresh_token=_sign({**claims, "typ": REFRESH}, timedelta(days=settings.JWT_REFRESH_TTL_DAYS)),
        expires_in=int(access_ttl.total_seconds()),
    )


def decode_token(token: str, *, verify_type: str | None = None) -> TokenPayload:
    """Verify signature, expiry, audience and issuer; raise ``ValueError`` otherwise."""
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM], audience=AUDIENCE, issuer=ISSUER)
        payload = TokenPayload.model_validate(claims)
    except (JWTError, ValidationError) as exc:
        raise ValueError("Invalid token") from exc
    if verify_type and payload.typ != verify_type:
        raise ValueError("Invalid token type")
    return payload


def refresh_access_token(refresh_token: str) -> tuple[TokenPayload, TokenPair]:
    payload = decode_token(refresh_token, verify_type=REFRESH)
    return payload, issue_token_pair(payload.sub, username=payload.username)
