from __future__ import annotations

import hmac

from fastapi import Depends, Header, HTTPException, Path, Request, status
from fastapi.security.utils import get_authorization_scheme_param

from ..core.config import settings
from ..core.security import ACCESS, decode_token
from ..middlewares import principal_ctx_var


class AuthContext:
    """Who is calling.

    ``user_id`` is set for user tokens. The service API key has no user of its
    own and may act on behalf of anyone.
    """

    def __init__(self, *, subject: str, scheme: str, user_id: str | None = None) -> None:
        self.subject = subject
        self.scheme = scheme
        self.user_id = user_id

    @property
    def is_service(self) -> bool:
        return self.scheme == "api_key"

    def can_act_for(self, user_id: str) -> bool:
        return self.is_service or self.user_id == user_id


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


async def require_principal(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> AuthContext:
    api_key = (settings.API_KEY or "").strip()
    provided_key = (x_api_key or "").strip()
    if provided_key:
        if api_key and hmac.compare_digest(api_key, provided_key):
            _set_principal(request, "api-key")
            return AuthContext(subject="api-key", scheme="api_key")
        raise _unauthorized("Invalid API key")

    if authorization:
        scheme, credentials = get_authorization_scheme_param(authorization)
        if scheme.lower() == "bearer" and credentials:
            try:
                payload = decode_token(credentials, verify_type=ACCESS)
            except ValueError as exc:
                raise _unauthorized(str(exc)) from exc
            subject = f"user:{payload.sub}"
            _set_principal(request, subject)
            request.state.token_payload = payload
            return AuthContext(subject=subject, scheme="jwt", user_id=payload.sub)

    raise _unauthorized("Authorization required")


async def require_user_access(
    user_id: str = Path(..., min_length=1, max_length=64),
    auth: AuthContext = Depends(require_principal),
) -> str:
    """Resolve the ``{user_id}`` path segment, refusing other people's data."""
    if not auth.can_act_for(user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to act for this user")
    return user_id
