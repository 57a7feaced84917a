from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..core.security import issue_token_pair, refresh_access_token
from ..crud.users import authenticate, create_user, get_user
from ..db.session import get_db
from ..deps.auth import AuthContext, require_principal
from ..schemas.auth import Credentials, RefreshRequest, TokenResponse, UserOut

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _tokens_for(user) -> TokenResponse:
    pair = issue_token_pair(subject=user.id, username=user.username)
    return TokenResponse(**pair.model_dump(), user_id=user.id)


@router.post("/register", response_model=TokenResponse, status_code=201, summary="Create an account")
def register(payload: Credentials, db: Session = Depends(get_db)):
    try:
        user = create_user(db, payload.username, payload.password)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _tokens_for(user)


@router.post("/login", response_model=TokenResponse, summary="Exchange credentials for JWTs")
def login(payload: Credentials, db: Session = Depends(get_db)):
    user = authenticate(db, payload.username, payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    return _tokens_for(user)


@router.post("/refresh", response_model=TokenResponse, summary="Refresh access token")
def refresh(payload: RefreshRequest):
    try:
        claims, pair = refresh_access_token(payload.refresh_token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    return TokenResponse(**pair.model_dump(), user_id=claims.sub)


@router.get("/me", response_model=UserOut)
def me(auth: AuthContext = Depends(require_principal), db: Session = Depends(get_db)):
    user = get_user(db, auth.user_id) if auth.user_id else None
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No account for this principal")
    return UserOut.model_validate(user)
