from __future__ import annotations

from pydantic import BaseModel, Field

from .common import CamelModel


class Credentials(BaseModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.@-]+$")
    # bcrypt ignores anything past 72 bytes
    password: str = Field(..., min_length=8, max_length=64)

    model_config = {
        "json_schema_extra": {
            "example": {"username": "faster", "password": "correct-horse"}
        },
    }


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: str

    model_config = {
        "json_schema_extra": {
            "example": {
                "access_token": "<jwt>",
                "refresh_token": "<jwt>",
                "token_type": "bearer",
                "expires_in": 3600,
                "user_id": "3f2a9c1e8b7d4e0f9a6b5c4d3e2f1a0b",
            }
        }
    }


class RefreshRequest(BaseModel):
    refresh_token: str

    model_config = {
        "json_schema_extra": {
            "example": {"refresh_token": "<jwt>"}
        }
    }


class UserOut(CamelModel):
    id: str
    username: str
    created_at: str
