"""
Pydantic schemas shared by the API, the store gateways and the client.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


# ═══════════════════════════════════════════════════════════════════════════════
# Identity & session
# ═══════════════════════════════════════════════════════════════════════════════


class Credentials(BaseModel):
    """Body of ``/register`` and ``/login``; emptiness is checked by the route."""

    username: str = ""
    password: str = ""

    def is_complete(self) -> bool:
        return bool(self.username.strip()) and bool(self.password)


class UserIdentity(BaseModel):
    """Identity document as stored in the auth collection."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    rev: Optional[str] = Field(default=None, alias="_rev")
    username: str
    password_hash: str = Field(alias="passwordHash")
    salt: str


class TokenClaims(BaseModel):
    user_id: str
    username: str
    issued_at: int
    expires_at: int


# ═══════════════════════════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════════════════════════


class Task(BaseModel):
    """
    A task document.  The store owns ``_id`` and ``_rev``; unknown fields
    are preserved so pass-through updates never drop data.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")
    rev: Optional[str] = Field(default=None, alias="_rev")
    title: str = ""
    description: str = ""
    deadline: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    completed: bool = False

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class TaskStats(BaseModel):
    total: int = 0
    pending: int = 0
    completed: int = 0


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class MessageResponse(BaseModel):
    ok: bool = True
    message: str


class RegisterResponse(MessageResponse):
    id: str

    @computed_field(alias="userId")
    @property
    def user_id(self) -> str:
        return self.id


class MeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    user_id: str = Field(serialization_alias="userId")
