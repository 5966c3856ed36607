"""Pydantic schemas for users and credentials.

Learn: Request fields are Optional so that a missing name/email/password
reaches UserService, which answers with one readable message
("Please enter all fields") instead of a per-field validation dump.

No response schema has a password field. That's the only guarantee
that the hash never leaves the server, so keep it that way.
"""

import uuid
from typing import Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Partial update — empty or omitted fields keep their stored value."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str

    model_config = {"from_attributes": True}


class AuthResponse(UserRead):
    """Returned by signup and login — the user plus a fresh token."""
    token: str
