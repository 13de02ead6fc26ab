"""
Session state models.

SessionData is what travels inside the encrypted cookie: a snapshot of the
sales record taken at login plus an absolute expiry in Unix milliseconds.
Every field is optional because an absent or cleared session is simply an
instance with nothing set.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class SessionData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sales_id: Optional[str] = None
    sales_code: Optional[str] = None
    sales_name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    is_manager: Optional[bool] = None
    expires_at: Optional[int] = None

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())


class SessionUser(BaseModel):
    """Login snapshot copied into a session (everything except the expiry)."""

    sales_id: str
    sales_code: str
    sales_name: str
    email: str
    department: str
    is_manager: bool
