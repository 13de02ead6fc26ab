"""Sales master records (the credential records used at login)"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SalesRecord(BaseModel):
    """Sales representative or manager account"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    sales_code: str
    sales_name: str
    email: str
    password_hash: str
    department: str
    is_manager: bool = False
    manager_id: Optional[str] = None
    created_at: str = Field(default_factory=_utcnow_iso)  # ISO format timestamp
    updated_at: str = Field(default_factory=_utcnow_iso)
