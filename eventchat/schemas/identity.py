from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Identity(BaseModel):
    """Caller identity derived from a verified bearer credential. Never persisted."""

    subject_id: str
    display_name: Optional[str] = None
    picture_url: Optional[str] = None
    email: Optional[str] = None
