# digishop/models/profile.py
from typing import Optional
from .base import TimeStampedModel

class Profile(TimeStampedModel):
    """Public profile mirroring an auth identity"""
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    # Only a backend operator flips this flag
    is_admin: bool = False

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
