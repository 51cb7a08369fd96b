"""
Publisher schemas.

Publishers are managed outside the upload pipeline; bulk uploads only
resolve a human-entered name or email to a publisher id.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema


class Publisher(BaseSchema):
    """Publisher roster entry."""
    id: str
    publisher_name: str = Field(..., min_length=1)
    email: Optional[str] = None

    def matches(self, identifier: str) -> bool:
        """Case-insensitive match on name or email."""
        needle = identifier.strip().lower()
        if not needle:
            return False
        if self.email and self.email.strip().lower() == needle:
            return True
        return self.publisher_name.strip().lower() == needle
