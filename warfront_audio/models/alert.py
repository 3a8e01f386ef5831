"""
Pydantic model for a transient combat alert.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Alert(BaseModel):
    """An alert raised when one country attacks another. Never persisted."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    attacker: str
    defender: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_active: bool = True

    class Config:
        """Pydantic model configuration."""

        frozen = True
        str_strip_whitespace = True

    @property
    def message(self) -> str:
        return f"{self.attacker} attacked {self.defender}"
