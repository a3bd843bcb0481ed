from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Actor(BaseModel):
    """The authenticated user as reported by the store's auth endpoint."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    email: str = Field(min_length=1)
    full_name: str | None = None
    role: str = "user"
    is_manager: bool | None = False

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
