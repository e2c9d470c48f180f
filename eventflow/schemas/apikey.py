"""API key schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApiKeyCreate(BaseModel):
    """Payload used to issue a key (the raw key is never an input)."""

    name: str
    user_id: int
    days_valid: int | None = Field(default=90, ge=1)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name cannot be blank")
        return value.strip()


class ApiKeyCreateOut(BaseModel):
    """Response of ``POST /apikeys``: the raw key is returned exactly once."""

    id: int
    name: str
    user_id: int
    key: str
    expires_at: datetime | None


class ApiKeyRead(BaseModel):
    id: int
    name: str
    prefix: str
    user_id: int
    is_active: bool
    created_at: datetime
    expires_at: datetime | None
    last_used_at: datetime | None

    model_config = ConfigDict(from_attributes=True)
