"""User schemas."""
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from eventflow.models.user import UserRole


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    full_name: str | None = Field(default=None, max_length=200)
    role: UserRole
    department: str | None = Field(default=None, max_length=120)
    is_active: bool = True


class UserRead(BaseModel):
    id: int
    username: str
    email: EmailStr
    full_name: str | None = None
    role: UserRole
    department: str | None = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
