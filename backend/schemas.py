from datetime import datetime
from pydantic import BaseModel, ConfigDict


class CategorySchema(BaseModel):
    id: int
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime
    books_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class ProfileSchema(BaseModel):
    """Read view of a profile; credential fields are never part of it."""

    name: str
    email: str
    phone: str = ""
    address: str = ""
    joined_date: datetime
    total_borrows: int
    total_fines: float


class LoginRequest(BaseModel):
    email: str
    password: str
