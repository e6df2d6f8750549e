from typing import Optional

from pydantic import Field

from .base import BaseSchema


class UserCreate(BaseSchema):
    """Anonymous user registration"""
    name: Optional[str] = Field(default=None, max_length=100)


class UserResponse(BaseSchema):
    id: str
    name: str
