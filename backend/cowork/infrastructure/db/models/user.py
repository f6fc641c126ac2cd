"""
User SQLModel

Mirror of the managed ``users`` table. Rows are created by the auth
provider's signup flow; this service only reads them.
"""

from typing import Optional

from sqlmodel import Field, SQLModel

from cowork.domain.models import UserRole
from cowork.infrastructure.db.models.base import BaseModel


class UserBase(SQLModel):
    name: str = Field(..., max_length=200)
    email: str = Field(..., max_length=320, index=True)
    whatsapp: Optional[str] = Field(default=None, max_length=50)
    role: str = Field(default=UserRole.CUSTOMER.value, index=True)


class User(BaseModel, UserBase, table=True):
    """Person known to the panel: customer, staff member or admin."""

    __tablename__ = "users"
