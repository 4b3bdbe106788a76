from sqlalchemy import BigInteger, Column, Enum, String
from sqlmodel import Field

from online_judge.data.schemas.base import BaseModel
from online_judge.data.schemas.enums import UserRole


class User(BaseModel, table=True):
    """Database model for a user account."""

    __tablename__ = "users"

    id: int = Field(
        sa_column=Column(BigInteger, primary_key=True, autoincrement=False),
        description="Snowflake identifier, assigned once at registration.",
    )
    username: str = Field(
        sa_column=Column(String(50), unique=True, nullable=False),
        description="Unique username for the user.",
    )
    email: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False),
        description="Unique email address for the user.",
    )
    password_hash: str = Field(
        sa_column=Column(String(256), nullable=False),
        exclude=True,
        description="Hashed user password.",
    )
    role: UserRole = Field(
        default=UserRole.USER,
        sa_column=Column(Enum(UserRole), default=UserRole.USER, nullable=False),
    )

    def __repr__(self):
        return f"<User {self.username} ({self.role.value})>"
