from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from online_judge.data.schemas.enums import UserRole


class UserRegisterModel(BaseModel):
    username: str = Field(..., min_length=1, max_length=50, examples=["alice"])
    password: str = Field(..., min_length=1, max_length=64, examples=["Str0ngP@ss!"])
    email: str = Field(..., max_length=255, examples=["alice@example.com"])
    code: str = Field(..., description="Verification code sent to the email")


class UserLoginModel(UserRegisterModel):
    pass


class UserUpdateModel(BaseModel):
    email: Optional[str] = Field(default="", max_length=255)
    password: Optional[str] = Field(default="", max_length=64)
    code: Optional[str] = Field(
        default="", description="Verification code for the new email"
    )


class EmailCodeRequest(BaseModel):
    email: str = Field(..., examples=["alice@example.com"])


class PictureCodeRequest(BaseModel):
    username: str = Field(..., max_length=50, examples=["alice"])


class PictureCodeCheckRequest(PictureCodeRequest):
    code: str


class UsernameRequest(BaseModel):
    username: str = Field(..., max_length=50, examples=["alice"])


class UserDetail(BaseModel):
    id: int
    username: str
    email: str
    role: UserRole
    created_at: datetime

    model_config = {"from_attributes": True}
