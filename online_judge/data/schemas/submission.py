import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import JSON, BigInteger, Column
from sqlmodel import Field, SQLModel

from online_judge.data.schemas.base import utc_now


class Submission(SQLModel, table=True):
    __tablename__ = "submissions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: int = Field(sa_column=Column(BigInteger, index=True, nullable=False))
    problem_id: uuid.UUID = Field(foreign_key="problems.id", index=True)
    language_id: int
    tokens: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utc_now)


class CodeSubmission(BaseModel):
    problem_id: uuid.UUID
    source_code: str
    language_id: int = 71


class SubmissionResult(BaseModel):
    id: uuid.UUID
    problem_id: uuid.UUID
    language_id: int
    status: str
    passed: int
    total: int
    time: Optional[float] = None
    memory: Optional[float] = None
    created_at: datetime
