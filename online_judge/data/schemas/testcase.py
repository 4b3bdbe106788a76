import uuid

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


class TestCase(SQLModel, table=True):
    """A hidden test case, exclusively owned by one problem."""

    __tablename__ = "test_cases"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    problem_id: uuid.UUID = Field(foreign_key="problems.id", index=True, nullable=False)
    input: str = Field(sa_column=Column(Text, nullable=False))
    expected: str = Field(sa_column=Column(Text, nullable=False))


class TestCasePayload(BaseModel):
    """Schema a submitted test case must decode into."""

    model_config = ConfigDict(extra="forbid", strict=True)

    input: str = PydanticField(..., min_length=1)
    expected: str = PydanticField(..., min_length=1)
