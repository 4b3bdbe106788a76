import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel as PydanticModel
from pydantic import Field as PydanticField
from sqlalchemy import Column, String, Text
from sqlmodel import Field

from online_judge.data.schemas.base import BaseModel


class Problem(BaseModel, table=True):
    """
    Represents a coding problem in the system.
    Its hidden test cases live in the ``test_cases`` table and are
    written in the same transaction as the problem itself.
    """

    __tablename__ = "problems"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(sa_column=Column(String(255), unique=True, nullable=False))
    content: str = Field(sa_column=Column(Text, nullable=False))
    difficulty: str = Field(sa_column=Column(String(20), nullable=False))
    max_runtime: int = Field(nullable=False, description="Time limit in milliseconds.")
    max_memory: int = Field(nullable=False, description="Memory limit in kilobytes.")


class ProblemCreateModel(PydanticModel):
    title: str = PydanticField(..., min_length=1, max_length=255, examples=["Two Sum"])
    content: str
    difficulty: str = PydanticField(..., max_length=20, examples=["easy"])
    max_runtime: int = PydanticField(..., ge=0, examples=[1000])
    max_memory: int = PydanticField(..., ge=0, examples=[65536])
    # Each element should be a JSON string or an object with "input" and "expected";
    # anything else is rejected by the service as a test case format error.
    test_cases: List[Any] = PydanticField(
        default_factory=list,
        examples=[['{"input": "[2,7,11,15]\\n9", "expected": "[0,1]"}']],
    )


class ProblemUpdateModel(PydanticModel):
    title: Optional[str] = None
    content: Optional[str] = None
    difficulty: Optional[str] = None
    max_runtime: Optional[int] = None
    max_memory: Optional[int] = None
    test_cases: Optional[List[Any]] = None


class ProblemTitleRequest(PydanticModel):
    title: str = PydanticField(..., examples=["Two Sum"])


class ProblemBrief(PydanticModel):
    id: uuid.UUID
    title: str
    difficulty: str

    model_config = {"from_attributes": True}


class ProblemResponse(ProblemBrief):
    content: str
    max_runtime: int
    max_memory: int
    created_at: datetime
    updated_at: datetime
    test_case_count: int = 0

    model_config = {"from_attributes": True}
