import json
import uuid
from typing import Any, List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from online_judge.config import logger
from online_judge.data.repositories import problem as problem_repository
from online_judge.data.schemas import (Problem, ResultCode, ServiceResponse,
                                       TestCase, TestCasePayload)
from online_judge.errors import DatabaseException, DuplicateEntryException

problem_logger = logger.getChild("problem")


class MalformedTestCase(ValueError):
    """A submitted test case does not decode into ``input`` and ``expected``."""


def decode_test_case(raw: Any) -> TestCasePayload:
    """Decode one submitted test case, given as a JSON string or a mapping."""
    try:
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw)
        return TestCasePayload.model_validate(raw)
    except ValueError as e:
        raise MalformedTestCase(str(e)) from e


class ProblemService:
    @staticmethod
    async def create(
        session: AsyncSession,
        title: str,
        content: str,
        difficulty: str,
        max_runtime: int,
        max_memory: int,
        test_cases: Sequence[Any],
    ) -> ServiceResponse:
        """
        Create a problem together with its hidden test cases.

        Every test case is decoded before the store is touched, so a single
        malformed case rejects the whole request with nothing written.
        """
        if not test_cases:
            problem_logger.error(f"Problem {title!r} submitted without test cases")
            return ServiceResponse.fail(ResultCode.INVALID_PARAM)

        try:
            payloads = [decode_test_case(raw) for raw in test_cases]
        except MalformedTestCase as e:
            problem_logger.error(f"Test case format error for {title!r}: {str(e)}")
            return ServiceResponse.fail(ResultCode.TEST_CASE_FORMAT_ERROR)

        try:
            if await problem_repository.count_by_title(session, title) > 0:
                problem_logger.warning(f"Problem {title!r} already exists")
                return ServiceResponse.fail(ResultCode.PROBLEM_ALREADY_EXISTS)
        except DatabaseException as e:
            problem_logger.error(f"Title check for {title!r} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)

        problem_id = uuid.uuid4()
        problem = Problem(
            id=problem_id,
            title=title,
            content=content,
            difficulty=difficulty,
            max_runtime=max_runtime,
            max_memory=max_memory,
        )
        rows: List[TestCase] = [
            TestCase(
                id=uuid.uuid4(),
                problem_id=problem_id,
                input=payload.input,
                expected=payload.expected,
            )
            for payload in payloads
        ]

        try:
            await problem_repository.insert_problem(session, problem, rows)
        except DuplicateEntryException:
            return ServiceResponse.fail(ResultCode.PROBLEM_ALREADY_EXISTS)
        except DatabaseException as e:
            problem_logger.error(f"Create problem {title!r} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.PERSIST_ERROR)

        return ServiceResponse.success(data={"problem_id": str(problem_id)})

    @staticmethod
    async def update(session: AsyncSession, problem_id: uuid.UUID, **fields) -> ServiceResponse:
        # Partial-update and test case replacement rules are not settled yet.
        problem_logger.warning(f"Rejected update of problem {problem_id}: not supported")
        return ServiceResponse.fail(ResultCode.OPERATION_NOT_SUPPORTED)

    @staticmethod
    async def delete(session: AsyncSession, problem_id: uuid.UUID) -> ServiceResponse:
        # Cascade policy for owned test cases and submissions is not settled yet.
        problem_logger.warning(f"Rejected delete of problem {problem_id}: not supported")
        return ServiceResponse.fail(ResultCode.OPERATION_NOT_SUPPORTED)

    @staticmethod
    async def get_problem_detail(session: AsyncSession, problem_id: uuid.UUID) -> ServiceResponse:
        try:
            detail = await problem_repository.get_problem_detail(session, problem_id)
        except DatabaseException as e:
            problem_logger.error(f"Reading problem {problem_id} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)
        if detail is None:
            return ServiceResponse.fail(ResultCode.PROBLEM_NOT_FOUND)
        return ServiceResponse.success(data=detail)

    @staticmethod
    async def list_problems(session: AsyncSession, skip: int = 0, limit: int = 100) -> ServiceResponse:
        try:
            problems = await problem_repository.list_problems(session, skip, limit)
        except DatabaseException as e:
            problem_logger.error(f"Listing problems failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)
        return ServiceResponse.success(data=problems)

    @staticmethod
    async def get_problem_id(session: AsyncSession, title: str) -> ServiceResponse:
        try:
            problem_id = await problem_repository.get_problem_id(session, title)
        except DatabaseException as e:
            problem_logger.error(f"Looking up problem {title!r} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)
        if problem_id is None:
            return ServiceResponse.fail(ResultCode.PROBLEM_NOT_FOUND)
        return ServiceResponse.success(data={"problem_id": str(problem_id)})


def get_problem_service() -> ProblemService:
    return ProblemService()
