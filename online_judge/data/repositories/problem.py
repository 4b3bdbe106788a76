import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from online_judge.config import logger
from online_judge.data.schemas import Problem, ProblemBrief, ProblemResponse, TestCase
from online_judge.errors import DatabaseException, DuplicateEntryException

problem_logger = logger.getChild("problem_repository")


async def count_by_title(db: AsyncSession, title: str) -> int:
    try:
        result = await db.execute(
            select(func.count()).select_from(Problem).where(Problem.title == title)
        )
        return result.scalar_one()
    except SQLAlchemyError as e:
        problem_logger.error(f"Failed to check title {title!r}: {str(e)}")
        raise DatabaseException(detail="Failed to query problems")


async def insert_problem(
    db: AsyncSession, problem: Problem, test_cases: List[TestCase]
) -> Problem:
    """Persist a problem together with all of its test cases in one transaction."""
    try:
        db.add(problem)
        db.add_all(test_cases)
        await db.commit()
        await db.refresh(problem)
        problem_logger.info(
            f"Created problem {problem.id} with {len(test_cases)} test cases"
        )
        return problem
    except IntegrityError as e:
        await db.rollback()
        problem_logger.warning(f"Unique constraint violated for {problem.title!r}: {str(e)}")
        raise DuplicateEntryException(detail="Problem already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        problem_logger.error(f"Failed to create problem {problem.title!r}: {str(e)}")
        raise DatabaseException(detail="Failed to create problem")


async def get_problem(db: AsyncSession, problem_id: uuid.UUID) -> Optional[Problem]:
    try:
        return await db.get(Problem, problem_id)
    except SQLAlchemyError as e:
        problem_logger.error(f"Failed to load problem {problem_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve problem")


async def get_problem_detail(
    db: AsyncSession, problem_id: uuid.UUID
) -> Optional[ProblemResponse]:
    """Problem statement plus the number of hidden test cases."""
    try:
        result = await db.execute(
            select(Problem, func.count(TestCase.id))
            .outerjoin(TestCase, TestCase.problem_id == Problem.id)
            .where(Problem.id == problem_id)
            .group_by(Problem.id)
        )
        row: Optional[Tuple[Problem, int]] = result.first()
    except SQLAlchemyError as e:
        problem_logger.error(f"Failed to load problem {problem_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve problem")
    if row is None:
        return None
    problem, test_case_count = row
    detail = ProblemResponse.model_validate(problem)
    detail.test_case_count = test_case_count
    return detail


async def list_problems(db: AsyncSession, skip: int, limit: int) -> List[ProblemBrief]:
    try:
        result = await db.execute(
            select(Problem).order_by(Problem.created_at.desc()).offset(skip).limit(limit)
        )
        problems = result.scalars().all()
    except SQLAlchemyError as e:
        problem_logger.error(f"Failed to list problems: {str(e)}")
        raise DatabaseException(detail="Failed to list problems")
    problem_logger.info(f"Listed {len(problems)} problems, skip: {skip}, limit: {limit}")
    return [ProblemBrief.model_validate(problem) for problem in problems]


async def get_problem_id(db: AsyncSession, title: str) -> Optional[uuid.UUID]:
    try:
        result = await db.execute(select(Problem.id).where(Problem.title == title))
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        problem_logger.error(f"Failed to look up problem {title!r}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve problem")


async def get_test_cases(db: AsyncSession, problem_id: uuid.UUID) -> List[TestCase]:
    try:
        result = await db.execute(
            select(TestCase).where(TestCase.problem_id == problem_id)
        )
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        problem_logger.error(f"Failed to load test cases for {problem_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve test cases")
