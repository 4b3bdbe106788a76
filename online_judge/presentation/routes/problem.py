import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from online_judge.business.services import ProblemService, get_problem_service
from online_judge.config import logger
from online_judge.data.repositories import get_session
from online_judge.data.schemas import (ApiResponse, ProblemCreateModel,
                                       ProblemTitleRequest, ProblemUpdateModel)
from online_judge.presentation.responses import unwrap

problem_logger = logger.getChild("problem")
problem_router = APIRouter(prefix="/problems", tags=["problems"])


@problem_router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a problem",
    description="Creates a problem together with its hidden test cases in one transaction."
)
async def create_problem(
    problem_data: ProblemCreateModel,
    problem_service: ProblemService = Depends(get_problem_service),
    db: AsyncSession = Depends(get_session),
):
    problem_logger.info(
        f"Creating problem {problem_data.title!r} with {len(problem_data.test_cases)} test cases"
    )
    result = await problem_service.create(
        db,
        problem_data.title,
        problem_data.content,
        problem_data.difficulty,
        problem_data.max_runtime,
        problem_data.max_memory,
        problem_data.test_cases,
    )
    return unwrap(result)


@problem_router.get(
    "/",
    response_model=ApiResponse,
    summary="List problems",
    description="Lists problems with pagination, newest first."
)
async def list_problems(
    skip: int = 0,
    limit: int = 100,
    problem_service: ProblemService = Depends(get_problem_service),
    db: AsyncSession = Depends(get_session),
):
    problem_logger.info(f"Listing problems with skip: {skip}, limit: {limit}")
    return unwrap(await problem_service.list_problems(db, skip, limit))


@problem_router.post(
    "/id",
    response_model=ApiResponse,
    summary="Look up a problem id by title",
)
async def get_problem_id(
    request_data: ProblemTitleRequest,
    problem_service: ProblemService = Depends(get_problem_service),
    db: AsyncSession = Depends(get_session),
):
    return unwrap(await problem_service.get_problem_id(db, request_data.title))


@problem_router.get(
    "/{problem_id}",
    response_model=ApiResponse,
    summary="Get a problem",
    description="Retrieves a problem statement by its ID. Test cases stay hidden."
)
async def get_problem(
    problem_id: uuid.UUID,
    problem_service: ProblemService = Depends(get_problem_service),
    db: AsyncSession = Depends(get_session),
):
    problem_logger.info(f"Fetching problem ID: {problem_id}")
    return unwrap(await problem_service.get_problem_detail(db, problem_id))


@problem_router.put(
    "/{problem_id}",
    response_model=ApiResponse,
    summary="Update a problem",
)
async def update_problem(
    problem_id: uuid.UUID,
    problem_update: ProblemUpdateModel,
    problem_service: ProblemService = Depends(get_problem_service),
    db: AsyncSession = Depends(get_session),
):
    problem_logger.info(f"Updating problem ID: {problem_id}")
    update_data = problem_update.model_dump(exclude_unset=True)
    return unwrap(await problem_service.update(db, problem_id, **update_data))


@problem_router.delete(
    "/{problem_id}",
    response_model=ApiResponse,
    summary="Delete a problem",
)
async def delete_problem(
    problem_id: uuid.UUID,
    problem_service: ProblemService = Depends(get_problem_service),
    db: AsyncSession = Depends(get_session),
):
    problem_logger.info(f"Deleting problem ID: {problem_id}")
    return unwrap(await problem_service.delete(db, problem_id))
