import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from online_judge.business.services import (SubmissionService,
                                            get_current_username,
                                            get_submission_service)
from online_judge.data.repositories import get_session
from online_judge.data.schemas import ApiResponse, CodeSubmission
from online_judge.presentation.responses import unwrap

submission_router = APIRouter(prefix="/submissions", tags=["submissions"])


@submission_router.post(
    "/code",
    response_model=ApiResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit code",
    description="Queues the solution on the judge against every hidden test case of the problem.",
)
async def submit_code(
    submission: CodeSubmission,
    username: str = Depends(get_current_username),
    submission_service: SubmissionService = Depends(get_submission_service),
    db: AsyncSession = Depends(get_session),
):
    result = await submission_service.submit(
        db, username, submission.problem_id, submission.source_code, submission.language_id
    )
    return unwrap(result)


@submission_router.get(
    "/{submission_id}",
    response_model=ApiResponse,
    summary="Get submission result",
)
async def get_submission_result(
    submission_id: uuid.UUID,
    submission_service: SubmissionService = Depends(get_submission_service),
    db: AsyncSession = Depends(get_session),
):
    return unwrap(await submission_service.get_result(db, submission_id))
