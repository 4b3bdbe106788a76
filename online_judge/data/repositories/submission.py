import uuid
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from online_judge.config import logger
from online_judge.data.schemas import Submission
from online_judge.errors import DatabaseException

submission_logger = logger.getChild("submission_repository")


async def save_submission(
    db: AsyncSession,
    user_id: int,
    problem_id: uuid.UUID,
    language_id: int,
    tokens: List[str],
) -> Submission:
    submission = Submission(
        user_id=user_id, problem_id=problem_id, language_id=language_id, tokens=tokens
    )
    try:
        db.add(submission)
        await db.commit()
        await db.refresh(submission)
        return submission
    except SQLAlchemyError as e:
        await db.rollback()
        submission_logger.error(f"Error saving submission for user {user_id}: {str(e)}")
        raise DatabaseException(detail="Error saving submission to the database")


async def get_submission(db: AsyncSession, submission_id: uuid.UUID) -> Optional[Submission]:
    try:
        return await db.get(Submission, submission_id)
    except SQLAlchemyError as e:
        submission_logger.error(f"Error fetching submission {submission_id}: {str(e)}")
        raise DatabaseException(detail="Error fetching submission from database")
