import asyncio
import uuid
from typing import Any, Dict, List

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from online_judge.config import logger
from online_judge.data.repositories import Judge0Client, get_judge_client
from online_judge.data.repositories import problem as problem_repository
from online_judge.data.repositories import submission as submission_repository
from online_judge.data.repositories import user_repository
from online_judge.data.schemas import ResultCode, ServiceResponse, SubmissionResult
from online_judge.errors import DatabaseException, JudgeException

# Create a module-specific logger
submission_logger = logger.getChild("submission")

# Judge0 status ids
IN_QUEUE = 1
PROCESSING = 2
ACCEPTED = 3


def summarize_results(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Fold per-test-case judge results into one verdict."""
    status_ids = [(result.get("status") or {}).get("id") for result in results]
    passed = sum(1 for status_id in status_ids if status_id == ACCEPTED)

    if any(status_id in (IN_QUEUE, PROCESSING) for status_id in status_ids):
        verdict = "Pending"
    elif passed == len(results):
        verdict = "Accepted"
    else:
        failing = next(
            result for result in results
            if (result.get("status") or {}).get("id") != ACCEPTED
        )
        verdict = (failing.get("status") or {}).get("description", "Rejected")

    times = [float(r["time"]) for r in results if r.get("time") is not None]
    memories = [float(r["memory"]) for r in results if r.get("memory") is not None]
    return {
        "status": verdict,
        "passed": passed,
        "total": len(results),
        "time": max(times) if times else None,
        "memory": max(memories) if memories else None,
    }


class SubmissionService:
    def __init__(self, judge_client: Judge0Client):
        self.judge_client = judge_client

    async def submit(
        self,
        session: AsyncSession,
        username: str,
        problem_id: uuid.UUID,
        source_code: str,
        language_id: int,
    ) -> ServiceResponse:
        """
        Send a solution to the judge, one run per hidden test case.

        Args:
            session: Database session
            username: Owner of the submission (from the bearer token)
            problem_id: The problem being solved
            source_code: The solution code
            language_id: Judge0 language id

        Returns:
            ServiceResponse carrying the new submission id
        """
        submission_logger.info(
            f"Solution submission: Problem ID {problem_id}, User {username}, Language: {language_id}"
        )
        try:
            user_id = await user_repository.get_user_id(session, username)
            if user_id is None:
                return ServiceResponse.fail(ResultCode.USERNAME_NOT_FOUND)
            problem = await problem_repository.get_problem(session, problem_id)
            if problem is None:
                return ServiceResponse.fail(ResultCode.PROBLEM_NOT_FOUND)
            test_cases = await problem_repository.get_test_cases(session, problem_id)
        except DatabaseException as e:
            submission_logger.error(f"Loading submission context failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)

        tokens = []
        try:
            for test_case in test_cases:
                token = await asyncio.to_thread(
                    self.judge_client.submit_code,
                    source_code,
                    language_id,
                    stdin=test_case.input,
                    expected_output=test_case.expected,
                    cpu_time_limit=problem.max_runtime / 1000,
                    memory_limit=problem.max_memory,
                )
                tokens.append(token)
        except JudgeException as e:
            submission_logger.error(f"Judge rejected submission for {problem_id}: {e.detail}")
            return ServiceResponse.fail(ResultCode.JUDGE_ERROR)

        try:
            submission = await submission_repository.save_submission(
                session, user_id, problem_id, language_id, tokens
            )
        except DatabaseException as e:
            submission_logger.error(f"Saving submission failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.PERSIST_ERROR)

        return ServiceResponse.success(data={"submission_id": str(submission.id)})

    async def get_result(self, session: AsyncSession, submission_id: uuid.UUID) -> ServiceResponse:
        try:
            submission = await submission_repository.get_submission(session, submission_id)
        except DatabaseException as e:
            submission_logger.error(f"Loading submission {submission_id} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)
        if submission is None:
            return ServiceResponse.fail(ResultCode.SUBMISSION_NOT_FOUND)

        try:
            results = [
                await asyncio.to_thread(self.judge_client.get_result, token)
                for token in submission.tokens
            ]
        except JudgeException as e:
            submission_logger.error(f"Fetching results for {submission_id} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.JUDGE_ERROR)

        return ServiceResponse.success(
            data=SubmissionResult(
                id=submission.id,
                problem_id=submission.problem_id,
                language_id=submission.language_id,
                created_at=submission.created_at,
                **summarize_results(results),
            )
        )


def get_submission_service(
    judge_client: Judge0Client = Depends(get_judge_client),
) -> SubmissionService:
    return SubmissionService(judge_client)
