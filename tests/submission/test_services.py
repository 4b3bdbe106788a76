import uuid

import pytest
from fastapi import status

from online_judge.business.services import SubmissionService, create_access_token
from online_judge.business.services.submission import summarize_results
from online_judge.data.schemas import ResultCode
from online_judge.errors import JudgeException

PROBLEM = {
    "title": "Two Sum",
    "content": "Find two numbers adding up to target.",
    "difficulty": "easy",
    "max_runtime": 2000,
    "max_memory": 65536,
    "test_cases": [
        {"input": "[2,7,11,15]\n9", "expected": "[0,1]"},
        {"input": "[3,2,4]\n6", "expected": "[1,2]"},
    ],
}


def judge_result(status_id, description, time="0.01", memory=1024):
    return {"status": {"id": status_id, "description": description}, "time": time, "memory": memory}


def test_summarize_all_accepted():
    summary = summarize_results([
        judge_result(3, "Accepted", time="0.01", memory=100),
        judge_result(3, "Accepted", time="0.05", memory=300),
    ])

    assert summary == {"status": "Accepted", "passed": 2, "total": 2, "time": 0.05, "memory": 300.0}


def test_summarize_first_failure_wins():
    summary = summarize_results([
        judge_result(3, "Accepted"),
        judge_result(4, "Wrong Answer"),
        judge_result(5, "Time Limit Exceeded", time=None),
    ])

    assert summary["status"] == "Wrong Answer"
    assert summary["passed"] == 1
    assert summary["total"] == 3


def test_summarize_pending():
    summary = summarize_results([judge_result(3, "Accepted"), judge_result(1, "In Queue")])

    assert summary["status"] == "Pending"


async def create_problem(client):
    response = await client.post("/api/v1/problems/", json=PROBLEM)
    return response.json()["data"]["problem_id"]


@pytest.mark.asyncio
async def test_submit_runs_every_test_case(client, judge_client, test_db, registered_user):
    problem_id = await create_problem(client)
    service = SubmissionService(judge_client)

    result = await service.submit(test_db, "alice", uuid.UUID(problem_id), "print(1)", 71)

    assert result.code == ResultCode.SUCCESS
    assert judge_client.submit_code.call_count == 2
    kwargs = judge_client.submit_code.call_args_list[0].kwargs
    assert kwargs["cpu_time_limit"] == 2.0
    assert kwargs["memory_limit"] == 65536
    stdins = {call.kwargs["stdin"] for call in judge_client.submit_code.call_args_list}
    assert stdins == {"[2,7,11,15]\n9", "[3,2,4]\n6"}


@pytest.mark.asyncio
async def test_submit_unknown_problem(judge_client, test_db, registered_user):
    service = SubmissionService(judge_client)

    result = await service.submit(test_db, "alice", uuid.uuid4(), "print(1)", 71)

    assert result.code == ResultCode.PROBLEM_NOT_FOUND
    judge_client.submit_code.assert_not_called()


@pytest.mark.asyncio
async def test_submit_judge_failure(client, judge_client, test_db, registered_user):
    problem_id = await create_problem(client)
    judge_client.submit_code.side_effect = JudgeException(detail="judge down")
    service = SubmissionService(judge_client)

    result = await service.submit(test_db, "alice", uuid.UUID(problem_id), "print(1)", 71)

    assert result.code == ResultCode.JUDGE_ERROR


@pytest.mark.asyncio
async def test_get_result(client, judge_client, test_db, registered_user):
    problem_id = await create_problem(client)
    service = SubmissionService(judge_client)
    submitted = await service.submit(test_db, "alice", uuid.UUID(problem_id), "print(1)", 71)

    result = await service.get_result(test_db, uuid.UUID(submitted.data["submission_id"]))

    assert result.code == ResultCode.SUCCESS
    assert result.data.status == "Accepted"
    assert result.data.passed == result.data.total == 2
    judge_client.get_result.assert_any_call("token-1")


@pytest.mark.asyncio
async def test_get_result_unknown_submission(judge_client, test_db):
    result = await SubmissionService(judge_client).get_result(test_db, uuid.uuid4())

    assert result.code == ResultCode.SUBMISSION_NOT_FOUND


@pytest.mark.asyncio
async def test_submit_route_requires_token(client):
    response = await client.post(
        "/api/v1/submissions/code",
        json={"problem_id": str(uuid.uuid4()), "source_code": "print(1)"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_submit_route_rejects_bad_token(client):
    response = await client.post(
        "/api/v1/submissions/code",
        json={"problem_id": str(uuid.uuid4()), "source_code": "print(1)"},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_submit_and_fetch_through_routes(client, registered_user):
    problem_id = await create_problem(client)
    headers = {"Authorization": f"Bearer {create_access_token('alice')}"}

    response = await client.post(
        "/api/v1/submissions/code",
        json={"problem_id": problem_id, "source_code": "print(1)", "language_id": 71},
        headers=headers,
    )
    assert response.status_code == status.HTTP_202_ACCEPTED
    submission_id = response.json()["data"]["submission_id"]

    response = await client.get(f"/api/v1/submissions/{submission_id}")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["status"] == "Accepted"
    assert data["problem_id"] == problem_id
