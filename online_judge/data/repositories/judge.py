from typing import Any, Dict, Optional

import requests

from online_judge.config import Config, logger
from online_judge.errors import JudgeException

judge_logger = logger.getChild("judge")


class Judge0Client:
    def __init__(self, base_url: str, auth_token: str):
        self.base_url = base_url.rstrip("/")
        self.headers = {"X-Auth-Token": auth_token}

    def submit_code(
            self,
            source_code: str,
            language_id: int,
            stdin: Optional[str] = "",
            expected_output: Optional[str] = None,
            cpu_time_limit: Optional[float] = None,
            memory_limit: Optional[int] = None,
    ) -> str:
        payload: Dict[str, Any] = {
            "source_code": source_code,
            "language_id": language_id,
            "stdin": stdin,
            "redirect_stderr_to_stdout": True,
        }
        if expected_output is not None:
            payload["expected_output"] = expected_output
        if cpu_time_limit is not None:
            payload["cpu_time_limit"] = cpu_time_limit
        if memory_limit is not None:
            payload["memory_limit"] = memory_limit
        try:
            response = requests.post(
                f"{self.base_url}/submissions",
                headers=self.headers,
                json=payload,
                timeout=10,
            )
            response.raise_for_status()
            token = response.json().get("token")
        except (requests.RequestException, ValueError) as e:
            judge_logger.error(f"Judge0 submission failed: {str(e)}")
            raise JudgeException(detail=f"Judge0 error: {str(e)}")
        if not token:
            raise JudgeException(detail="Judge0 returned no submission token")
        return token

    def get_result(self, token: str) -> Dict[str, Any]:
        try:
            response = requests.get(
                f"{self.base_url}/submissions/{token}",
                headers=self.headers,
                timeout=10,
                params={"fields": "status,time,memory,stdout,stderr,compile_output"},
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            judge_logger.error(f"Judge0 result lookup failed for {token}: {str(e)}")
            raise JudgeException(detail=f"Judge0 error: {str(e)}")


judge_client = Judge0Client(Config.JUDGE0_URL, Config.JUDGE0_AUTH_TOKEN)


def get_judge_client() -> Judge0Client:
    return judge_client
