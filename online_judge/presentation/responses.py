from typing import Any, Optional

from fastapi import status

from online_judge.data.schemas import ApiResponse, ResultCode, ServiceResponse
from online_judge.errors import AppException

STATUS_BY_CODE = {
    ResultCode.INVALID_PARAM: status.HTTP_400_BAD_REQUEST,
    ResultCode.INVALID_EMAIL_FORMAT: status.HTTP_400_BAD_REQUEST,
    ResultCode.CODE_EXPIRED: status.HTTP_400_BAD_REQUEST,
    ResultCode.CODE_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ResultCode.TEST_CASE_FORMAT_ERROR: status.HTTP_400_BAD_REQUEST,
    ResultCode.WRONG_PASSWORD: status.HTTP_401_UNAUTHORIZED,
    ResultCode.USERNAME_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ResultCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ResultCode.PROBLEM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ResultCode.SUBMISSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ResultCode.EMAIL_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ResultCode.USERNAME_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ResultCode.PROBLEM_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ResultCode.OPERATION_NOT_SUPPORTED: status.HTTP_501_NOT_IMPLEMENTED,
}


def raise_for_code(code: ResultCode) -> None:
    """Turn a failed status into an AppException.

    Dependency failures collapse into one generic internal error so that
    storage details never reach the client.
    """
    if code == ResultCode.SUCCESS:
        return
    if code.is_dependency_error:
        raise AppException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )
    raise AppException(
        status_code=STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST),
        detail=code.message,
        code=code,
    )


def success(data: Optional[Any] = None) -> ApiResponse:
    return ApiResponse(code=int(ResultCode.SUCCESS), msg=ResultCode.SUCCESS.message, data=data)


def unwrap(result: ServiceResponse) -> ApiResponse:
    raise_for_code(result.code)
    if result.token is not None:
        return success({"token": result.token})
    return success(result.data)
