from .base import BaseModel
from .enums import ResultCode, UserRole
from .user import User
from .problem import (
    Problem,
    ProblemBrief,
    ProblemCreateModel,
    ProblemResponse,
    ProblemTitleRequest,
    ProblemUpdateModel,
)
from .testcase import TestCase, TestCasePayload
from .submission import CodeSubmission, Submission, SubmissionResult
from .response import ApiResponse, ServiceResponse
from .auth import (
    EmailCodeRequest,
    PictureCodeCheckRequest,
    PictureCodeRequest,
    UserDetail,
    UserLoginModel,
    UsernameRequest,
    UserRegisterModel,
    UserUpdateModel,
)

__all__ = [
    "BaseModel",
    "ResultCode",
    "UserRole",
    "User",
    "Problem",
    "ProblemBrief",
    "ProblemCreateModel",
    "ProblemResponse",
    "ProblemTitleRequest",
    "ProblemUpdateModel",
    "TestCase",
    "TestCasePayload",
    "CodeSubmission",
    "Submission",
    "SubmissionResult",
    "ApiResponse",
    "ServiceResponse",
    "EmailCodeRequest",
    "PictureCodeCheckRequest",
    "PictureCodeRequest",
    "UserDetail",
    "UserLoginModel",
    "UsernameRequest",
    "UserRegisterModel",
    "UserUpdateModel",
]
