from .auth import UserService, get_user_service
from .auth_dependency import BearerToken, get_current_username
from .auth_util import (create_access_token, decode_token,
                        generate_password_hash, verify_password)
from .id_generator import (IdGenerationError, SnowflakeGenerator,
                           get_id_generator)
from .problem import ProblemService, get_problem_service
from .submission import SubmissionService, get_submission_service
from .verification import VerificationService, get_verification_service

__all__ = [
    "UserService",
    "get_user_service",
    "BearerToken",
    "get_current_username",
    "create_access_token",
    "decode_token",
    "generate_password_hash",
    "verify_password",
    "IdGenerationError",
    "SnowflakeGenerator",
    "get_id_generator",
    "ProblemService",
    "get_problem_service",
    "SubmissionService",
    "get_submission_service",
    "VerificationService",
    "get_verification_service",
]
