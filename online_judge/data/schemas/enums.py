from enum import Enum, IntEnum


class UserRole(str, Enum):
    """Account roles in the system."""
    USER = "user"
    ADMIN = "admin"


class ResultCode(IntEnum):
    """Status codes returned by the service layer."""
    SUCCESS = 1000
    INVALID_PARAM = 1001

    # Accounts
    EMAIL_ALREADY_EXISTS = 1101
    USERNAME_ALREADY_EXISTS = 1102
    USERNAME_NOT_FOUND = 1103
    USER_NOT_FOUND = 1104
    WRONG_PASSWORD = 1105

    # Verification
    INVALID_EMAIL_FORMAT = 1201
    CODE_EXPIRED = 1202
    CODE_MISMATCH = 1203

    # Problems
    PROBLEM_ALREADY_EXISTS = 1301
    PROBLEM_NOT_FOUND = 1302
    TEST_CASE_FORMAT_ERROR = 1303
    OPERATION_NOT_SUPPORTED = 1304

    # Submissions
    SUBMISSION_NOT_FOUND = 1401

    # Dependency failures
    STORE_ERROR = 1501
    PERSIST_ERROR = 1502
    DELETE_FAILED = 1503
    HASH_ERROR = 1504
    ID_GENERATION_ERROR = 1505
    CACHE_ERROR = 1506
    CACHE_WRITE_ERROR = 1507
    DELIVERY_ERROR = 1508
    CAPTCHA_ERROR = 1509
    JUDGE_ERROR = 1510

    @property
    def message(self) -> str:
        return _MESSAGES.get(self, self.name.replace("_", " ").capitalize())

    @property
    def is_dependency_error(self) -> bool:
        return self in DEPENDENCY_ERRORS


DEPENDENCY_ERRORS = frozenset(
    {
        ResultCode.STORE_ERROR,
        ResultCode.PERSIST_ERROR,
        ResultCode.DELETE_FAILED,
        ResultCode.HASH_ERROR,
        ResultCode.ID_GENERATION_ERROR,
        ResultCode.CACHE_ERROR,
        ResultCode.CACHE_WRITE_ERROR,
        ResultCode.DELIVERY_ERROR,
        ResultCode.CAPTCHA_ERROR,
        ResultCode.JUDGE_ERROR,
    }
)

_MESSAGES = {
    ResultCode.SUCCESS: "Success",
    ResultCode.INVALID_PARAM: "Invalid parameters",
    ResultCode.EMAIL_ALREADY_EXISTS: "Email already exists",
    ResultCode.USERNAME_ALREADY_EXISTS: "Username already exists",
    ResultCode.USERNAME_NOT_FOUND: "Username does not exist",
    ResultCode.USER_NOT_FOUND: "User does not exist",
    ResultCode.WRONG_PASSWORD: "Wrong password",
    ResultCode.INVALID_EMAIL_FORMAT: "Invalid email format",
    ResultCode.CODE_EXPIRED: "Verification code expired",
    ResultCode.CODE_MISMATCH: "Wrong verification code",
    ResultCode.PROBLEM_ALREADY_EXISTS: "Problem already exists",
    ResultCode.PROBLEM_NOT_FOUND: "Problem does not exist",
    ResultCode.TEST_CASE_FORMAT_ERROR: "Test case format error",
    ResultCode.OPERATION_NOT_SUPPORTED: "Operation not supported",
    ResultCode.SUBMISSION_NOT_FOUND: "Submission does not exist",
}
