from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from online_judge.business.services import (UserService, VerificationService,
                                            get_user_service,
                                            get_verification_service)
from online_judge.config import logger
from online_judge.data.repositories import get_session
from online_judge.data.schemas import (ApiResponse, EmailCodeRequest,
                                       PictureCodeCheckRequest,
                                       PictureCodeRequest, ResultCode,
                                       UserLoginModel, UsernameRequest,
                                       UserRegisterModel)
from online_judge.errors import CacheException, VerificationCodeExpired
from online_judge.presentation.responses import raise_for_code, success, unwrap

auth_logger = logger.getChild("auth")
auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post(
    "/register",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Creates a new account after checking the emailed verification code and returns a bearer token.",
)
async def register(
    user_data: UserRegisterModel,
    user_service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_session),
):
    auth_logger.info(f"Registration attempt for username: {user_data.username}")
    result = await user_service.register(
        session, user_data.username, user_data.password, user_data.email, user_data.code
    )
    return unwrap(result)


@auth_router.post(
    "/login",
    response_model=ApiResponse,
    summary="Log in a user",
    description="Checks the emailed verification code and the password, then returns a bearer token.",
)
async def login(
    login_data: UserLoginModel,
    user_service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_session),
):
    auth_logger.info(f"Login attempt for username: {login_data.username}")
    result = await user_service.login(
        session, login_data.username, login_data.password, login_data.email, login_data.code
    )
    return unwrap(result)


@auth_router.post(
    "/send-email-code",
    response_model=ApiResponse,
    summary="Send an email verification code",
)
async def send_email_code(
    request_data: EmailCodeRequest,
    verification_service: VerificationService = Depends(get_verification_service),
):
    code = await verification_service.issue_email_code(request_data.email)
    raise_for_code(code)
    return success()


@auth_router.post(
    "/send-code",
    response_model=ApiResponse,
    summary="Issue a picture challenge",
    description="Returns a base64 PNG captcha; the answer is kept server-side under the username.",
)
async def send_picture_code(
    request_data: PictureCodeRequest,
    verification_service: VerificationService = Depends(get_verification_service),
):
    result = await verification_service.issue_picture_challenge(request_data.username)
    return unwrap(result)


@auth_router.post(
    "/check-picture-code",
    response_model=ApiResponse,
    summary="Check a picture challenge answer",
)
async def check_picture_code(
    request_data: PictureCodeCheckRequest,
    verification_service: VerificationService = Depends(get_verification_service),
):
    try:
        ok = await verification_service.verify_picture_challenge(
            request_data.username, request_data.code
        )
    except VerificationCodeExpired:
        raise_for_code(ResultCode.CODE_EXPIRED)
    except CacheException:
        raise_for_code(ResultCode.CACHE_ERROR)
    if not ok:
        raise_for_code(ResultCode.CODE_MISMATCH)
    return success()


@auth_router.post(
    "/user-id",
    response_model=ApiResponse,
    summary="Look up a user id by username",
)
async def get_user_id(
    request_data: UsernameRequest,
    user_service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_session),
):
    result = await user_service.get_user_id(session, request_data.username)
    return unwrap(result)
