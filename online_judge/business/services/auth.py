from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from online_judge.business.services import auth_util
from online_judge.business.services.id_generator import (IdGenerationError,
                                                         SnowflakeGenerator,
                                                         get_id_generator)
from online_judge.business.services.verification import (
    VerificationService, get_verification_service)
from online_judge.config import logger
from online_judge.data.repositories import user_repository
from online_judge.data.schemas import ResultCode, ServiceResponse
from online_judge.errors import DatabaseException, DuplicateEntryException

auth_logger = logger.getChild("auth")


class UserService:
    """Registration, login and account maintenance.

    Every operation runs its checks strictly in order and stops at the first
    failing one, returning a ServiceResponse whose code names that failure.
    """

    def __init__(
        self,
        verification_service: VerificationService,
        id_generator: SnowflakeGenerator,
    ):
        self.verification_service = verification_service
        self.id_generator = id_generator

    async def _classify_duplicate(
        self, session: AsyncSession, username: str, email: str
    ) -> ResultCode:
        # Insert lost a race with a concurrent registration; name the field that collided.
        # Anything else (e.g. two nodes sharing a snowflake node id) is a persistence fault.
        try:
            if await user_repository.count_by_email(session, email) > 0:
                return ResultCode.EMAIL_ALREADY_EXISTS
            if await user_repository.count_by_username(session, username) > 0:
                return ResultCode.USERNAME_ALREADY_EXISTS
        except DatabaseException:
            return ResultCode.PERSIST_ERROR
        return ResultCode.PERSIST_ERROR

    async def register(
        self, session: AsyncSession, username: str, password: str, email: str, code: str
    ) -> ServiceResponse:
        try:
            if await user_repository.count_by_email(session, email) > 0:
                auth_logger.warning(f"Email {email} already exists")
                return ServiceResponse.fail(ResultCode.EMAIL_ALREADY_EXISTS)
            if await user_repository.count_by_username(session, username) > 0:
                auth_logger.warning(f"Username {username} already exists")
                return ServiceResponse.fail(ResultCode.USERNAME_ALREADY_EXISTS)
        except DatabaseException as e:
            auth_logger.error(f"Uniqueness check failed for {username}: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)

        code_status = await self.verification_service.check_email_code(email, code)
        if code_status != ResultCode.SUCCESS:
            return ServiceResponse.fail(code_status)

        try:
            user_id = self.id_generator.next_id()
        except IdGenerationError as e:
            auth_logger.error(f"Generating user id failed: {str(e)}")
            return ServiceResponse.fail(ResultCode.ID_GENERATION_ERROR)

        try:
            password_hash = auth_util.generate_password_hash(password)
        except (ValueError, TypeError) as e:
            auth_logger.error(f"Hashing password failed: {str(e)}")
            return ServiceResponse.fail(ResultCode.HASH_ERROR)

        try:
            await user_repository.insert_user(session, user_id, username, password_hash, email)
        except DuplicateEntryException:
            status = await self._classify_duplicate(session, username, email)
            auth_logger.warning(f"Insert of {username} rejected by store: {status.name}")
            return ServiceResponse.fail(status)
        except DatabaseException as e:
            auth_logger.error(f"Insert new user {username} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.PERSIST_ERROR)

        auth_logger.info(f"User registered: {username} (ID: {user_id})")
        return ServiceResponse.success(token=auth_util.create_access_token(username))

    async def login(
        self, session: AsyncSession, username: str, password: str, email: str, code: str
    ) -> ServiceResponse:
        code_status = await self.verification_service.check_email_code(email, code)
        if code_status != ResultCode.SUCCESS:
            return ServiceResponse.fail(code_status)

        try:
            if await user_repository.count_by_username(session, username) == 0:
                auth_logger.warning(f"Do not have this username: {username}")
                return ServiceResponse.fail(ResultCode.USERNAME_NOT_FOUND)
            password_hash = await user_repository.get_password_hash(session, username)
        except DatabaseException as e:
            auth_logger.error(f"Credential lookup for {username} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)
        if password_hash is None:
            # Deleted between the existence check and the read
            return ServiceResponse.fail(ResultCode.USERNAME_NOT_FOUND)

        try:
            password_ok = auth_util.verify_password(password, password_hash)
        except (ValueError, TypeError) as e:
            auth_logger.error(f"Stored hash for {username} is unusable: {str(e)}")
            return ServiceResponse.fail(ResultCode.HASH_ERROR)

        if not password_ok:
            auth_logger.warning(f"Wrong password for {username}")
            return ServiceResponse.fail(ResultCode.WRONG_PASSWORD)

        auth_logger.info(f"User logged in: {username}")
        return ServiceResponse.success(token=auth_util.create_access_token(username))

    async def _require_user(self, session: AsyncSession, user_id: int) -> ResultCode:
        try:
            if await user_repository.count_by_id(session, user_id) == 0:
                auth_logger.warning(f"Do not have this user_id: {user_id}")
                return ResultCode.USER_NOT_FOUND
        except DatabaseException as e:
            auth_logger.error(f"User lookup {user_id} failed: {e.detail}")
            return ResultCode.STORE_ERROR
        return ResultCode.SUCCESS

    async def get_detail(self, session: AsyncSession, user_id: int) -> ServiceResponse:
        status = await self._require_user(session, user_id)
        if status != ResultCode.SUCCESS:
            return ServiceResponse.fail(status)

        try:
            detail = await user_repository.get_user_detail(session, user_id)
        except DatabaseException as e:
            auth_logger.error(f"Reading detail of user {user_id} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)
        if detail is None:
            # Deleted between the existence check and the read
            return ServiceResponse.fail(ResultCode.USER_NOT_FOUND)
        return ServiceResponse.success(data=detail)

    async def delete(self, session: AsyncSession, user_id: int) -> ServiceResponse:
        status = await self._require_user(session, user_id)
        if status != ResultCode.SUCCESS:
            return ServiceResponse.fail(status)

        try:
            await user_repository.delete_user(session, user_id)
        except DatabaseException as e:
            auth_logger.error(f"Delete user {user_id} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.DELETE_FAILED)

        auth_logger.info(f"User deleted: ID {user_id}")
        return ServiceResponse.success()

    async def update_detail(
        self,
        session: AsyncSession,
        user_id: int,
        email: Optional[str] = "",
        password: Optional[str] = "",
        code: Optional[str] = "",
    ) -> ServiceResponse:
        email = email or ""
        password = password or ""

        status = await self._require_user(session, user_id)
        if status != ResultCode.SUCCESS:
            return ServiceResponse.fail(status)

        if email:
            code_status = await self.verification_service.check_email_code(email, code or "")
            if code_status != ResultCode.SUCCESS:
                return ServiceResponse.fail(code_status)

        password_hash = ""
        if password:
            try:
                password_hash = auth_util.generate_password_hash(password)
            except (ValueError, TypeError) as e:
                auth_logger.error(f"Hashing password failed: {str(e)}")
                return ServiceResponse.fail(ResultCode.HASH_ERROR)

        try:
            await user_repository.update_user_detail(session, user_id, email, password_hash)
        except DuplicateEntryException:
            auth_logger.warning(f"Email {email} already taken, user {user_id} not updated")
            return ServiceResponse.fail(ResultCode.EMAIL_ALREADY_EXISTS)
        except DatabaseException as e:
            auth_logger.error(f"Db update userID {user_id} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)

        return ServiceResponse.success()

    async def get_user_id(self, session: AsyncSession, username: str) -> ServiceResponse:
        try:
            user_id = await user_repository.get_user_id(session, username)
        except DatabaseException as e:
            auth_logger.error(f"GetUserID {username} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.STORE_ERROR)
        if user_id is None:
            return ServiceResponse.fail(ResultCode.USERNAME_NOT_FOUND)
        return ServiceResponse.success(data={"user_id": user_id})


def get_user_service(
    verification_service: VerificationService = Depends(get_verification_service),
    id_generator: SnowflakeGenerator = Depends(get_id_generator),
) -> UserService:
    return UserService(verification_service, id_generator)
