import base64
import random
import secrets
import string
import time
from typing import Callable, Optional

from captcha.image import ImageCaptcha
from fastapi import Depends
from pydantic import EmailStr, TypeAdapter, ValidationError

from online_judge.config import Config, logger
from online_judge.data.repositories import (MailClient, RedisClient,
                                            get_mail_client, get_redis_client)
from online_judge.data.schemas import ResultCode, ServiceResponse
from online_judge.errors import (CacheException, DeliveryException,
                                 VerificationCodeExpired)

verification_logger = logger.getChild("auth.verification")

_email_adapter = TypeAdapter(EmailStr)


def is_valid_email(email: str) -> bool:
    try:
        _email_adapter.validate_python(email)
        return True
    except ValidationError:
        return False


def create_verification_code(length: int = Config.VERIFICATION_CODE_LENGTH) -> str:
    return "".join(secrets.choice(string.digits) for _ in range(length))


def create_picture_answer(length: int = Config.PICTURE_CODE_LENGTH) -> str:
    return "".join(random.choices(string.ascii_uppercase + string.digits, k=length))


class VerificationService:
    """Issues and checks the two one-time challenge kinds.

    Emailed numeric codes are keyed by email address and guard registration,
    login, and email changes. Picture challenges are keyed by username and
    guard the anti-automation gate. The expected answers only ever live in
    the cache.
    """

    def __init__(
        self,
        redis_client: RedisClient,
        mail_client: MailClient,
        clock: Callable[[], float] = time.time,
        single_use: bool = Config.VERIFICATION_CODE_SINGLE_USE,
        captcha: Optional[ImageCaptcha] = None,
    ):
        self.redis_client = redis_client
        self.mail_client = mail_client
        self.clock = clock
        self.single_use = single_use
        self.captcha = captcha or ImageCaptcha()

    async def issue_email_code(self, email: str) -> ResultCode:
        if not is_valid_email(email):
            verification_logger.warning(f"Invalid email format: {email}")
            return ResultCode.INVALID_EMAIL_FORMAT

        code = create_verification_code()
        issued_at = self.clock()

        try:
            await self.mail_client.send_verification_code(email, code)
        except DeliveryException as e:
            verification_logger.error(f"Delivery to {email} failed: {e.detail}")
            return ResultCode.DELIVERY_ERROR

        try:
            await self.redis_client.store_verification_code(email, code, issued_at)
        except CacheException as e:
            verification_logger.error(f"Storing code for {email} failed: {e.detail}")
            return ResultCode.CACHE_WRITE_ERROR

        return ResultCode.SUCCESS

    async def check_email_code(self, email: str, code: str) -> ResultCode:
        try:
            expected = await self.redis_client.get_verification_code(email, self.clock())
        except VerificationCodeExpired:
            verification_logger.info(f"Verification code expired for {email}")
            return ResultCode.CODE_EXPIRED
        except CacheException as e:
            verification_logger.error(f"Reading code for {email} failed: {e.detail}")
            return ResultCode.CACHE_ERROR

        if not secrets.compare_digest(expected.encode(), (code or "").encode()):
            verification_logger.warning(f"Wrong verification code for {email}")
            return ResultCode.CODE_MISMATCH

        if self.single_use:
            try:
                await self.redis_client.delete_verification_code(email)
            except CacheException as e:
                verification_logger.error(f"Consuming code for {email} failed: {e.detail}")
                return ResultCode.CACHE_ERROR
        return ResultCode.SUCCESS

    async def issue_picture_challenge(self, username: str) -> ServiceResponse:
        answer = create_picture_answer()
        try:
            image = self.captcha.generate(answer, format="png")
        except (OSError, ValueError) as e:
            verification_logger.error(f"Captcha rendering failed: {str(e)}")
            return ServiceResponse.fail(ResultCode.CAPTCHA_ERROR)

        try:
            await self.redis_client.store_picture_code(username, answer, self.clock())
        except CacheException as e:
            verification_logger.error(f"Storing picture code for {username} failed: {e.detail}")
            return ServiceResponse.fail(ResultCode.CACHE_WRITE_ERROR)

        encoded = base64.b64encode(image.getvalue()).decode("ascii")
        return ServiceResponse.success(data={"image": f"data:image/png;base64,{encoded}"})

    async def verify_picture_challenge(self, username: str, answer: str) -> bool:
        """Compare ``answer`` with the cached picture challenge for ``username``.

        Raises VerificationCodeExpired or CacheException when the expected
        answer cannot be read.
        """
        try:
            expected = await self.redis_client.get_picture_code(username, self.clock())
        except (VerificationCodeExpired, CacheException) as e:
            verification_logger.error(f"Picture code lookup for {username} failed: {str(e)}")
            raise

        if expected != answer:
            verification_logger.warning(f"Wrong picture code from: {username}")
            return False
        return True


def get_verification_service(
    redis_client: RedisClient = Depends(get_redis_client),
    mail_client: MailClient = Depends(get_mail_client),
) -> VerificationService:
    return VerificationService(redis_client, mail_client)
