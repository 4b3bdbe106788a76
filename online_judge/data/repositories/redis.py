import json
from typing import Any, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from online_judge.config import Config, logger
from online_judge.errors import CacheException, VerificationCodeExpired

cache_logger = logger.getChild("cache")

EMAIL_CODE_PREFIX = "email_code"
PICTURE_CODE_PREFIX = "picture_code"


class RedisClient:
    """Async Redis client holding the ephemeral verification challenges.

    Email codes and picture answers live under disjoint key prefixes. Each
    value records its issue timestamp; a value older than its lifetime is
    treated as expired even if Redis has not evicted it yet.
    """

    def __init__(self, redis: Optional[Redis] = None):
        self.redis = redis
        self.email_code_expiry = Config.VERIFICATION_CODE_EXPIRY
        self.picture_code_expiry = Config.PICTURE_CODE_EXPIRY

    async def connect(self):
        if self.redis is None:
            try:
                self.redis = Redis(
                    host=Config.REDIS_HOST,
                    port=Config.REDIS_PORT,
                    db=0,
                    password=Config.REDIS_PASSWORD,
                    decode_responses=True,
                )
                await self.redis.ping()
            except RedisError as e:
                self.redis = None
                raise CacheException(detail=f"Redis connection error: {str(e)}")

    async def close(self):
        if self.redis:
            await self.redis.close()

    async def get(self, name: str) -> Any:
        await self.connect()
        try:
            return await self.redis.get(name)
        except RedisError as e:
            raise CacheException(detail=f"Redis operation failed: {str(e)}")

    async def set(self, name: str, value: str, ex: Optional[int] = None) -> None:
        await self.connect()
        try:
            await self.redis.set(name=name, value=value, ex=ex)
        except RedisError as e:
            raise CacheException(detail=f"Redis operation failed: {str(e)}")

    async def delete(self, name: str) -> int:
        await self.connect()
        try:
            return await self.redis.delete(name)
        except RedisError as e:
            raise CacheException(detail=f"Redis operation failed: {str(e)}")

    async def _store_challenge(
        self, key: str, answer: str, issued_at: float, lifetime: int
    ) -> None:
        payload = json.dumps({"code": answer, "issued_at": issued_at})
        await self.set(key, payload, ex=lifetime)

    async def _load_challenge(self, key: str, now: float, lifetime: int) -> str:
        raw = await self.get(key)
        if raw is None:
            raise VerificationCodeExpired(f"No live challenge for {key}")
        try:
            payload = json.loads(raw)
            answer = payload["code"]
            issued_at = float(payload["issued_at"])
        except (ValueError, KeyError, TypeError) as e:
            cache_logger.error(f"Malformed challenge under {key}: {str(e)}")
            raise CacheException(detail="Malformed challenge value")
        if now - issued_at > lifetime:
            raise VerificationCodeExpired(f"Challenge for {key} expired")
        return answer

    async def store_verification_code(self, email: str, code: str, issued_at: float) -> None:
        await self._store_challenge(
            f"{EMAIL_CODE_PREFIX}:{email}", code, issued_at, self.email_code_expiry
        )

    async def get_verification_code(self, email: str, now: float) -> str:
        return await self._load_challenge(
            f"{EMAIL_CODE_PREFIX}:{email}", now, self.email_code_expiry
        )

    async def delete_verification_code(self, email: str) -> None:
        await self.delete(f"{EMAIL_CODE_PREFIX}:{email}")

    async def store_picture_code(self, username: str, answer: str, issued_at: float) -> None:
        await self._store_challenge(
            f"{PICTURE_CODE_PREFIX}:{username}", answer, issued_at, self.picture_code_expiry
        )

    async def get_picture_code(self, username: str, now: float) -> str:
        return await self._load_challenge(
            f"{PICTURE_CODE_PREFIX}:{username}", now, self.picture_code_expiry
        )


redis_client = RedisClient()
