from .database import get_session, init_db
from .judge import Judge0Client, get_judge_client, judge_client
from .mail import MailClient, get_mail_client, mail_client
from .redis import RedisClient, redis_client
from .redis_dependency import get_redis_client

__all__ = [
    "get_session",
    "init_db",
    "Judge0Client",
    "get_judge_client",
    "judge_client",
    "MailClient",
    "get_mail_client",
    "mail_client",
    "RedisClient",
    "redis_client",
    "get_redis_client",
]
