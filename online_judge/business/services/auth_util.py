import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from online_judge.config import Config

passwd_context = CryptContext(schemes=["bcrypt"])


def generate_password_hash(password: str) -> str:
    return passwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return passwd_context.verify(password, password_hash)


def create_access_token(
    subject: str, expiry: timedelta = timedelta(seconds=Config.JWT_ACCESS_TOKEN_EXPIRY)
) -> str:
    """Mint a stateless bearer token bound to ``subject`` (a username)."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": now,
        "exp": now + expiry,
        "jti": str(uuid.uuid4()),
    }

    return encode_token(payload)


def encode_token(payload):
    return jwt.encode(
        payload=payload, key=Config.JWT_SECRET, algorithm=Config.JWT_ALGORITHM
    )


def decode_token(token: str) -> Any | None:
    try:
        token_data = jwt.decode(
            jwt=token, key=Config.JWT_SECRET, algorithms=[Config.JWT_ALGORITHM]
        )
        return token_data

    except jwt.PyJWTError as _:
        return None
