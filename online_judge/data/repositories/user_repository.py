from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from online_judge.config import logger
from online_judge.data.schemas import User, UserDetail
from online_judge.data.schemas.base import utc_now
from online_judge.errors import DatabaseException, DuplicateEntryException

user_logger = logger.getChild("user")


async def _count(db: AsyncSession, *criteria) -> int:
    try:
        result = await db.execute(select(func.count()).select_from(User).where(*criteria))
        return result.scalar_one()
    except SQLAlchemyError as e:
        user_logger.error(f"Error counting users: {str(e)}")
        raise DatabaseException(detail="Failed to query users due to database error")


async def count_by_email(db: AsyncSession, email: str) -> int:
    return await _count(db, User.email == email)


async def count_by_username(db: AsyncSession, username: str) -> int:
    return await _count(db, User.username == username)


async def count_by_id(db: AsyncSession, user_id: int) -> int:
    return await _count(db, User.id == user_id)


async def insert_user(
    db: AsyncSession, user_id: int, username: str, password_hash: str, email: str
) -> User:
    """Insert a new account. Raises DuplicateEntryException on a unique violation."""
    new_user = User(
        id=user_id, username=username, password_hash=password_hash, email=email
    )
    try:
        db.add(new_user)
        await db.commit()
        await db.refresh(new_user)
        return new_user
    except IntegrityError as e:
        await db.rollback()
        user_logger.warning(f"Unique constraint violated inserting {username}: {str(e)}")
        raise DuplicateEntryException(detail="Username or email already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        user_logger.error(f"Error inserting user {username}: {str(e)}")
        raise DatabaseException(detail="Failed to insert user due to database error")


async def get_user_detail(db: AsyncSession, user_id: int) -> Optional[UserDetail]:
    try:
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        user_logger.error(f"Error retrieving user {user_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve user due to database error")
    if user is None:
        return None
    return UserDetail.model_validate(user)


async def update_user_detail(
    db: AsyncSession, user_id: int, email: str = "", password_hash: str = ""
) -> None:
    """Partial update: an empty field is left unchanged."""
    values = {}
    if email:
        values["email"] = email
    if password_hash:
        values["password_hash"] = password_hash
    if not values:
        return
    values["updated_at"] = utc_now()
    try:
        await db.execute(update(User).where(User.id == user_id).values(**values))
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        user_logger.warning(f"Unique constraint violated updating {user_id}: {str(e)}")
        raise DuplicateEntryException(detail="Email already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        user_logger.error(f"Error updating user {user_id}: {str(e)}")
        raise DatabaseException(detail="Failed to update user due to database error")


async def delete_user(db: AsyncSession, user_id: int) -> None:
    try:
        await db.execute(delete(User).where(User.id == user_id))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        user_logger.error(f"Error deleting user {user_id}: {str(e)}")
        raise DatabaseException(detail="Failed to delete user due to database error")


async def get_user_id(db: AsyncSession, username: str) -> Optional[int]:
    try:
        result = await db.execute(select(User.id).where(User.username == username))
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        user_logger.error(f"Error retrieving id for {username}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve user due to database error")


async def get_password_hash(db: AsyncSession, username: str) -> Optional[str]:
    """Stored bcrypt hash for ``username``, or None when there is no such user."""
    try:
        result = await db.execute(
            select(User.password_hash).where(User.username == username)
        )
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        user_logger.error(f"Error retrieving credentials for {username}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve user due to database error")
