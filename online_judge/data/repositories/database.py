from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from online_judge.config import Config

async_engine = create_async_engine(url=Config.ONLINE_JUDGE_DB_URL)
async_session_factory = async_sessionmaker(bind=async_engine, expire_on_commit=False)


async def init_db() -> None:
    """
    Initializes the online judge database.
    """
    # Register the table models on SQLModel.metadata
    import online_judge.data.schemas  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get an async session for the online judge database.
    """
    async with async_session_factory() as session:
        yield session
