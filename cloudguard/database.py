"""Database primitives."""

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base declarative model class."""

    metadata = MetaData()


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine for a database URL.

    Parameters
    ----------
    database_url : str
        SQLAlchemy database URL.

    Returns
    -------
    AsyncEngine
        Configured engine.
    """
    return create_async_engine(database_url, future=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine.

    Parameters
    ----------
    engine : AsyncEngine
        Engine to bind sessions to.

    Returns
    -------
    async_sessionmaker[AsyncSession]
        Session factory with attribute expiry disabled.
    """
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all mapped tables.

    Parameters
    ----------
    engine : AsyncEngine
        Engine to create tables on.

    Returns
    -------
    None
        Emits ``CREATE TABLE`` for missing tables.
    """
    import cloudguard.models  # noqa: F401

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
