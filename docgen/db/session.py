"""Database session management for async SQLAlchemy.

Provides async session creation and dependency injection for FastAPI.
PostgreSQL (asyncpg) is the deployment target; SQLite (aiosqlite) works for
local runs and tests.
"""

import logging
import uuid
from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel, select

from docgen.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

SAMPLE_TEMPLATE_ID = uuid.UUID("bf0d03fb-d8ea-4377-a991-b3b5818e71ec")


# Global engine and session maker
_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Get or create the async database engine.

    Args:
        settings: Optional settings. If None, uses global settings.

    Returns:
        The async SQLAlchemy engine.
    """
    global _engine

    try:
        if _engine is None:
            settings = settings or get_settings()

            logger.info(f"Creating async database engine: {settings.database_url}")

            engine_kwargs = {
                "echo": settings.log_level == "DEBUG",
                "pool_pre_ping": True,
            }
            if not settings.database_url.startswith("sqlite"):
                engine_kwargs.update(pool_size=10, max_overflow=20)

            _engine = create_async_engine(settings.database_url, **engine_kwargs)

            logger.info("Database engine created successfully")

        return _engine

    except Exception as e:
        logger.error(f"Failed to create database engine: {e}", exc_info=True)
        raise


def get_session_maker(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Get or create the async session maker.

    Args:
        settings: Optional settings. If None, uses global settings.

    Returns:
        The async session maker.
    """
    global _async_session_maker

    try:
        if _async_session_maker is None:
            engine = get_engine(settings)

            _async_session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            logger.info("Session maker created successfully")

        return _async_session_maker

    except Exception as e:
        logger.error(f"Failed to create session maker: {e}", exc_info=True)
        raise


async def get_async_session(settings: Settings | None = None) -> AsyncGenerator[AsyncSession, None]:
    """Dependency injection for FastAPI to get async database sessions.

    Args:
        settings: Optional settings. If None, uses global settings.

    Yields:
        An async database session.
    """
    session_maker = get_session_maker(settings)
    async with session_maker() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}", exc_info=True)
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise


async def create_all_tables(settings: Settings | None = None) -> None:
    """Create all database tables.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    try:
        # Import models to ensure they're registered with SQLModel metadata
        from docgen.db import models  # noqa: F401

        engine = get_engine(settings)

        logger.info("Creating database tables...")

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        logger.info("Database tables created successfully")

    except Exception as e:
        logger.error(f"Failed to create database tables: {e}", exc_info=True)
        raise


async def init_db(settings: Settings | None = None) -> None:
    """Initialize the database.

    Creates tables and seeds a sample template when none exist.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    try:
        from docgen.db.models import TemplateRecord
        from docgen.template_engine.models import TemplateCategory

        await create_all_tables(settings)

        session_maker = get_session_maker(settings)
        async with session_maker() as session:
            try:
                result = await session.execute(select(TemplateRecord).limit(1))
                if result.scalar_one_or_none() is None:
                    logger.info("Seeding sample template...")
                    session.add(
                        TemplateRecord(
                            id=SAMPLE_TEMPLATE_ID,
                            name="Offer Letter",
                            category=TemplateCategory.OFFER_LETTER,
                            body_text=(
                                "Dear {{name}},\n"
                                "We are pleased to offer you the position of {{position}} "
                                "starting {{start_date}} with an annual salary of {{salary}}.\n"
                                "Please reply to confirm your acceptance."
                            ),
                            placeholders=[
                                {"name": "name", "value_type": "text", "required": True},
                                {"name": "email", "value_type": "email", "required": False},
                                {"name": "position", "value_type": "text", "required": True},
                                {"name": "start_date", "value_type": "date", "required": True},
                                {"name": "salary", "value_type": "number", "required": True},
                            ],
                        )
                    )
                    await session.commit()
                    logger.info(f"Created sample template: {SAMPLE_TEMPLATE_ID}")

            except Exception as e:
                logger.error(f"Error seeding initial data: {e}", exc_info=True)
                await session.rollback()
                raise

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise


async def close_db(settings: Settings | None = None) -> None:
    """Close the database engine and all connections.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    global _engine, _async_session_maker

    try:
        if _engine is not None:
            logger.info("Closing database engine...")
            await _engine.dispose()
            _engine = None
            _async_session_maker = None
            logger.info("Database engine closed")

    except Exception as e:
        logger.error(f"Error closing database engine: {e}", exc_info=True)
        raise
