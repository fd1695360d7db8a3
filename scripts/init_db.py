"""Database initialization script.

Creates the database tables and seeds a sample template.

Usage:
    python -m scripts.init_db
"""

import asyncio

from docgen.core.config import get_settings
from docgen.db.session import close_db, init_db


async def main() -> None:
    """Initialize the database."""
    settings = get_settings()
    try:
        await init_db(settings)
    finally:
        await close_db(settings)
    print("Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(main())
