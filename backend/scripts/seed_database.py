"""
Create the schema and seed default data into the configured database.

Usage:
    python -m scripts.seed_database
"""
import asyncio
import logging

from nexus.config import get_settings
from nexus.database import Database
from nexus.seed import seed_database


async def main() -> None:
    settings = get_settings()
    database = Database(settings.database_url, echo=settings.debug)
    try:
        await database.create_schema()
        async with database.session() as session:
            inserted = await seed_database(session)
        print("Seed data inserted" if inserted else "Database already seeded, nothing to do")
    finally:
        await database.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    asyncio.run(main())
