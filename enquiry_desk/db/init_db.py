"""
Initialize database tables
Run this once to create tables: python -m enquiry_desk.db.init_db
"""

import asyncio
import logging

from ..core.config import settings
from .database import create_engine, init_db


async def main():
    engine = create_engine(settings)
    try:
        await init_db(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    asyncio.run(main())
