"""
Local database initialization.

Creates the shifts/photos/bookings tables with Base.metadata.create_all and
optionally inserts development shift rows. Production databases are
migrated with Alembic (alembic upgrade head) instead.

Usage:
    python scripts/init_db.py              # create tables
    python scripts/init_db.py --shifts 5   # also insert shifts 1..5
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import select

from database.connection import Database
from database.models import Base, Shift
from shared.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def init_db(shift_count: int = 0) -> None:
    database = Database.from_settings(get_settings())
    try:
        logger.info("Creating tables...")
        async with database.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✓ Tables created")

        if shift_count:
            async with database.transaction() as session:
                result = await session.execute(select(Shift.id))
                existing = set(result.scalars().all())
                missing = [i for i in range(1, shift_count + 1) if i not in existing]
                session.add_all(Shift(id=i) for i in missing)
            logger.info(f"✓ Inserted {len(missing)} development shifts")
    finally:
        await database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--shifts", type=int, default=0, help="insert shift ids 1..N")
    args = parser.parse_args()
    asyncio.run(init_db(args.shifts))
