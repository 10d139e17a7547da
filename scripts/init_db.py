"""Create the database schema and seed default payroll mappings.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --database-url sqlite+aiosqlite:///./payroll.db
    python scripts/init_db.py --organisation-id <uuid>
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from uuid import UUID

from payroll_export.config import configure_logging, get_settings
from payroll_export.database import create_schema, create_session_factory, get_engine
from payroll_export.services.mapping_service import MappingService


async def init_db(database_url: str, organisation_id: UUID | None) -> None:
    """Create missing tables, then seed mappings for one organisation."""
    print(f"Target database: {database_url.split('@')[1] if '@' in database_url else database_url}")

    engine = get_engine(database_url)
    try:
        await create_schema(engine)
        print("Schema created")

        if organisation_id is not None:
            factory = create_session_factory(engine)
            async with factory() as session:
                created = await MappingService(session).seed_defaults(organisation_id)
                await session.commit()
            print(f"Seeded {len(created)} payroll mappings for {organisation_id}")
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Initialise the payroll export database")
    parser.add_argument("--database-url", help="Database URL (default: DATABASE_URL)")
    parser.add_argument(
        "--organisation-id",
        type=UUID,
        help="Seed the default shift type mappings for this organisation",
    )
    args = parser.parse_args()

    configure_logging()
    database_url = args.database_url or get_settings().database_url
    try:
        asyncio.run(init_db(database_url, args.organisation_id))
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
