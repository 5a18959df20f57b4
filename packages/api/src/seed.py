# This project was developed with assistance from AI tools.
"""CLI entrypoint for reference data seeding.

Usage:
    python -m src.seed
"""

import argparse
import asyncio
import json

from db.database import SessionLocal

from .services.seed.seeder import seed_reference_data


async def main() -> None:
    """Run reference data seeding."""
    async with SessionLocal() as session:
        result = await seed_reference_data(session)
        print(json.dumps(result, indent=2))

        if result.get("status") == "already_seeded":
            print("\nReference data already present. Nothing inserted.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Seed the document catalog, reminder rules and stage expectations",
    )
    parser.parse_args()
    asyncio.run(main())
