#!/usr/bin/env python3
"""
Seed Script

Loads the sample institutions, courses and accounts into the configured
store. Does nothing if the store already has users.
Usage: python scripts/seed_database.py
"""
import asyncio
import sys
sys.path.insert(0, '.')

from careerguide.core.config import get_settings
from careerguide.core.log_config import configure_logging
from careerguide.db import build_store
from careerguide.db.seed import seed_store


async def main():
    settings = get_settings()
    configure_logging(settings.log_level)
    if settings.use_memory_store:
        print("⚠️  MONGODB_URI not set - nothing to seed (the in-memory store seeds itself at startup)")
        return

    store = build_store(settings)
    try:
        await store.init_indexes()
        if await seed_store(store):
            print("✅ Sample data loaded")
            print("   Admin:   admin@careerguide.ls / admin123")
            print("   Student: test@test.com / test123")
        else:
            print("ℹ️  Store already has users, skipped")
    finally:
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
