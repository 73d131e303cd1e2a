#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the document store and SMTP relay are reachable.
Usage: python scripts/check_connections.py
"""
import asyncio
import smtplib
import sys
sys.path.insert(0, '.')

from careerguide.core.config import get_settings
from careerguide.db import build_store


def check_smtp(settings) -> bool:
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
            if settings.smtp_use_tls:
                server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
        return True
    except (smtplib.SMTPException, OSError) as e:
        print(f"    Error: {e}")
        return False


async def check_store(settings) -> bool:
    store = build_store(settings)
    try:
        return await store.ping()
    finally:
        await store.close()


def main():
    settings = get_settings()
    print("=" * 50)
    print("CAREER GUIDANCE PLATFORM - CONNECTION CHECK")
    print("=" * 50)

    # Document store
    print("\n[1] Checking document store...")
    if settings.use_memory_store:
        print("    ⚠️  MONGODB_URI not set - the in-memory store will be used")
    else:
        print(f"    Database: {settings.mongodb_db}")
        if asyncio.run(check_store(settings)):
            print("    ✅ MongoDB: CONNECTED")
        else:
            print("    ❌ MongoDB: FAILED")

    # SMTP
    print("\n[2] Checking SMTP relay...")
    if settings.smtp_configured:
        print(f"    Host: {settings.smtp_host}:{settings.smtp_port}")
        if check_smtp(settings):
            print("    ✅ SMTP: CONNECTED")
        else:
            print("    ❌ SMTP: FAILED")
    else:
        print("    ⚠️  SMTP: not configured (emails will be skipped)")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
