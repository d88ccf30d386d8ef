#!/usr/bin/env python3
"""
Delete stale one-time codes (used or expired) older than OTP_PURGE_AFTER_HOURS.

Usage:
    python scripts/purge_codes.py [--hours N]
"""

import argparse
import asyncio
from datetime import timedelta

from hdnotes.features.auth.services.credential_store import CredentialStore
from hdnotes.platform.config import get_settings
from hdnotes.platform.db import models  # noqa: F401
from hdnotes.platform.db.session import SessionLocal
from hdnotes.platform.timeutils import utcnow


async def purge_codes(hours: int) -> int:
    async with SessionLocal() as db:
        store = CredentialStore(db)
        deleted = await store.purge_stale_codes(older_than=utcnow() - timedelta(hours=hours))
        await store.commit()
        return deleted


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--hours", type=int, default=get_settings().OTP_PURGE_AFTER_HOURS)
    args = parser.parse_args()

    deleted = asyncio.run(purge_codes(args.hours))
    print(f"Deleted {deleted} stale one-time code(s)")


if __name__ == "__main__":
    main()
