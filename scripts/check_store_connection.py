#!/usr/bin/env python3
"""
Check the configured document store connection.

Connects with the settings from .env, reads the commit and ETag markers and
counts registered webhooks. Nothing is written.

Usage:
    python scripts/check_store_connection.py
    python scripts/check_store_connection.py --verbose
"""

import argparse
import sys
import time

from safelife.common.config import Config
from safelife.common.error_handling import NotFoundError, StoreError
from safelife.common.logger import setup_logging
from safelife.services import SafelifeStore


def check_connection() -> bool:
    """Connect, read the markers, and report."""
    print(Config.summary())

    try:
        Config.validate()
    except ValueError as e:
        print(f"❌ {e}")
        return False

    start_time = time.time()
    try:
        with SafelifeStore.from_env() as store:
            print(f"✅ Connected to {Config.STORE_BACKEND} (took {time.time() - start_time:.2f}s)")

            for label, read in (
                ("Last checked commit", store.get_last_checked_commit),
                ("ETag", store.get_etag),
            ):
                try:
                    print(f"   {label}: {read()}")
                except NotFoundError:
                    print(f"   {label}: (not set)")

            print(f"   Webhooks: {len(store.list_webhooks())}")
    except StoreError as e:
        print(f"❌ {type(e).__name__}: {str(e)[:200]}")
        return False

    return True


def main() -> int:
    parser = argparse.ArgumentParser(description="Check the document store connection")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging(debug=True if args.verbose else None)

    print()
    print("=" * 70)
    print("Document Store Connection Check")
    print("=" * 70)

    success = check_connection()

    print("=" * 70)
    print("✅ Store connection is working." if success else "❌ Store check failed.")
    print("=" * 70)
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
