#!/usr/bin/env python3
"""Initialize the database for grave-map."""

import sys

from .connection import db, redact_url


def main():
    """Initialize the database."""
    try:
        print("Initializing database...")
        db.initialize()
        print(f"✓ Connected to {redact_url(str(db.engine.url))}")
        print("✓ Tables created")

    except Exception as e:
        print(f"✗ Database initialization failed: {e}")
        import traceback
        traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
