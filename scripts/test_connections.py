#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the MongoDB connection and outgoing email settings.
Usage: python scripts/test_connections.py
"""
import sys
sys.path.insert(0, '.')

from app.db.mongodb import test_mongo_connection, init_mongo_indexes
from app.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("VETERAN JOB MARKETPLACE - CONNECTION TEST")
    print("=" * 50)

    # Test MongoDB
    print("\n[1] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    MongoDB: CONNECTED")
        init_mongo_indexes()
        print("    Indexes: OK")
    else:
        print("    MongoDB: FAILED")

    # SMTP is only used for password reset emails
    print("\n[2] Checking SMTP settings...")
    if settings.smtp_host:
        print(f"    Host: {settings.smtp_host}:{settings.smtp_port}")
        print(f"    From: {settings.from_name} <{settings.from_email}>")
    else:
        print("    SMTP: not configured (password reset emails will fail)")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
