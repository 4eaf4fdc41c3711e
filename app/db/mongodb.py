"""
MongoDB Connection Utility

MongoDB stores every marketplace entity:
- Accounts (veterans, employers, admins) with embedded persona/company profile
- Companies, job postings and applications
- Resumes (military history + generated content)
- Messages, success stories, partner inquiries, saved candidates

WHY MongoDB for these?
- Personas, veteran preferences and resumes are nested documents
- Each document is mostly self-contained; joins are done in the service layer
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import PyMongoError
from pymongo.database import Database
from pymongo.collection import Collection
from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, tz_aware=True)
    return _client


def get_mongo_db() -> Database:
    """Get the application database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection. Use the COLLECTIONS constants for names."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except PyMongoError as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "companies": "companies",
    "jobs": "jobs",
    "applications": "applications",
    "resumes": "resumes",
    "messages": "messages",
    "stories": "stories",
    "partner_inquiries": "partner_inquiries",
    "saved_candidates": "saved_candidates",
}


def init_mongo_indexes():
    """
    Create indexes for uniqueness rules and common lookups.
    Call this once during app startup.
    """
    db = get_mongo_db()

    db[COLLECTIONS["users"]].create_index("email", unique=True)
    db[COLLECTIONS["users"]].create_index("role")
    db[COLLECTIONS["companies"]].create_index("name", unique=True)

    db[COLLECTIONS["jobs"]].create_index([("is_active", ASCENDING), ("created_at", DESCENDING)])
    db[COLLECTIONS["jobs"]].create_index("posted_by")

    # One application per (job, applicant)
    db[COLLECTIONS["applications"]].create_index([
        ("job", ASCENDING),
        ("applicant", ASCENDING)
    ], unique=True)

    db[COLLECTIONS["resumes"]].create_index([("user", ASCENDING), ("created_at", DESCENDING)])

    db[COLLECTIONS["messages"]].create_index([("sender", ASCENDING), ("recipient", ASCENDING)])
    db[COLLECTIONS["messages"]].create_index([("recipient", ASCENDING), ("read", ASCENDING)])

    db[COLLECTIONS["saved_candidates"]].create_index([
        ("employer", ASCENDING),
        ("candidate", ASCENDING),
        ("job", ASCENDING)
    ], unique=True)

    logger.info("MongoDB indexes created successfully")
