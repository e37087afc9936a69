"""
MongoDB Connection Utility

MongoDB stores:
- users: identity/profile documents (owned by the identity provider)
- jobs: job postings (owned by job-posting CRUD)
- applications: job applications and their two-party delete flags
"""
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection

from jobportal.core.config import get_settings
from jobportal.core.logger import get_logger

logger = get_logger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        settings = get_settings()
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection (see COLLECTIONS)."""
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
    except Exception as e:
        logger.warning(f"MongoDB connection failed: {e}")
        return False


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse a path/token id into an ObjectId; None when it is not one."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "jobs": "jobs",
    "applications": "applications",
}

APPLICATION_UNIQUE_INDEX = "uniq_job_seeker_application"


def init_application_indexes(collection: Collection) -> None:
    """
    Indexes on the applications collection.

    The compound unique index is what actually enforces one application per
    (job, job seeker); the read-before-insert check only produces a nicer error.
    """
    collection.create_index(
        [("jobInfo.jobId", ASCENDING), ("jobSeekerInfo.id", ASCENDING)],
        unique=True,
        name=APPLICATION_UNIQUE_INDEX,
    )
    collection.create_index("employerInfo.id")
    collection.create_index("jobSeekerInfo.id")


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()
    init_application_indexes(db[COLLECTIONS["applications"]])
    db[COLLECTIONS["jobs"]].create_index("postedBy")
    logger.info("MongoDB indexes created successfully")
