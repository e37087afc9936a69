"""
MongoDB Service - collection access for documents this app consults.

Collections:
1. jobs  - job postings; read only here (title + owner are snapshotted
           into applications)
2. users - identity/profile documents; read for every authenticated
           request, written by profile updates
"""

from datetime import datetime, timezone
from typing import Optional
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection

from jobportal.core.errors import ForbiddenError, NotFoundError, ValidationError
from jobportal.core.logger import get_logger
from jobportal.db.mongodb import COLLECTIONS, get_collection, to_object_id
from jobportal.schemas.schemas import ActorIdentity, ProfileUpdate, ResumeReference, Role
from jobportal.services.resume_router import ResumeIngestionRouter, get_resume_router
from jobportal.utils.file_upload import IncomingFile

logger = get_logger(__name__)


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if isinstance(doc.get("_id"), ObjectId):
        doc["_id"] = str(doc["_id"])
    return doc


def serialize_docs(docs) -> list:
    """Convert an iterable of MongoDB documents to a JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


# ============================================================
# JOBS COLLECTION
# ============================================================

class JobService:
    """Read access to job postings."""

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["jobs"])

    def get_by_id(self, job_id: str) -> Optional[dict]:
        """Fetch a job by id; None for unknown or malformed ids."""
        oid = to_object_id(job_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})


# ============================================================
# USERS COLLECTION
# ============================================================

def identity_from_doc(doc: dict) -> ActorIdentity:
    """
    Build the actor identity from a user document.

    Role tags outside Role are rejected here, so nothing downstream ever has
    to decide what an unknown role means.
    """
    try:
        role = Role(doc.get("role"))
    except ValueError:
        raise ForbiddenError(f"Unknown user role: {doc.get('role')}")

    resume = doc.get("resume") or {}
    return ActorIdentity(
        id=str(doc["_id"]),
        role=role,
        name=doc.get("name"),
        email=doc.get("email"),
        phone=doc.get("phone"),
        address=doc.get("address"),
        cover_letter=doc.get("coverLetter"),
        niches=doc.get("niches"),
        resume=ResumeReference(**resume) if resume.get("public_id") and resume.get("url") else None,
    )


class UserProfileService:
    """
    Handles user profile documents.
    Profile resume replacement goes through the ingestion router.
    """

    def __init__(self, collection: Collection = None, router: ResumeIngestionRouter = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["users"])
        self.router = router if router is not None else get_resume_router()

    def get_identity(self, user_id: str) -> Optional[ActorIdentity]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid}, projection={"password": False})
        if doc is None:
            return None
        return identity_from_doc(doc)

    def update_profile(
        self,
        actor: ActorIdentity,
        update: ProfileUpdate,
        file: Optional[IncomingFile] = None
    ) -> ActorIdentity:
        """
        Update profile fields and optionally replace the stored resume.

        The new resume is uploaded and saved on the profile first; the old one
        is deleted from storage only afterwards, and a failure there is not
        fatal. A seeker is never left without a resume.
        """
        if actor.role == Role.job_seeker and not (
            update.first_niche and update.second_niche and update.third_niche
        ):
            raise ValidationError("Please provide your preferred job niches.")

        changes = {
            "name": update.name,
            "email": update.email,
            "phone": update.phone,
            "address": update.address,
            "coverLetter": update.cover_letter,
            "niches.firstNiche": update.first_niche,
            "niches.secondNiche": update.second_niche,
            "niches.thirdNiche": update.third_niche,
        }
        changes = {key: value for key, value in changes.items() if value is not None}
        changes["updatedAt"] = datetime.now(timezone.utc)

        new_resume = None
        if file is not None:
            new_resume = self.router.ingest_file(file)
            changes["resume"] = new_resume.to_document()

        try:
            doc = self.collection.find_one_and_update(
                {"_id": to_object_id(actor.id)},
                {"$set": changes},
                projection={"password": False},
                return_document=ReturnDocument.AFTER,
            )
        except Exception:
            # profile write failed: the fresh upload is referenced by nothing
            self.router.discard(new_resume)
            raise

        if doc is None:
            self.router.discard(new_resume)
            raise NotFoundError("User not found.")

        if new_resume is not None and actor.resume is not None and actor.resume != new_resume:
            if self.router.discard(actor.resume):
                logger.info(f"Replaced resume {actor.resume.storage_id} -> {new_resume.storage_id} for user {actor.id}")

        return identity_from_doc(doc)


# ============================================================
# CONVENIENCE FUNCTIONS: service getters for route injection
# ============================================================

def get_job_service() -> JobService:
    return JobService()


def get_profile_service() -> UserProfileService:
    return UserProfileService()
