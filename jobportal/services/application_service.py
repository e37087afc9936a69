"""
Application Record Manager - job applications and their two-party delete.

An application is visible to a party until that party deletes it. Delete
flags per party live in `deletedBy`:

    {jobSeeker: False, employer: False}   active
    exactly one flag True                 pending (still listed for the other party)
    both True                             removed from the collection

The flag flip is a single find_one_and_update that returns the post-update
document, so when both parties delete concurrently exactly one of them sees
both flags set and performs the hard delete. A document with both flags set
is never returned by any read in this module.
"""

from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional

from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from jobportal.core.errors import (
    DuplicateError, MissingResumeError, NotFoundError, ValidationError
)
from jobportal.core.logger import get_logger
from jobportal.db.mongodb import COLLECTIONS, get_collection, init_application_indexes, to_object_id
from jobportal.schemas.schemas import (
    ActorIdentity, ApplicationFields, ApplicationRecord, DeletedBy, EmployerInfo,
    JobInfo, JobSeekerInfo, ResumeReference, Role
)
from jobportal.services.mongo_service import JobService, serialize_doc
from jobportal.services.resume_router import ResumeIngestionRouter, get_resume_router
from jobportal.utils.file_upload import IncomingFile

logger = get_logger(__name__)

# Which flag each party flips
DELETE_FLAGS = {
    Role.job_seeker: "deletedBy.jobSeeker",
    Role.employer: "deletedBy.employer",
}

# Whose id a party must match to touch a record
OWNER_FIELDS = {
    Role.job_seeker: "jobSeekerInfo.id",
    Role.employer: "employerInfo.id",
}

# Matches every record that is not in the transient both-deleted state
NOT_FULLY_DELETED = {"$or": [{"deletedBy.jobSeeker": False}, {"deletedBy.employer": False}]}
FULLY_DELETED = {"deletedBy.jobSeeker": True, "deletedBy.employer": True}


class ApplicationCursor:
    """
    Lazy, restartable view over a query: every iteration opens a new cursor.
    """

    def __init__(self, collection: Collection, query: dict):
        self.collection = collection
        self.query = query

    def __iter__(self) -> Iterator[ApplicationRecord]:
        for doc in self.collection.find(self.query):
            yield ApplicationRecord.model_validate(serialize_doc(doc))


class ApplicationRecordManager:
    """
    Owns application creation, duplicate prevention and the delete state machine.
    """

    def __init__(
        self,
        collection: Collection = None,
        jobs: JobService = None,
        router: ResumeIngestionRouter = None
    ):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["applications"])
        self.jobs = jobs if jobs is not None else JobService()
        self.router = router if router is not None else get_resume_router()

    def ensure_indexes(self) -> None:
        init_application_indexes(self.collection)

    # ------------------------------------------------------------
    # submit
    # ------------------------------------------------------------

    def _find_existing(self, job_id: str, seeker_id: str) -> Optional[dict]:
        return self.collection.find_one({"jobInfo.jobId": job_id, "jobSeekerInfo.id": seeker_id})

    def submit(
        self,
        job_id: str,
        actor: ActorIdentity,
        fields: ApplicationFields,
        file: Optional[IncomingFile] = None
    ) -> ApplicationRecord:
        """
        Create an application of `actor` to job `job_id`.

        Raises:
            ValidationError: a form field is missing or blank
            NotFoundError: no such job
            DuplicateError: actor already applied to this job
            MissingResumeError: no file attached and no resume on the profile
            UnsupportedFormatError / StorageServiceError: from resume ingestion
        """
        missing = fields.missing()
        if missing:
            logger.debug(f"Application rejected, missing fields: {missing}")
            raise ValidationError("All fields are required.")

        job = self.jobs.get_by_id(job_id)
        if not job:
            raise NotFoundError("Job not found.")
        job_id = str(job["_id"])

        if self._find_existing(job_id, actor.id):
            raise DuplicateError("You have already applied for this job.")

        uploaded: Optional[ResumeReference] = None
        if file is not None:
            uploaded = self.router.ingest_file(file)
            resume = uploaded
        elif actor.resume is not None:
            resume = actor.resume
        else:
            raise MissingResumeError("Please upload your resume.")

        record = {
            "jobSeekerInfo": JobSeekerInfo(
                id=actor.id,
                name=fields.name,
                email=fields.email,
                phone=fields.phone,
                address=fields.address,
                cover_letter=fields.cover_letter,
                resume=resume,
            ).model_dump(by_alias=True, mode="json"),
            "employerInfo": EmployerInfo(id=str(job["postedBy"])).model_dump(mode="json"),
            "jobInfo": JobInfo(job_id=job_id, job_title=job["title"]).model_dump(by_alias=True),
            "deletedBy": DeletedBy().model_dump(by_alias=True),
            "createdAt": datetime.now(timezone.utc),
        }

        try:
            self.collection.insert_one(record)
        except DuplicateKeyError:
            # lost a race against a concurrent submit for the same job
            logger.warning(f"Concurrent duplicate application by {actor.id} for job {job_id}")
            self.router.discard(uploaded)
            raise DuplicateError("You have already applied for this job.")
        except Exception:
            # nothing references the fresh upload
            self.router.discard(uploaded)
            raise

        logger.info(f"Application {record['_id']} created: seeker {actor.id} -> job {job_id}")
        return ApplicationRecord.model_validate(serialize_doc(record))

    # ------------------------------------------------------------
    # reads
    # ------------------------------------------------------------

    def list_for_employer(self, employer_id: str) -> Iterable[ApplicationRecord]:
        return ApplicationCursor(self.collection, {
            "employerInfo.id": employer_id,
            "deletedBy.employer": False,
        })

    def list_for_job_seeker(self, seeker_id: str) -> Iterable[ApplicationRecord]:
        return ApplicationCursor(self.collection, {
            "jobSeekerInfo.id": seeker_id,
            "deletedBy.jobSeeker": False,
        })

    def get(self, application_id: str, actor: ActorIdentity) -> ApplicationRecord:
        """A record the actor is party to and has not deleted."""
        oid = to_object_id(application_id)
        doc = None
        if oid is not None:
            doc = self.collection.find_one({
                "_id": oid,
                OWNER_FIELDS[actor.role]: actor.id,
                DELETE_FLAGS[actor.role]: False,
            })
        if doc is None:
            raise NotFoundError("Application not found.")
        return ApplicationRecord.model_validate(serialize_doc(doc))

    # ------------------------------------------------------------
    # delete
    # ------------------------------------------------------------

    def delete(self, application_id: str, actor: ActorIdentity) -> bool:
        """
        Soft-delete the application for the actor's side.

        Returns True when this call removed the record for good (both sides
        have now deleted it), False when it is pending on the other side.
        Repeating a side's delete is a no-op.

        Raises:
            NotFoundError: no such record (or not one the actor is party to)
        """
        oid = to_object_id(application_id)
        if oid is None:
            raise NotFoundError("Application not found.")

        doc = self.collection.find_one_and_update(
            {"_id": oid, OWNER_FIELDS[actor.role]: actor.id, **NOT_FULLY_DELETED},
            {"$set": {DELETE_FLAGS[actor.role]: True}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("Application not found.")

        flags = doc["deletedBy"]
        if flags.get("jobSeeker") and flags.get("employer"):
            return self._hard_delete(oid)

        logger.info(f"Application {application_id} deleted by {actor.role.value}, pending other party")
        return False

    def _hard_delete(self, oid) -> bool:
        result = self.collection.delete_one({"_id": oid, **FULLY_DELETED})
        if result.deleted_count:
            logger.info(f"Application {oid} permanently deleted")
        return result.deleted_count > 0

    def purge_fully_deleted(self) -> int:
        """
        Remove records left with both flags set (e.g. a crash between the
        flag flip and the delete). Run at startup.
        """
        result = self.collection.delete_many(FULLY_DELETED)
        if result.deleted_count:
            logger.warning(f"Purged {result.deleted_count} fully deleted application(s)")
        return result.deleted_count


def get_application_manager() -> ApplicationRecordManager:
    return ApplicationRecordManager()
