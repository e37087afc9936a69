"""
Shared fixtures: an in-memory MongoDB (mongomock), an in-memory content
storage service and a TestClient wired to both.
"""

import io
from datetime import datetime

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from jobportal.core.auth import create_access_token
from jobportal.core.errors import StorageServiceError
from jobportal.main import app
from jobportal.schemas.schemas import ActorIdentity, ApplicationFields, ResumeReference, Role
from jobportal.services.application_service import ApplicationRecordManager, get_application_manager
from jobportal.services.content_storage import ContentStorageService
from jobportal.services.mongo_service import JobService, UserProfileService, get_profile_service
from jobportal.services.resume_router import ResumeIngestionRouter
from jobportal.utils.file_upload import IncomingFile


_UNSET = object()


class InMemoryStorage(ContentStorageService):
    """Content storage double that records every call."""

    def __init__(self):
        self.objects = {}
        self.uploads = []
        self.deleted = []
        self.calls = []
        self.fail_upload = False
        self.fail_delete = False
        self.response_override = _UNSET

    def upload(self, directive, file):
        self.calls.append(("upload", file.filename))
        if self.fail_upload:
            raise StorageServiceError("Failed to upload resume.")
        if self.response_override is not _UNSET:
            return self.response_override
        storage_id = f"Job_Seekers_Resume/obj{len(self.uploads) + 1}"
        self.objects[storage_id] = file.stream.read()
        self.uploads.append((directive, file.filename))
        return {"storage_id": storage_id, "url": f"https://cdn.test/{storage_id}"}

    def delete(self, storage_id):
        self.calls.append(("delete", storage_id))
        if self.fail_delete:
            raise StorageServiceError(f"Failed to delete stored resume {storage_id}.")
        self.objects.pop(storage_id, None)
        self.deleted.append(storage_id)


def make_file(filename: str, content: bytes = b"resume-bytes", content_type: str = "application/octet-stream") -> IncomingFile:
    return IncomingFile(filename=filename, stream=io.BytesIO(content), content_type=content_type, size=len(content))


def valid_fields(**overrides) -> ApplicationFields:
    data = {
        "name": "A",
        "email": "a@x.com",
        "phone": "123",
        "address": "Y",
        "cover_letter": "Z",
    }
    data.update(overrides)
    return ApplicationFields(**data)


@pytest.fixture
def mongo_db():
    return mongomock.MongoClient()["portal_test"]


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def resume_router(storage):
    return ResumeIngestionRouter(storage)


@pytest.fixture
def manager(mongo_db, resume_router):
    manager = ApplicationRecordManager(
        mongo_db["applications"], JobService(mongo_db["jobs"]), resume_router
    )
    manager.ensure_indexes()
    return manager


@pytest.fixture
def profiles(mongo_db, resume_router):
    return UserProfileService(mongo_db["users"], resume_router)


@pytest.fixture
def employer_doc(mongo_db):
    doc = {
        "_id": ObjectId(),
        "name": "Acme HR",
        "email": "hr@acme.test",
        "role": "Employer",
        "createdAt": datetime(2024, 1, 1),
    }
    mongo_db["users"].insert_one(doc)
    return doc


@pytest.fixture
def seeker_doc(mongo_db):
    doc = {
        "_id": ObjectId(),
        "name": "A",
        "email": "a@x.com",
        "phone": "123",
        "address": "Y",
        "role": "Job Seeker",
        "niches": {"firstNiche": "Backend", "secondNiche": "Data", "thirdNiche": "DevOps"},
        "resume": {"public_id": "Job_Seekers_Resume/stored", "url": "https://cdn.test/Job_Seekers_Resume/stored"},
        "createdAt": datetime(2024, 1, 1),
    }
    mongo_db["users"].insert_one(doc)
    return doc


@pytest.fixture
def job_doc(mongo_db, employer_doc):
    doc = {"_id": ObjectId(), "title": "Backend Engineer", "postedBy": employer_doc["_id"]}
    mongo_db["jobs"].insert_one(doc)
    return doc


@pytest.fixture
def seeker(seeker_doc) -> ActorIdentity:
    return ActorIdentity(
        id=str(seeker_doc["_id"]),
        role=Role.job_seeker,
        name="A",
        resume=ResumeReference(**seeker_doc["resume"]),
    )


@pytest.fixture
def employer(employer_doc) -> ActorIdentity:
    return ActorIdentity(id=str(employer_doc["_id"]), role=Role.employer, name="Acme HR")


@pytest.fixture
def client(manager, profiles):
    app.dependency_overrides[get_application_manager] = lambda: manager
    app.dependency_overrides[get_profile_service] = lambda: profiles
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_doc: dict) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user_doc['_id'])})}"}
