"""
HTTP tests for the application and profile routes.
"""

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from jobportal.core.auth import create_access_token
from jobportal.main import app

from conftest import auth_headers

FORM = {
    "name": "A",
    "email": "a@x.com",
    "phone": "123",
    "address": "Y",
    "coverLetter": "Z",
}


def apply(client, job_id, user_doc, data=None, files=None):
    return client.post(
        f"/api/jobs/{job_id}/applications",
        data=FORM if data is None else data,
        files=files,
        headers=auth_headers(user_doc),
    )


class TestSubmitApplication:

    def test_apply_with_pdf(self, client, seeker_doc, employer_doc, job_doc, storage):
        response = apply(client, job_doc["_id"], seeker_doc, files={"resume": ("cv.pdf", b"%PDF-1.4", "application/pdf")})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Application submitted."
        application = body["application"]
        assert application["jobSeekerInfo"]["resume"]["public_id"] == "Job_Seekers_Resume/obj1"
        assert application["jobSeekerInfo"]["coverLetter"] == "Z"
        assert application["employerInfo"] == {"id": str(employer_doc["_id"]), "role": "Employer"}
        assert application["jobInfo"]["jobTitle"] == "Backend Engineer"
        assert application["deletedBy"] == {"jobSeeker": False, "employer": False}
        directive, _ = storage.uploads[0]
        assert directive.page == 1

    def test_apply_with_stored_resume(self, client, seeker_doc, job_doc, storage):
        response = apply(client, job_doc["_id"], seeker_doc)

        assert response.status_code == 201
        assert response.json()["application"]["jobSeekerInfo"]["resume"]["public_id"] == "Job_Seekers_Resume/stored"
        assert storage.calls == []

    def test_missing_cover_letter(self, client, seeker_doc, job_doc):
        data = {key: value for key, value in FORM.items() if key != "coverLetter"}

        response = apply(client, job_doc["_id"], seeker_doc, data=data)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "All fields are required."}

    def test_unknown_job(self, client, seeker_doc):
        response = apply(client, ObjectId(), seeker_doc)

        assert response.status_code == 404
        assert response.json()["message"] == "Job not found."

    def test_unsupported_format(self, client, mongo_db, seeker_doc, job_doc):
        response = apply(client, job_doc["_id"], seeker_doc, files={"resume": ("resume.bmp", b"BM", "image/bmp")})

        assert response.status_code == 400
        assert "bmp" in response.json()["message"]
        assert mongo_db["applications"].count_documents({}) == 0

    def test_duplicate(self, client, seeker_doc, job_doc):
        assert apply(client, job_doc["_id"], seeker_doc).status_code == 201

        response = apply(client, job_doc["_id"], seeker_doc)

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_empty_file(self, client, seeker_doc, job_doc, storage):
        response = apply(client, job_doc["_id"], seeker_doc, files={"resume": ("cv.pdf", b"", "application/pdf")})

        assert response.status_code == 400
        assert storage.calls == []

    def test_file_too_large(self, client, seeker_doc, job_doc, storage):
        big = b"x" * (5 * 1024 * 1024 + 1)

        response = apply(client, job_doc["_id"], seeker_doc, files={"resume": ("cv.png", big, "image/png")})

        assert response.status_code == 413
        assert storage.calls == []

    def test_employer_cannot_apply(self, client, employer_doc, job_doc):
        response = apply(client, job_doc["_id"], employer_doc)

        assert response.status_code == 403
        assert response.json()["message"] == "Employer not allowed to access this resource."

    def test_requires_token(self, client, job_doc):
        response = client.post(f"/api/jobs/{job_doc['_id']}/applications", data=FORM)

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "User is not authenticated."}

    def test_invalid_token(self, client, job_doc):
        response = client.post(
            f"/api/jobs/{job_doc['_id']}/applications",
            data=FORM,
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    def test_unknown_role_is_forbidden(self, client, mongo_db, job_doc):
        admin = {"_id": ObjectId(), "name": "Root", "role": "Admin"}
        mongo_db["users"].insert_one(admin)

        response = apply(client, job_doc["_id"], admin)

        assert response.status_code == 403


class TestApplicationLifecycle:

    @pytest.fixture
    def application_id(self, client, seeker_doc, job_doc):
        return apply(client, job_doc["_id"], seeker_doc).json()["application"]["_id"]

    def test_lists(self, client, seeker_doc, employer_doc, application_id):
        employer_list = client.get("/api/applications/employer", headers=auth_headers(employer_doc))
        seeker_list = client.get("/api/applications/jobseeker", headers=auth_headers(seeker_doc))

        assert [a["_id"] for a in employer_list.json()["applications"]] == [application_id]
        assert [a["_id"] for a in seeker_list.json()["applications"]] == [application_id]

    def test_lists_are_role_gated(self, client, seeker_doc, employer_doc):
        assert client.get("/api/applications/employer", headers=auth_headers(seeker_doc)).status_code == 403
        assert client.get("/api/applications/jobseeker", headers=auth_headers(employer_doc)).status_code == 403

    def test_get_one(self, client, employer_doc, application_id):
        response = client.get(f"/api/applications/{application_id}", headers=auth_headers(employer_doc))

        assert response.status_code == 200
        assert response.json()["application"]["_id"] == application_id

    def test_two_party_delete(self, client, mongo_db, seeker_doc, employer_doc, application_id):
        seeker_headers = auth_headers(seeker_doc)
        employer_headers = auth_headers(employer_doc)

        response = client.delete(f"/api/applications/{application_id}", headers=seeker_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Application Deleted.", "success": True}

        assert client.get("/api/applications/jobseeker", headers=seeker_headers).json()["applications"] == []
        assert len(client.get("/api/applications/employer", headers=employer_headers).json()["applications"]) == 1
        assert client.get(f"/api/applications/{application_id}", headers=seeker_headers).status_code == 404

        response = client.delete(f"/api/applications/{application_id}", headers=employer_headers)
        assert response.status_code == 200
        assert mongo_db["applications"].count_documents({}) == 0

        response = client.delete(f"/api/applications/{application_id}", headers=employer_headers)
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Application not found."}

    def test_cookie_token(self, client, seeker_doc, application_id):
        client.cookies.set("token", create_access_token({"sub": str(seeker_doc["_id"])}))

        response = client.get("/api/applications/jobseeker")

        assert response.status_code == 200
        assert len(response.json()["applications"]) == 1


class TestProfileRoutes:

    def test_me(self, client, seeker_doc):
        response = client.get("/api/users/me", headers=auth_headers(seeker_doc))

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["role"] == "Job Seeker"
        assert user["niches"]["firstNiche"] == "Backend"
        assert user["resume"]["public_id"] == "Job_Seekers_Resume/stored"

    def test_replace_resume(self, client, seeker_doc, storage):
        response = client.put(
            "/api/users/profile",
            data={"phone": "555", "firstNiche": "Backend", "secondNiche": "Data", "thirdNiche": "ML"},
            files={"resume": ("new.docx", b"PK\x03\x04", "application/octet-stream")},
            headers=auth_headers(seeker_doc),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile updated."
        assert body["user"]["phone"] == "555"
        assert body["user"]["resume"]["public_id"] == "Job_Seekers_Resume/obj1"
        assert storage.calls == [("upload", "new.docx"), ("delete", "Job_Seekers_Resume/stored")]

    def test_seeker_niches_required(self, client, seeker_doc):
        response = client.put("/api/users/profile", data={"phone": "555"}, headers=auth_headers(seeker_doc))

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide your preferred job niches."


def test_health_route_exists(client, monkeypatch):
    monkeypatch.setattr("jobportal.main.test_mongo_connection", lambda: True)

    response = client.get("/health")

    assert response.json() == {"status": "healthy", "mongodb": "connected"}


class TestServerErrors:
    """Failures outside the domain still come back as a JSON envelope."""

    def test_database_failure(self, client, manager, employer_doc, monkeypatch):
        def unreachable(*args, **kwargs):
            raise ServerSelectionTimeoutError("no servers available")

        monkeypatch.setattr(manager.collection, "find", unreachable)

        response = client.get("/api/applications/employer", headers=auth_headers(employer_doc))

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["message"]

    def test_failed_insert_discards_upload(self, client, manager, mongo_db, seeker_doc, job_doc, storage, monkeypatch):
        def write_failed(*args, **kwargs):
            raise PyMongoError("write failed")

        monkeypatch.setattr(manager.collection, "insert_one", write_failed)

        response = apply(client, job_doc["_id"], seeker_doc, files={"resume": ("cv.png", b"\x89PNG", "image/png")})

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert storage.deleted == ["Job_Seekers_Resume/obj1"]
        assert mongo_db["applications"].count_documents({}) == 0

    def test_unexpected_error(self, client, manager, employer_doc, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(manager, "list_for_employer", broken)
        unguarded = TestClient(app, raise_server_exceptions=False)

        response = unguarded.get("/api/applications/employer", headers=auth_headers(employer_doc))

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal Server Error."}
