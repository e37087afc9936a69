"""
Application Routes

POST /jobs/{job_id}/applications - Apply to a job (job seeker only)
GET /applications/employer - Applications received (employer only)
GET /applications/jobseeker - Applications sent (job seeker only)
GET /applications/{application_id} - One application (either party)
DELETE /applications/{application_id} - Delete for the caller's side
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from jobportal.core.auth import get_current_actor, get_current_employer, get_current_job_seeker
from jobportal.schemas.schemas import (
    ActorIdentity, ApplicationDetailResponse, ApplicationFields,
    ApplicationListResponse, ApplicationResponse, MessageResponse
)
from jobportal.services.application_service import ApplicationRecordManager, get_application_manager
from jobportal.utils.file_upload import open_upload

router = APIRouter(tags=["Applications"])


@router.post("/jobs/{job_id}/applications", response_model=ApplicationResponse, status_code=201)
def submit_application(
    job_id: str,
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    cover_letter: Optional[str] = Form(None, alias="coverLetter"),
    resume: Optional[UploadFile] = File(None, description="Resume (jpg, jpeg, png, pdf, doc, docx)"),
    seeker: ActorIdentity = Depends(get_current_job_seeker),
    manager: ApplicationRecordManager = Depends(get_application_manager),
):
    """
    Apply to a job.

    Without a file the resume stored on the seeker's profile is used.
    """
    fields = ApplicationFields(
        name=name, email=email, phone=phone, address=address, cover_letter=cover_letter
    )
    with open_upload(resume) as upload:
        application = manager.submit(job_id, seeker, fields, upload)

    return ApplicationResponse(message="Application submitted.", application=application)


@router.get("/applications/employer", response_model=ApplicationListResponse)
def employer_applications(
    employer: ActorIdentity = Depends(get_current_employer),
    manager: ApplicationRecordManager = Depends(get_application_manager),
):
    """Applications to the employer's jobs that the employer has not deleted."""
    return ApplicationListResponse(applications=list(manager.list_for_employer(employer.id)))


@router.get("/applications/jobseeker", response_model=ApplicationListResponse)
def job_seeker_applications(
    seeker: ActorIdentity = Depends(get_current_job_seeker),
    manager: ApplicationRecordManager = Depends(get_application_manager),
):
    """The seeker's applications that the seeker has not deleted."""
    return ApplicationListResponse(applications=list(manager.list_for_job_seeker(seeker.id)))


@router.get("/applications/{application_id}", response_model=ApplicationDetailResponse)
def get_application(
    application_id: str,
    actor: ActorIdentity = Depends(get_current_actor),
    manager: ApplicationRecordManager = Depends(get_application_manager),
):
    return ApplicationDetailResponse(application=manager.get(application_id, actor))


@router.delete("/applications/{application_id}", response_model=MessageResponse)
def delete_application(
    application_id: str,
    actor: ActorIdentity = Depends(get_current_actor),
    manager: ApplicationRecordManager = Depends(get_application_manager),
):
    """
    Delete an application for the caller's side.
    Same response whether the record is now pending or permanently gone.
    """
    manager.delete(application_id, actor)
    return MessageResponse(message="Application Deleted.")
