"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Field aliases match the persisted document layout (camelCase), Python
attribute names stay snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class Role(str, Enum):
    job_seeker = "Job Seeker"
    employer = "Employer"


class ResourceKind(str, Enum):
    image = "image"
    raw = "raw"


# ============================================================
# RESUME / STORAGE SCHEMAS
# ============================================================

class ResumeReference(BaseModel):
    """Pointer to a stored resume. Replaced wholesale, never edited."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    storage_id: str = Field(..., alias="public_id", min_length=1)
    url: str = Field(..., min_length=1)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class UploadDirective(BaseModel):
    """How one uploaded file is handed to the content storage service."""
    model_config = ConfigDict(frozen=True)

    resource_kind: ResourceKind
    target_format: Optional[str] = None
    page: Optional[int] = None


# ============================================================
# IDENTITY SCHEMAS
# ============================================================

class Niches(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_niche: Optional[str] = Field(None, alias="firstNiche")
    second_niche: Optional[str] = Field(None, alias="secondNiche")
    third_niche: Optional[str] = Field(None, alias="thirdNiche")


class ActorIdentity(BaseModel):
    """The authenticated caller, as supplied by the identity provider."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    role: Role
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    cover_letter: Optional[str] = Field(None, alias="coverLetter")
    niches: Optional[Niches] = None
    resume: Optional[ResumeReference] = None


class UserProfileResponse(BaseModel):
    success: bool = True
    user: ActorIdentity
    message: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Profile fields accepted by PUT /users/profile."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    cover_letter: Optional[str] = None
    first_niche: Optional[str] = None
    second_niche: Optional[str] = None
    third_niche: Optional[str] = None


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationFields(BaseModel):
    """Form fields of an application submission (validated by the manager)."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    cover_letter: Optional[str] = None

    def missing(self) -> List[str]:
        """Names of fields that are absent or blank."""
        return [
            field for field, value in self.model_dump().items()
            if value is None or not str(value).strip()
        ]


class JobSeekerInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    phone: str
    address: str
    cover_letter: str = Field(..., alias="coverLetter")
    role: Role = Role.job_seeker
    resume: ResumeReference


class EmployerInfo(BaseModel):
    id: str
    role: Role = Role.employer


class JobInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
    job_title: str = Field(..., alias="jobTitle")


class DeletedBy(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_seeker: bool = Field(False, alias="jobSeeker")
    employer: bool = False


class ApplicationRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    job_seeker_info: JobSeekerInfo = Field(..., alias="jobSeekerInfo")
    employer_info: EmployerInfo = Field(..., alias="employerInfo")
    job_info: JobInfo = Field(..., alias="jobInfo")
    deleted_by: DeletedBy = Field(default_factory=DeletedBy, alias="deletedBy")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class ApplicationResponse(BaseModel):
    success: bool = True
    message: str
    application: ApplicationRecord


class ApplicationDetailResponse(BaseModel):
    success: bool = True
    application: ApplicationRecord


class ApplicationListResponse(BaseModel):
    success: bool = True
    applications: List[ApplicationRecord]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
