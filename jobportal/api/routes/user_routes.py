"""
User Routes

GET /users/me - Get own profile
PUT /users/profile - Update profile, optionally replacing the stored resume
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from jobportal.core.auth import get_current_actor
from jobportal.schemas.schemas import ActorIdentity, ProfileUpdate, UserProfileResponse
from jobportal.services.mongo_service import UserProfileService, get_profile_service
from jobportal.utils.file_upload import open_upload

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserProfileResponse)
def get_me(actor: ActorIdentity = Depends(get_current_actor)):
    """Get current authenticated user's profile."""
    return UserProfileResponse(user=actor)


@router.put("/profile", response_model=UserProfileResponse)
def update_profile(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    cover_letter: Optional[str] = Form(None, alias="coverLetter"),
    first_niche: Optional[str] = Form(None, alias="firstNiche"),
    second_niche: Optional[str] = Form(None, alias="secondNiche"),
    third_niche: Optional[str] = Form(None, alias="thirdNiche"),
    resume: Optional[UploadFile] = File(None),
    actor: ActorIdentity = Depends(get_current_actor),
    profiles: UserProfileService = Depends(get_profile_service),
):
    """
    Update profile. Only provided fields are updated.

    A new resume replaces the stored one; the old file is removed from
    storage once the new one is saved.
    """
    update = ProfileUpdate(
        name=name, email=email, phone=phone, address=address, cover_letter=cover_letter,
        first_niche=first_niche, second_niche=second_niche, third_niche=third_niche,
    )
    with open_upload(resume) as upload:
        user = profiles.update_profile(actor, update, upload)

    return UserProfileResponse(user=user, message="Profile updated.")
