"""
Student Routes

POST /student/profile - Registration step 2: create or update profile by user_id
GET /student/profile - Get own profile
PUT /student/profile - Create or update own profile
GET /student/jobs/available - Jobs visible to my department
GET /student/jobs/applied - Jobs I applied to, with status
POST /student/jobs/{job_id}/apply - Apply to a job (once)
GET /student/applications - My application statuses
GET /student/messages - Announcements for my department
GET /student/jobs/pdf/{filename} - Download a job document
"""

from fastapi import APIRouter, HTTPException, Depends, Response
from fastapi.responses import FileResponse
from typing import Optional

from placement_portal.core.auth import get_current_user, get_current_student, get_optional_user
from placement_portal.services import application_service, job_service, message_service, profile_service
from placement_portal.utils.file_upload import resolve_document
from placement_portal.schemas.schemas import (
    ProfileCreate, ProfileData, ProfileResponse, JobListResponse, AppliedJobListResponse,
    ApplicationStatusListResponse, AnnouncementListResponse, MessageResponse
)

router = APIRouter(prefix="/student", tags=["Students"])


@router.post("/profile", response_model=MessageResponse)
async def submit_profile(
    data: ProfileCreate,
    response: Response,
    caller: Optional[dict] = Depends(get_optional_user)
):
    """
    Detailed-info step of registration.

    No session is required; the account id comes in the body. If a session
    is present it must belong to the same account.
    """
    if caller is not None and caller["user_id"] != data.user_id:
        raise HTTPException(status_code=403, detail="User ID mismatch")

    created = profile_service.upsert_profile(data.user_id, data)
    if created:
        response.status_code = 201
        return MessageResponse(message="Profile created successfully")
    return MessageResponse(message="Profile updated successfully")


@router.get("/profile")
async def get_profile(student: dict = Depends(get_current_student)):
    profile = profile_service.get_profile(student["user_id"])
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"profile": ProfileResponse(**profile)}


@router.put("/profile", response_model=MessageResponse)
async def update_profile(data: ProfileData, student: dict = Depends(get_current_student)):
    """Replace own profile; creates it if missing."""
    profile_service.upsert_profile(student["user_id"], data)
    return MessageResponse(message="Profile updated successfully")


@router.get("/jobs/available", response_model=JobListResponse)
async def get_available_jobs(student: dict = Depends(get_current_student)):
    return JobListResponse(jobs=job_service.jobs_for_student(student["user_id"]))


@router.get("/jobs/applied", response_model=AppliedJobListResponse)
async def get_applied_jobs(student: dict = Depends(get_current_student)):
    return AppliedJobListResponse(appliedJobs=application_service.applied_jobs(student["user_id"]))


@router.get("/jobs/pdf/{filename}")
async def get_job_document(filename: str, user: dict = Depends(get_current_user)):
    """Serve a job's PDF. Accepts a bare file name or the stored path."""
    path = resolve_document(filename)
    if not path:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path, media_type="application/pdf")


@router.post("/jobs/{job_id}/apply", response_model=MessageResponse, status_code=201)
async def apply_for_job(job_id: int, student: dict = Depends(get_current_student)):
    """Apply to a job. A second application for the same job is a 409."""
    application_service.apply_for_job(student["user_id"], job_id)
    return MessageResponse(message="Application submitted successfully")


@router.get("/applications", response_model=ApplicationStatusListResponse)
async def get_application_status(student: dict = Depends(get_current_student)):
    return ApplicationStatusListResponse(
        applications=application_service.application_statuses(student["user_id"])
    )


@router.get("/messages", response_model=AnnouncementListResponse)
async def get_messages(student: dict = Depends(get_current_student)):
    return AnnouncementListResponse(messages=message_service.messages_for_student(student["user_id"]))
