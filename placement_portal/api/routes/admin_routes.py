"""
Admin Routes (admin role only)

POST /admin/register-students - Bulk-invite students from a CSV upload
GET /admin/jobs - List all jobs
POST /admin/jobs - Create job posting (multipart, optional PDF)
DELETE /admin/jobs/{job_id} - Delete job, its applications and document
GET /admin/jobs/{job_id}/applications - Applicants for a job
PUT /admin/applications/{application_id}/status - Set application status
GET /admin/messages - List all announcements
POST /admin/messages - Post announcement
DELETE /admin/messages/{message_id} - Delete announcement
GET /admin/filtered-jobs/{student_id} - Jobs visible to a given student
POST /admin/messages/{message_id}/notify - Email students who can see a message
"""

from datetime import date
from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form
from typing import List, Optional

from placement_portal.core.auth import get_current_admin
from placement_portal.services import job_service, message_service, application_service
from placement_portal.services.notification_service import EmailService, get_email_service
from placement_portal.services.registration_service import invite_students
from placement_portal.services.visibility import encode_departments, parse_department_input
from placement_portal.utils.csv_parser import parse_invitation_csv
from placement_portal.utils.file_upload import save_job_document, remove_document
from placement_portal.schemas.schemas import (
    JobResponse, JobListResponse, JobApplicationListResponse, ApplicationStatusUpdate,
    MessageCreate, AnnouncementResponse, AnnouncementListResponse, FanOutResponse,
    MessageResponse
)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(get_current_admin)])


@router.post("/register-students", response_model=FanOutResponse, status_code=201)
async def register_students(
    csv_file: UploadFile = File(..., alias="csvFile", description="CSV with email,department columns"),
    email_service: EmailService = Depends(get_email_service)
):
    """
    Invite every student listed in the CSV.

    Rows are processed independently; failures are reported, not fatal.
    """
    invitees = parse_invitation_csv(await csv_file.read())
    if not invitees:
        raise HTTPException(status_code=400, detail="CSV file has no rows")

    result, reasons = invite_students(invitees, email_service)
    message = "Students registered and invites sent."
    if reasons:
        message = "Some invitations failed: " + "; ".join(reasons)

    return FanOutResponse(
        message=message,
        recipient_count=result.total,
        sent=len(result.succeeded),
        failed=result.failed
    )


@router.get("/jobs", response_model=JobListResponse)
async def list_jobs():
    return JobListResponse(jobs=job_service.list_jobs())


@router.post("/jobs", response_model=JobResponse, status_code=201)
async def create_job(
    title: str = Form(..., min_length=1),
    company: str = Form(..., min_length=1),
    departments: List[str] = Form(...),
    location: Optional[str] = Form(None),
    salary: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    requirements: List[str] = Form([]),
    min_cgpa: Optional[float] = Form(None, alias="minCGPA", ge=0, le=10),
    deadline: Optional[date] = Form(None),
    exclude_placed: bool = Form(True, alias="excludePlaced"),
    pdf_file: Optional[UploadFile] = File(None, alias="pdfFile")
):
    """Create a job posting with an optional PDF attachment."""
    departments_json = encode_departments(parse_department_input(departments))

    pdf_path = None
    if pdf_file is not None and pdf_file.filename:
        pdf_path = await save_job_document(pdf_file)

    try:
        return job_service.create_job(
            title=title, company=company, departments_json=departments_json,
            location=location, salary=salary, description=description,
            requirements=[r for r in requirements if r.strip()],
            min_cgpa=min_cgpa, deadline=deadline, exclude_placed=exclude_placed,
            pdf_path=pdf_path
        )
    except Exception:
        # Row never written, don't leave the upload behind
        if pdf_path:
            remove_document(pdf_path)
        raise


@router.delete("/jobs/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: int):
    """Delete a job. Applications go with it; the PDF is removed afterwards."""
    job_service.delete_job(job_id)
    return MessageResponse(message="Job deleted successfully")


@router.get("/jobs/{job_id}/applications", response_model=JobApplicationListResponse)
async def get_job_applications(job_id: int):
    return JobApplicationListResponse(applications=application_service.applications_for_job(job_id))


@router.put("/applications/{application_id}/status", response_model=MessageResponse)
async def update_application_status(application_id: int, update: ApplicationStatusUpdate):
    application_service.update_application_status(application_id, update.status.value)
    return MessageResponse(message=f"Application marked {update.status.value}")


@router.get("/messages", response_model=AnnouncementListResponse)
async def list_messages():
    return AnnouncementListResponse(messages=message_service.list_messages())


@router.post("/messages", response_model=AnnouncementResponse, status_code=201)
async def create_message(message: MessageCreate):
    return message_service.create_message(message.content, message.departments)


@router.delete("/messages/{message_id}", response_model=MessageResponse)
async def delete_message(message_id: int):
    message_service.delete_message(message_id)
    return MessageResponse(message="Message deleted successfully")


@router.get("/filtered-jobs/{student_id}", response_model=JobListResponse)
async def filter_jobs_for_student(student_id: int):
    """Jobs the given student would see."""
    return JobListResponse(jobs=job_service.jobs_for_student(student_id))


@router.post("/messages/{message_id}/notify", response_model=FanOutResponse)
async def notify_students_on_message(
    message_id: int,
    email_service: EmailService = Depends(get_email_service)
):
    """Email every student in the message's departments."""
    result = message_service.notify_students(message_id, email_service)
    message = "Notifications sent successfully"
    if result.failed:
        message = f"Notifications sent with {len(result.failed)} failure(s)"
    return FanOutResponse(
        message=message,
        recipient_count=result.total,
        sent=len(result.succeeded),
        failed=result.failed
    )
