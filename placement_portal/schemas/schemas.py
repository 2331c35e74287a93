"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    admin = "admin"


class Department(str, Enum):
    computer_science = "Computer Science"
    information_technology = "Information Technology"
    electronics_communication = "Electronics and Communication"
    electrical = "Electrical Engineering"
    mechanical = "Mechanical Engineering"
    civil = "Civil Engineering"


# Sentinel department-set member meaning "every department"
ALL_DEPARTMENTS = "all"

DEPARTMENT_NAMES = [d.value for d in Department]


class ApplicationStatus(str, Enum):
    pending = "pending"
    shortlisted = "shortlisted"
    selected = "selected"
    rejected = "rejected"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    role: UserRole

class TokenResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class UserResponse(BaseModel):
    id: int
    email: str
    role: str
    name: Optional[str] = None
    department: Optional[str] = None


# ============================================================
# REGISTRATION SCHEMAS
# ============================================================

class InviteRequest(BaseModel):
    email: EmailStr
    department: Department

class InviteResponse(BaseModel):
    message: str
    email: str
    department: str

class StudentRegistrationRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    department: Department
    name: str = Field(..., min_length=2, max_length=200)
    # Signed invitation token from the registration link, if the student has one
    token: Optional[str] = None

class AdminRegistrationRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    department: Optional[str] = None
    name: Optional[str] = None

class RegistrationResponse(BaseModel):
    message: str
    access_token: str
    user: UserResponse


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class EducationEntry(BaseModel):
    level: str
    institution: str
    percentage: str
    year: str

class ProjectEntry(BaseModel):
    name: str
    description: str = ""
    year: str = ""

class ProfileData(BaseModel):
    full_name: str
    phone_number: Optional[str] = None
    address: Optional[str] = None
    department: Optional[str] = None
    roll_number: Optional[str] = None
    current_year: Optional[str] = None
    cgpa: float = Field(..., ge=0, le=10)
    backlogs: int = Field(0, ge=0)
    placement_status: str = "Not Placed"
    education_history: List[EducationEntry] = []
    skills: List[str] = []
    projects: List[ProjectEntry] = []

class ProfileCreate(ProfileData):
    """Detailed-info step of registration; carries the account id."""
    user_id: int

class ProfileResponse(ProfileData):
    id: int
    user_id: int
    email: Optional[str] = None


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobResponse(BaseModel):
    id: int
    title: str
    company: str
    location: Optional[str] = None
    salary: Optional[str] = None
    description: Optional[str] = None
    requirements: List[str] = []
    departments: List[str] = []
    min_cgpa: Optional[float] = None
    deadline: Optional[date] = None
    exclude_placed: bool = False
    pdf_path: Optional[str] = None
    posted_date: datetime

class JobListResponse(BaseModel):
    jobs: List[JobResponse]

class AppliedJobResponse(BaseModel):
    id: int
    title: str
    company: str
    location: Optional[str] = None
    salary: Optional[str] = None
    description: Optional[str] = None
    departments: List[str] = []
    deadline: Optional[date] = None
    pdf_path: Optional[str] = None
    posted_date: datetime
    status: str

class AppliedJobListResponse(BaseModel):
    appliedJobs: List[AppliedJobResponse]


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus

class ApplicationStatusItem(BaseModel):
    job_id: int
    status: str

class ApplicationStatusListResponse(BaseModel):
    applications: List[ApplicationStatusItem]

class ApplicantProfile(BaseModel):
    full_name: Optional[str] = None
    roll_number: Optional[str] = None
    department: Optional[str] = None
    cgpa: Optional[float] = None
    backlogs: Optional[int] = None
    phone_number: Optional[str] = None
    email: str

class JobApplicationResponse(BaseModel):
    id: int
    studentId: int
    status: str
    studentProfile: ApplicantProfile

class JobApplicationListResponse(BaseModel):
    applications: List[JobApplicationResponse]


# ============================================================
# MESSAGE SCHEMAS
# ============================================================

class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1)
    departments: List[str] = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content cannot be blank")
        return v

class AnnouncementResponse(BaseModel):
    id: int
    content: str
    departments: List[str]
    created_at: datetime

class AnnouncementListResponse(BaseModel):
    messages: List[AnnouncementResponse]


# ============================================================
# FAN-OUT SCHEMAS
# ============================================================

class FanOutResponse(BaseModel):
    message: str
    recipient_count: int
    sent: int
    failed: List[str] = []


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
