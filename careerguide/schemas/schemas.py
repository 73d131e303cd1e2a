"""
Pydantic Schemas - Request Validation

All API request schemas in one file for simplicity.
Wire names are camelCase (``institutionName``); Python attributes are
snake_case. Both spellings are accepted on input.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Union
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    institution = "institution"
    company = "company"
    admin = "admin"


class UserStatus(str, Enum):
    active = "active"
    suspended = "suspended"
    pending = "pending"


# Institutions share the user status values
InstitutionStatus = UserStatus


class VerificationStatus(str, Enum):
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


class CourseStatus(str, Enum):
    open = "open"
    closed = "closed"
    waitlist = "waitlist"


class ApplicationStatus(str, Enum):
    pending = "pending"
    under_review = "under_review"
    approved = "approved"
    admitted = "admitted"
    rejected = "rejected"
    waitlist = "waitlist"
    accepted = "accepted"


class JobStatus(str, Enum):
    open = "open"
    closed = "closed"


class JobApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    accepted = "accepted"
    rejected = "rejected"


class NotificationType(str, Enum):
    application = "application"
    job = "job"
    system = "system"
    message = "message"


class NotificationPriority(str, Enum):
    low = "low"
    normal = "normal"
    high = "high"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str
    role: UserRole
    institution_name: Optional[str] = None
    company_name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _strip_required(v)


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class EmailRequest(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ResetPasswordRequest(CamelModel):
    token: str
    password: str = Field(..., min_length=6)


class Address(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    address: Optional[Address] = None
    # Student matching fields
    skills: Optional[List[str]] = None
    course: Optional[str] = None
    experience: Optional[float] = Field(None, ge=0)
    preferred_location: Optional[str] = None


# ============================================================
# INSTITUTION SCHEMAS
# ============================================================

class CourseCreate(CamelModel):
    name: str
    code: Optional[str] = None
    description: str = ""
    requirements: List[str] = []
    minimum_grade: str = "C"
    duration: Optional[str] = None
    fees: float = Field(0, ge=0)
    seats: int = Field(50, ge=1)
    faculty_id: Optional[str] = None
    status: CourseStatus = CourseStatus.open
    application_deadline: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _strip_required(v)


class FacultyCreate(CamelModel):
    name: str
    description: str = ""
    dean: Optional[str] = None
    contact_email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _strip_required(v)


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class ApplicationCreate(CamelModel):
    course_id: str
    institution_id: str
    documents: List[dict] = []
    notes: Optional[str] = None


class TranscriptUpload(CamelModel):
    grades: Dict[str, str]
    institution: Optional[str] = None
    program: Optional[str] = None
    graduation_year: Optional[int] = Field(None, ge=1950, le=2100)
    gpa: Optional[float] = Field(None, ge=0)

    @field_validator("grades")
    @classmethod
    def normalize_grades(cls, v: Dict[str, str]) -> Dict[str, str]:
        return {subject.strip(): grade.strip().upper() for subject, grade in v.items()}


class AcceptAdmissionRequest(CamelModel):
    application_id: str


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(CamelModel):
    title: str
    description: str
    requirements: Union[List[str], str]
    location: Optional[str] = None
    salary: Optional[Union[str, float]] = None
    type: Optional[str] = None
    deadline: Optional[str] = None

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("requirements")
    @classmethod
    def requirements_as_list(cls, v: Union[List[str], str]) -> List[str]:
        items = [v] if isinstance(v, str) else v
        items = [item.strip() for item in items if item and item.strip()]
        if not items:
            raise ValueError("at least one requirement is needed")
        return items


class JobApplyRequest(CamelModel):
    job_id: str
    cover_letter: Optional[str] = None


class CompanyProfileUpdate(CamelModel):
    company_name: Optional[str] = None
    description: Optional[str] = None
    industry: Optional[str] = None
    website: Optional[str] = None
    contact_info: Optional[dict] = None


# ============================================================
# STATUS UPDATE SCHEMAS
# ============================================================

class JobStatusUpdate(CamelModel):
    status: JobStatus


class JobApplicationStatusUpdate(CamelModel):
    status: JobApplicationStatus


class ApplicationStatusUpdate(CamelModel):
    status: ApplicationStatus
    notes: Optional[str] = None


class UserStatusUpdate(CamelModel):
    status: UserStatus


class InstitutionStatusUpdate(CamelModel):
    status: InstitutionStatus
