"""
Application Routes

GET /applications - List applications (admin: all, institution: own)
GET /applications/{id} - One application (admin, owning institution, applicant)
POST /applications - Apply for a course (student)
PATCH /applications/{id}/status - Decide on an application (admin, institution; not "accepted")
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from careerguide.core.auth import authenticate, authorize, get_current_student
from careerguide.core.errors import APIError
from careerguide.db import COLLECTIONS, DocumentStore, get_store
from careerguide.schemas.schemas import ApplicationCreate, ApplicationStatus, ApplicationStatusUpdate
from careerguide.services import admission_service
from careerguide.services.email_service import EmailService, get_email_service
from careerguide.utils.helpers import format_response, institution_id_for

router = APIRouter(prefix="/applications", tags=["Applications"])

get_reviewer = authorize("admin", "institution")


def can_view(user: dict, application: dict) -> bool:
    role = user.get("role")
    if role == "admin":
        return True
    if role == "institution":
        return application.get("institutionId") == institution_id_for(user)
    return application.get("studentId") == user["id"]


@router.get("")
async def list_applications(
    status: Optional[ApplicationStatus] = Query(None),
    user: dict = Depends(get_reviewer),
    store: DocumentStore = Depends(get_store),
):
    filters = {}
    if user["role"] == "institution":
        filters["institutionId"] = institution_id_for(user)
    if status:
        filters["status"] = status.value

    if filters:
        applications = await store.find(COLLECTIONS["applications"], filters)
    else:
        applications = await store.list(COLLECTIONS["applications"])
    applications.sort(key=lambda a: a.get("createdAt") or "", reverse=True)
    return format_response(True, "Applications retrieved successfully", applications)


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    user: dict = Depends(authenticate),
    store: DocumentStore = Depends(get_store),
):
    application = await store.get(COLLECTIONS["applications"], application_id)
    if not application:
        raise APIError(404, "Application not found")
    if not can_view(user, application):
        raise APIError(403, "Not authorized to view this application")
    return format_response(True, "Application retrieved successfully", application)


@router.post("", status_code=201)
async def create_application(
    request: ApplicationCreate,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store),
):
    application = await admission_service.submit_application(
        store, student, request.course_id, request.institution_id, request.documents, request.notes
    )
    return format_response(True, "Application submitted successfully", application)


@router.patch("/{application_id}/status")
async def update_application_status(
    application_id: str,
    request: ApplicationStatusUpdate,
    user: dict = Depends(get_reviewer),
    store: DocumentStore = Depends(get_store),
    email_service: EmailService = Depends(get_email_service),
):
    application = await store.get(COLLECTIONS["applications"], application_id)
    if not application:
        raise APIError(404, "Application not found")
    if not can_view(user, application):
        raise APIError(403, "Not authorized to update this application")
    if request.status == ApplicationStatus.accepted:
        raise APIError(400, "Only the student can accept an admission offer")

    updated = await admission_service.set_application_status(
        store, application, request.status.value, email_service, notes=request.notes
    )
    return format_response(True, "Application status updated successfully", updated)
