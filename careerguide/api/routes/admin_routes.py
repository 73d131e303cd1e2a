"""
Admin Routes (admin role only)

GET /admin/dashboard - System statistics
GET /admin/recent-activity - Latest registrations, applications and jobs
GET /admin/institutions - All institutions
GET /admin/companies - All company accounts
GET /admin/users - All users (optional ?role= filter)
PATCH /admin/institutions/{id}/status - Activate / suspend an institution
PATCH /admin/companies/{id}/status - Activate / suspend a company
PATCH /admin/users/{id}/status - Activate / suspend any user
GET /admin/reports - System report (?period=weekly|monthly|yearly)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from careerguide.core.auth import get_current_admin
from careerguide.core.errors import APIError
from careerguide.db import COLLECTIONS, DocumentStore, get_store
from careerguide.schemas.schemas import InstitutionStatusUpdate, UserRole, UserStatusUpdate
from careerguide.services import notification_service, report_service
from careerguide.services.email_service import EmailService, get_email_service
from careerguide.utils.helpers import format_response, sanitize_user, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

RECENT_ACTIVITY_LIMIT = 10


@router.get("/dashboard")
async def dashboard(admin: dict = Depends(get_current_admin), store: DocumentStore = Depends(get_store)):
    users = await store.list(COLLECTIONS["users"])
    institutions = await store.list(COLLECTIONS["institutions"])
    applications = await store.list(COLLECTIONS["applications"])
    jobs = await store.list(COLLECTIONS["jobs"])

    stats = {
        "totalUsers": len(users),
        "totalStudents": sum(1 for u in users if u.get("role") == "student"),
        "totalCompanies": sum(1 for u in users if u.get("role") == "company"),
        "totalInstitutions": len(institutions),
        "pendingInstitutions": sum(1 for i in institutions if i.get("status") == "pending"),
        "totalApplications": len(applications),
        "pendingApplications": sum(1 for a in applications if a.get("status") == "pending"),
        "totalJobs": len(jobs),
        "activeJobs": sum(1 for j in jobs if j.get("status") == "open"),
    }
    return format_response(True, "Dashboard data retrieved successfully", {"stats": stats})


@router.get("/recent-activity")
async def recent_activity(admin: dict = Depends(get_current_admin), store: DocumentStore = Depends(get_store)):
    limit = RECENT_ACTIVITY_LIMIT
    users = await store.list(COLLECTIONS["users"], order_by="-createdAt", limit=limit)
    applications = await store.list(COLLECTIONS["applications"], order_by="-createdAt", limit=limit)
    jobs = await store.list(COLLECTIONS["jobs"], order_by="-createdAt", limit=limit)

    activity = [
        {"id": u["id"], "type": "registration", "timestamp": u.get("createdAt"),
         "description": f"{u.get('name')} registered as {u.get('role')}"}
        for u in users
    ]
    activity += [
        {"id": a["id"], "type": "application", "timestamp": a.get("createdAt"),
         "description": f"{a.get('studentName')} applied to {a.get('courseName') or a.get('courseId')}"}
        for a in applications
    ]
    activity += [
        {"id": j["id"], "type": "job", "timestamp": j.get("createdAt"),
         "description": f"{j.get('companyName') or 'A company'} posted {j.get('title')}"}
        for j in jobs
    ]
    activity.sort(key=lambda item: item["timestamp"] or "", reverse=True)
    return format_response(True, "Recent activity retrieved successfully", activity[:limit])


@router.get("/institutions")
async def list_institutions(admin: dict = Depends(get_current_admin), store: DocumentStore = Depends(get_store)):
    institutions = await store.list(COLLECTIONS["institutions"], order_by="name")
    return format_response(True, "Institutions retrieved successfully", institutions)


@router.get("/companies")
async def list_companies(admin: dict = Depends(get_current_admin), store: DocumentStore = Depends(get_store)):
    companies = await store.query(COLLECTIONS["users"], "role", "==", UserRole.company.value)
    return format_response(True, "Companies retrieved successfully", [sanitize_user(c) for c in companies])


@router.get("/users")
async def list_users(
    role: Optional[UserRole] = Query(None),
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store),
):
    if role:
        users = await store.query(COLLECTIONS["users"], "role", "==", role.value)
    else:
        users = await store.list(COLLECTIONS["users"], order_by="-createdAt")
    return format_response(True, "Users retrieved successfully", [sanitize_user(u) for u in users])


@router.patch("/institutions/{institution_id}/status")
async def update_institution_status(
    institution_id: str,
    request: InstitutionStatusUpdate,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store),
):
    status = request.status.value
    changes = {"status": status, "updatedAt": utc_now_iso()}
    if status == "active":
        changes["verificationStatus"] = "verified"

    institution = await store.update(COLLECTIONS["institutions"], institution_id, changes)
    if institution is None:
        raise APIError(404, "Institution not found")

    if institution.get("adminId"):
        await notification_service.notify(
            store, institution["adminId"], "Institution Status Update",
            f"{institution.get('name')} is now {status}.", related_id=institution_id,
        )
    logger.info("Admin %s set institution %s to %s", admin["id"], institution_id, status)
    return format_response(True, f"Institution status updated to {status}", institution)


async def _set_user_status(
    store: DocumentStore,
    email_service: EmailService,
    admin: dict,
    user_id: str,
    status: str,
    role: Optional[str] = None,
) -> dict:
    user = await store.get(COLLECTIONS["users"], user_id)
    if not user or (role and user.get("role") != role):
        raise APIError(404, f"{(role or 'user').capitalize()} not found")
    if user_id == admin["id"]:
        raise APIError(400, "You cannot change your own account status")

    changes = {"status": status, "updatedAt": utc_now_iso()}
    if status == "active":
        changes["verificationStatus"] = "verified"
    updated = await store.update(COLLECTIONS["users"], user_id, changes)

    if status == "active" and user.get("status") != "active":
        await email_service.send_account_approved_email(updated)
    logger.info("Admin %s set user %s to %s", admin["id"], user_id, status)
    return sanitize_user(updated)


@router.patch("/companies/{company_id}/status")
async def update_company_status(
    company_id: str,
    request: UserStatusUpdate,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store),
    email_service: EmailService = Depends(get_email_service),
):
    company = await _set_user_status(
        store, email_service, admin, company_id, request.status.value, role=UserRole.company.value
    )
    return format_response(True, f"Company status updated to {request.status.value}", company)


@router.patch("/users/{user_id}/status")
async def update_user_status(
    user_id: str,
    request: UserStatusUpdate,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store),
    email_service: EmailService = Depends(get_email_service),
):
    user = await _set_user_status(store, email_service, admin, user_id, request.status.value)
    return format_response(True, f"User status updated to {request.status.value}", user)


@router.get("/reports")
async def system_report(
    period: str = Query("monthly", pattern="^(weekly|monthly|yearly)$"),
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store),
):
    report = await report_service.generate_system_report(store, period)
    return format_response(True, "System report generated successfully", report)
