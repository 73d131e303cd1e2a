"""
Company Routes (company role only)

GET /companies/dashboard - Own jobs, applicant counts, stats
GET /companies/jobs - Own job postings
POST /companies/jobs - Post a job
GET /companies/jobs/{job_id}/applicants - Applications for one of own jobs
PATCH /companies/jobs/{job_id}/status - Open / close a job
PATCH /companies/job-applications/{application_id}/status - Review an applicant
PUT /companies/profile - Update company profile
"""

import logging

from fastapi import APIRouter, Depends

from careerguide.core.auth import get_current_company
from careerguide.core.errors import APIError
from careerguide.db import COLLECTIONS, DocumentStore, get_store
from careerguide.schemas.schemas import (
    CompanyProfileUpdate, JobApplicationStatusUpdate, JobCreate, JobStatusUpdate,
)
from careerguide.services import job_service, notification_service
from careerguide.utils.helpers import format_response, sanitize_user, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("/dashboard")
async def dashboard(company: dict = Depends(get_current_company), store: DocumentStore = Depends(get_store)):
    jobs = await store.query(COLLECTIONS["jobs"], "companyId", "==", company["id"])
    applications = []
    for job in jobs:
        applications += await store.query(COLLECTIONS["job_applications"], "jobId", "==", job["id"])
    applications.sort(key=lambda a: a.get("appliedDate") or "", reverse=True)

    stats = {
        "totalJobs": len(jobs),
        "activeJobs": sum(1 for j in jobs if j.get("status") == "open"),
        "totalApplications": len(applications),
        "pendingApplications": sum(1 for a in applications if a.get("status") == "pending"),
    }
    return format_response(True, "Dashboard data retrieved successfully", {
        "company": sanitize_user(company),
        "jobs": jobs,
        "recentApplications": applications[:10],
        "stats": stats,
    })


@router.get("/jobs")
async def my_jobs(company: dict = Depends(get_current_company), store: DocumentStore = Depends(get_store)):
    jobs = await store.query(COLLECTIONS["jobs"], "companyId", "==", company["id"])
    jobs.sort(key=lambda j: j.get("postedDate") or "", reverse=True)
    return format_response(True, "Jobs retrieved successfully", jobs)


@router.post("/jobs", status_code=201)
async def post_job(
    request: JobCreate,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_store),
):
    job = await job_service.create_job(store, company, request)
    return format_response(True, "Job posted successfully", job)


@router.get("/jobs/{job_id}/applicants")
async def job_applicants(
    job_id: str,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_store),
):
    job = await job_service.get_company_job(store, company, job_id)
    applicants = await store.query(COLLECTIONS["job_applications"], "jobId", "==", job_id)
    applicants.sort(key=lambda a: a.get("appliedDate") or "")
    return format_response(True, "Applicants retrieved successfully", {"job": job, "applicants": applicants})


@router.patch("/jobs/{job_id}/status")
async def update_job_status(
    job_id: str,
    request: JobStatusUpdate,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_store),
):
    await job_service.get_company_job(store, company, job_id)
    job = await store.update(COLLECTIONS["jobs"], job_id, {
        "status": request.status.value,
        "updatedAt": utc_now_iso(),
    })
    return format_response(True, f"Job status updated to {request.status.value}", job)


@router.patch("/job-applications/{application_id}/status")
async def update_job_application_status(
    application_id: str,
    request: JobApplicationStatusUpdate,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_store),
):
    application = await store.get(COLLECTIONS["job_applications"], application_id)
    if not application:
        raise APIError(404, "Job application not found")
    job = await job_service.get_company_job(store, company, application["jobId"])

    status = request.status.value
    updated = await store.update(COLLECTIONS["job_applications"], application_id, {
        "status": status,
        "updatedAt": utc_now_iso(),
    })
    if application.get("status") != status:
        await notification_service.notify(
            store, application["studentId"], "Job Application Update",
            f"Your application for {job.get('title')} is now {status}.",
            type="job", related_id=application_id,
            priority="high" if status in ("accepted", "rejected") else "normal",
        )
    logger.info("Company %s set job application %s to %s", company["id"], application_id, status)
    return format_response(True, f"Application status updated to {status}", updated)


@router.put("/profile")
async def update_profile(
    request: CompanyProfileUpdate,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_store),
):
    changes = request.model_dump(mode="json", by_alias=True, exclude_unset=True)
    changes["updatedAt"] = utc_now_iso()
    changes["profileCompleted"] = True
    updated = await store.update(COLLECTIONS["users"], company["id"], changes)
    return format_response(True, "Profile updated successfully", sanitize_user(updated))
