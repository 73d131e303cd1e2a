"""
Job postings and job applications.

Shared by the student, company and public job routes.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from careerguide.core.errors import APIError
from careerguide.db import COLLECTIONS, DocumentStore, DuplicateDocumentError
from careerguide.schemas.schemas import JobCreate
from careerguide.services import notification_service
from careerguide.utils.helpers import utc_now, utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Remote"
DEFAULT_SALARY = "Negotiable"
DEFAULT_TYPE = "full-time"
DEFAULT_DEADLINE_DAYS = 30


async def create_job(store: DocumentStore, company: dict, job: JobCreate) -> dict:
    now = utc_now()
    data = {
        "companyId": company["id"],
        "companyName": company.get("companyName") or company.get("name"),
        "title": job.title,
        "description": job.description,
        "requirements": job.requirements,
        "location": job.location or DEFAULT_LOCATION,
        "salary": job.salary if job.salary not in (None, "") else DEFAULT_SALARY,
        "type": job.type or DEFAULT_TYPE,
        "status": "open",
        "postedDate": now.isoformat(),
        "deadline": job.deadline or (now + timedelta(days=DEFAULT_DEADLINE_DAYS)).isoformat(),
        "createdAt": now.isoformat(),
        "updatedAt": now.isoformat(),
    }
    created = await store.create(COLLECTIONS["jobs"], data)
    logger.info("Company %s posted job %s", company["id"], created["id"])
    return created


async def attach_companies(store: DocumentStore, jobs: List[dict]) -> List[dict]:
    """Add a ``company`` summary to each job."""
    companies = {}
    result = []
    for job in jobs:
        company_id = job.get("companyId")
        if company_id not in companies:
            company = await store.get(COLLECTIONS["users"], company_id) if company_id else None
            companies[company_id] = {
                "id": company_id,
                "name": company.get("companyName") or company.get("name"),
                "industry": company.get("industry"),
                "website": company.get("website"),
            } if company else None
        result.append({**job, "company": companies[company_id]})
    return result


async def open_jobs(store: DocumentStore) -> List[dict]:
    jobs = await store.query(COLLECTIONS["jobs"], "status", "==", "open")
    return sorted(jobs, key=lambda j: j.get("postedDate") or "", reverse=True)


async def apply_to_job(
    store: DocumentStore, student: dict, job_id: str, cover_letter: Optional[str] = None
) -> dict:
    """One application per (student, job); the job must exist and be open."""
    job = await store.get(COLLECTIONS["jobs"], job_id)
    if not job:
        raise APIError(404, "Job not found")
    if job.get("status") != "open":
        raise APIError(400, "This job is no longer accepting applications")

    if await store.find(COLLECTIONS["job_applications"], {"studentId": student["id"], "jobId": job_id}):
        raise APIError(400, "You have already applied for this job")

    now = utc_now_iso()
    try:
        application = await store.create(COLLECTIONS["job_applications"], {
            "jobId": job_id,
            "jobTitle": job.get("title"),
            "companyId": job.get("companyId"),
            "studentId": student["id"],
            "studentName": student.get("name"),
            "studentEmail": student.get("email"),
            "coverLetter": cover_letter or "",
            "status": "pending",
            "appliedDate": now,
            "createdAt": now,
            "updatedAt": now,
        })
    except DuplicateDocumentError:
        raise APIError(400, "You have already applied for this job")

    if job.get("companyId"):
        await notification_service.notify(
            store, job["companyId"], "New Job Application",
            f"{student.get('name')} applied for {job.get('title')}.",
            type="job", related_id=application["id"],
        )
    logger.info("Student %s applied for job %s", student["id"], job_id)
    return application


async def get_company_job(store: DocumentStore, company: dict, job_id: str) -> dict:
    """The job if it belongs to ``company``, otherwise 404."""
    job = await store.get(COLLECTIONS["jobs"], job_id)
    if not job or job.get("companyId") != company["id"]:
        raise APIError(404, "Job not found")
    return job
