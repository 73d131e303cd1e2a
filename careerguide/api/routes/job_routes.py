"""
Job Routes

GET /jobs - List jobs (optional ?status= and ?companyId= filters)
GET /jobs/{job_id} - Get job details
POST /jobs/apply - Apply to job (student only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from careerguide.core.auth import get_current_student
from careerguide.core.errors import APIError
from careerguide.db import COLLECTIONS, DocumentStore, get_store
from careerguide.schemas.schemas import JobApplyRequest, JobStatus
from careerguide.services import job_service
from careerguide.utils.helpers import format_response

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("")
async def list_jobs(
    status: Optional[JobStatus] = Query(None),
    company_id: Optional[str] = Query(None, alias="companyId"),
    store: DocumentStore = Depends(get_store),
):
    """List job postings, newest first."""
    filters = {}
    if status:
        filters["status"] = status.value
    if company_id:
        filters["companyId"] = company_id

    if filters:
        jobs = await store.find(COLLECTIONS["jobs"], filters)
    else:
        jobs = await store.list(COLLECTIONS["jobs"])
    jobs.sort(key=lambda j: j.get("postedDate") or "", reverse=True)
    return format_response(True, "Jobs retrieved successfully", await job_service.attach_companies(store, jobs))


@router.post("/apply", status_code=201)
async def apply_to_job(
    request: JobApplyRequest,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store),
):
    application = await job_service.apply_to_job(store, student, request.job_id, request.cover_letter)
    return format_response(True, "Job application submitted successfully", application)


@router.get("/{job_id}")
async def get_job(job_id: str, store: DocumentStore = Depends(get_store)):
    job = await store.get(COLLECTIONS["jobs"], job_id)
    if not job:
        raise APIError(404, "Job not found")
    job = (await job_service.attach_companies(store, [job]))[0]
    return format_response(True, "Job retrieved successfully", job)
