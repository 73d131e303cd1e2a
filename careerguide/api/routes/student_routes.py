"""
Student Routes (student role only)

GET /students/applications - Own course applications
POST /students/applications - Apply for a course
GET /students/dashboard - Applications, stats and notifications
POST /students/transcript - Upload (or replace) transcript
GET /students/transcript - Get own transcript
POST /students/admission/accept - Accept an admitted offer
GET /students/qualified-courses - Courses the transcript qualifies for
GET /students/jobs - Open jobs with company info
POST /students/jobs/apply - Apply for a job
GET /students/job-applications - Own job applications
GET /students/recommended-jobs - Open jobs matched to the profile
"""

from fastapi import APIRouter, Depends

from careerguide.core.auth import get_current_student
from careerguide.core.errors import APIError
from careerguide.db import COLLECTIONS, DocumentStore, get_store
from careerguide.schemas.schemas import (
    AcceptAdmissionRequest, ApplicationCreate, JobApplyRequest, TranscriptUpload,
)
from careerguide.services import admission_service, job_service, matching_service, notification_service
from careerguide.services.email_service import EmailService, get_email_service
from careerguide.utils.helpers import count_by_status, format_response, utc_now_iso

router = APIRouter(prefix="/students", tags=["Students"])


# ============================================================
# COURSE APPLICATIONS
# ============================================================

@router.get("/applications")
async def my_applications(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    applications = await store.query(COLLECTIONS["applications"], "studentId", "==", student["id"])
    applications.sort(key=lambda a: a.get("applicationDate") or "", reverse=True)
    message = "Applications retrieved successfully" if applications else "No applications found"
    return format_response(True, message, applications)


@router.post("/applications", status_code=201)
async def apply_for_course(
    request: ApplicationCreate,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store),
):
    """Max one application per course and two per institution."""
    application = await admission_service.submit_application(
        store, student, request.course_id, request.institution_id, request.documents, request.notes
    )
    return format_response(True, "Application submitted successfully", application)


@router.get("/dashboard")
async def dashboard(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    applications = await store.query(COLLECTIONS["applications"], "studentId", "==", student["id"])
    job_applications = await store.query(COLLECTIONS["job_applications"], "studentId", "==", student["id"])
    notifications = await notification_service.list_for_user(store, student["id"])
    transcript = await admission_service.get_transcript(store, student["id"])

    by_status = count_by_status(applications, "pending", "admitted", "rejected", "accepted", "waitlist")
    stats = {
        "totalApplications": len(applications),
        "pendingApplications": by_status["pending"],
        "admittedApplications": by_status["admitted"] + by_status["accepted"],
        "rejectedApplications": by_status["rejected"],
        "jobApplications": len(job_applications),
        "unreadNotifications": sum(1 for n in notifications if not n.get("read")),
        "hasTranscript": transcript is not None,
    }
    return format_response(True, "Dashboard data retrieved successfully", {
        "applications": applications,
        "jobApplications": job_applications,
        "notifications": notifications[:5],
        "stats": stats,
    })


# ============================================================
# TRANSCRIPT & ADMISSIONS
# ============================================================

@router.post("/transcript")
async def upload_transcript(
    request: TranscriptUpload,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store),
):
    """One transcript per student; uploading again replaces it."""
    data = request.model_dump(mode="json", by_alias=True, exclude_none=True)
    data.update({"studentId": student["id"], "uploadedAt": utc_now_iso()})

    existing = await admission_service.get_transcript(store, student["id"])
    if existing:
        transcript = await store.update(COLLECTIONS["transcripts"], existing["id"], data)
    else:
        transcript = await store.create(COLLECTIONS["transcripts"], data)
    return format_response(True, "Transcript uploaded successfully", transcript)


@router.get("/transcript")
async def get_transcript(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    transcript = await admission_service.get_transcript(store, student["id"])
    if not transcript:
        raise APIError(404, "No transcript found")
    return format_response(True, "Transcript retrieved successfully", transcript)


@router.post("/admission/accept")
async def accept_admission(
    request: AcceptAdmissionRequest,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store),
    email_service: EmailService = Depends(get_email_service),
):
    result = await admission_service.accept_admission(
        store, student["id"], request.application_id, email_service
    )
    return format_response(
        True, "Admission accepted successfully. Other offers have been declined.", result
    )


@router.get("/qualified-courses")
async def qualified_courses(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    result = await admission_service.qualified_courses(store, student["id"])
    return format_response(True, "Qualified courses retrieved successfully", result)


# ============================================================
# JOBS
# ============================================================

@router.get("/jobs")
async def available_jobs(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    jobs = await job_service.attach_companies(store, await job_service.open_jobs(store))
    applied = {
        a["jobId"] for a in await store.query(COLLECTIONS["job_applications"], "studentId", "==", student["id"])
    }
    jobs = [{**job, "hasApplied": job["id"] in applied} for job in jobs]
    return format_response(True, "Jobs retrieved successfully", jobs)


@router.post("/jobs/apply", status_code=201)
async def apply_for_job(
    request: JobApplyRequest,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store),
):
    application = await job_service.apply_to_job(store, student, request.job_id, request.cover_letter)
    return format_response(True, "Job application submitted successfully", application)


@router.get("/job-applications")
async def my_job_applications(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    applications = await store.query(COLLECTIONS["job_applications"], "studentId", "==", student["id"])
    result = []
    for application in applications:
        job = await store.get(COLLECTIONS["jobs"], application["jobId"])
        result.append({**application, "job": job})
    result.sort(key=lambda a: a.get("appliedDate") or "", reverse=True)
    return format_response(True, "Job applications retrieved successfully", result)


@router.get("/recommended-jobs")
async def recommended_jobs(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    jobs = matching_service.recommend_jobs(student, await job_service.open_jobs(store))
    return format_response(True, "Recommended jobs retrieved successfully", jobs)
