"""
Institution Routes

Public:
GET /institutions - List institutions (optional ?status= filter)
GET /institutions/courses/all - Every course on the platform
GET /institutions/{id} - Institution details
GET /institutions/{id}/courses - Courses offered by an institution
GET /institutions/{id}/faculties - Faculties of an institution

Institution role:
GET /institutions/dashboard - Own courses, latest applications, stats
POST /institutions/courses - Add a course
POST /institutions/faculties - Add a faculty
GET /institutions/applications - Applications to own courses
GET /institutions/reports - Institution report
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from careerguide.core.auth import get_current_institution
from careerguide.core.errors import APIError
from careerguide.db import COLLECTIONS, DocumentStore, get_store
from careerguide.schemas.schemas import CourseCreate, FacultyCreate, InstitutionStatus
from careerguide.services import report_service
from careerguide.services.admission_service import required_subjects
from careerguide.services.report_service import APPLICATION_STATUSES
from careerguide.utils.helpers import count_by_status, format_response, institution_id_for, utc_now_iso

router = APIRouter(prefix="/institutions", tags=["Institutions"])


def shape_course(course: dict) -> dict:
    """Course as the listing pages expect it."""
    return {
        **course,
        "requirements": {
            "subjects": required_subjects(course),
            "minimumGrade": course.get("minimumGrade", "C"),
        },
        "availableSeats": course.get("availableSeats", course.get("seats", 0)),
    }


# ============================================================
# INSTITUTION ROLE (declared before /{institution_id})
# ============================================================

@router.get("/dashboard")
async def dashboard(user: dict = Depends(get_current_institution), store: DocumentStore = Depends(get_store)):
    institution_id = institution_id_for(user)
    courses = await store.query(COLLECTIONS["courses"], "institutionId", "==", institution_id)
    applications = await store.query(COLLECTIONS["applications"], "institutionId", "==", institution_id)
    applications.sort(key=lambda a: a.get("createdAt") or "", reverse=True)

    by_status = count_by_status(applications, *APPLICATION_STATUSES)
    stats = {
        "totalCourses": len(courses),
        "totalApplications": len(applications),
        "pendingApplications": by_status["pending"],
        "admittedStudents": by_status["admitted"] + by_status["accepted"],
        "rejectedApplications": by_status["rejected"],
    }
    return format_response(True, "Dashboard data retrieved successfully", {
        "institution": await store.get(COLLECTIONS["institutions"], institution_id),
        "courses": [shape_course(c) for c in courses],
        "recentApplications": applications[:10],
        "stats": stats,
    })


@router.post("/courses", status_code=201)
async def create_course(
    request: CourseCreate,
    user: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store),
):
    institution_id = institution_id_for(user)
    if request.faculty_id:
        faculty = await store.get(COLLECTIONS["faculties"], request.faculty_id)
        if not faculty or faculty.get("institutionId") != institution_id:
            raise APIError(404, "Faculty not found")

    now = utc_now_iso()
    data = request.model_dump(mode="json", by_alias=True, exclude_none=True)
    data.update({
        "status": request.status.value,
        "institutionId": institution_id,
        "availableSeats": request.seats,
        "createdAt": now,
        "updatedAt": now,
    })
    course = await store.create(COLLECTIONS["courses"], data)
    return format_response(True, "Course created successfully", shape_course(course))


@router.post("/faculties", status_code=201)
async def create_faculty(
    request: FacultyCreate,
    user: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store),
):
    data = request.model_dump(mode="json", by_alias=True, exclude_none=True)
    data.update({"institutionId": institution_id_for(user), "createdAt": utc_now_iso()})
    faculty = await store.create(COLLECTIONS["faculties"], data)
    return format_response(True, "Faculty created successfully", faculty)


@router.get("/applications")
async def institution_applications(
    user: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store),
):
    applications = await store.query(
        COLLECTIONS["applications"], "institutionId", "==", institution_id_for(user)
    )
    applications.sort(key=lambda a: a.get("createdAt") or "", reverse=True)
    return format_response(True, "Applications retrieved successfully", applications)


@router.get("/reports")
async def institution_report(
    period: str = Query("monthly", pattern="^(weekly|monthly|yearly)$"),
    user: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store),
):
    report = await report_service.generate_institution_report(store, institution_id_for(user), period)
    return format_response(True, "Institution report generated successfully", report)


# ============================================================
# PUBLIC
# ============================================================

@router.get("")
async def list_institutions(
    status: Optional[InstitutionStatus] = Query(None),
    store: DocumentStore = Depends(get_store),
):
    if status:
        institutions = await store.query(COLLECTIONS["institutions"], "status", "==", status.value)
    else:
        institutions = await store.list(COLLECTIONS["institutions"], order_by="name")
    return format_response(True, "Institutions retrieved successfully", institutions)


@router.get("/courses/all")
async def all_courses(store: DocumentStore = Depends(get_store)):
    courses = await store.list(COLLECTIONS["courses"], order_by="name")
    return format_response(True, "Courses retrieved successfully", [shape_course(c) for c in courses])


@router.get("/{institution_id}")
async def get_institution(institution_id: str, store: DocumentStore = Depends(get_store)):
    institution = await store.get(COLLECTIONS["institutions"], institution_id)
    if not institution:
        raise APIError(404, "Institution not found")
    return format_response(True, "Institution retrieved successfully", institution)


@router.get("/{institution_id}/courses")
async def institution_courses(institution_id: str, store: DocumentStore = Depends(get_store)):
    courses = await store.query(COLLECTIONS["courses"], "institutionId", "==", institution_id)
    return format_response(True, "Courses retrieved successfully", [shape_course(c) for c in courses])


@router.get("/{institution_id}/faculties")
async def institution_faculties(institution_id: str, store: DocumentStore = Depends(get_store)):
    faculties = await store.query(COLLECTIONS["faculties"], "institutionId", "==", institution_id)
    return format_response(True, "Faculties retrieved successfully", faculties)
