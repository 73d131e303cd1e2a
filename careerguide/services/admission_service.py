"""
Admission Service

PURPOSE:
Business rules for course applications.

RULES:
1. A student applies to a course at most once
2. A student holds at most 2 applications per institution
3. Course qualification: the transcript must contain every required
   subject, and the average grade over those subjects must be C (3) or above
4. Accepting an admitted offer declines every other admitted offer and
   promotes the earliest pending applicant of each released course

Rule 2 is a read-then-write check: two concurrent submissions for the same
student can both pass it. Rule 1 is also backed by the unique index on
(studentId, courseId).
"""

import logging
from typing import Dict, List, Optional

from careerguide.core.errors import APIError
from careerguide.db import COLLECTIONS, DocumentStore, DuplicateDocumentError
from careerguide.services import notification_service
from careerguide.services.email_service import EmailService
from careerguide.utils.helpers import utc_now_iso

logger = logging.getLogger(__name__)

GRADE_POINTS = {"A": 5, "B": 4, "C": 3, "D": 2, "E": 1, "F": 0}
PASS_AVERAGE = 3
MAX_APPLICATIONS_PER_INSTITUTION = 2

# Statuses that hold a seat on the course
SEAT_HOLDING = ("admitted", "accepted")


# ============================================================
# APPLICATION SUBMISSION
# ============================================================

async def check_application_limits(
    store: DocumentStore, student_id: str, course_id: str, institution_id: str
) -> None:
    """Raise 400 if the student may not apply to this course."""
    existing = await store.find(
        COLLECTIONS["applications"], {"studentId": student_id, "courseId": course_id}
    )
    if existing:
        raise APIError(400, "You have already applied to this course")

    at_institution = await store.count(
        COLLECTIONS["applications"], {"studentId": student_id, "institutionId": institution_id}
    )
    if at_institution >= MAX_APPLICATIONS_PER_INSTITUTION:
        raise APIError(
            400,
            f"You can only apply to a maximum of {MAX_APPLICATIONS_PER_INSTITUTION} courses per institution",
        )


async def submit_application(
    store: DocumentStore,
    student: dict,
    course_id: str,
    institution_id: str,
    documents: Optional[list] = None,
    notes: Optional[str] = None,
) -> dict:
    """
    Validate limits and create a pending application for ``student``.

    The course's own ``institutionId`` is authoritative; a request naming
    another institution is rejected.
    """
    course = await store.get(COLLECTIONS["courses"], course_id)
    if not course:
        raise APIError(404, "Course not found")
    if course.get("status") == "closed":
        raise APIError(400, "This course is not accepting applications")
    if course.get("institutionId"):
        if institution_id != course["institutionId"]:
            raise APIError(400, "Course does not belong to this institution")
        institution_id = course["institutionId"]

    await check_application_limits(store, student["id"], course_id, institution_id)

    institution = await store.get(COLLECTIONS["institutions"], institution_id)
    now = utc_now_iso()
    data = {
        "studentId": student["id"],
        "studentName": student.get("name"),
        "studentEmail": student.get("email"),
        "courseId": course_id,
        "courseName": course.get("name"),
        "institutionId": institution_id,
        "institutionName": institution.get("name") if institution else None,
        "status": "pending",
        "documents": documents or [],
        "notes": notes,
        "applicationDate": now,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        application = await store.create(COLLECTIONS["applications"], data)
    except DuplicateDocumentError:
        raise APIError(400, "You have already applied to this course")

    logger.info("Student %s applied to course %s", student["id"], course_id)
    return application


# ============================================================
# QUALIFICATION
# ============================================================

def required_subjects(course: dict) -> List[str]:
    """Course requirements may be stored as a list or as {"subjects": [...]}."""
    requirements = course.get("requirements") or []
    if isinstance(requirements, dict):
        requirements = requirements.get("subjects") or []
    return list(requirements)


def grade_average(subjects: List[str], grades: Dict[str, str]) -> float:
    if not subjects:
        return 0.0
    total = sum(GRADE_POINTS.get(str(grades.get(s, "")).upper(), 0) for s in subjects)
    return total / len(subjects)


def course_qualifies(course: dict, grades: Dict[str, str]) -> bool:
    """
    True if the grades meet the course's subject requirements.

    A course without required subjects is open to every transcript.
    """
    subjects = required_subjects(course)
    if not subjects:
        return True
    grades = grades or {}
    if not all(subject in grades for subject in subjects):
        return False
    return grade_average(subjects, grades) >= PASS_AVERAGE


async def get_transcript(store: DocumentStore, student_id: str) -> Optional[dict]:
    return await store.find_one(COLLECTIONS["transcripts"], {"studentId": student_id})


async def qualified_courses(store: DocumentStore, student_id: str) -> dict:
    """Courses the student's transcript qualifies for. 400 without a transcript."""
    transcript = await get_transcript(store, student_id)
    if not transcript:
        raise APIError(400, "No transcript found. Please upload your transcript first.")

    courses = await store.list(COLLECTIONS["courses"])
    grades = transcript.get("grades") or {}
    qualified = [c for c in courses if course_qualifies(c, grades)]
    return {"qualifiedCourses": qualified, "totalCourses": len(courses), "transcript": transcript}


# ============================================================
# DECISIONS
# ============================================================

async def _adjust_seats(store: DocumentStore, course_id: str, delta: int) -> None:
    course = await store.get(COLLECTIONS["courses"], course_id)
    if not course or course.get("availableSeats") is None:
        return
    seats = max(0, course["availableSeats"] + delta)
    if course.get("seats") is not None:
        seats = min(seats, course["seats"])
    await store.update(COLLECTIONS["courses"], course_id, {"availableSeats": seats})


async def set_application_status(
    store: DocumentStore,
    application: dict,
    status: str,
    email_service: Optional[EmailService] = None,
    notes: Optional[str] = None,
    extra: Optional[dict] = None,
) -> dict:
    """
    Move an application to ``status``, keep course seats in step and tell the student.

    The in-app notification is always written; the email is best effort.
    """
    now = utc_now_iso()
    changes = {"status": status, "updatedAt": now}
    if status == "admitted":
        changes["admittedAt"] = now
    if notes is not None:
        changes["notes"] = notes
    if extra:
        changes.update(extra)

    updated = await store.update(COLLECTIONS["applications"], application["id"], changes)
    if updated is None:
        raise APIError(404, "Application not found")

    previous = application.get("status")
    if previous not in SEAT_HOLDING and status in SEAT_HOLDING:
        await _adjust_seats(store, application["courseId"], -1)
    elif previous in SEAT_HOLDING and status not in SEAT_HOLDING:
        await _adjust_seats(store, application["courseId"], 1)

    if previous != status:
        course = updated.get("courseName") or "your course"
        await notification_service.notify(
            store,
            updated["studentId"],
            "Application Update",
            f"Your application for {course} is now {status.replace('_', ' ')}.",
            type="application",
            related_id=updated["id"],
            priority="high" if status in ("admitted", "rejected") else "normal",
        )
        if email_service is not None:
            student = await store.get(COLLECTIONS["users"], updated["studentId"])
            if student:
                await email_service.send_application_status_email(student, updated)

    logger.info("Application %s: %s -> %s", updated["id"], previous, status)
    return updated


async def promote_next_pending(
    store: DocumentStore, course_id: str, email_service: Optional[EmailService] = None
) -> Optional[dict]:
    """Admit the earliest pending application for ``course_id``, if any."""
    pending = await store.find(
        COLLECTIONS["applications"], {"courseId": course_id, "status": "pending"}
    )
    if not pending:
        return None
    pending.sort(key=lambda a: a.get("applicationDate") or a.get("createdAt") or "")
    promoted = await set_application_status(store, pending[0], "admitted", email_service)
    logger.info("Promoted application %s for course %s", promoted["id"], course_id)
    return promoted


async def accept_admission(
    store: DocumentStore,
    student_id: str,
    application_id: str,
    email_service: Optional[EmailService] = None,
) -> dict:
    """
    Student accepts one admitted offer.

    Returns {"accepted": app, "declined": [apps], "promoted": [apps]}.
    """
    application = await store.get(COLLECTIONS["applications"], application_id)
    if not application:
        raise APIError(404, "Application not found")
    if application.get("studentId") != student_id:
        raise APIError(403, "Not authorized to accept this admission")
    if application.get("status") != "admitted":
        raise APIError(400, "This application is not in admitted status")

    now = utc_now_iso()
    accepted = await set_application_status(
        store, application, "accepted", email_service, extra={"acceptedAt": now}
    )

    others = await store.find(
        COLLECTIONS["applications"], {"studentId": student_id, "status": "admitted"}
    )
    declined = []
    for other in others:
        if other["id"] == application_id:
            continue
        declined.append(await set_application_status(
            store, other, "rejected", extra={"rejectionReason": "Student accepted another offer"},
        ))

    promoted = []
    for released in declined:
        nxt = await promote_next_pending(store, released["courseId"], email_service)
        if nxt:
            promoted.append(nxt)

    return {"accepted": accepted, "declined": declined, "promoted": promoted}
