"""
Report Service - system-wide and per-institution statistics.

All figures are computed from the store at request time.
"""

import logging
from collections import Counter
from datetime import timedelta
from typing import Dict, List

from careerguide.db import COLLECTIONS, DocumentStore
from careerguide.utils.helpers import count_by_status, parse_iso, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"weekly": 7, "monthly": 30, "yearly": 365}

APPLICATION_STATUSES = (
    "pending", "under_review", "approved", "admitted", "rejected", "waitlist", "accepted",
)
SUCCESSFUL = ("admitted", "accepted")


def _created_since(docs: List[dict], days: int) -> int:
    cutoff = utc_now() - timedelta(days=days)
    count = 0
    for doc in docs:
        created = parse_iso(doc.get("createdAt"))
        if created and created >= cutoff:
            count += 1
    return count


def _percent(part: int, whole: int) -> str:
    if not whole:
        return "0%"
    return f"{round(part * 100 / whole)}%"


def _top(counter: Counter, limit: int = 5) -> List[Dict]:
    return [{"name": name, "applications": n} for name, n in counter.most_common(limit)]


async def generate_system_report(store: DocumentStore, period: str = "monthly") -> dict:
    days = PERIOD_DAYS.get(period, 30)
    users = await store.list(COLLECTIONS["users"])
    institutions = await store.list(COLLECTIONS["institutions"])
    applications = await store.list(COLLECTIONS["applications"])
    jobs = await store.list(COLLECTIONS["jobs"])
    job_applications = await store.list(COLLECTIONS["job_applications"])

    roles = Counter(u.get("role") for u in users)
    successful = sum(1 for a in applications if a.get("status") in SUCCESSFUL)

    logger.info("Generated %s system report", period)
    return {
        "period": period,
        "generatedAt": utc_now_iso(),
        "statistics": {
            "totalUsers": len(users),
            "newUsersThisPeriod": _created_since(users, days),
            "usersByRole": dict(roles),
            "totalInstitutions": len(institutions),
            "totalCompanies": roles.get("company", 0),
            "totalApplications": len(applications),
            "newApplicationsThisPeriod": _created_since(applications, days),
            "successfulApplications": successful,
            "jobPostings": len(jobs),
            "activeJobs": sum(1 for j in jobs if j.get("status") == "open"),
            "jobApplications": len(job_applications),
        },
        "applicationStatus": count_by_status(applications, *APPLICATION_STATUSES),
        "popularCourses": _top(Counter(a.get("courseName") for a in applications if a.get("courseName"))),
        "topInstitutions": _top(
            Counter(a.get("institutionName") for a in applications if a.get("institutionName"))
        ),
    }


async def generate_institution_report(
    store: DocumentStore, institution_id: str, period: str = "monthly"
) -> dict:
    days = PERIOD_DAYS.get(period, 30)
    courses = await store.query(COLLECTIONS["courses"], "institutionId", "==", institution_id)
    applications = await store.query(COLLECTIONS["applications"], "institutionId", "==", institution_id)

    by_status = count_by_status(applications, *APPLICATION_STATUSES)
    admitted = by_status["admitted"] + by_status["accepted"]
    decided = admitted + by_status["rejected"]

    performance = []
    for course in courses:
        course_apps = [a for a in applications if a.get("courseId") == course["id"]]
        performance.append({
            "courseId": course["id"],
            "name": course.get("name"),
            "applications": len(course_apps),
            "admitted": sum(1 for a in course_apps if a.get("status") in SUCCESSFUL),
            "availableSeats": course.get("availableSeats"),
        })
    performance.sort(key=lambda c: c["applications"], reverse=True)

    return {
        "institutionId": institution_id,
        "period": period,
        "generatedAt": utc_now_iso(),
        "statistics": {
            "totalCourses": len(courses),
            "totalApplications": len(applications),
            "newApplicationsThisPeriod": _created_since(applications, days),
            "admittedStudents": admitted,
            "rejectionRate": _percent(by_status["rejected"], decided),
        },
        "applicationStatus": by_status,
        "coursePerformance": performance,
    }
