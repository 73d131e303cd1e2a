"""
Job Matching Service

PURPOSE:
Score open jobs against a student profile and recommend the best fits.

SCORING (0-100):
- Course relevance  40  student's course matches the job's degree requirement
- Skills            30  share of required skills covered by the student
- Experience        20  student's years >= years the job asks for
- Location          10  preferred location equals the job location

Jobs scoring above RECOMMENDATION_THRESHOLD are recommended, best first.

Job requirements come in two shapes:
- {"degree": "...", "skills": [...], "experience": "2-4 years"}
- a plain list of requirement strings, treated as the skill list; the
  degree and experience are read out of the same strings
"""

import re
from typing import List, Optional

RECOMMENDATION_THRESHOLD = 50
MAX_SCORE = 100

WEIGHTS = {
    "course": 40,
    "skills": 30,
    "experience": 20,
    "location": 10,
}


def parse_experience(text) -> int:
    """First number in e.g. "2-4 years" -> 2. No number -> 0."""
    if isinstance(text, (int, float)):
        return int(text)
    match = re.search(r"(\d+)", str(text or ""))
    return int(match.group(1)) if match else 0


def _requirement_parts(job: dict) -> tuple:
    """(degree, skills, experience) from either requirements shape."""
    requirements = job.get("requirements") or []
    if isinstance(requirements, dict):
        return (
            requirements.get("degree"),
            list(requirements.get("skills") or []),
            requirements.get("experience"),
        )
    if isinstance(requirements, str):
        requirements = [requirements]
    experience = next((r for r in requirements if "year" in r.lower()), None)
    return None, list(requirements), experience


def _course_matches(course: str, degree: Optional[str], requirements: List[str]) -> bool:
    course = course.lower()
    if degree:
        return degree.lower() in course
    return any(course in req.lower() for req in requirements)


def calculate_match_score(student: dict, job: dict) -> float:
    """Score how well ``student`` fits ``job``."""
    degree, skills, experience = _requirement_parts(job)
    score = 0.0

    course = student.get("course")
    if course and (degree or skills):
        if _course_matches(course, degree, skills):
            score += WEIGHTS["course"]

    student_skills = student.get("skills") or []
    if student_skills and skills:
        wanted = [s.lower() for s in skills]
        matching = [s for s in student_skills if any(s.lower() in req for req in wanted)]
        score += min(len(matching) / len(skills), 1.0) * WEIGHTS["skills"]

    years = student.get("experience")
    if years and experience:
        if years >= parse_experience(experience):
            score += WEIGHTS["experience"]

    preferred = student.get("preferredLocation")
    location = job.get("location")
    if preferred and location and preferred.strip().lower() == location.strip().lower():
        score += WEIGHTS["location"]

    return round(min(score, MAX_SCORE), 2)


def recommend_jobs(student: dict, jobs: List[dict]) -> List[dict]:
    """Jobs above the threshold with a ``matchScore`` field, highest first."""
    scored = [{**job, "matchScore": calculate_match_score(student, job)} for job in jobs]
    recommended = [job for job in scored if job["matchScore"] > RECOMMENDATION_THRESHOLD]
    return sorted(recommended, key=lambda job: job["matchScore"], reverse=True)
