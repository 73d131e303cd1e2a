"""
Tests for matching, qualification and reporting rules.
"""

import asyncio

import pytest

from careerguide.db import COLLECTIONS, MemoryDocumentStore
from careerguide.db.seed import seed_store
from careerguide.services import report_service
from careerguide.services.admission_service import course_qualifies, grade_average
from careerguide.services.matching_service import calculate_match_score, parse_experience, recommend_jobs

STUDENT = {
    "course": "Computer Science",
    "skills": ["Python", "SQL"],
    "experience": 3,
    "preferredLocation": "Maseru",
}


class TestMatching:

    def test_perfect_match(self):
        job = {
            "requirements": {"degree": "Computer Science", "skills": ["Python", "SQL"], "experience": "2-4 years"},
            "location": "maseru",
        }
        assert calculate_match_score(STUDENT, job) == 100

    def test_partial_skills(self):
        job = {"requirements": {"skills": ["Python", "Java", "Go", "Rust"]}, "location": "Remote"}
        assert calculate_match_score(STUDENT, job) == 7.5

    def test_not_enough_experience(self):
        job = {"requirements": {"experience": "5+ years"}}
        assert calculate_match_score(STUDENT, job) == 0

    def test_list_requirements(self):
        job = {"requirements": ["Degree in Computer Science", "Python", "3 years experience"], "location": "Maseru"}
        # course 40, one of three skills 10, experience 20, location 10
        assert calculate_match_score(STUDENT, job) == 80

    def test_empty_profile(self):
        assert calculate_match_score({}, {"requirements": ["Python"], "location": "Maseru"}) == 0

    @pytest.mark.parametrize("text,years", [("2-4 years", 2), ("5+ years", 5), ("none", 0), (3, 3), (None, 0)])
    def test_parse_experience(self, text, years):
        assert parse_experience(text) == years

    def test_recommendations_filtered_and_sorted(self):
        jobs = [
            {"id": "low", "requirements": {"skills": ["Cobol"]}},
            {"id": "mid", "requirements": {"degree": "Computer Science", "skills": ["Python"]}},
            {"id": "top", "requirements": {"degree": "Computer Science", "skills": ["Python"]}, "location": "Maseru"},
        ]
        recommended = recommend_jobs(STUDENT, jobs)
        assert [j["id"] for j in recommended] == ["top", "mid"]
        assert recommended[0]["matchScore"] > recommended[1]["matchScore"]


class TestQualification:

    def test_average_must_reach_c(self):
        course = {"requirements": ["Mathematics", "English"]}
        assert course_qualifies(course, {"Mathematics": "C", "English": "C"})
        assert not course_qualifies(course, {"Mathematics": "D", "English": "C"})

    def test_all_subjects_required(self):
        course = {"requirements": ["Mathematics", "English"]}
        assert not course_qualifies(course, {"Mathematics": "A"})
        assert not course_qualifies(course, {})

    def test_course_without_subjects_is_open_to_everyone(self):
        assert course_qualifies({"requirements": []}, {"Mathematics": "F"})
        assert course_qualifies({}, {})

    def test_shaped_requirements(self):
        course = {"requirements": {"subjects": ["Mathematics"], "minimumGrade": "C"}}
        assert course_qualifies(course, {"Mathematics": "B"})

    def test_grade_average(self):
        assert grade_average(["a", "b"], {"a": "A", "b": "F"}) == 2.5
        assert grade_average(["a"], {"a": "X"}) == 0


class TestReports:

    def test_system_report_counts_real_data(self):
        store = MemoryDocumentStore()
        asyncio.run(seed_store(store))
        asyncio.run(store.create(COLLECTIONS["applications"], {
            "studentId": "s1", "courseId": "c1", "courseName": "Computer Science",
            "institutionName": "National University of Lesotho", "status": "admitted",
        }))

        report = asyncio.run(report_service.generate_system_report(store, "weekly"))
        stats = report["statistics"]
        assert report["period"] == "weekly"
        assert stats["totalUsers"] == 2
        assert stats["totalInstitutions"] == 2
        assert stats["successfulApplications"] == 1
        assert report["popularCourses"] == [{"name": "Computer Science", "applications": 1}]

    def test_institution_report(self):
        store = MemoryDocumentStore()
        course = asyncio.run(store.create(COLLECTIONS["courses"], {"name": "Law", "institutionId": "i1"}))
        for status in ("admitted", "rejected", "rejected", "pending"):
            asyncio.run(store.create(COLLECTIONS["applications"], {
                "institutionId": "i1", "courseId": course["id"], "status": status,
            }))

        report = asyncio.run(report_service.generate_institution_report(store, "i1"))
        assert report["statistics"]["admittedStudents"] == 1
        assert report["statistics"]["rejectionRate"] == "67%"
        assert report["coursePerformance"][0]["applications"] == 4


class TestSeed:

    def test_seed_is_idempotent(self):
        store = MemoryDocumentStore()
        assert asyncio.run(seed_store(store)) is True
        assert asyncio.run(seed_store(store)) is False
        courses = asyncio.run(store.list(COLLECTIONS["courses"]))
        nul = asyncio.run(store.find_one(COLLECTIONS["institutions"], {"name": "National University of Lesotho"}))
        assert len(courses) == 2
        assert {c["institutionId"] for c in courses} == {nul["id"]}
        assert all(c["facultyId"] for c in courses)
