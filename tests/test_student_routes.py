"""
Tests for student endpoints: course applications, transcripts, admissions, jobs.
"""

import pytest

from careerguide.db import COLLECTIONS


@pytest.fixture
def two_institutions(create_doc):
    first = create_doc("institutions", name="First University", status="active")
    second = create_doc("institutions", name="Second College", status="active")
    return first, second


def apply(client, student, course, path="/api/students/applications"):
    return client.post(path, headers=student["headers"], json={
        "courseId": course["id"], "institutionId": course["institutionId"],
    })


class TestCourseApplications:

    def test_apply(self, client, student, two_institutions, open_course):
        course = open_course(two_institutions[0]["id"])
        response = apply(client, student, course)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["studentId"] == student["user"]["id"]
        assert data["courseName"] == "Computer Science"
        assert data["institutionName"] == "First University"

    def test_second_application_to_same_course_rejected(self, client, student, two_institutions, open_course):
        course = open_course(two_institutions[0]["id"])
        assert apply(client, student, course).status_code == 201
        response = apply(client, student, course)
        assert response.status_code == 400
        assert "already applied" in response.json()["message"]

    def test_third_course_at_same_institution_rejected(self, client, student, two_institutions, open_course):
        first, second = two_institutions
        courses = [open_course(first["id"], name=f"Course {i}") for i in range(3)]
        assert apply(client, student, courses[0]).status_code == 201
        assert apply(client, student, courses[1]).status_code == 201

        response = apply(client, student, courses[2])
        assert response.status_code == 400
        assert "maximum of 2" in response.json()["message"]

        # The limit is per institution
        assert apply(client, student, open_course(second["id"])).status_code == 201

    def test_limit_not_bypassed_by_naming_another_institution(self, client, student, two_institutions,
                                                              open_course, store, run):
        first, second = two_institutions
        courses = [open_course(first["id"], name=f"Course {i}") for i in range(3)]
        apply(client, student, courses[0])
        apply(client, student, courses[1])

        response = apply(client, student, {"id": courses[2]["id"], "institutionId": second["id"]})
        assert response.status_code == 400
        assert response.json()["message"] == "Course does not belong to this institution"

        stored = run(store.find(COLLECTIONS["applications"], {"studentId": student["user"]["id"]}))
        assert len(stored) == 2
        assert {a["institutionId"] for a in stored} == {first["id"]}

    def test_closed_course_rejected(self, client, student, two_institutions, create_doc):
        course = create_doc("courses", name="Closed", institutionId=two_institutions[0]["id"], status="closed")
        assert apply(client, student, course).status_code == 400

    def test_unknown_course(self, client, student, two_institutions):
        course = {"id": "no-such-course", "institutionId": two_institutions[0]["id"]}
        response = apply(client, student, course)
        assert response.status_code == 404
        assert response.json()["message"] == "Course not found"

    def test_missing_fields(self, client, student):
        response = client.post("/api/students/applications", headers=student["headers"], json={})
        assert response.status_code == 400
        assert response.json()["message"] == "Missing required fields: courseId, institutionId"

    def test_list_own_applications(self, client, student, register_user, two_institutions, open_course):
        course = open_course(two_institutions[0]["id"])
        apply(client, student, course)
        other = register_user("student")
        apply(client, other, course)

        response = client.get("/api/students/applications", headers=student["headers"])
        assert [a["studentId"] for a in response.json()["data"]] == [student["user"]["id"]]

    def test_other_roles_forbidden(self, client, company):
        response = client.get("/api/students/applications", headers=company["headers"])
        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Required roles: student"

    def test_dashboard(self, client, student, two_institutions, open_course):
        apply(client, student, open_course(two_institutions[0]["id"]))
        response = client.get("/api/students/dashboard", headers=student["headers"])
        stats = response.json()["data"]["stats"]
        assert stats["totalApplications"] == 1
        assert stats["pendingApplications"] == 1
        assert stats["hasTranscript"] is False


class TestTranscriptAndQualification:

    def test_transcript_upsert(self, client, student, store, run):
        first = client.post("/api/students/transcript", headers=student["headers"], json={
            "grades": {"Mathematics": "b"}, "institution": "High School",
        })
        assert first.status_code == 200
        assert first.json()["data"]["grades"] == {"Mathematics": "B"}

        client.post("/api/students/transcript", headers=student["headers"], json={
            "grades": {"Mathematics": "A", "English": "C"},
        })
        transcripts = run(store.find(COLLECTIONS["transcripts"], {"studentId": student["user"]["id"]}))
        assert len(transcripts) == 1
        assert transcripts[0]["grades"] == {"Mathematics": "A", "English": "C"}

        response = client.get("/api/students/transcript", headers=student["headers"])
        assert response.json()["data"]["grades"]["English"] == "C"

    def test_missing_transcript(self, client, student):
        assert client.get("/api/students/transcript", headers=student["headers"]).status_code == 404
        response = client.get("/api/students/qualified-courses", headers=student["headers"])
        assert response.status_code == 400
        assert "No transcript found" in response.json()["message"]

    def test_qualified_courses(self, client, student, two_institutions, open_course):
        institution_id = two_institutions[0]["id"]
        open_course(institution_id, name="Science", requirements=["Mathematics", "Physics"])
        open_course(institution_id, name="Arts", requirements=["English", "History"])
        open_course(institution_id, name="Commerce", requirements=["Mathematics", "Accounting"])

        client.post("/api/students/transcript", headers=student["headers"], json={
            # Science: (5 + 3) / 2 = 4, Commerce: (5 + 0) / 2 = 2.5, Arts: no History
            "grades": {"Mathematics": "A", "Physics": "C", "English": "B", "Accounting": "F"},
        })
        response = client.get("/api/students/qualified-courses", headers=student["headers"])
        data = response.json()["data"]
        assert [c["name"] for c in data["qualifiedCourses"]] == ["Science"]
        assert data["totalCourses"] == 3


class TestAdmissionAcceptance:

    def test_accept_declines_other_offers_and_promotes_waitlist(
        self, client, student, register_user, two_institutions, open_course, store, run
    ):
        first, second = two_institutions
        course_a = open_course(first["id"], name="Course A")
        course_b = open_course(second["id"], name="Course B")
        apply(client, student, course_a)
        apply(client, student, course_b)

        early = register_user("student")
        late = register_user("student")
        apply(client, early, course_b)
        apply(client, late, course_b)

        own = run(store.find(COLLECTIONS["applications"], {"studentId": student["user"]["id"]}))
        for application in own:
            run(store.update(COLLECTIONS["applications"], application["id"], {"status": "admitted"}))
        accepted_id = next(a["id"] for a in own if a["courseId"] == course_a["id"])

        response = client.post("/api/students/admission/accept", headers=student["headers"],
                               json={"applicationId": accepted_id})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["accepted"]["status"] == "accepted"
        assert [a["courseId"] for a in data["declined"]] == [course_b["id"]]
        assert data["declined"][0]["rejectionReason"] == "Student accepted another offer"
        assert [a["studentId"] for a in data["promoted"]] == [early["user"]["id"]]

        still_pending = run(store.find(COLLECTIONS["applications"], {"studentId": late["user"]["id"]}))
        assert still_pending[0]["status"] == "pending"

    def test_only_admitted_can_be_accepted(self, client, student, two_institutions, open_course):
        application = apply(client, student, open_course(two_institutions[0]["id"])).json()["data"]
        response = client.post("/api/students/admission/accept", headers=student["headers"],
                               json={"applicationId": application["id"]})
        assert response.status_code == 400

    def test_cannot_accept_someone_elses_offer(
        self, client, student, register_user, two_institutions, open_course, store, run
    ):
        other = register_user("student")
        application = apply(client, other, open_course(two_institutions[0]["id"])).json()["data"]
        run(store.update(COLLECTIONS["applications"], application["id"], {"status": "admitted"}))

        response = client.post("/api/students/admission/accept", headers=student["headers"],
                               json={"applicationId": application["id"]})
        assert response.status_code == 403

    def test_unknown_application(self, client, student):
        response = client.post("/api/students/admission/accept", headers=student["headers"],
                               json={"applicationId": "missing"})
        assert response.status_code == 404


class TestStudentJobs:

    @pytest.fixture
    def posted_job(self, client, company):
        response = client.post("/api/companies/jobs", headers=company["headers"], json={
            "title": "Junior Developer",
            "description": "Build web services",
            "requirements": ["Python", "SQL"],
            "location": "Maseru",
        })
        return response.json()["data"]

    def test_jobs_list_marks_applied(self, client, student, posted_job):
        jobs = client.get("/api/students/jobs", headers=student["headers"]).json()["data"]
        assert jobs[0]["hasApplied"] is False
        assert jobs[0]["company"]["name"] == "Acme Corp"

        client.post("/api/students/jobs/apply", headers=student["headers"], json={"jobId": posted_job["id"]})
        jobs = client.get("/api/students/jobs", headers=student["headers"]).json()["data"]
        assert jobs[0]["hasApplied"] is True

    def test_apply_once_per_job(self, client, student, posted_job):
        payload = {"jobId": posted_job["id"], "coverLetter": "Hire me"}
        first = client.post("/api/students/jobs/apply", headers=student["headers"], json=payload)
        assert first.status_code == 201
        assert first.json()["data"]["coverLetter"] == "Hire me"

        second = client.post("/api/students/jobs/apply", headers=student["headers"], json=payload)
        assert second.status_code == 400

    def test_cannot_apply_to_closed_job(self, client, student, company, posted_job):
        client.patch(f"/api/companies/jobs/{posted_job['id']}/status", headers=company["headers"],
                     json={"status": "closed"})
        response = client.post("/api/students/jobs/apply", headers=student["headers"],
                               json={"jobId": posted_job["id"]})
        assert response.status_code == 400

    def test_my_job_applications(self, client, student, posted_job):
        client.post("/api/students/jobs/apply", headers=student["headers"], json={"jobId": posted_job["id"]})
        data = client.get("/api/students/job-applications", headers=student["headers"]).json()["data"]
        assert len(data) == 1
        assert data[0]["job"]["title"] == "Junior Developer"

    def test_recommended_jobs(self, client, student, posted_job):
        client.put("/api/auth/profile", headers=student["headers"], json={
            "skills": ["Python", "SQL"], "preferredLocation": "Maseru",
        })
        # Skills 30 + location 10 = 40, below the threshold
        data = client.get("/api/students/recommended-jobs", headers=student["headers"]).json()["data"]
        assert data == []

        client.put("/api/auth/profile", headers=student["headers"], json={"course": "Python"})
        data = client.get("/api/students/recommended-jobs", headers=student["headers"]).json()["data"]
        assert [j["id"] for j in data] == [posted_job["id"]]
        assert data[0]["matchScore"] == 80
