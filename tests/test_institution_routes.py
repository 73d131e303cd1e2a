"""
Tests for public institution listings and institution-role endpoints.
"""


def test_list_and_get(client, create_doc):
    nul = create_doc("institutions", name="National University", status="active")
    create_doc("institutions", name="Arts Academy", status="pending")

    listed = client.get("/api/institutions").json()["data"]
    assert [i["name"] for i in listed] == ["Arts Academy", "National University"]

    response = client.get(f"/api/institutions/{nul['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "National University"


def test_unknown_institution(client):
    response = client.get("/api/institutions/missing")
    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": "Institution not found",
        "timestamp": response.json()["timestamp"],
    }


def test_courses_are_shaped_for_listing(client, create_doc, open_course):
    institution = create_doc("institutions", name="National University")
    open_course(institution["id"], requirements=["Mathematics"], seats=25)

    courses = client.get(f"/api/institutions/{institution['id']}/courses").json()["data"]
    assert courses[0]["requirements"] == {"subjects": ["Mathematics"], "minimumGrade": "C"}
    assert courses[0]["availableSeats"] == 25

    everything = client.get("/api/institutions/courses/all").json()["data"]
    assert len(everything) == 1


def test_create_course_and_faculty(client, institution):
    headers = institution["headers"]
    institution_id = institution["user"]["institutionId"]

    faculty = client.post("/api/institutions/faculties", headers=headers, json={"name": "Faculty of Science"})
    assert faculty.status_code == 201
    faculty_id = faculty.json()["data"]["id"]

    response = client.post("/api/institutions/courses", headers=headers, json={
        "name": "Physics",
        "requirements": ["Mathematics", "Physical Science"],
        "seats": 30,
        "facultyId": faculty_id,
    })
    assert response.status_code == 201
    course = response.json()["data"]
    assert course["institutionId"] == institution_id
    assert course["facultyId"] == faculty_id
    assert course["availableSeats"] == 30
    assert course["status"] == "open"

    listed = client.get(f"/api/institutions/{institution_id}/courses").json()["data"]
    assert [c["name"] for c in listed] == ["Physics"]
    faculties = client.get(f"/api/institutions/{institution_id}/faculties").json()["data"]
    assert [f["name"] for f in faculties] == ["Faculty of Science"]


def test_course_with_foreign_faculty(client, institution, create_doc):
    other_faculty = create_doc("faculties", name="Elsewhere", institutionId="another-institution")
    response = client.post("/api/institutions/courses", headers=institution["headers"], json={
        "name": "Physics", "facultyId": other_faculty["id"],
    })
    assert response.status_code == 404


def test_course_requires_name(client, institution):
    response = client.post("/api/institutions/courses", headers=institution["headers"], json={"seats": 10})
    assert response.status_code == 400
    assert response.json()["message"] == "Missing required fields: name"


def test_students_cannot_create_courses(client, student):
    response = client.post("/api/institutions/courses", headers=student["headers"], json={"name": "Hack 101"})
    assert response.status_code == 403


def test_dashboard_and_applications(client, institution, student, open_course):
    institution_id = institution["user"]["institutionId"]
    course = open_course(institution_id)
    client.post("/api/students/applications", headers=student["headers"], json={
        "courseId": course["id"], "institutionId": institution_id,
    })

    dashboard = client.get("/api/institutions/dashboard", headers=institution["headers"]).json()["data"]
    assert dashboard["stats"]["totalCourses"] == 1
    assert dashboard["stats"]["pendingApplications"] == 1
    assert dashboard["institution"]["id"] == institution_id
    assert len(dashboard["recentApplications"]) == 1

    applications = client.get("/api/institutions/applications", headers=institution["headers"]).json()["data"]
    assert [a["studentId"] for a in applications] == [student["user"]["id"]]


def test_institution_report(client, institution, student, open_course, store, run):
    institution_id = institution["user"]["institutionId"]
    course = open_course(institution_id)
    client.post("/api/students/applications", headers=student["headers"], json={
        "courseId": course["id"], "institutionId": institution_id,
    })

    report = client.get("/api/institutions/reports", headers=institution["headers"]).json()["data"]
    assert report["institutionId"] == institution_id
    assert report["statistics"]["totalApplications"] == 1
    assert report["coursePerformance"][0]["applications"] == 1
