"""
Tests for admin moderation and reporting.
"""

import pytest


class TestAccess:

    @pytest.mark.parametrize("path", [
        "/api/admin/dashboard", "/api/admin/users", "/api/admin/companies",
        "/api/admin/institutions", "/api/admin/recent-activity", "/api/admin/reports",
    ])
    def test_non_admins_forbidden(self, client, student, path):
        response = client.get(path, headers=student["headers"])
        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Required roles: admin"

    def test_anonymous_rejected(self, client):
        assert client.get("/api/admin/dashboard").status_code == 401


class TestDashboard:

    def test_stats(self, client, admin, student, company, institution):
        stats = client.get("/api/admin/dashboard", headers=admin["headers"]).json()["data"]["stats"]
        assert stats["totalUsers"] == 4
        assert stats["totalStudents"] == 1
        assert stats["totalCompanies"] == 1
        assert stats["totalInstitutions"] == 1
        assert stats["pendingInstitutions"] == 1

    def test_recent_activity(self, client, admin, student):
        activity = client.get("/api/admin/recent-activity", headers=admin["headers"]).json()["data"]
        assert {item["type"] for item in activity} == {"registration"}
        assert len(activity) == 2

    def test_user_list_filters_by_role(self, client, admin, student, company):
        users = client.get("/api/admin/users", params={"role": "company"}, headers=admin["headers"]).json()["data"]
        assert [u["id"] for u in users] == [company["user"]["id"]]
        assert all("password" not in u for u in users)


class TestStatusUpdates:

    def test_suspend_user(self, client, admin, student):
        response = client.patch(f"/api/admin/users/{student['user']['id']}/status",
                                headers=admin["headers"], json={"status": "suspended"})
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "suspended"

        assert client.get("/api/auth/me", headers=student["headers"]).status_code == 401
        login = client.post("/api/auth/login", json={"email": student["email"], "password": student["password"]})
        assert login.status_code == 401

    def test_invalid_status_rejected(self, client, admin, student):
        response = client.patch(f"/api/admin/users/{student['user']['id']}/status",
                                headers=admin["headers"], json={"status": "banished"})
        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid status")

    def test_unknown_user(self, client, admin):
        response = client.patch("/api/admin/users/missing/status", headers=admin["headers"],
                                json={"status": "active"})
        assert response.status_code == 404

    def test_cannot_change_own_status(self, client, admin):
        response = client.patch(f"/api/admin/users/{admin['user']['id']}/status",
                                headers=admin["headers"], json={"status": "suspended"})
        assert response.status_code == 400

    def test_company_endpoint_only_targets_companies(self, client, admin, student, company):
        response = client.patch(f"/api/admin/companies/{student['user']['id']}/status",
                                headers=admin["headers"], json={"status": "suspended"})
        assert response.status_code == 404

        response = client.patch(f"/api/admin/companies/{company['user']['id']}/status",
                                headers=admin["headers"], json={"status": "suspended"})
        assert response.status_code == 200

    def test_reactivation_sends_approval_email(self, client, admin, company, email_service):
        client.patch(f"/api/admin/companies/{company['user']['id']}/status",
                     headers=admin["headers"], json={"status": "pending"})
        response = client.patch(f"/api/admin/companies/{company['user']['id']}/status",
                                headers=admin["headers"], json={"status": "active"})
        assert response.json()["data"]["verificationStatus"] == "verified"
        assert any("Approval" in s for s in email_service.subjects())

    def test_activate_institution(self, client, admin, institution):
        institution_id = institution["user"]["institutionId"]
        response = client.patch(f"/api/admin/institutions/{institution_id}/status",
                                headers=admin["headers"], json={"status": "active"})
        assert response.status_code == 200
        assert response.json()["data"]["verificationStatus"] == "verified"

        listed = client.get("/api/institutions", params={"status": "active"}).json()["data"]
        assert [i["id"] for i in listed] == [institution_id]

        notifications = client.get("/api/notifications", headers=institution["headers"]).json()["data"]
        assert len(notifications) == 1

    def test_invalid_institution_status(self, client, admin, institution):
        response = client.patch(f"/api/admin/institutions/{institution['user']['institutionId']}/status",
                                headers=admin["headers"], json={"status": "closed"})
        assert response.status_code == 400

    def test_unknown_institution(self, client, admin):
        response = client.patch("/api/admin/institutions/missing/status", headers=admin["headers"],
                                json={"status": "active"})
        assert response.status_code == 404


class TestReports:

    def test_system_report_counts(self, client, admin, student, company):
        client.post("/api/companies/jobs", headers=company["headers"], json={
            "title": "Tester", "description": "QA", "requirements": ["Attention to detail"],
        })
        report = client.get("/api/admin/reports", headers=admin["headers"]).json()["data"]
        stats = report["statistics"]
        assert report["period"] == "monthly"
        assert stats["totalUsers"] == 3
        assert stats["newUsersThisPeriod"] == 3
        assert stats["jobPostings"] == 1
        assert stats["activeJobs"] == 1

    def test_invalid_period(self, client, admin):
        response = client.get("/api/admin/reports", params={"period": "hourly"}, headers=admin["headers"])
        assert response.status_code == 400
