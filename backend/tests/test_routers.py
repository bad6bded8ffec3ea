"""
HTTP-level tests for the Deepmetric API.
"""

from conftest import STUDENT_EMAIL, api, login
from deepmetric.core.config import settings
from deepmetric.core.database import SessionLocal
from deepmetric.core.storage import KeyValueStore, USERS_KEY
from deepmetric.services.advisor import AdvisorService, get_advisor
from deepmetric.main import app
from test_advisor import FakeGeminiClient


def login_admin(client):
    return login(client, email=settings.ADMIN_EMAIL, name="Admin")


class TestAuth:
    def test_login_creates_user(self, client):
        response = client.post(api("/auth/login"), json={"name": "Ama", "email": STUDENT_EMAIL})

        body = response.json()
        assert body["isNew"]
        assert body["user"]["role"] == "student"
        assert body["user"]["registeredCourseIds"] == []

        me = client.get(api("/auth/me")).json()
        assert me["user"]["id"] == body["user"]["id"]

    def test_invalid_email_is_rejected(self, client):
        response = client.post(api("/auth/login"), json={"name": "Ama", "email": "not-an-email"})
        assert response.status_code == 422

    def test_admin_email_grants_admin_role(self, client):
        assert login_admin(client)["role"] == "admin"

    def test_logout(self, client):
        login(client)
        assert client.post(api("/auth/logout")).status_code == 200
        assert client.get(api("/auth/me")).json()["user"] is None


class TestSessionRequired:
    def test_protected_routes_redirect_to_login(self, client):
        for method, path in [
            ("post", "/progress/courses/1/register"),
            ("get", "/progress/dashboard"),
            ("get", "/certificates/1"),
        ]:
            response = getattr(client, method)(api(path), follow_redirects=False)
            assert response.status_code == 303
            assert response.headers["location"] == api("/auth/login")

    def test_login_prompt(self, client):
        body = client.get(api("/auth/login")).json()
        assert body["authenticated"] is False


class TestCatalog:
    def test_list_and_filter(self, client):
        body = client.get(api("/courses/")).json()
        assert body["total"] == 4
        assert body["courses"][0]["reviewStats"]["average"] is None
        assert body["courses"][0]["status"] is None

        filtered = client.get(api("/courses/"), params={"level": "Advanced"}).json()
        assert [c["course"]["id"] for c in filtered["courses"]] == ["3"]

    def test_unknown_course(self, client):
        assert client.get(api("/courses/nope")).status_code == 404

    def test_reviews(self, client):
        login(client)
        response = client.post(api("/courses/1/reviews"), json={"rating": 4, "comment": "Solid"})
        assert response.status_code == 201

        body = client.get(api("/courses/1/reviews")).json()
        assert body["stats"] == {"average": 4.0, "count": 1}
        assert body["hasUserRated"] is True

        assert client.post(api("/courses/1/reviews"), json={"rating": 9}).status_code == 422
        assert client.post(api("/courses/nope/reviews"), json={"rating": 3}).status_code == 404


class TestEnrollmentFlow:
    def test_register_request_approve(self, client):
        student = login(client)
        client.post(api("/progress/courses/1/register"))
        client.put(api("/progress/courses/1"), json={"percent": 140})
        response = client.post(
            api("/progress/courses/1/complete"),
            json={"evidence": "https://example.com/project"}
        )
        assert response.json()["pendingCourseIds"] == ["1"]
        assert response.json()["courseProgress"] == {"1": 100}

        listing = client.get(api("/courses/")).json()["courses"][0]
        assert listing["status"] == "pending_approval"

        login_admin(client)
        queue = client.get(api("/admin/completions/")).json()
        assert queue["total"] == 1
        assert queue["requests"][0]["evidence"] == "https://example.com/project"

        decision = client.post(api(f"/admin/completions/{student['id']}/1/approve")).json()
        assert decision["applied"] is True
        assert decision["user"]["completedCourseIds"] == ["1"]

        outbox = client.get(api("/notifications/outbox")).json()
        assert [e["subject"] for e in outbox] == [
            "Course Registration Confirmation",
            "Course Completion Approved"
        ]

        login(client)
        certificate = client.get(api("/certificates/1")).json()
        assert certificate["courseTitle"] == "Data Analytics Fundamentals"
        verification = client.get(api(f"/certificates/verify/{certificate['credentialId']}")).json()
        assert verification["valid"] is True
        assert verification["userId"] == student["id"]

    def test_reject(self, client):
        student = login(client)
        client.post(api("/progress/courses/2/register"))
        client.put(api("/progress/courses/2"), json={"percent": 30})
        client.post(api("/progress/courses/2/complete"), json={})

        login_admin(client)
        decision = client.post(api(f"/admin/completions/{student['id']}/2/reject")).json()
        assert decision["user"]["pendingCourseIds"] == []
        assert decision["user"]["courseProgress"] == {"2": 30}

        login(client)
        dashboard = client.get(api("/progress/dashboard")).json()
        assert dashboard["courses"][0]["status"] == "registered"

    def test_certificate_for_incomplete_course(self, client):
        login(client)
        client.post(api("/progress/courses/1/register"))
        assert client.get(api("/certificates/1")).status_code == 404

    def test_decision_for_unknown_user(self, client):
        login_admin(client)
        decision = client.post(api("/admin/completions/nobody/1/approve")).json()
        assert decision == {"applied": False, "user": None}


class TestAdmin:
    def test_students_are_forbidden(self, client):
        login(client)
        assert client.get(api("/admin/completions/")).status_code == 403
        assert client.get(api("/admin/dashboard")).status_code == 403
        assert client.post(api("/admin/courses/"), json={"title": "X"}).status_code == 403

    def test_course_management(self, client):
        login_admin(client)

        created = client.post(api("/admin/courses/"), json={
            "id": "sql-101",
            "title": "SQL for Analysts",
            "level": "Beginner",
            "price": 500,
            "tags": ["SQL"]
        })
        assert created.status_code == 201
        assert client.post(api("/admin/courses/"), json={"id": "sql-101", "title": "Dup"}).status_code == 409

        updated = client.put(api("/admin/courses/sql-101"), json={"title": "Advanced SQL", "level": "Advanced"})
        assert updated.json()["title"] == "Advanced SQL"
        assert client.put(api("/admin/courses/nope"), json={"title": "x"}).status_code == 404

        assert client.delete(api("/admin/courses/sql-101")).status_code == 200
        assert client.delete(api("/admin/courses/sql-101")).status_code == 404

        messages = [n["message"] for n in client.get(api("/notifications/")).json()]
        assert "New course created successfully" in messages
        assert "Course deleted successfully" in messages

    def test_dashboard_and_users(self, client):
        login(client)
        client.post(api("/progress/courses/1/register"))
        login_admin(client)

        stats = client.get(api("/admin/dashboard")).json()["statistics"]
        assert stats["users"]["total"] == 2
        assert stats["enrollments"]["total"] == 1

        users = client.get(api("/admin/completions/users")).json()
        assert {u["email"] for u in users} == {STUDENT_EMAIL, settings.ADMIN_EMAIL}


class TestAdvisor:
    def test_chat_and_history(self, client):
        fake = AdvisorService(client=FakeGeminiClient())
        app.dependency_overrides[get_advisor] = lambda: fake

        reply = client.post(api("/advisor/chat"), json={"message": "Where do I start?"}).json()
        assert reply["reply"] == "reply to Where do I start?"

        history = client.get(api("/advisor/history")).json()["messages"]
        assert [m["role"] for m in history] == ["user", "model"]

        client.delete(api("/advisor/history"))
        assert client.get(api("/advisor/history")).json()["messages"] == []

    def test_tag_suggestions_are_admin_only(self, client):
        fake = AdvisorService(client=FakeGeminiClient())
        app.dependency_overrides[get_advisor] = lambda: fake

        login(client)
        assert client.post(api("/advisor/tags"), json={"title": "SQL"}).status_code == 403

        login_admin(client)
        response = client.post(api("/advisor/tags"), json={"title": "SQL", "existingTags": ["SQL"]})
        assert response.json()["tags"] == ["Python", "Dashboards"]


def test_notifications_can_be_dismissed(client):
    login(client)
    notification = client.get(api("/notifications/")).json()[0]

    assert client.delete(api(f"/notifications/{notification['id']}")).status_code == 200
    assert client.delete(api(f"/notifications/{notification['id']}")).status_code == 404


def test_legacy_request_leaves_queue_once_approved(client):
    db = SessionLocal()
    try:
        KeyValueStore(db).set(USERS_KEY, [{
            "id": "u1",
            "name": "Ama",
            "email": STUDENT_EMAIL,
            "registeredCourseIds": [],
            "pendingCourseIds": ["1"]
        }])
        db.commit()
    finally:
        db.close()

    login_admin(client)
    assert client.get(api("/admin/completions/")).json()["total"] == 1

    decision = client.post(api("/admin/completions/u1/1/approve")).json()
    assert decision["applied"] is True
    assert decision["user"]["completedCourseIds"] == ["1"]
    assert client.get(api("/admin/completions/")).json()["total"] == 0

    again = client.post(api("/admin/completions/u1/1/approve")).json()
    assert again == {"applied": False, "user": None}
