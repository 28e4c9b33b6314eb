"""Integration tests for the dashboard endpoints"""

from backend.app.schemas.auth import AuthenticatedUser
from backend.app.views.dashboard import (
    MISSING_UID_MESSAGE,
    PROFILE_NOT_LOADED_MESSAGE,
    UPDATE_SUCCEEDED_MESSAGE,
)
from tests.helpers import sign_in_with_redirect


class TestDashboardAPI:
    """Integration tests for dashboard snapshots and profile edits"""

    def test_without_navigation_state(self, client):
        data = client.get("/api/v1/dashboard/developer").json()

        assert data["loading"] is True
        assert data["uid"] is None
        assert [n["description"] for n in data["notifications"]] == [MISSING_UID_MESSAGE]

    def test_sign_in_carries_uid_to_dashboard(self, client):
        client.put("/api/v1/intent", json={"role": "candidate"})
        sign_in_with_redirect(client)

        data = client.get("/api/v1/dashboard/developer").json()

        assert data["uid"] == "1001"
        assert data["loading"] is False
        assert data["profile"] is None
        assert data["notifications"] == []

    def test_signup_then_dashboard(self, client):
        client.post("/api/v1/auth/github/popup", json={"access_token": "alice-token"})

        signup = client.post("/api/v1/profiles/developer", json={"firstName": "Alice", "skills": "Python"})
        assert signup.status_code == 201
        assert signup.json()["navigation"]["path"] == "/dashboard/developer"

        data = client.get("/api/v1/dashboard/developer").json()
        assert data["profile"]["firstName"] == "Alice"
        assert data["profile"]["email"] == "alice@example.com"
        assert data["active_tab"] == "all"

    def test_edit_recruiter_profile(self, client):
        client.post("/api/v1/auth/github/popup", json={"access_token": "alice-token"})
        client.post("/api/v1/profiles/recruiter", json={"companyName": "Acme"})

        response = client.patch("/api/v1/dashboard/recruiter/profile", json={"companyName": "Globex"})

        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["companyName"] == "Globex"
        assert data["editing"] is False
        assert data["notifications"][-1]["description"] == UPDATE_SUCCEEDED_MESSAGE
        assert client.get("/api/v1/profiles/recruiter/me").json()["companyName"] == "Globex"

    def test_edit_requires_sign_in(self, client):
        response = client.patch("/api/v1/dashboard/developer/profile", json={"bio": "x"})

        assert response.status_code == 401

    def test_edit_someone_elses_profile(self, client, tokens):
        client.post("/api/v1/auth/github/popup", json={"access_token": "alice-token"})
        client.post("/api/v1/profiles/developer", json={"firstName": "Alice"})
        token = tokens.create_session_token(AuthenticatedUser(uid="2002"))

        response = client.patch(
            "/api/v1/dashboard/developer/profile",
            json={"bio": "hijacked"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 403
        assert client.get("/api/v1/profiles/developer/me").json().get("bio") == ""

    def test_recruiter_sees_incoming_applications(self, client, tokens):
        client.post("/api/v1/auth/github/popup", json={"access_token": "alice-token"})
        client.post("/api/v1/profiles/recruiter", json={"companyName": "Acme"})
        idea_id = client.post("/api/v1/ideas", json={"cofounderRole": "CTO"}).json()["id"]
        bob = tokens.create_session_token(AuthenticatedUser(uid="2002"))
        client.post("/api/v1/applications", json={"ideaId": idea_id}, headers={"Authorization": f"Bearer {bob}"})

        data = client.get("/api/v1/dashboard/recruiter").json()

        assert [idea["id"] for idea in data["ideas"]] == [idea_id]
        assert [c["developerId"] for c in data["visible_candidates"]] == ["2002"]

    def test_edit_without_navigation_state(self, client):
        client.post("/api/v1/auth/github/popup", json={"access_token": "alice-token"})

        response = client.patch("/api/v1/dashboard/developer/profile", json={"bio": "x"})

        assert response.status_code == 400
        assert response.json()["error"] == MISSING_UID_MESSAGE

    def test_edit_before_signup(self, client):
        client.put("/api/v1/intent", json={"role": "candidate"})
        client.post("/api/v1/auth/github/popup", json={"access_token": "alice-token"})

        response = client.patch("/api/v1/dashboard/developer/profile", json={"bio": "new"})

        assert response.status_code == 200
        data = response.json()
        assert data["profile"] is None
        assert data["editing"] is False
        assert [n["description"] for n in data["notifications"]] == [PROFILE_NOT_LOADED_MESSAGE]
        assert client.get("/api/v1/profiles/developer/me").status_code == 404
