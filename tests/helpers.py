"""Test doubles and request helpers shared across test modules"""

import json
from typing import Dict
from urllib.parse import parse_qs, urlparse

import httpx
from fastapi.testclient import TestClient

ALICE = {
    "id": 1001,
    "login": "alice",
    "name": "Alice Developer",
    "email": "alice@example.com",
    "avatar_url": "https://avatars.example.com/alice.png",
}
BOB = {
    "id": 2002,
    "login": "bob",
    "name": "Bob Founder",
    "email": None,
    "avatar_url": "https://avatars.example.com/bob.png",
}


class FakeGitHub:
    """Request handler emulating the GitHub OAuth and user endpoints"""

    def __init__(self):
        self.codes: Dict[str, str] = {"alice-code": "alice-token", "bob-code": "bob-token"}
        self.users: Dict[str, dict] = {"alice-token": dict(ALICE), "bob-token": dict(BOB)}
        self.emails: Dict[str, list] = {
            "bob-token": [
                {"email": "bob@old.example.com", "primary": False, "verified": True},
                {"email": "bob@example.com", "primary": True, "verified": True},
            ]
        }
        self.fail_with_status = None
        # Raw 200 bodies served instead of the normal response, keyed by path
        self.raw_bodies: Dict[str, str] = {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with_status is not None:
            return httpx.Response(self.fail_with_status, json={"message": "unavailable"})
        if request.url.path in self.raw_bodies:
            return httpx.Response(200, content=self.raw_bodies[request.url.path])

        if request.url.path == "/login/oauth/access_token":
            form = parse_qs(request.content.decode())
            code = form.get("code", [None])[0]
            token = self.codes.get(code)
            if token is None:
                return httpx.Response(200, json={"error": "bad_verification_code"})
            return httpx.Response(200, json={"access_token": token, "token_type": "bearer"})

        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if request.url.path == "/user":
            if token not in self.users:
                return httpx.Response(401, json={"message": "Bad credentials"})
            return httpx.Response(200, content=json.dumps(self.users[token]))

        if request.url.path == "/user/emails":
            return httpx.Response(200, json=self.emails.get(token, []))

        return httpx.Response(404)


def state_from_login(client: TestClient) -> str:
    """Start redirect sign-in and return the OAuth state it issued"""
    response = client.get("/api/v1/auth/github/login", follow_redirects=False)
    assert response.status_code == 302
    return parse_qs(urlparse(response.headers["location"]).query)["state"][0]


def sign_in_with_redirect(client: TestClient, code: str = "alice-code") -> httpx.Response:
    state = state_from_login(client)
    return client.get(
        "/api/v1/auth/github/callback",
        params={"code": code, "state": state},
        follow_redirects=False,
    )
