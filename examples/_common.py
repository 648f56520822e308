"""
Shared helpers for Taskboard examples.

Handles the health check and authentication (register → token) so each
example can focus on its specific workflow.
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000/api"
PASSWORD = "demo-password-123"


def check_backend() -> None:
    """Verify the backend is reachable and healthy."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  uvicorn taskboard.main:app --reload --port 8000")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print("Backend health:")
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")
    print(f"  Redis:    {health['redis']}")

    if health["database"] != "ok":
        print(f"\nERROR: Database is not reachable: {health['database']}")
        sys.exit(1)


def register(name: str) -> tuple[dict, str]:
    """Register a fresh user, returning (user, access_token).

    Uses a unique email per run so examples are idempotent.
    """
    run_id = uuid.uuid4().hex[:8]
    resp = httpx.post(
        f"{BASE}/register",
        json={
            "name": f"{name} {run_id}",
            "email": f"{name.lower()}-{run_id}@example.com",
            "password": PASSWORD,
            "password_confirmation": PASSWORD,
        },
        timeout=10,
    )
    if resp.status_code != 201:
        print(f"ERROR: Registration failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    body = resp.json()
    return body["data"], body["access_token"]


def create_client(name: str = "Demo") -> httpx.Client:
    """Register a user and return an httpx Client with its bearer token."""
    user, token = register(name)
    print(f"  User:     {user['email']} (#{user['id']})")
    return httpx.Client(
        base_url=BASE,
        timeout=10,
        headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
    )
