#!/usr/bin/env python3
"""
Taskboard Quickstart — Full lifecycle in one script.

Registers two users → project → tasks → filter/sort/include → cascade delete.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8000
"""

from _common import check_backend, create_client


def main():
    check_backend()

    print("\n1. Registering users...")
    alice = create_client("Alice")
    bob = create_client("Bob")

    # ── Create project ────────────────────────────────────────────
    print("\n2. Creating project...")
    resp = alice.post("/projects", json={"title": "Move house"})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    project = resp.json()["data"]
    print(f"   Project: {project['title']} (#{project['id']})")

    # ── Create tasks ──────────────────────────────────────────────
    print("\n3. Creating tasks...")
    tasks = []
    for title in ("Book van", "Pack books", "Cancel internet"):
        resp = alice.post("/tasks", json={"title": title, "project_id": project["id"]})
        assert resp.status_code == 201, f"Failed: {resp.text}"
        tasks.append(resp.json()["data"])
        print(f"   Task #{tasks[-1]['id']}: {title}")

    # ── Mark one done ─────────────────────────────────────────────
    print("\n4. Marking the first task done...")
    resp = alice.patch(f"/tasks/{tasks[0]['id']}", json={"is_done": True})
    assert resp.status_code == 200, f"Failed: {resp.text}"

    # ── Query ─────────────────────────────────────────────────────
    print("\n5. Open tasks, sorted by title:")
    resp = alice.get("/tasks", params={"filter[is_done]": "false", "sort": "title"})
    for t in resp.json()["data"]:
        print(f"   [ ] #{t['id']} {t['title']}")

    resp = alice.get("/projects", params={"include": "tasks"})
    listed = resp.json()["data"][0]
    print(f"\n   Project '{listed['title']}' has {len(listed['tasks'])} task(s)")

    # ── Isolation ─────────────────────────────────────────────────
    print("\n6. Bob tries to read Alice's project...")
    resp = bob.get(f"/projects/{project['id']}")
    print(f"   → {resp.status_code} {resp.json()['message']}")

    # ── Cascade delete ────────────────────────────────────────────
    print("\n7. Deleting the project...")
    resp = alice.delete(f"/projects/{project['id']}")
    assert resp.status_code == 204, f"Failed: {resp.text}"
    resp = alice.get("/tasks")
    print(f"   Tasks left: {resp.json()['meta']['total']}")

    alice.post("/logout")
    bob.post("/logout")
    print("\nDone.")


if __name__ == "__main__":
    main()
