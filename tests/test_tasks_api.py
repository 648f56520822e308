"""Task API tests — CRUD, partial updates, project assignment, filtering.

Learn: These tests verify the per-user isolation and the list grammar,
which are the most important business rules in the system. We test:
1. Task CRUD (new tasks start not done)
2. Partial updates via PUT and PATCH, including detaching from a project
3. project_id must name a project the caller owns
4. filter[is_done] partitions the list
5. Sorting with the id tie-break

Pattern: Build up test data using the API (register → project → tasks).
"""

import pytest

from taskboard.config import settings


# ═══════════════════════════════════════════════════════════
# Shared fixtures
# ═══════════════════════════════════════════════════════════


@pytest.fixture
async def project(client, alice):
    resp = await client.post("/api/projects", json={"title": "Home"}, headers=alice["headers"])
    return resp.json()["data"]


@pytest.fixture
async def task(client, alice):
    resp = await client.post("/api/tasks", json={"title": "Buy milk"}, headers=alice["headers"])
    assert resp.status_code == 201
    return resp.json()["data"]


async def _create_tasks(client, user, titles):
    created = []
    for title in titles:
        r = await client.post("/api/tasks", json={"title": title}, headers=user["headers"])
        assert r.status_code == 201
        created.append(r.json()["data"])
    return created


# ═══════════════════════════════════════════════════════════
# Task CRUD
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_task(client, alice):
    """POST /tasks creates a not-done task owned by the caller."""
    r = await client.post("/api/tasks", json={"title": "Fix login bug"}, headers=alice["headers"])
    assert r.status_code == 201
    task = r.json()["data"]
    assert task["title"] == "Fix login bug"
    assert task["is_done"] is False
    assert task["creator_id"] == alice["id"]
    assert task["project_id"] is None


@pytest.mark.asyncio
async def test_create_task_ignores_is_done(client, alice):
    r = await client.post(
        "/api/tasks", json={"title": "Already?", "is_done": True}, headers=alice["headers"]
    )
    assert r.status_code == 201
    assert r.json()["data"]["is_done"] is False


@pytest.mark.asyncio
async def test_create_task_in_project(client, alice, project):
    r = await client.post(
        "/api/tasks", json={"title": "Paint fence", "project_id": project["id"]},
        headers=alice["headers"],
    )
    assert r.status_code == 201
    assert r.json()["data"]["project_id"] == project["id"]


@pytest.mark.asyncio
async def test_create_task_in_foreign_project(client, bob, project):
    """project_id must name one of the caller's own projects."""
    r = await client.post(
        "/api/tasks", json={"title": "Sneaky", "project_id": project["id"]},
        headers=bob["headers"],
    )
    assert r.status_code == 422
    assert r.json()["errors"]["project_id"] == ["The selected project id is invalid."]


@pytest.mark.asyncio
async def test_create_task_in_missing_project(client, alice):
    r = await client.post(
        "/api/tasks", json={"title": "Lost", "project_id": 424242}, headers=alice["headers"]
    )
    assert r.status_code == 422
    assert "project_id" in r.json()["errors"]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"title": ""}, {"title": "  "}, {"title": "x" * 256}])
async def test_create_task_invalid_title(client, alice, body):
    r = await client.post("/api/tasks", json=body, headers=alice["headers"])
    assert r.status_code == 422
    assert "title" in r.json()["errors"]


@pytest.mark.asyncio
async def test_get_task(client, alice, task):
    r = await client.get(f"/api/tasks/{task['id']}", headers=alice["headers"])
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["id"] == task["id"]
    assert data["title"] == "Buy milk"
    assert data["created_at"] == task["created_at"]


@pytest.mark.asyncio
async def test_get_missing_task(client, alice):
    r = await client.get("/api/tasks/999999", headers=alice["headers"])
    assert r.status_code == 404
    assert r.json() == {"message": "Task not found"}


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "PATCH", "DELETE"])
async def test_out_of_range_task_id_is_not_found(client, alice, method):
    r = await client.request(
        method, f"/api/tasks/{10**30}", json={"is_done": True}, headers=alice["headers"]
    )
    assert r.status_code == 404
    assert r.json() == {"message": "Task not found"}


@pytest.mark.asyncio
async def test_create_task_with_out_of_range_project(client, alice):
    r = await client.post(
        "/api/tasks", json={"title": "Far away", "project_id": 10**30}, headers=alice["headers"]
    )
    assert r.status_code == 422
    assert r.json()["errors"]["project_id"] == ["The selected project id is invalid."]


@pytest.mark.asyncio
async def test_mark_task_done(client, alice, task):
    r = await client.patch(
        f"/api/tasks/{task['id']}", json={"is_done": True}, headers=alice["headers"]
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["is_done"] is True
    assert data["title"] == "Buy milk"


@pytest.mark.asyncio
async def test_put_is_partial_too(client, alice, task):
    r = await client.put(
        f"/api/tasks/{task['id']}", json={"title": "Buy oat milk"}, headers=alice["headers"]
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["title"] == "Buy oat milk"
    assert data["is_done"] is False


@pytest.mark.asyncio
async def test_move_and_detach_task(client, alice, task, project):
    url = f"/api/tasks/{task['id']}"

    r = await client.patch(url, json={"project_id": project["id"]}, headers=alice["headers"])
    assert r.json()["data"]["project_id"] == project["id"]

    # Omitting project_id leaves it alone
    r = await client.patch(url, json={"is_done": True}, headers=alice["headers"])
    assert r.json()["data"]["project_id"] == project["id"]

    r = await client.patch(url, json={"project_id": None}, headers=alice["headers"])
    assert r.json()["data"]["project_id"] is None


@pytest.mark.asyncio
async def test_move_task_into_foreign_project(client, alice, bob, task):
    r = await client.post("/api/projects", json={"title": "Bob's"}, headers=bob["headers"])
    bobs_project = r.json()["data"]

    r = await client.patch(
        f"/api/tasks/{task['id']}", json={"project_id": bobs_project["id"]},
        headers=alice["headers"],
    )
    assert r.status_code == 422

    r = await client.get(f"/api/tasks/{task['id']}", headers=alice["headers"])
    assert r.json()["data"]["project_id"] is None


@pytest.mark.asyncio
async def test_update_task_rejects_blank_title(client, alice, task):
    r = await client.patch(
        f"/api/tasks/{task['id']}", json={"title": "   "}, headers=alice["headers"]
    )
    assert r.status_code == 422
    assert "title" in r.json()["errors"]


@pytest.mark.asyncio
async def test_delete_task(client, alice, task):
    r = await client.delete(f"/api/tasks/{task['id']}", headers=alice["headers"])
    assert r.status_code == 204

    r = await client.get(f"/api/tasks/{task['id']}", headers=alice["headers"])
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Ownership
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_other_users_task_is_not_found(client, alice, bob, task):
    url = f"/api/tasks/{task['id']}"
    assert (await client.get(url, headers=bob["headers"])).status_code == 404
    assert (await client.patch(url, json={"is_done": True}, headers=bob["headers"])).status_code == 404
    assert (await client.delete(url, headers=bob["headers"])).status_code == 404

    r = await client.get(url, headers=alice["headers"])
    assert r.json()["data"]["is_done"] is False


@pytest.mark.asyncio
async def test_list_is_scoped_to_creator(client, alice, bob):
    await _create_tasks(client, alice, ["a1", "a2"])
    await _create_tasks(client, bob, ["b1"])

    r = await client.get("/api/tasks", headers=alice["headers"])
    assert sorted(t["title"] for t in r.json()["data"]) == ["a1", "a2"]


# ═══════════════════════════════════════════════════════════
# Listing: filter, sort
# ═══════════════════════════════════════════════════════════


async def _all_pages(client, user, params=None):
    """Walk page 1..last_page and return every row id in listing order."""
    ids, page, last_page = [], 1, 1
    while page <= last_page:
        r = await client.get(
            "/api/tasks", params={**(params or {}), "page": page}, headers=user["headers"]
        )
        assert r.status_code == 200
        ids.extend(t["id"] for t in r.json()["data"])
        last_page = r.json()["meta"]["last_page"]
        page += 1
    return ids


@pytest.mark.asyncio
async def test_filter_is_done_partitions_list(client, monkeypatch, alice):
    """Done and not-done listings split the full listing, across every page."""
    monkeypatch.setattr(settings, "page_size", 2)
    tasks = await _create_tasks(client, alice, [f"t{i}" for i in range(7)])
    for t in tasks[::2]:
        await client.patch(f"/api/tasks/{t['id']}", json={"is_done": True}, headers=alice["headers"])

    everything = await _all_pages(client, alice)
    done = await _all_pages(client, alice, {"filter[is_done]": "true"})
    not_done = await _all_pages(client, alice, {"filter[is_done]": "0"})

    assert len(everything) == len(set(everything)) == 7
    assert len(done) == len(set(done)) == 4
    assert len(not_done) == len(set(not_done)) == 3
    assert set(done) == {t["id"] for t in tasks[::2]}
    assert set(done) | set(not_done) == set(everything)
    assert not set(done) & set(not_done)


@pytest.mark.asyncio
@pytest.mark.parametrize("page", ["²", "٣", "1e3"])
async def test_non_ascii_page_rejected(client, alice, page):
    r = await client.get("/api/tasks", params={"page": page}, headers=alice["headers"])
    assert r.status_code == 422
    assert "page" in r.json()["errors"]


@pytest.mark.asyncio
async def test_huge_page_is_empty(client, alice):
    await _create_tasks(client, alice, ["only"])
    r = await client.get("/api/tasks", params={"page": str(10**30)}, headers=alice["headers"])
    assert r.status_code == 200
    body = r.json()
    assert body["data"] == []
    assert body["meta"]["total"] == 1
    assert body["links"]["next"] is None


@pytest.mark.asyncio
async def test_filter_is_done_any_of(client, alice):
    await _create_tasks(client, alice, ["x", "y"])
    r = await client.get(
        "/api/tasks", params={"filter[is_done]": "true,false"}, headers=alice["headers"]
    )
    assert r.json()["meta"]["total"] == 2


@pytest.mark.asyncio
async def test_filter_is_done_bad_value(client, alice):
    r = await client.get("/api/tasks", params={"filter[is_done]": "maybe"}, headers=alice["headers"])
    assert r.status_code == 422
    assert "filter[is_done]" in r.json()["errors"]


@pytest.mark.asyncio
async def test_unknown_filter_rejected(client, alice):
    r = await client.get("/api/tasks", params={"filter[title]": "milk"}, headers=alice["headers"])
    assert r.status_code == 422
    assert r.json()["errors"]["filter"] == [
        "Requested filter(s) `title` are not allowed. Allowed filter(s) are `is_done`."
    ]


@pytest.mark.asyncio
async def test_include_not_allowed_on_tasks(client, alice):
    r = await client.get("/api/tasks", params={"include": "project"}, headers=alice["headers"])
    assert r.status_code == 422
    assert "include" in r.json()["errors"]


@pytest.mark.asyncio
async def test_sort_by_is_done_then_title(client, alice):
    tasks = await _create_tasks(client, alice, ["b", "a", "c"])
    await client.patch(f"/api/tasks/{tasks[1]['id']}", json={"is_done": True}, headers=alice["headers"])

    r = await client.get("/api/tasks", params={"sort": "-is_done,title"}, headers=alice["headers"])
    assert [t["title"] for t in r.json()["data"]] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_equal_sort_keys_break_ties_by_id(client, monkeypatch, alice):
    """Rows that compare equal keep a stable order across pages."""
    monkeypatch.setattr(settings, "page_size", 2)
    tasks = await _create_tasks(client, alice, ["same"] * 5)

    seen = []
    for page in (1, 2, 3):
        r = await client.get(
            "/api/tasks", params={"sort": "title", "page": page}, headers=alice["headers"]
        )
        seen.extend(t["id"] for t in r.json()["data"])

    assert seen == [t["id"] for t in tasks]
