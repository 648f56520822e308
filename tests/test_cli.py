"""CLI tests — click's CliRunner against an httpx.MockTransport.

Learn: The CLI is a thin httpx client, so instead of a server we hand
it a transport that records each request and answers from a table.
"""

import functools
import json

import httpx
import pytest
from click.testing import CliRunner

from taskboard.cli import main as cli_main

TOKEN = "1|abc"


@pytest.fixture
def api(monkeypatch):
    """Route table + request log; patches the CLI's AsyncClient to use it."""
    routes = {}
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        key = (request.method, request.url.path)
        if key not in routes:
            return httpx.Response(404, json={"message": "Not Found"})
        status, body = routes[key]
        return httpx.Response(status, json=body) if body is not None else httpx.Response(status)

    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        cli_main.httpx,
        "AsyncClient",
        functools.partial(real_client, transport=httpx.MockTransport(handler)),
    )
    return routes, seen


def _invoke(args, token=TOKEN):
    env = {"TASKBOARD_API_URL": "http://api.test"}
    if token:
        env["TASKBOARD_TOKEN"] = token
    return CliRunner().invoke(cli_main.main, args, env=env)


def _page(rows, total=None, last_page=1):
    return {
        "data": rows,
        "links": {"first": "", "last": "", "prev": None, "next": None},
        "meta": {
            "current_page": 1, "from": 1 if rows else None, "to": len(rows) or None,
            "last_page": last_page, "per_page": 15,
            "total": len(rows) if total is None else total, "path": "",
        },
    }


def _task(id_, title, is_done=False, project_id=None):
    return {"id": id_, "title": title, "is_done": is_done, "project_id": project_id,
            "creator_id": 1, "created_at": "", "updated_at": ""}


def test_login_prints_token(api):
    routes, seen = api
    routes[("POST", "/api/login")] = (200, {"access_token": "7|xyz", "token_type": "Bearer"})

    result = _invoke(["login", "me@example.com", "--password", "pw123456"], token=None)

    assert result.exit_code == 0
    assert "7|xyz" in result.output
    assert json.loads(seen[0].content) == {"email": "me@example.com", "password": "pw123456"}


def test_login_failure_shows_api_message(api):
    routes, _ = api
    routes[("POST", "/api/login")] = (401, {"message": "Login information invalid"})

    result = _invoke(["login", "me@example.com", "--password", "bad"], token=None)

    assert result.exit_code == 1
    assert "Login information invalid" in result.output


def test_commands_require_token(api):
    result = _invoke(["whoami"], token=None)
    assert result.exit_code == 1
    assert "not logged in" in result.output


def test_whoami_sends_bearer_token(api):
    routes, seen = api
    routes[("GET", "/api/user")] = (200, {"id": 1, "name": "Alice", "email": "a@example.com"})

    result = _invoke(["whoami"])

    assert result.exit_code == 0
    assert "Alice <a@example.com>" in result.output
    assert seen[0].headers["Authorization"] == f"Bearer {TOKEN}"


def test_tasks_filter_and_sort_params(api):
    routes, seen = api
    routes[("GET", "/api/tasks")] = (200, _page([_task(3, "Buy milk", is_done=True)]))

    result = _invoke(["tasks", "--done", "--sort", "-title", "--page", "2"])

    assert result.exit_code == 0
    assert "Buy milk" in result.output
    params = seen[0].url.params
    assert params["filter[is_done]"] == "true"
    assert params["sort"] == "-title"
    assert params["page"] == "2"


def test_tasks_empty(api):
    routes, _ = api
    routes[("GET", "/api/tasks")] = (200, _page([]))
    result = _invoke(["tasks", "--not-done"])
    assert "No tasks found." in result.output


def test_projects_with_tasks(api):
    routes, seen = api
    project = {"id": 2, "title": "Home", "owner_id": 1, "created_at": "", "updated_at": "",
               "tasks": [_task(5, "Paint fence", project_id=2)]}
    routes[("GET", "/api/projects")] = (200, _page([project], total=20, last_page=2))

    result = _invoke(["projects", "--include-tasks"])

    assert result.exit_code == 0
    assert "#2  Home" in result.output
    assert "Paint fence" in result.output
    assert "Page 1 of 2" in result.output
    assert seen[0].url.params["include"] == "tasks"


def test_add_task_with_project(api):
    routes, seen = api
    routes[("POST", "/api/tasks")] = (201, {"data": _task(9, "Write report", project_id=4)})

    result = _invoke(["add", "Write report", "--project", "4"])

    assert result.exit_code == 0
    assert "Task #9 created" in result.output
    assert json.loads(seen[0].content) == {"title": "Write report", "project_id": 4}


def test_add_task_validation_error(api):
    routes, _ = api
    routes[("POST", "/api/tasks")] = (
        422, {"message": "The selected project id is invalid.",
              "errors": {"project_id": ["The selected project id is invalid."]}},
    )
    result = _invoke(["add", "x", "-p", "99"])
    assert result.exit_code == 1
    assert "The selected project id is invalid." in result.output


def test_done_patches_task(api):
    routes, seen = api
    routes[("PATCH", "/api/tasks/9")] = (200, {"data": _task(9, "x", is_done=True)})

    result = _invoke(["done", "9"])

    assert result.exit_code == 0
    assert json.loads(seen[0].content) == {"is_done": True}


def test_rm_missing_task(api):
    routes, _ = api
    routes[("DELETE", "/api/tasks/9")] = (404, {"message": "Task not found"})

    result = _invoke(["rm", "9"])

    assert result.exit_code == 1
    assert "Task not found" in result.output


def test_rm_task(api):
    routes, _ = api
    routes[("DELETE", "/api/tasks/9")] = (204, None)
    result = _invoke(["rm", "9"])
    assert result.exit_code == 0
    assert "Task #9 deleted." in result.output
