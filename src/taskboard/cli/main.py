"""Taskboard CLI — manage projects and tasks from the terminal.

Usage:
    taskboard login me@example.com              # Prompt for password, print a token
    export TASKBOARD_TOKEN=...                   # Use it for every other command
    taskboard whoami                             # Current user
    taskboard projects --include-tasks           # List projects
    taskboard tasks --not-done --sort title      # List tasks
    taskboard add "write the report" -p 3        # Create a task
    taskboard done 42                            # Mark task #42 done
    taskboard rm 42                              # Delete task #42
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import sys
from typing import Optional

import click
import httpx

from taskboard import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("TASKBOARD_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Taskboard API."""
    headers = {"Accept": "application/json"}
    token = os.environ.get("TASKBOARD_TOKEN")
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        # No running loop: normal CLI invocation
        return asyncio.run(coro)
    else:
        # Already inside an event loop (e.g. test runner), so run in a thread
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _require_token() -> None:
    if not os.environ.get("TASKBOARD_TOKEN"):
        click.secho(
            "Error: not logged in (run `taskboard login` and set TASKBOARD_TOKEN)",
            fg="red",
            err=True,
        )
        sys.exit(1)


def _check(r: httpx.Response) -> None:
    """Exit with the API's own message on any error response."""
    if r.is_success:
        return
    try:
        message = r.json().get("message", r.text)
    except ValueError:
        message = r.text or r.reason_phrase
    click.secho(f"Error ({r.status_code}): {message}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    # Header
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    # Rows
    for row in rows:
        line = "  ".join(
            str("-" if row.get(k) is None else row[k])[:w].ljust(w) for _, k, w in columns
        )
        click.echo(line)


def _done_mark(task: dict) -> str:
    return click.style("x", fg="green") if task["is_done"] else " "


def _page_footer(meta: dict) -> None:
    if meta["last_page"] > 1:
        click.echo()
        click.echo(f"Page {meta['current_page']} of {meta['last_page']} ({meta['total']} total)")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="taskboard")
def main():
    """Taskboard — projects and tasks from the command line."""


# ---------------------------------------------------------------------------
# taskboard login / whoami
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
def login(email: str, password: str):
    """Log in and print a bearer token for TASKBOARD_TOKEN."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        r = await c.post("/api/login", json={"email": email, "password": password})
        _check(r)
        token = r.json()["access_token"]

    click.secho("Logged in.", fg="green", err=True)
    click.echo(token)


@main.command()
def whoami():
    """Show the user the current token belongs to."""
    _require_token()
    _run(_whoami_impl())


async def _whoami_impl():
    async with _client() as c:
        r = await c.get("/api/user")
        _check(r)
        user = r.json()

    click.echo(f"{user['name']} <{user['email']}> (#{user['id']})")


# ---------------------------------------------------------------------------
# taskboard projects
# ---------------------------------------------------------------------------


@main.command()
@click.option("--include-tasks", is_flag=True, help="Also list each project's tasks")
@click.option("--page", default=1, type=click.IntRange(min=1), help="Page number")
def projects(include_tasks: bool, page: int):
    """List your projects, newest first."""
    _require_token()
    _run(_projects_impl(include_tasks, page))


async def _projects_impl(include_tasks: bool, page: int):
    params: dict = {"page": page}
    if include_tasks:
        params["include"] = "tasks"

    async with _client() as c:
        r = await c.get("/api/projects", params=params)
        _check(r)
        body = r.json()

    rows = body["data"]
    if not rows:
        click.echo("No projects found.")
        return

    if not include_tasks:
        _print_table(rows, [("ID", "id", 6), ("Title", "title", 60)])
    else:
        for p in rows:
            click.secho(f"#{p['id']}  {p['title']}", bold=True)
            for t in p.get("tasks") or []:
                click.echo(f"  [{_done_mark(t)}] #{t['id']}  {t['title']}")
            if not p.get("tasks"):
                click.echo("  (no tasks)")
    _page_footer(body["meta"])


# ---------------------------------------------------------------------------
# taskboard tasks
# ---------------------------------------------------------------------------


@main.command()
@click.option("--done/--not-done", "done", default=None, help="Filter by completion")
@click.option("--sort", "-s", help='Sort keys, e.g. "title" or "-is_done,title"')
@click.option("--page", default=1, type=click.IntRange(min=1), help="Page number")
def tasks(done: Optional[bool], sort: Optional[str], page: int):
    """List your tasks."""
    _require_token()
    _run(_tasks_impl(done, sort, page))


async def _tasks_impl(done: Optional[bool], sort: Optional[str], page: int):
    params: dict = {"page": page}
    if done is not None:
        params["filter[is_done]"] = "true" if done else "false"
    if sort:
        params["sort"] = sort

    async with _client() as c:
        r = await c.get("/api/tasks", params=params)
        _check(r)
        body = r.json()

    rows = body["data"]
    if not rows:
        click.echo("No tasks found.")
        return

    click.secho(f"Tasks ({body['meta']['total']}):", bold=True)
    click.echo()
    _print_table(
        [{**t, "done": "yes" if t["is_done"] else "no"} for t in rows],
        [
            ("ID", "id", 6),
            ("Done", "done", 5),
            ("Project", "project_id", 8),
            ("Title", "title", 60),
        ],
    )
    _page_footer(body["meta"])


# ---------------------------------------------------------------------------
# taskboard add / done / rm
# ---------------------------------------------------------------------------


@main.command()
@click.argument("title")
@click.option("--project", "-p", "project_id", type=int, help="File under this project")
def add(title: str, project_id: Optional[int]):
    """Create a task."""
    _require_token()
    _run(_add_impl(title, project_id))


async def _add_impl(title: str, project_id: Optional[int]):
    body: dict = {"title": title}
    if project_id is not None:
        body["project_id"] = project_id

    async with _client() as c:
        r = await c.post("/api/tasks", json=body)
        _check(r)
        task = r.json()["data"]

    click.secho(f"Task #{task['id']} created: {task['title']}", fg="green")


@main.command()
@click.argument("task_id", type=int)
def done(task_id: int):
    """Mark a task as done."""
    _require_token()
    _run(_done_impl(task_id))


async def _done_impl(task_id: int):
    async with _client() as c:
        r = await c.patch(f"/api/tasks/{task_id}", json={"is_done": True})
        _check(r)

    click.secho(f"Task #{task_id} done.", fg="green")


@main.command()
@click.argument("task_id", type=int)
def rm(task_id: int):
    """Delete a task."""
    _require_token()
    _run(_rm_impl(task_id))


async def _rm_impl(task_id: int):
    async with _client() as c:
        r = await c.delete(f"/api/tasks/{task_id}")
        _check(r)

    click.echo(f"Task #{task_id} deleted.")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
