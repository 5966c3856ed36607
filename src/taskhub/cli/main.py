"""TaskHub CLI — manage your tasks from the terminal.

Usage:
    taskhub signup "Ada" ada@example.com          # Create an account (prompts for password)
    taskhub login ada@example.com                 # Sign in, token saved locally
    taskhub whoami                                # Show the signed-in profile
    taskhub tasks --pending --priority High       # List / search / filter tasks
    taskhub add "Buy milk" -p Low                 # Create a task
    taskhub done 42                               # Mark task 42 complete (--undo to reopen)
    taskhub edit 42 --title "Buy oat milk"        # Change title/description/priority
    taskhub rm 42                                 # Delete a task
    taskhub serve                                 # Run the API server
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from pathlib import Path
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:5000"


def _api_url() -> str:
    return os.environ.get("TASKHUB_API_URL", DEFAULT_API_URL).rstrip("/")


def _token_path() -> Path:
    custom = os.environ.get("TASKHUB_TOKEN_FILE")
    return Path(custom) if custom else Path.home() / ".taskhub" / "token"


def _load_token() -> Optional[str]:
    path = _token_path()
    if not path.exists():
        return None
    return path.read_text().strip() or None


def _save_token(token: str) -> None:
    path = _token_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(token)
    path.chmod(0o600)


def _clear_token() -> None:
    _token_path().unlink(missing_ok=True)


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the TaskHub API."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
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
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


async def _get(token: str, path: str, params: Optional[dict] = None) -> httpx.Response:
    async with _client(token) as c:
        return await c.get(path, params=params)


async def _send(
    token: Optional[str], method: str, path: str, body: Optional[dict] = None
) -> httpx.Response:
    async with _client(token) as c:
        return await c.request(method, path, json=body)


def _require_token() -> str:
    token = _load_token()
    if not token:
        click.secho("Not signed in. Run `taskhub login` first.", fg="red", err=True)
        sys.exit(1)
    return token


def _check(r: httpx.Response, authed: bool = True):
    """Return the JSON body, or print the API's error message and exit.

    A 401 on an authenticated call means the saved token is no good
    any more, so it is thrown away.
    """
    if r.is_success:
        return r.json()
    try:
        message = r.json().get("message") or r.text
    except ValueError:
        message = r.text
    if authed and r.status_code == 401:
        _clear_token()
    click.secho(f"Error ({r.status_code}): {message}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.secho(line, fg=_priority_color(row.get("priority", "")))


def _priority_color(priority: str) -> str:
    colors = {"High": "red", "Medium": "yellow", "Low": "green"}
    return colors.get(priority, "white")


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="taskhub")
def main():
    """TaskHub — personal task tracking from the terminal."""


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


@main.command()
@click.argument("name")
@click.argument("email")
@click.password_option()
def signup(name: str, email: str, password: str):
    """Create an account and sign in."""
    r = _run(_send(None, "POST", "/api/auth/signup",
                   {"name": name, "email": email, "password": password}))
    user = _check(r, authed=False)
    _save_token(user["token"])
    click.secho(f"Welcome, {user['name']}! You are signed in.", fg="green")


@main.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
def login(email: str, password: str):
    """Sign in with email and password."""
    r = _run(_send(None, "POST", "/api/auth/login", {"email": email, "password": password}))
    user = _check(r, authed=False)
    _save_token(user["token"])
    click.secho(f"Signed in as {user['name']} <{user['email']}>", fg="green")


@main.command()
def logout():
    """Forget the saved token."""
    _clear_token()
    click.echo("Signed out.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
def whoami(as_json: bool):
    """Show the signed-in user's profile."""
    user = _check(_run(_get(_require_token(), "/api/users/profile")))
    if as_json:
        click.echo(_pretty_json(user))
    else:
        click.echo(f"{user['name']} <{user['email']}>")


@main.command("profile-update")
@click.option("--name", help="New display name")
@click.option("--email", help="New email address")
@click.option("--password", is_flag=True, help="Prompt for a new password")
def profile_update(name: Optional[str], email: Optional[str], password: bool):
    """Change name, email, or password."""
    body: dict = {}
    if name:
        body["name"] = name
    if email:
        body["email"] = email
    if password:
        body["password"] = click.prompt(
            "New password", hide_input=True, confirmation_prompt=True
        )
    if not body:
        click.echo("Nothing to update.")
        return
    user = _check(_run(_send(_require_token(), "PUT", "/api/users/profile", body)))
    click.secho(f"Profile updated: {user['name']} <{user['email']}>", fg="green")


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@main.command()
@click.option("--search", "-s", help="Substring of title or description")
@click.option("--completed/--pending", default=None, help="Only completed / open tasks")
@click.option(
    "--priority", "-p", type=click.Choice(["Low", "Medium", "High"]), help="Only this priority"
)
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
def tasks(search: Optional[str], completed: Optional[bool], priority: Optional[str], as_json: bool):
    """List your tasks, newest first."""
    params: dict = {}
    if search:
        params["search"] = search
    if completed is not None:
        params["isCompleted"] = "true" if completed else "false"
    if priority:
        params["priority"] = priority

    data = _check(_run(_get(_require_token(), "/api/tasks", params)))
    if as_json:
        click.echo(_pretty_json(data))
        return
    if not data:
        click.echo("No tasks.")
        return

    rows = [
        {**t, "done": "x" if t["isCompleted"] else " "}
        for t in data
    ]
    _print_table(rows, [
        ("ID", "id", 6),
        ("Done", "done", 4),
        ("Priority", "priority", 8),
        ("Title", "title", 40),
        ("Description", "description", 30),
    ])


@main.command()
@click.argument("title")
@click.option("--description", "-d", help="Longer description")
@click.option(
    "--priority", "-p", type=click.Choice(["Low", "Medium", "High"]), default="Medium",
    show_default=True,
)
def add(title: str, description: Optional[str], priority: str):
    """Create a task."""
    body = {"title": title, "priority": priority}
    if description:
        body["description"] = description
    task = _check(_run(_send(_require_token(), "POST", "/api/tasks", body)))
    click.secho(f"Task #{task['id']} created: {task['title']}", fg="green")


@main.command()
@click.argument("task_id", type=int)
@click.option("--undo", is_flag=True, help="Mark the task as not completed")
def done(task_id: int, undo: bool):
    """Mark a task completed."""
    task = _check(_run(
        _send(_require_token(), "PUT", f"/api/tasks/{task_id}", {"isCompleted": not undo})
    ))
    state = "completed" if task["isCompleted"] else "reopened"
    click.secho(f"Task #{task['id']} {state}", fg="green")


@main.command()
@click.argument("task_id", type=int)
@click.option("--title", help="New title")
@click.option("--description", "-d", help="New description")
@click.option("--priority", "-p", type=click.Choice(["Low", "Medium", "High"]))
def edit(task_id: int, title: Optional[str], description: Optional[str], priority: Optional[str]):
    """Change a task's title, description, or priority."""
    body = {
        k: v
        for k, v in {"title": title, "description": description, "priority": priority}.items()
        if v
    }
    if not body:
        click.echo("Nothing to update.")
        return
    task = _check(_run(_send(_require_token(), "PUT", f"/api/tasks/{task_id}", body)))
    click.secho(f"Task #{task['id']} updated", fg="green")


@main.command()
@click.argument("task_id", type=int)
@click.confirmation_option(prompt="Delete this task?")
def rm(task_id: int):
    """Delete a task."""
    result = _check(_run(_send(_require_token(), "DELETE", f"/api/tasks/{task_id}")))
    click.secho(f"{result['message']} (#{task_id})", fg="green")


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", help="Bind address (default from TASKHUB_HOST)")
@click.option("--port", type=int, help="Port (default from TASKHUB_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the TaskHub API server."""
    import uvicorn

    from taskhub.config import Settings

    settings = Settings()
    uvicorn.run(
        "taskhub.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
