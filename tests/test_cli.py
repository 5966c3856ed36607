"""CLI tests — commands run against a mocked API.

Learn: The CLI builds its HTTP client through _client(); tests swap that
for one backed by httpx.MockTransport, so each test scripts the API's
answers and inspects the requests the CLI sent. The token file lives in
tmp_path via TASKHUB_TOKEN_FILE.
"""

import json

import httpx
import pytest
from click.testing import CliRunner

from taskhub.cli import main as cli

USER = {"id": "0b6f1f6e-4d0e-4a43-9d56-5a1d2f3c4b5a", "name": "Ada", "email": "ada@example.com"}


def _task(**overrides) -> dict:
    task = {
        "id": 1,
        "ownerId": USER["id"],
        "title": "Buy milk",
        "description": None,
        "isCompleted": False,
        "priority": "Low",
        "createdAt": "2026-01-01T00:00:00",
        "updatedAt": "2026-01-01T00:00:00",
    }
    task.update(overrides)
    return task


@pytest.fixture
def token_file(tmp_path, monkeypatch):
    path = tmp_path / "token"
    monkeypatch.setenv("TASKHUB_TOKEN_FILE", str(path))
    return path


@pytest.fixture
def api(monkeypatch):
    """Scriptable fake API. Set api.responses[(method, path)] = (status, body)."""

    class FakeApi:
        def __init__(self):
            self.responses: dict[tuple[str, str], tuple[int, object]] = {}
            self.requests: list[httpx.Request] = []

        def handler(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            status, body = self.responses.get(
                (request.method, request.url.path),
                (404, {"message": "Not found", "stack": None}),
            )
            return httpx.Response(status, json=body)

        @property
        def last(self) -> httpx.Request:
            return self.requests[-1]

    fake = FakeApi()

    def fake_client(token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return httpx.AsyncClient(
            transport=httpx.MockTransport(fake.handler),
            base_url="http://test",
            headers=headers,
        )

    monkeypatch.setattr(cli, "_client", fake_client)
    return fake


@pytest.fixture
def signed_in(token_file):
    token_file.write_text("tok-123")
    return token_file


def test_signup_saves_token(api, token_file):
    api.responses[("POST", "/api/auth/signup")] = (201, {**USER, "token": "tok-new"})
    result = CliRunner().invoke(
        cli.main, ["signup", "Ada", "ada@example.com", "--password", "pw_123456"]
    )
    assert result.exit_code == 0, result.output
    assert "Welcome, Ada" in result.output
    assert token_file.read_text() == "tok-new"
    assert json.loads(api.last.content) == {
        "name": "Ada",
        "email": "ada@example.com",
        "password": "pw_123456",
    }


def test_login_failure_shows_message(api, token_file):
    api.responses[("POST", "/api/auth/login")] = (
        401,
        {"message": "Invalid email or password", "stack": None},
    )
    result = CliRunner().invoke(cli.main, ["login", "ada@example.com", "--password", "nope"])
    assert result.exit_code == 1
    assert "Invalid email or password" in result.output
    assert not token_file.exists()


def test_login_saves_token(api, token_file):
    api.responses[("POST", "/api/auth/login")] = (200, {**USER, "token": "tok-login"})
    result = CliRunner().invoke(cli.main, ["login", "ada@example.com", "--password", "pw"])
    assert result.exit_code == 0, result.output
    assert token_file.read_text() == "tok-login"


def test_commands_need_a_token(api, token_file):
    result = CliRunner().invoke(cli.main, ["tasks"])
    assert result.exit_code == 1
    assert "Not signed in" in result.output
    assert api.requests == []


def test_whoami_sends_bearer_token(api, signed_in):
    api.responses[("GET", "/api/users/profile")] = (200, USER)
    result = CliRunner().invoke(cli.main, ["whoami"])
    assert result.exit_code == 0, result.output
    assert "Ada <ada@example.com>" in result.output
    assert api.last.headers["Authorization"] == "Bearer tok-123"


def test_rejected_token_is_cleared(api, signed_in):
    api.responses[("GET", "/api/users/profile")] = (
        401,
        {"message": "Not authorized, token invalid", "stack": None},
    )
    result = CliRunner().invoke(cli.main, ["whoami"])
    assert result.exit_code == 1
    assert "token invalid" in result.output
    assert not signed_in.exists()


def test_logout_removes_token(signed_in):
    result = CliRunner().invoke(cli.main, ["logout"])
    assert result.exit_code == 0
    assert not signed_in.exists()


def test_tasks_passes_filters(api, signed_in):
    api.responses[("GET", "/api/tasks")] = (200, [_task(priority="High", isCompleted=True)])
    result = CliRunner().invoke(
        cli.main, ["tasks", "--search", "milk", "--completed", "--priority", "High"]
    )
    assert result.exit_code == 0, result.output
    assert "Buy milk" in result.output
    params = dict(api.last.url.params)
    assert params == {"search": "milk", "isCompleted": "true", "priority": "High"}


def test_tasks_pending_flag(api, signed_in):
    api.responses[("GET", "/api/tasks")] = (200, [])
    result = CliRunner().invoke(cli.main, ["tasks", "--pending"])
    assert result.exit_code == 0
    assert "No tasks." in result.output
    assert api.last.url.params["isCompleted"] == "false"


def test_add_task(api, signed_in):
    api.responses[("POST", "/api/tasks")] = (201, _task(id=7))
    result = CliRunner().invoke(cli.main, ["add", "Buy milk", "-p", "Low", "-d", "2 litres"])
    assert result.exit_code == 0, result.output
    assert "Task #7 created" in result.output
    assert json.loads(api.last.content) == {
        "title": "Buy milk",
        "priority": "Low",
        "description": "2 litres",
    }


def test_done_and_undo(api, signed_in):
    api.responses[("PUT", "/api/tasks/1")] = (200, _task(isCompleted=True))
    result = CliRunner().invoke(cli.main, ["done", "1"])
    assert result.exit_code == 0, result.output
    assert "completed" in result.output
    assert json.loads(api.last.content) == {"isCompleted": True}

    api.responses[("PUT", "/api/tasks/1")] = (200, _task(isCompleted=False))
    result = CliRunner().invoke(cli.main, ["done", "1", "--undo"])
    assert "reopened" in result.output
    assert json.loads(api.last.content) == {"isCompleted": False}


def test_edit_sends_only_given_fields(api, signed_in):
    api.responses[("PUT", "/api/tasks/1")] = (200, _task(title="Buy oat milk"))
    result = CliRunner().invoke(cli.main, ["edit", "1", "--title", "Buy oat milk"])
    assert result.exit_code == 0, result.output
    assert json.loads(api.last.content) == {"title": "Buy oat milk"}


def test_rm_other_users_task(api, signed_in):
    api.responses[("DELETE", "/api/tasks/9")] = (
        401,
        {"message": "Not authorized to delete this task", "stack": None},
    )
    result = CliRunner().invoke(cli.main, ["rm", "9", "--yes"])
    assert result.exit_code == 1
    assert "Not authorized to delete this task" in result.output


def test_rm_task(api, signed_in):
    api.responses[("DELETE", "/api/tasks/1")] = (200, {"message": "Task removed", "id": 1})
    result = CliRunner().invoke(cli.main, ["rm", "1", "--yes"])
    assert result.exit_code == 0, result.output
    assert "Task removed (#1)" in result.output
