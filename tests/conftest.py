"""Pytest configuration and fixtures for tests."""

import socket
from collections.abc import Callable
from unittest.mock import Mock

import pytest
import requests


def build_response(status_code: int, body: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.fixture
def make_response() -> Callable[[int, str], requests.Response]:
    """Factory for real requests.Response objects with a given status and body."""
    return build_response


@pytest.fixture
def mock_session() -> Mock:
    """A requests.Session stand-in with a real headers dict."""
    session = Mock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


@pytest.fixture(autouse=True)
def clear_ticktick_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep a developer's real credentials out of the tests
    for name in [
        "TICKTICK_ACCESS_TOKEN",
        "TICKTICK_CLIENT_ID",
        "TICKTICK_CLIENT_SECRET",
        "TICKTICK_OAUTH_PORT",
        "TICKTICK_API_BASE_URL",
    ]:
        monkeypatch.delenv(name, raising=False)
