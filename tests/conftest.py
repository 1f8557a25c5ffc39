"""Shared pytest fixtures for jiramenu tests."""

import json
from unittest.mock import MagicMock

import pytest

from jiramenu import jira_client, scheduler
from jiramenu.cache import ISSUE_CACHE

SERVER = "https://jira.example.com"


@pytest.fixture(autouse=True)
def clean_state():
    """Start every test with an empty issue cache and a fresh event loop."""
    ISSUE_CACHE.clear()
    scheduler.set_loop(None)
    yield
    ISSUE_CACHE.clear()
    scheduler.set_loop(None)


@pytest.fixture
def mock_jira():
    """Provide a mock JIRA client.

    The mock is injected into jira_client and automatically reset after the test.
    REST calls made through jira_client.request() land on mock._session.request
    and succeed with an empty 204 response unless configured otherwise.

    Usage:
        def test_something(mock_jira):
            mock_jira.transitions.return_value = [...]
            # Test code that calls jira_client.get_jira()
    """
    mock = MagicMock()
    mock._options = {"server": SERVER}
    mock._session.request.return_value = make_response(204)
    jira_client.set_jira(mock)
    yield mock
    jira_client.reset_jira()


def make_response(status: int = 200, body=None) -> MagicMock:
    """Build a fake requests.Response."""
    resp = MagicMock()
    resp.status_code = status
    resp.content = json.dumps(body).encode() if body is not None else b""
    resp.json.return_value = body
    return resp


@pytest.fixture
def respond(mock_jira):
    """Set the response returned by the next REST calls.

    Usage:
        def test_something(respond):
            respond(201, {"id": "10000"})
    """
    def _respond(status: int = 200, body=None):
        mock_jira._session.request.return_value = make_response(status, body)
        return mock_jira._session.request.return_value

    return _respond


@pytest.fixture
def sent(mock_jira):
    """Return (method, url, payload, params) of a REST call made via request().

    Usage:
        method, url, payload, params = sent()      # last call
        method, url, payload, params = sent(0)     # first call
    """
    def _sent(index: int = -1):
        call = mock_jira._session.request.call_args_list[index]
        method, url = call.args
        data = call.kwargs.get("data")
        payload = json.loads(data) if data is not None else None
        return method, url, payload, call.kwargs.get("params")

    return _sent


class FakeClock:
    """Virtual time for the event loop; sleeping advances the clock."""

    def __init__(self):
        self.now = 0.0

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_loop():
    """Install an event loop driven by a virtual clock.

    Usage:
        def test_something(fake_loop):
            fake_loop.clock.now += 2.0
            fake_loop.run_pending()
    """
    clock = FakeClock()
    loop = scheduler.EventLoop(timefunc=clock.time, delayfunc=clock.sleep)
    loop.clock = clock
    scheduler.set_loop(loop)
    yield loop
    scheduler.set_loop(None)
