"""tests/vuln_cage/conftest.py

Common fixtures for the entire test suite.
"""

import json

import httpx
import pytest
from typer.testing import CliRunner


@pytest.fixture(scope="session")
def runner() -> CliRunner:
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep VULN_CAGE_* variables from the developer's shell out of the tests."""
    for name in ("VULN_CAGE_GITHUB_TOKEN", "VULN_CAGE_SOURCES", "VULN_CAGE_HTTP_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_httpx_client(monkeypatch):
    """
    Replaces httpx.Client with a mock that uses a MockTransport.

    Returns a handler function that tests can use to register mock responses.
    """
    responses = {}
    calls_log: list[tuple[str, str]] = []
    original_client = httpx.Client

    def add_response(
        url: str,
        method: str = "GET",
        status_code: int = 200,
        json_payload: dict | list | None = None,
        content: bytes | None = None,
    ):
        """Register a mock response for a given URL and method."""
        if json_payload is not None:
            body = json.dumps(json_payload).encode("utf-8")
        else:
            body = content if content is not None else b""
        responses[(method.upper(), url)] = (status_code, body)

    def mock_transport(request: httpx.Request) -> httpx.Response:
        """The transport logic that returns registered responses or a 404."""
        method = request.method
        url = str(request.url)
        key = (method, url)
        calls_log.append((method, url))
        if key in responses:
            status, body = responses[key]
            headers = {"Content-Length": str(len(body)), "Content-Type": "application/json"}
            return httpx.Response(status, content=body, headers=headers)

        return httpx.Response(404, text=f"Mock URL not found: {request.method} {request.url}")

    # Patch httpx.Client to always use our mock transport
    def patched_client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(mock_transport)
        return original_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "Client", patched_client)
    # expose call log on the returned function
    add_response.calls = calls_log  # type: ignore[attr-defined]
    return add_response
