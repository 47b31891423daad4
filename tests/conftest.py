"""Pytest configuration - loads .env for integration tests and fakes urllib for unit tests."""

import io
import json
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from fly_admin.sdk import FlyClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

GRAPHQL_URL = "https://graphql.fly.test"
API_URL = "https://machines.fly.test"
TOKEN = "fo1_test_token"


@dataclass
class RecordedRequest:
    """One request seen by the fake transport."""

    method: str
    url: str
    headers: dict[str, str]
    body: Any = None


@dataclass
class FakeHTTP:
    """Stand-in for urllib.request.urlopen that replays queued responses."""

    requests: list[RecordedRequest] = field(default_factory=list)
    responses: list[Any] = field(default_factory=list)

    def reply(self, body: Any = "", status: int = 200) -> None:
        """Queue a response; bytes are sent as-is, other non-string bodies are JSON-encoded."""
        if isinstance(body, bytes):
            raw = body
        else:
            raw = (body if isinstance(body, str) else json.dumps(body)).encode("utf-8")
        self.responses.append((status, raw))

    def fail(self, exc: BaseException) -> None:
        """Queue an exception raised instead of a response."""
        self.responses.append(exc)

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]

    def __call__(self, req: urllib.request.Request, timeout: float | None = None) -> io.BytesIO:
        self.requests.append(
            RecordedRequest(
                method=req.get_method(),
                url=req.full_url,
                headers={k.lower(): v for k, v in req.header_items()},
                body=json.loads(req.data) if req.data else None,
            )
        )
        outcome = self.responses.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome

        status, raw = outcome
        if status >= 400:
            raise urllib.error.HTTPError(req.full_url, status, "error", None, io.BytesIO(raw))
        return io.BytesIO(raw)


@pytest.fixture
def fake_http(monkeypatch) -> FakeHTTP:
    fake = FakeHTTP()
    monkeypatch.setattr(urllib.request, "urlopen", fake)
    return fake


@pytest.fixture
def client(fake_http) -> FlyClient:
    return FlyClient(TOKEN, graphql_url=GRAPHQL_URL, api_url=API_URL)
