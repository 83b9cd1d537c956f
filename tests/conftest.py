"""Shared fixtures for the portal test suite."""

from __future__ import annotations

import json
from typing import Any, Callable

import pytest
import requests
from requests.cookies import RequestsCookieJar

from portal.api_client import ApiClient
from portal.credentials import CredentialStore, MemoryStorage
from portal.models import ApiErrorDetail, ApiResponse, AuthResult, User
from portal.session import SessionManager


def make_response(status: int, body: Any = None, *, raw: bytes | None = None) -> requests.Response:
	response = requests.Response()
	response.status_code = status
	response.url = "https://api.test/v1/stub"
	if raw is not None:
		response._content = raw
	elif body is not None:
		response._content = json.dumps(body).encode("utf-8")
	else:
		response._content = b""
	response.headers["Content-Type"] = "application/json"
	return response


class StubHttpSession:
	"""Stands in for ``requests.Session``: records calls, replays queued outcomes."""

	def __init__(self) -> None:
		self.calls: list[dict[str, Any]] = []
		self.outcomes: list[requests.Response | Exception] = []
		self.cookies = RequestsCookieJar()

	def queue(self, outcome: requests.Response | Exception) -> None:
		self.outcomes.append(outcome)

	def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
		self.calls.append({"method": method, "url": url, **kwargs})
		outcome = self.outcomes.pop(0)
		if isinstance(outcome, Exception):
			raise outcome
		return outcome


@pytest.fixture
def http() -> StubHttpSession:
	return StubHttpSession()


@pytest.fixture
def api(http: StubHttpSession) -> ApiClient:
	return ApiClient("https://api.test/v1", session=http, timeout=5.0)


def sample_user(**overrides: Any) -> User:
	fields = {"user_id": "u-1", "email": "jane@example.com", "first_name": "Jane", "last_name": "Doe"}
	fields.update(overrides)
	return User(**fields)


def login_ok(token: str = "tok-1", **user_fields: Any) -> ApiResponse[AuthResult]:
	return ApiResponse[AuthResult](success=True, data=AuthResult(token=token, user=sample_user(**user_fields)))


def failure(code: str, message: str) -> ApiResponse[Any]:
	return ApiResponse[Any](success=False, error=ApiErrorDetail(code=code, message=message))


class FakeApi:
	"""In-memory replacement for ``ApiClient`` used by session tests."""

	def __init__(self) -> None:
		self.login_responses: list[ApiResponse[Any]] = []
		self.register_responses: list[ApiResponse[Any]] = []
		self.login_payloads: list[Any] = []
		self.register_payloads: list[Any] = []
		self.during_login: Callable[[], None] | None = None

	def login_user(self, payload):
		self.login_payloads.append(payload)
		response = self.login_responses.pop(0)
		hook, self.during_login = self.during_login, None
		if hook is not None:
			hook()
		return response

	def register_user(self, payload):
		self.register_payloads.append(payload)
		return self.register_responses.pop(0)


@pytest.fixture
def fake_api() -> FakeApi:
	return FakeApi()


@pytest.fixture
def durable() -> MemoryStorage:
	return MemoryStorage()


@pytest.fixture
def transport() -> MemoryStorage:
	return MemoryStorage()


@pytest.fixture
def credentials(durable: MemoryStorage, transport: MemoryStorage) -> CredentialStore:
	return CredentialStore(durable, transport)


@pytest.fixture
def manager(fake_api: FakeApi, credentials: CredentialStore) -> SessionManager:
	return SessionManager(fake_api, credentials)
