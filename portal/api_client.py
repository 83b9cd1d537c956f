"""HTTP client for the remote claims API.

Every call funnels through ``ApiClient.request`` which turns whatever happens
on the wire into an ``ApiResponse`` envelope: server error envelopes are
passed through unchanged, anything that never produced a usable response is
reported as ``UNKNOWN_ERROR``. No ``requests`` exception escapes this module.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional
from urllib.parse import quote, urlsplit

import requests
from pydantic import ValidationError

from portal.claims import ClaimsQuery
from portal.config import API_BASE_URL, API_TIMEOUT_SECONDS, DEBUG_HTTP
from portal.documents import DocumentUpload
from portal.models import (
	UNKNOWN_ERROR,
	ApiErrorDetail,
	ApiResponse,
	AuthResult,
	ClaimPage,
	DetailedClaim,
	Document,
	DocumentStatus,
	DocumentUrl,
	LoginPayload,
	RegisterPayload,
	User,
)

LOGGER = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


def _error_from_body(body: Any) -> ApiErrorDetail | None:
	if not isinstance(body, dict):
		return None
	error = body.get("error")
	if not isinstance(error, dict):
		return None
	try:
		return ApiErrorDetail.model_validate(error)
	except ValidationError:
		return None


class ApiClient:
	"""Thin wrapper around a ``requests.Session`` bound to one API base URL."""

	def __init__(
		self,
		base_url: str | None = None,
		*,
		token_provider: TokenProvider | None = None,
		timeout: float | None = None,
		session: requests.Session | None = None,
	) -> None:
		self.base_url = (base_url or API_BASE_URL).rstrip("/")
		self.timeout = timeout if timeout is not None else API_TIMEOUT_SECONDS
		self.token_provider = token_provider
		self._session = session or requests.Session()

	@property
	def cookies(self):
		"""Cookie jar sent with every request made through this client."""
		return self._session.cookies

	@property
	def host(self) -> str:
		return urlsplit(self.base_url).hostname or ""

	def _headers(self) -> dict[str, str]:
		headers = {"Accept": "application/json"}
		token = self.token_provider() if self.token_provider else None
		LOGGER.debug("Auth token: %s", "present" if token else "missing")
		if token:
			headers["Authorization"] = f"Bearer {token}"
		return headers

	def request(self, method: str, path: str, model: Any = None, **kwargs: Any) -> ApiResponse[Any]:
		"""Send one request and normalize the outcome into an envelope.

		``model`` is the type expected under ``data``; when given, the payload is
		validated against ``ApiResponse[model]`` and a mismatch is reported as an
		``UNKNOWN_ERROR`` failure rather than raised.
		"""

		envelope_type = ApiResponse[model] if model is not None else ApiResponse[Any]
		url = f"{self.base_url}/{path.lstrip('/')}"
		headers = self._headers()
		headers.update(kwargs.pop("headers", None) or {})
		try:
			response = self._session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
		except requests.RequestException as exc:
			LOGGER.warning("%s %s failed before a response arrived: %s", method, path, exc)
			return envelope_type.failure(UNKNOWN_ERROR, str(exc) or "An unexpected error occurred")

		if DEBUG_HTTP:
			LOGGER.debug("%s %s -> %s", method, url, response.status_code)

		try:
			body = response.json()
		except ValueError:
			body = None

		try:
			response.raise_for_status()
		except requests.HTTPError as exc:
			error = _error_from_body(body)
			if error is not None:
				LOGGER.info("%s %s rejected: %s %s", method, path, error.code, error.message)
				message = body.get("message")
				return envelope_type(success=False, error=error, message=message if isinstance(message, str) else None)
			if isinstance(body, dict) and body.get("success") is False:
				LOGGER.info("%s %s rejected with HTTP %s", method, path, response.status_code)
				message = body.get("message")
				return envelope_type(success=False, message=message if isinstance(message, str) else None)
			LOGGER.warning("%s %s returned HTTP %s without an error envelope: %s", method, path, response.status_code, exc)
			return envelope_type.failure(
				UNKNOWN_ERROR,
				"The server returned an unexpected response",
				details={"status": response.status_code},
			)

		if not isinstance(body, dict):
			LOGGER.warning("%s %s returned a body that is not a JSON object", method, path)
			return envelope_type.failure(UNKNOWN_ERROR, "The server returned an unreadable response")

		try:
			return envelope_type.model_validate(body)
		except ValidationError as exc:
			LOGGER.warning("%s %s returned an unexpected payload: %s", method, path, exc.error_count())
			return envelope_type.failure(
				UNKNOWN_ERROR,
				"The server returned an unexpected response",
				details=exc.errors(include_url=False, include_context=False, include_input=False),
			)

	# Authentication

	def register_user(self, payload: RegisterPayload) -> ApiResponse[User]:
		return self.request("POST", "/auth/register", User, json=payload.to_wire())

	def login_user(self, payload: LoginPayload) -> ApiResponse[AuthResult]:
		return self.request("POST", "/auth/login", AuthResult, json=payload.to_wire())

	# Claims

	def get_all_claims(self, query: ClaimsQuery | None = None) -> ApiResponse[ClaimPage]:
		params = (query or ClaimsQuery()).to_params()
		return self.request("GET", "/claims", ClaimPage, params=params)

	def get_claim(self, claim_id: str) -> ApiResponse[DetailedClaim]:
		return self.request("GET", f"/claims/{quote(str(claim_id), safe='')}", DetailedClaim)

	# Documents

	def upload_document(self, upload: DocumentUpload) -> ApiResponse[Document]:
		files = {"document": (upload.file_name, upload.content, upload.content_type)}
		data = {"documentType": upload.document_type.value, "description": upload.description}
		return self.request("POST", "/documents", Document, files=files, data=data)

	def get_document_url(self, document_id: str) -> ApiResponse[DocumentUrl]:
		return self.request("GET", f"/documents/{quote(str(document_id), safe='')}/url", DocumentUrl)

	def get_document_status(self, document_id: str) -> ApiResponse[DocumentStatus]:
		return self.request("GET", f"/documents/{quote(str(document_id), safe='')}/status", DocumentStatus)
