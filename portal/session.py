"""Authentication state for one browser session.

``SessionManager`` is the single owner of the token and user profile. It is
an explicit object handed to views rather than a module global, so each
browser session (and each test) gets its own instance.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace

from portal.api_client import ApiClient
from portal.credentials import CredentialStore
from portal.models import (
	LOGIN_FAILED,
	UNKNOWN_ERROR,
	ApiErrorDetail,
	ApiResponse,
	LoginPayload,
	RegisterPayload,
	User,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
	token: str | None = None
	user: User | None = None
	is_loading: bool = False
	last_error: ApiErrorDetail | None = None

	@property
	def is_authenticated(self) -> bool:
		return bool(self.token)


INITIAL_STATE = SessionState()


class SessionManager:
	def __init__(self, api: ApiClient, credentials: CredentialStore) -> None:
		self.api = api
		self.credentials = credentials
		self._state = INITIAL_STATE
		self._lock = threading.Lock()
		self._generation = 0

	# state access

	def snapshot(self) -> SessionState:
		with self._lock:
			return self._state

	@property
	def token(self) -> str | None:
		return self.snapshot().token

	@property
	def user(self) -> User | None:
		return self.snapshot().user

	@property
	def is_loading(self) -> bool:
		return self.snapshot().is_loading

	@property
	def last_error(self) -> ApiErrorDetail | None:
		return self.snapshot().last_error

	@property
	def is_authenticated(self) -> bool:
		return self.snapshot().is_authenticated

	def _update(self, **changes) -> None:
		with self._lock:
			self._state = replace(self._state, **changes)

	def _begin_attempt(self) -> int:
		with self._lock:
			self._generation += 1
			self._state = replace(self._state, is_loading=True, last_error=None)
			return self._generation

	# operations

	def login(self, email: str, password: str) -> bool:
		"""Authenticate and store the credential; never raises.

		Returns False when the server rejects the credentials, when the call
		fails in transit, and when a newer login or a logout started while this
		one was in flight.
		"""

		generation = self._begin_attempt()
		response = self.api.login_user(LoginPayload(email=email, password=password))

		with self._lock:
			if generation != self._generation:
				LOGGER.info("Discarding superseded login response")
				return False

			if response.success and response.data is not None:
				try:
					self.credentials.set_credential(response.data.token)
				except (OSError, ValueError) as exc:
					LOGGER.warning("Unable to persist session credential: %s", exc)
					self._state = SessionState(
						last_error=ApiErrorDetail(code=UNKNOWN_ERROR, message=f"Unable to store session: {exc}"),
					)
					return False
				self._state = SessionState(token=response.data.token, user=response.data.user)
				LOGGER.info("Signed in as user %s", response.data.user.user_id)
				return True

			error = response.error or ApiErrorDetail(code=LOGIN_FAILED, message="Login failed")
			self._state = SessionState(last_error=error)
			LOGGER.info("Login failed: %s", error.code)
			return False

	def register(self, payload: RegisterPayload) -> ApiResponse[User]:
		"""Create an account and hand the whole envelope back to the caller."""

		self._update(is_loading=True, last_error=None)
		response = self.api.register_user(payload)
		if not response.success and response.error is not None and response.error.code == UNKNOWN_ERROR:
			self._update(is_loading=False, last_error=response.error)
		else:
			self._update(is_loading=False)
		return response

	def logout(self) -> None:
		with self._lock:
			self._generation += 1
			self._state = INITIAL_STATE
		try:
			self.credentials.clear_credential()
		except OSError as exc:
			LOGGER.warning("Unable to clear persisted credential: %s", exc)
		LOGGER.info("Signed out")

	def initialize_auth(self) -> None:
		"""Restore a persisted token without fetching the user profile."""

		token = self.credentials.read_durable()
		if token:
			self._update(token=token)
			LOGGER.debug("Restored persisted session token")

	def clear_error(self) -> None:
		self._update(last_error=None)
