"""Navigation-time access check for portal pages.

The guard runs before any page logic and only looks at the requested path
and the request cookies. It never consults the in-memory session: a page
reload reaches the guard before any session state exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Mapping
from urllib.parse import urlencode, urlsplit

from portal.config import AUTH_TOKEN_KEY, LANDING_PATH, LOGIN_PATH, REDIRECT_PARAM, REGISTER_PATH

LOGGER = logging.getLogger(__name__)

PathKind = Literal["protected", "public"]

PROTECTED_PATHS: tuple[str, ...] = ("/dashboard", "/claims", "/upload")
PUBLIC_PATHS: tuple[str, ...] = (LOGIN_PATH, REGISTER_PATH)

EXCLUDED_PREFIXES: tuple[str, ...] = ("/api", "/static", "/app/static", "/_stcore")
EXCLUDED_FILES: tuple[str, ...] = ("/favicon.ico",)
EXCLUDED_SUFFIXES: tuple[str, ...] = (".svg", ".png", ".jpg", ".jpeg", ".gif", ".webp")


@dataclass(frozen=True)
class GuardDecision:
	action: Literal["allow", "redirect"]
	location: str | None = None

	@property
	def allowed(self) -> bool:
		return self.action == "allow"


ALLOW = GuardDecision("allow")


def _matches(path: str, prefix: str) -> bool:
	return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def _normalize(path: str) -> str:
	path = urlsplit(path or "/").path or "/"
	if not path.startswith("/"):
		path = "/" + path
	return path


def safe_redirect_target(value: str | None, default: str = LANDING_PATH) -> str:
	"""Return ``value`` when it is a local absolute path, otherwise ``default``."""

	if not value or not value.startswith("/") or value.startswith("//"):
		return default
	parts = urlsplit(value)
	if parts.scheme or parts.netloc:
		return default
	return value


class RouteGuard:
	def __init__(
		self,
		protected: tuple[str, ...] = PROTECTED_PATHS,
		public: tuple[str, ...] = PUBLIC_PATHS,
		*,
		login_path: str = LOGIN_PATH,
		landing_path: str = LANDING_PATH,
		cookie_name: str = AUTH_TOKEN_KEY,
	) -> None:
		self.protected = protected
		self.public = public
		self.login_path = login_path
		self.landing_path = landing_path
		self.cookie_name = cookie_name

	def is_excluded(self, path: str) -> bool:
		path = _normalize(path)
		if path in EXCLUDED_FILES:
			return True
		if any(_matches(path, prefix) for prefix in EXCLUDED_PREFIXES):
			return True
		return path.lower().endswith(EXCLUDED_SUFFIXES)

	def classify(self, path: str) -> PathKind | None:
		path = _normalize(path)
		if any(_matches(path, prefix) for prefix in self.protected):
			return "protected"
		if any(_matches(path, prefix) for prefix in self.public):
			return "public"
		return None

	def evaluate(self, path: str, cookies: Mapping[str, str] | None) -> GuardDecision:
		path = _normalize(path)
		if self.is_excluded(path):
			return ALLOW

		token = (cookies or {}).get(self.cookie_name)
		kind = self.classify(path)

		if kind == "protected" and not token:
			location = f"{self.login_path}?{urlencode({REDIRECT_PARAM: path})}"
			LOGGER.debug("Guard: %s requires a session, redirecting to %s", path, self.login_path)
			return GuardDecision("redirect", location)
		if kind == "public" and token:
			LOGGER.debug("Guard: %s is an auth page and a session exists, redirecting", path)
			return GuardDecision("redirect", self.landing_path)
		return ALLOW
