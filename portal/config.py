"""Configuration flags for the claims portal client."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final


def _get_bool(env_var: str, default: bool) -> bool:
	value = os.getenv(env_var)
	if value is None:
		return default
	return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_float(env_var: str, default: float) -> float:
	value = os.getenv(env_var)
	if value is None or not value.strip():
		return default
	try:
		return float(value)
	except ValueError:
		return default


def _get_int(env_var: str, default: int) -> int:
	value = os.getenv(env_var)
	if value is None or not value.strip():
		return default
	try:
		return int(value)
	except ValueError:
		return default


API_BASE_URL: Final[str] = os.getenv("PORTAL_API_BASE_URL", "https://api.medicalclaims.example.com/v1")
API_TIMEOUT_SECONDS: Final[float] = _get_float("PORTAL_API_TIMEOUT", 10.0)
DEBUG_HTTP: Final[bool] = _get_bool("PORTAL_DEBUG_HTTP", False)

DATA_ROOT: Final[Path] = Path(os.getenv("PORTAL_DATA_DIR", "data/client"))
LOG_LEVEL: Final[str] = os.getenv("PORTAL_LOG_LEVEL", "INFO").upper()

AUTH_TOKEN_KEY: Final[str] = "authToken"
COOKIE_MAX_AGE_SECONDS: Final[int] = _get_int("PORTAL_COOKIE_MAX_AGE", 7 * 24 * 3600)

LOGIN_PATH: Final[str] = "/login"
REGISTER_PATH: Final[str] = "/register"
LANDING_PATH: Final[str] = "/dashboard"
REDIRECT_PARAM: Final[str] = "redirectedFrom"

DEFAULT_CONFIDENCE_THRESHOLD: Final[float] = 0.7
ITEMS_PER_PAGE: Final[int] = 10


def configure_logging(level: str | None = None) -> None:
	"""Apply the configured log level to the root logger once per process."""

	root = logging.getLogger()
	if root.handlers:
		root.setLevel(level or LOG_LEVEL)
		return
	logging.basicConfig(
		level=level or LOG_LEVEL,
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
