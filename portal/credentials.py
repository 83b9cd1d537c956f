"""Storage surfaces for the session credential.

The bearer token is kept in two places: a durable client-side key that the
session manager reads at start-up, and a transport cookie that the route
guard reads from each incoming request. ``CredentialStore`` is the only
place that writes either of them.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from requests.cookies import RequestsCookieJar

from portal.config import AUTH_TOKEN_KEY, DATA_ROOT

LOGGER = logging.getLogger(__name__)


class MemoryStorage:
	"""Process-local key/value surface."""

	def __init__(self, initial: dict[str, str] | None = None) -> None:
		self._values: dict[str, str] = dict(initial or {})

	def get(self, key: str) -> str | None:
		return self._values.get(key)

	def set(self, key: str, value: str) -> None:
		self._values[key] = value

	def delete(self, key: str) -> None:
		self._values.pop(key, None)


class FileStorage:
	"""Durable key/value surface backed by a small JSON document on disk."""

	def __init__(self, path: str | Path | None = None) -> None:
		self.path = Path(path) if path is not None else DATA_ROOT / "storage.json"

	def _read(self) -> dict[str, Any]:
		if not self.path.exists():
			return {}
		try:
			data = json.loads(self.path.read_text(encoding="utf-8"))
		except (OSError, ValueError) as exc:
			LOGGER.warning("Ignoring unreadable client storage %s: %s", self.path, exc)
			return {}
		return data if isinstance(data, dict) else {}

	def _write(self, payload: dict[str, Any]) -> None:
		self.path.parent.mkdir(parents=True, exist_ok=True)
		self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

	def get(self, key: str) -> str | None:
		value = self._read().get(key)
		return value if isinstance(value, str) and value else None

	def set(self, key: str, value: str) -> None:
		payload = self._read()
		payload[key] = value
		self._write(payload)

	def delete(self, key: str) -> None:
		payload = self._read()
		if key not in payload:
			return
		del payload[key]
		self._write(payload)


class CookieJarStorage:
	"""Transport surface backed by a ``requests`` cookie jar."""

	def __init__(self, jar: RequestsCookieJar | None = None, *, domain: str = "", path: str = "/") -> None:
		self.jar = jar if jar is not None else RequestsCookieJar()
		self._domain = domain
		self._path = path

	@classmethod
	def for_client(cls, api) -> "CookieJarStorage":
		"""Bind to the client's own jar, scoped to the API host only."""
		return cls(api.cookies, domain=api.host)

	def get(self, key: str) -> str | None:
		return self.jar.get(key, domain=self._domain or None, path=self._path)

	def set(self, key: str, value: str) -> None:
		self.jar.set(key, value, domain=self._domain, path=self._path)

	def delete(self, key: str) -> None:
		# set(None) removes the cookie instead of storing an empty value
		self.jar.set(key, None, domain=self._domain, path=self._path)


class CredentialStore:
	"""Keeps the durable key and the transport cookie in step.

	Both surfaces may be the same object when one mechanism serves both
	purposes (the browser front-end keeps the token in a single cookie).
	"""

	def __init__(self, durable, transport, key: str = AUTH_TOKEN_KEY) -> None:
		self.durable = durable
		self.transport = transport
		self.key = key

	def set_credential(self, token: str) -> None:
		if not token:
			raise ValueError("token must be a non-empty string")
		self.durable.set(self.key, token)
		if self.transport is not self.durable:
			self.transport.set(self.key, token)
		LOGGER.debug("Session credential stored under %s", self.key)

	def clear_credential(self) -> None:
		self.durable.delete(self.key)
		if self.transport is not self.durable:
			self.transport.delete(self.key)
		LOGGER.debug("Session credential cleared")

	def read_durable(self) -> str | None:
		return self.durable.get(self.key) or None

	def read_transport(self) -> str | None:
		return self.transport.get(self.key) or None
