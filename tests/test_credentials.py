from __future__ import annotations

from pathlib import Path

import pytest
import requests
from requests.cookies import RequestsCookieJar, get_cookie_header

from portal.credentials import CookieJarStorage, CredentialStore, FileStorage, MemoryStorage


def test_file_storage_survives_new_instance(tmp_path: Path) -> None:
	path = tmp_path / "client" / "storage.json"
	FileStorage(path).set("authToken", "tok-1")

	assert FileStorage(path).get("authToken") == "tok-1"


def test_file_storage_delete(tmp_path: Path) -> None:
	storage = FileStorage(tmp_path / "storage.json")
	storage.set("authToken", "tok-1")
	storage.set("theme", "dark")

	storage.delete("authToken")
	storage.delete("missing")

	assert storage.get("authToken") is None
	assert storage.get("theme") == "dark"


def test_file_storage_ignores_corrupt_file(tmp_path: Path) -> None:
	path = tmp_path / "storage.json"
	path.write_text("{not json", encoding="utf-8")

	storage = FileStorage(path)

	assert storage.get("authToken") is None
	storage.set("authToken", "tok-2")
	assert storage.get("authToken") == "tok-2"


def test_cookie_jar_storage_round_trip() -> None:
	jar = RequestsCookieJar()
	storage = CookieJarStorage(jar)

	storage.set("authToken", "tok-1")
	assert storage.get("authToken") == "tok-1"
	assert jar.get("authToken") == "tok-1"

	storage.delete("authToken")
	assert storage.get("authToken") is None
	storage.delete("authToken")


def test_client_cookie_is_scoped_to_api_host(api) -> None:
	storage = CookieJarStorage.for_client(api)

	storage.set("authToken", "tok-1")

	assert [cookie.domain for cookie in api.cookies] == ["api.test"]
	assert storage.get("authToken") == "tok-1"
	own = requests.Request("GET", "https://api.test/v1/claims").prepare()
	other = requests.Request("GET", "https://tracker.example/pixel").prepare()
	assert get_cookie_header(api.cookies, own) == "authToken=tok-1"
	assert get_cookie_header(api.cookies, other) is None

	storage.delete("authToken")
	assert list(api.cookies) == []


def test_credential_store_writes_and_clears_both_surfaces() -> None:
	durable, transport = MemoryStorage(), MemoryStorage()
	store = CredentialStore(durable, transport)

	store.set_credential("tok-1")
	assert durable.get("authToken") == "tok-1"
	assert transport.get("authToken") == "tok-1"
	assert store.read_durable() == store.read_transport() == "tok-1"

	store.clear_credential()
	assert store.read_durable() is None
	assert store.read_transport() is None


def test_credential_store_with_one_shared_surface() -> None:
	calls: list[str] = []

	class Recording(MemoryStorage):
		def set(self, key: str, value: str) -> None:
			calls.append("set")
			super().set(key, value)

	shared = Recording()
	store = CredentialStore(shared, shared, key="sid")
	store.set_credential("tok-1")

	assert calls == ["set"]
	assert store.read_transport() == "tok-1"


def test_credential_store_rejects_empty_token() -> None:
	store = CredentialStore(MemoryStorage(), MemoryStorage())
	with pytest.raises(ValueError):
		store.set_credential("")
