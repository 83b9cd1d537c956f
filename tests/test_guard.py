from __future__ import annotations

import pytest

from portal.guard import RouteGuard, safe_redirect_target

TOKEN = {"authToken": "tok-1"}


@pytest.fixture
def guard() -> RouteGuard:
	return RouteGuard()


@pytest.mark.parametrize(
	("path", "cookies", "location"),
	[
		("/dashboard", {}, "/login?redirectedFrom=%2Fdashboard"),
		("/claims/c-42", {}, "/login?redirectedFrom=%2Fclaims%2Fc-42"),
		("/upload", {"other": "x"}, "/login?redirectedFrom=%2Fupload"),
		("/login", TOKEN, "/dashboard"),
		("/register", TOKEN, "/dashboard"),
	],
)
def test_redirects(guard: RouteGuard, path: str, cookies: dict, location: str) -> None:
	decision = guard.evaluate(path, cookies)
	assert decision.action == "redirect"
	assert decision.location == location


@pytest.mark.parametrize(
	("path", "cookies"),
	[
		("/dashboard", TOKEN),
		("/claims/c-42", TOKEN),
		("/login", {}),
		("/register", None),
		("/", {}),
		("/", TOKEN),
		("/about", {}),
		("/about", TOKEN),
		("/dashboards", {}),
	],
)
def test_allows(guard: RouteGuard, path: str, cookies) -> None:
	assert guard.evaluate(path, cookies).allowed


def test_empty_cookie_counts_as_missing(guard: RouteGuard) -> None:
	assert guard.evaluate("/dashboard", {"authToken": ""}).action == "redirect"


@pytest.mark.parametrize(
	"path",
	["/api/claims", "/static/app.js", "/_stcore/health", "/favicon.ico", "/dashboard/logo.png", "/upload/hero.WEBP"],
)
def test_excluded_paths_bypass_the_guard(guard: RouteGuard, path: str) -> None:
	assert guard.is_excluded(path)
	assert guard.evaluate(path, {}).allowed


def test_classify(guard: RouteGuard) -> None:
	assert guard.classify("/dashboard") == "protected"
	assert guard.classify("/claims/abc") == "protected"
	assert guard.classify("/login") == "public"
	assert guard.classify("/dashboards") is None
	assert guard.classify("/") is None


def test_query_string_is_not_part_of_the_path(guard: RouteGuard) -> None:
	decision = guard.evaluate("/dashboard?page=2", {})
	assert decision.location == "/login?redirectedFrom=%2Fdashboard"


def test_decision_is_idempotent(guard: RouteGuard) -> None:
	first = guard.evaluate("/claims/1", {})
	second = guard.evaluate("/claims/1", {})
	assert first == second


def test_custom_configuration() -> None:
	guard = RouteGuard(("/admin",), ("/signin",), login_path="/signin", landing_path="/home", cookie_name="sid")
	assert guard.evaluate("/admin", {"authToken": "x"}).location == "/signin?redirectedFrom=%2Fadmin"
	assert guard.evaluate("/signin", {"sid": "x"}).location == "/home"
	assert guard.evaluate("/dashboard", {}).allowed


@pytest.mark.parametrize(
	("value", "expected"),
	[
		("/claims/7", "/claims/7"),
		("/upload", "/upload"),
		(None, "/dashboard"),
		("", "/dashboard"),
		("https://evil.example/", "/dashboard"),
		("//evil.example/path", "/dashboard"),
		("claims", "/dashboard"),
	],
)
def test_safe_redirect_target(value, expected: str) -> None:
	assert safe_redirect_target(value) == expected
