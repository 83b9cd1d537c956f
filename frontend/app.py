"""Streamlit front-end for the medical claims portal."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import parse_qs, urlsplit

import streamlit as st
import streamlit.components.v1 as st_components

from portal.api_client import ApiClient
from portal.claims import SORTABLE_COLUMNS, STATUS_FILTERS, ClaimsQuery
from portal.config import (
	API_BASE_URL,
	AUTH_TOKEN_KEY,
	COOKIE_MAX_AGE_SECONDS,
	LANDING_PATH,
	LOGIN_PATH,
	REDIRECT_PARAM,
	REGISTER_PATH,
	configure_logging,
)
from portal.credentials import CredentialStore
from portal.documents import DOCUMENT_TYPE_OPTIONS, validate_upload
from portal.extraction import format_key, group_claim, rows_for_display
from portal.formatting import format_confidence, format_currency, format_date, format_money, format_value
from portal.guard import RouteGuard, safe_redirect_target
from portal.models import ApiErrorDetail, RegisterPayload
from portal.session import SessionManager

configure_logging()
LOGGER = logging.getLogger("portal.frontend")

st.set_page_config(
	page_title="Claims Portal",
	page_icon="🩺",
	layout="centered",
)

st.markdown(
	"""
		<style>
			.block-container {
				max-width: 960px !important;
				padding-top: 1.5rem !important;
				padding-bottom: 3rem !important;
			}
		</style>
	""",
	unsafe_allow_html=True,
)

GUARD = RouteGuard()


class BrowserCookieStorage:
	"""Cookie surface for the current browser tab.

	Reads come from the cookies sent with the page request, overlaid with any
	writes made during this session. Writes are queued and pushed to the
	browser with a small script at the start of the next run, so a page switch
	right after a write cannot drop them.
	"""

	_OVERLAY_KEY = "_cookie_overlay"
	_PENDING_KEY = "_cookie_pending"

	def _overlay(self) -> dict[str, str | None]:
		return st.session_state.setdefault(self._OVERLAY_KEY, {})

	def cookies(self) -> dict[str, str]:
		merged = {key: value for key, value in st.context.cookies.items()}
		for key, value in self._overlay().items():
			if value is None:
				merged.pop(key, None)
			else:
				merged[key] = value
		return merged

	def get(self, key: str) -> str | None:
		return self.cookies().get(key)

	def set(self, key: str, value: str) -> None:
		self._overlay()[key] = value
		self._push(f"{key}={value}; path=/; max-age={COOKIE_MAX_AGE_SECONDS}; SameSite=Lax")

	def delete(self, key: str) -> None:
		self._overlay()[key] = None
		self._push(f"{key}=; path=/; max-age=0; SameSite=Lax")

	def _push(self, cookie: str) -> None:
		st.session_state.setdefault(self._PENDING_KEY, []).append(cookie)

	def flush(self) -> None:
		pending = st.session_state.get(self._PENDING_KEY) or []
		if not pending:
			return
		script = "".join(f"window.parent.document.cookie = {json.dumps(cookie)};" for cookie in pending)
		st_components.html(f"<script>{script}</script>", height=0)
		st.session_state[self._PENDING_KEY] = []


def _cookie_storage() -> BrowserCookieStorage:
	if "cookie_storage" not in st.session_state:
		st.session_state["cookie_storage"] = BrowserCookieStorage()
	return st.session_state["cookie_storage"]


def session_manager() -> SessionManager:
	"""Return this browser session's manager, creating and restoring it once."""

	manager = st.session_state.get("session_manager")
	if manager is not None:
		return manager
	cookies = _cookie_storage()
	api = ApiClient(API_BASE_URL)
	manager = SessionManager(api, CredentialStore(cookies, cookies, key=AUTH_TOKEN_KEY))
	api.token_provider = lambda: manager.token
	manager.initialize_auth()
	st.session_state["session_manager"] = manager
	return manager


def show_error(error: ApiErrorDetail | None, fallback: str = "Something went wrong") -> None:
	if error is None:
		st.error(fallback)
		return
	st.error(error.message or fallback)
	details = error.details
	if isinstance(details, dict):
		for field, message in details.items():
			st.caption(f"{format_key(str(field))}: {message}")
	elif isinstance(details, str) and details:
		st.caption(details)


def go_to(location: str) -> None:
	parts = urlsplit(location)
	params = parse_qs(parts.query)
	if REDIRECT_PARAM in params:
		st.session_state["redirected_from"] = params[REDIRECT_PARAM][0]
	path = parts.path or "/"
	page = PAGES.get(path) or PAGES.get("/" + path.strip("/").split("/")[0])
	if page is None:
		LOGGER.warning("No page registered for %s, going to %s", path, LANDING_PATH)
		page = PAGES[LANDING_PATH]
	st.switch_page(page)


def render_home() -> None:
	st.title("Medical Claims Portal")
	st.caption("Upload claim documents and follow their processing.")
	manager = session_manager()
	if manager.is_authenticated:
		if st.button("Go to dashboard", type="primary"):
			go_to(LANDING_PATH)
		return
	col_login, col_register = st.columns(2)
	if col_login.button("Sign in", type="primary", width="stretch"):
		go_to(LOGIN_PATH)
	if col_register.button("Create account", width="stretch"):
		go_to(REGISTER_PATH)


def render_login() -> None:
	manager = session_manager()
	st.title("Sign in")
	with st.form("login_form"):
		email = st.text_input("Email")
		password = st.text_input("Password", type="password")
		submitted = st.form_submit_button("Sign in", type="primary")

	if submitted:
		if not email.strip() or not password:
			st.error("Email and password are required")
			return
		manager.clear_error()
		with st.spinner("Signing in..."):
			ok = manager.login(email.strip(), password)
		if ok:
			target = safe_redirect_target(st.session_state.pop("redirected_from", None))
			go_to(target)
		else:
			show_error(manager.last_error, "Login failed")

	if st.button("Need an account? Register"):
		go_to(REGISTER_PATH)


def render_register() -> None:
	manager = session_manager()
	st.title("Create account")
	with st.form("register_form"):
		first_name = st.text_input("First name")
		last_name = st.text_input("Last name")
		email = st.text_input("Email")
		password = st.text_input("Password", type="password")
		submitted = st.form_submit_button("Register", type="primary")

	if submitted:
		if not all(value.strip() for value in (first_name, last_name, email, password)):
			st.error("All fields are required")
			return
		manager.clear_error()
		payload = RegisterPayload(
			email=email.strip(),
			password=password,
			first_name=first_name.strip(),
			last_name=last_name.strip(),
		)
		with st.spinner("Creating account..."):
			response = manager.register(payload)
		if response.success:
			st.success(response.message or "Account created. You can sign in now.")
		else:
			show_error(response.error, "Registration failed")

	if st.button("Already registered? Sign in"):
		go_to(LOGIN_PATH)


def _claims_query() -> ClaimsQuery:
	query = st.session_state.get("claims_query")
	if not isinstance(query, ClaimsQuery):
		query = ClaimsQuery()
		st.session_state["claims_query"] = query
	return query


def render_dashboard() -> None:
	manager = session_manager()
	st.title("Claims")
	query = _claims_query()

	col_status, col_sort, col_dir = st.columns([2, 2, 1])
	status = col_status.selectbox(
		"Status",
		STATUS_FILTERS,
		index=STATUS_FILTERS.index(query.status) if query.status in STATUS_FILTERS else 0,
	)
	if status != (query.status or "ALL"):
		query = query.with_status(status)
	sort_by = col_sort.selectbox("Sort by", SORTABLE_COLUMNS, index=SORTABLE_COLUMNS.index(query.sort_by))
	if sort_by != query.sort_by:
		query = query.toggle_sort(sort_by)
	if col_dir.button("↑↓", help=f"Currently {query.sort_direction}"):
		query = query.toggle_sort(query.sort_by)
	st.session_state["claims_query"] = query

	with st.spinner("Loading claims..."):
		response = manager.api.get_all_claims(query)
	if not response.success or response.data is None:
		show_error(response.error, "Failed to fetch claims")
		return

	page = response.data
	if not page.claims:
		st.info("No claims yet. Upload a document to start one.")
		if st.button("Upload document"):
			go_to("/upload")
		return

	rows: list[dict[str, Any]] = [
		{
			"Claim": claim.id,
			"Patient": format_value(claim.patient_name),
			"Provider": format_value(claim.provider_name),
			"Service date": format_date(claim.service_date),
			"Amount": format_money(claim.amount),
			"Status": claim.status,
			"Created": format_date(claim.created_at),
		}
		for claim in page.claims
	]
	st.dataframe(rows, width="stretch", hide_index=True)

	pagination = page.pagination
	col_prev, col_info, col_next = st.columns([1, 2, 1])
	if col_prev.button("Previous", disabled=pagination.current_page <= 1):
		st.session_state["claims_query"] = query.with_page(pagination.current_page - 1)
		st.rerun()
	col_info.caption(f"Page {pagination.current_page} of {max(1, pagination.total_pages)} · {pagination.total_items} claims")
	if col_next.button("Next", disabled=pagination.current_page >= pagination.total_pages):
		st.session_state["claims_query"] = query.with_page(pagination.current_page + 1)
		st.rerun()

	selected = st.selectbox("Open claim", [claim.id for claim in page.claims])
	if st.button("View details", type="primary"):
		st.session_state["claim_id"] = selected
		go_to("/claims")


def render_upload() -> None:
	manager = session_manager()
	st.title("Upload document")
	labels = [label for label, _ in DOCUMENT_TYPE_OPTIONS]
	with st.form("upload_form"):
		uploaded = st.file_uploader("Document", type=["pdf", "jpg", "jpeg", "png", "tif", "tiff"])
		type_label = st.selectbox("Document type", labels, index=None, placeholder="Select a document type")
		description = st.text_area("Description", placeholder="Enter document description...")
		submitted = st.form_submit_button("Upload", type="primary")

	if not submitted:
		return
	document_type = dict(DOCUMENT_TYPE_OPTIONS).get(type_label) if type_label else None
	try:
		upload = validate_upload(
			uploaded.name if uploaded else None,
			uploaded.getvalue() if uploaded else None,
			document_type,
			description,
			content_type=uploaded.type if uploaded else None,
		)
	except ValueError as exc:
		st.error(str(exc))
		return

	with st.spinner("Uploading..."):
		response = manager.api.upload_document(upload)
	if not response.success or response.data is None:
		show_error(response.error, "Failed to upload document. Please try again.")
		return
	st.success(f"Document {response.data.file_name} uploaded successfully")
	status = manager.api.get_document_status(response.data.document_id)
	if status.success and status.data is not None:
		st.progress(min(max(status.data.progress, 0.0), 100.0) / 100.0, text=f"Processing: {status.data.status}")
	if st.button("Back to dashboard"):
		go_to(LANDING_PATH)


def _render_field(label: str, value: str) -> None:
	st.markdown(f"**{label}**  \n{value}")


def render_claim() -> None:
	manager = session_manager()
	claim_id = st.query_params.get("id") or st.session_state.get("claim_id")
	if not claim_id:
		st.info("Select a claim from the dashboard.")
		if st.button("Back to dashboard"):
			go_to(LANDING_PATH)
		return

	with st.spinner("Loading claim..."):
		response = manager.api.get_claim(str(claim_id))
	if not response.success or response.data is None:
		show_error(response.error, "Failed to load claim")
		return

	claim = response.data
	st.title(f"Claim {claim.id}")
	st.caption(f"Status: {format_value(claim.status)} · Updated {format_date(claim.updated_at)}")

	extracted = claim.extracted_data
	details = extracted.claim_details
	currency = (details.currency if details else None) or "USD"
	col_patient, col_provider, col_money = st.columns(3)
	with col_patient:
		st.subheader("Patient")
		patient = extracted.patient_info
		_render_field("Name", format_value(patient.name if patient else claim.patient_name))
		_render_field("Date of birth", format_date(patient.dob if patient else None))
		_render_field("Insurance ID", format_value(patient.insurance_id if patient else None))
	with col_provider:
		st.subheader("Provider")
		provider = extracted.provider_info
		_render_field("Name", format_value(provider.name if provider else claim.provider_name))
		_render_field("Provider number", format_value(provider.provider_number if provider else None))
	with col_money:
		st.subheader("Amounts")
		_render_field("Total", format_currency(details.total_amount if details else claim.amount, currency))
		_render_field("Covered", format_currency(details.covered_amount if details else None, currency))
		_render_field(
			"Patient responsibility",
			format_currency(details.patient_responsibility if details else None, currency),
		)

	grouped = group_claim(claim)
	st.subheader("Extracted fields")
	st.caption(f"Showing {grouped.total} fields at or above {format_confidence(grouped.threshold)} confidence")
	for label, lines in grouped.groups():
		with st.expander(label, expanded=label.startswith("High")):
			if lines:
				st.dataframe(rows_for_display(lines), width="stretch", hide_index=True)
			else:
				st.caption("Nothing in this group.")

	if claim.extracted_medical_entities:
		st.subheader("Medical entities")
		st.dataframe(
			[
				{
					"Type": format_key(entity.type),
					"Value": entity.value,
					"Confidence": format_confidence(entity.confidence),
					"Context": format_value(entity.context),
				}
				for entity in claim.extracted_medical_entities
			],
			width="stretch",
			hide_index=True,
		)

	st.subheader("Source document")
	if st.button("Get download link"):
		url_response = manager.api.get_document_url(claim.document_id)
		if url_response.success and url_response.data is not None:
			st.link_button("Open document", url_response.data.presigned_url)
			st.caption(f"Link expires {format_value(url_response.data.expires_at)}")
		else:
			show_error(url_response.error, "Unable to fetch document link")


def render_sidebar() -> None:
	manager = session_manager()
	if not manager.is_authenticated:
		return
	with st.sidebar:
		user = manager.user
		st.caption(f"Signed in as {user.email}" if user else "Signed in")
		if st.button("Dashboard", width="stretch"):
			go_to(LANDING_PATH)
		if st.button("Upload document", width="stretch"):
			go_to("/upload")
		if st.button("Sign out", width="stretch"):
			manager.logout()
			go_to("/")


_ROUTES: list[tuple[str, Any, str]] = [
	("/", render_home, "Home"),
	(LOGIN_PATH, render_login, "Sign in"),
	(REGISTER_PATH, render_register, "Register"),
	(LANDING_PATH, render_dashboard, "Claims"),
	("/upload", render_upload, "Upload"),
	("/claims", render_claim, "Claim"),
]

PAGES: dict[str, Any] = {
	path: st.Page(render, title=title, url_path=path.strip("/") or "home", default=path == "/")
	for path, render, title in _ROUTES
}


def _current_path(page: Any) -> str:
	return "/" + (getattr(page, "url_path", "") or "").strip("/")


def main() -> None:
	session_manager()
	_cookie_storage().flush()
	current = st.navigation(list(PAGES.values()), position="hidden")
	decision = GUARD.evaluate(_current_path(current), _cookie_storage().cookies())
	if not decision.allowed and decision.location:
		go_to(decision.location)
	render_sidebar()
	current.run()


main()
