"""Command-line report of claims and their grouped extraction results."""

from __future__ import annotations

import argparse
import getpass
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from portal.api_client import ApiClient
from portal.claims import STATUS_FILTERS, ClaimsQuery
from portal.config import API_BASE_URL, DATA_ROOT, configure_logging
from portal.credentials import CookieJarStorage, CredentialStore, FileStorage
from portal.extraction import format_key, group_claim
from portal.formatting import format_confidence, format_money
from portal.session import SessionManager

REPO_ROOT = Path(__file__).resolve().parents[1]
REPORTS_DIR = REPO_ROOT / "reports"


def build_session(base_url: str, storage_path: Path) -> SessionManager:
	api = ApiClient(base_url)
	credentials = CredentialStore(FileStorage(storage_path), CookieJarStorage.for_client(api))
	manager = SessionManager(api, credentials)
	api.token_provider = lambda: manager.token
	manager.initialize_auth()
	return manager


def claim_report(manager: SessionManager, claim_id: str) -> dict[str, Any]:
	response = manager.api.get_claim(claim_id)
	if not response.success or response.data is None:
		return {"claim_id": claim_id, "error": response.error.model_dump() if response.error else None}
	grouped = group_claim(response.data)
	return {
		"claim_id": claim_id,
		"status": response.data.status,
		"threshold": grouped.threshold,
		"groups": {
			label: [
				{"field": format_key(line.key), "value": line.value, "confidence": format_confidence(line.confidence)}
				for line in lines
			]
			for label, lines in grouped.groups()
		},
	}


def main() -> int:
	parser = argparse.ArgumentParser(description="Summarize claims from the claims API")
	parser.add_argument("--base-url", default=API_BASE_URL)
	parser.add_argument("--email", help="Sign in with this account instead of the stored session")
	parser.add_argument("--status", choices=STATUS_FILTERS, default="ALL")
	parser.add_argument("--page", type=int, default=1)
	parser.add_argument("--claim", action="append", default=[], help="Include grouped extraction for this claim id")
	parser.add_argument("--logout", action="store_true", help="Forget the stored session and exit")
	parser.add_argument("--storage", type=Path, default=DATA_ROOT / "storage.json")
	args = parser.parse_args()

	configure_logging()
	manager = build_session(args.base_url, args.storage)

	if args.logout:
		manager.logout()
		print("Signed out")
		return 0

	if args.email:
		password = getpass.getpass("Password: ")
		if not manager.login(args.email, password):
			error = manager.last_error
			print(f"Login failed: {error.message if error else 'unknown error'}")
			return 1
	elif not manager.is_authenticated:
		print("No stored session. Pass --email to sign in.")
		return 1

	query = ClaimsQuery(page=args.page, status=args.status)
	listing = manager.api.get_all_claims(query)
	if not listing.success or listing.data is None:
		print(f"Failed to fetch claims: {listing.error.message if listing.error else 'unknown error'}")
		return 1

	for claim in listing.data.claims:
		print(f"{claim.id:<24} {claim.status:<12} {format_money(claim.amount):>14}  {claim.patient_name or ''}")

	payload = {
		"generated_at": datetime.now(UTC).isoformat(timespec="seconds"),
		"query": query.to_params(),
		"pagination": listing.data.pagination.model_dump(),
		"claims": [claim.model_dump() for claim in listing.data.claims],
		"details": [claim_report(manager, claim_id) for claim_id in args.claim],
	}
	REPORTS_DIR.mkdir(parents=True, exist_ok=True)
	output_path = REPORTS_DIR / "claims.json"
	with open(output_path, "w", encoding="utf-8") as handle:
		json.dump(payload, handle, indent=2)
	print(f"Report written to {output_path}")
	return 0


if __name__ == "__main__":
	raise SystemExit(main())
