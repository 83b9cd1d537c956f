"""Display helpers for claim values."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable


def format_value(value: Any, formatter: Callable[[Any], str] | None = None) -> str:
	if value is None:
		return "N/A"
	if formatter is not None:
		return formatter(value)
	return str(value)


def format_currency(amount: Any, currency: str = "USD") -> str:
	if amount is None:
		return "N/A"
	try:
		numeric = float(amount)
	except (TypeError, ValueError):
		return "N/A"
	return f"{currency or 'USD'} {numeric:.2f}"


def format_money(value: Any) -> str:
	try:
		numeric = float(value)
	except (TypeError, ValueError):
		return "—"
	return f"${numeric:,.2f}"


def format_date(value: str | None) -> str:
	if not value:
		return "N/A"
	try:
		parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
	except ValueError:
		return value
	return parsed.strftime("%m/%d/%Y")


def format_confidence(confidence: float | None) -> str:
	return format_value(confidence, lambda val: f"{float(val) * 100:.1f}%")
