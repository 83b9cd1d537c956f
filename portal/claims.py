"""Query parameters for the paginated claims listing."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from portal.config import ITEMS_PER_PAGE
from portal.models import ClaimStatus

SortDirection = Literal["asc", "desc"]

STATUS_FILTERS: list[str] = ["ALL"] + [status.value for status in ClaimStatus]
SORTABLE_COLUMNS: tuple[str, ...] = ("createdAt", "status", "amount", "patientName", "serviceDate")


class ClaimsQuery(BaseModel):
	"""Filter, sort and page selection for ``GET /claims``."""

	page: int = Field(default=1, ge=1)
	limit: int = Field(default=ITEMS_PER_PAGE, ge=1)
	sort_by: str = "createdAt"
	sort_direction: SortDirection = "desc"
	status: str | None = None

	def to_params(self) -> dict[str, Any]:
		params: dict[str, Any] = {
			"page": self.page,
			"limit": self.limit,
			"sortBy": self.sort_by,
			"sortDirection": self.sort_direction,
		}
		status = (self.status or "").strip()
		if status and status.upper() != "ALL":
			params["status"] = status
		return params

	def toggle_sort(self, column: str) -> "ClaimsQuery":
		"""Return the query re-sorted after a click on ``column``'s header."""

		if column == self.sort_by:
			direction: SortDirection = "asc" if self.sort_direction == "desc" else "desc"
			return self.model_copy(update={"sort_direction": direction})
		return self.model_copy(update={"sort_by": column, "sort_direction": "asc"})

	def with_page(self, page: int) -> "ClaimsQuery":
		return self.model_copy(update={"page": max(1, page)})

	def with_status(self, status: str | None) -> "ClaimsQuery":
		# a new filter always starts from the first page
		return self.model_copy(update={"status": status, "page": 1})
