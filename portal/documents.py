"""Upload form handling for claim documents."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass

from portal.models import DocumentType

MISSING_FIELDS_MESSAGE = "Please select a file and document type"

DOCUMENT_TYPE_OPTIONS: list[tuple[str, str]] = [
	("Invoice", DocumentType.INVOICE.value),
	("Discharge Summary", DocumentType.DISCHARGE_SUMMARY.value),
	("Prescription", DocumentType.PRESCRIPTION.value),
]


@dataclass(frozen=True)
class DocumentUpload:
	file_name: str
	content: bytes
	content_type: str
	document_type: DocumentType
	description: str = ""


def validate_upload(
	file_name: str | None,
	content: bytes | None,
	document_type: str | DocumentType | None,
	description: str | None = None,
	content_type: str | None = None,
) -> DocumentUpload:
	"""Check the upload form before anything is sent to the API.

	Raises ``ValueError`` with a user-facing message when the file or the
	document type is missing.
	"""

	if not file_name or content is None or not document_type:
		raise ValueError(MISSING_FIELDS_MESSAGE)
	try:
		doc_type = DocumentType(document_type)
	except ValueError as exc:
		raise ValueError(f"Unknown document type: {document_type}") from exc

	guessed = content_type or mimetypes.guess_type(file_name)[0] or "application/octet-stream"
	return DocumentUpload(
		file_name=file_name,
		content=content,
		content_type=guessed,
		document_type=doc_type,
		description=(description or "").strip(),
	)
