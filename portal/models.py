"""Wire models shared by the claims portal client.

Field names are snake_case in Python and camelCase on the wire; every model
accepts either spelling and ignores fields it does not know about.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

UNKNOWN_ERROR = "UNKNOWN_ERROR"
LOGIN_FAILED = "LOGIN_FAILED"


class WireModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

	def to_wire(self) -> dict[str, Any]:
		return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ApiErrorDetail(WireModel):
	"""Error body carried by a failed response envelope."""

	code: str
	message: str
	details: Any = None


class ApiResponse(WireModel, Generic[T]):
	"""Uniform envelope returned by every remote API operation."""

	success: bool
	data: T | None = None
	error: ApiErrorDetail | None = None
	message: str | None = None

	@classmethod
	def failure(cls, code: str, message: str, details: Any = None) -> "ApiResponse[T]":
		return cls(success=False, error=ApiErrorDetail(code=code, message=message, details=details))


class User(WireModel):
	user_id: str
	email: str
	first_name: str
	last_name: str
	created_at: str | None = None


class RegisterPayload(WireModel):
	email: str
	password: str
	first_name: str
	last_name: str


class LoginPayload(WireModel):
	email: str
	password: str


class AuthResult(WireModel):
	token: str
	user: User


class ClaimStatus(str, Enum):
	PROCESSING = "PROCESSING"
	APPROVED = "APPROVED"
	REJECTED = "REJECTED"


class Claim(WireModel):
	"""Row shown on the claims dashboard."""

	id: str
	document_id: str
	status: str
	created_at: str
	updated_at: str | None = None
	patient_name: str | None = None
	provider_name: str | None = None
	service_date: str | None = None
	amount: float | None = None
	claim_type: str | None = None


class Pagination(WireModel):
	total_items: int
	total_pages: int
	current_page: int
	limit: int


class ClaimPage(WireModel):
	claims: list[Claim] = Field(default_factory=list)
	pagination: Pagination


class ExtractedLine(WireModel):
	"""One key/value pair pulled from a document, tagged with a confidence score."""

	key: str
	value: str
	confidence: float = Field(ge=0.0, le=1.0)


class PatientInfo(WireModel):
	name: str | None = None
	dob: str | None = None
	gender: str | None = None
	insurance_id: str | None = None


class ProviderInfo(WireModel):
	name: str | None = None
	address: str | None = None
	provider_number: str | None = None


class ClaimDetails(WireModel):
	service_date: str | None = None
	discharge_date: str | None = None
	total_amount: float | None = None
	covered_amount: float | None = None
	patient_responsibility: float | None = None
	currency: str | None = None
	claim_type: str | None = None
	diagnosis_codes: list[str] = Field(default_factory=list)
	procedure_codes: list[str] = Field(default_factory=list)


class ExtractedData(WireModel):
	patient_info: PatientInfo | None = None
	provider_info: ProviderInfo | None = None
	claim_details: ClaimDetails | None = None
	lines: list[ExtractedLine] = Field(default_factory=list)


class ExtractionMetadata(WireModel):
	confidence_threshold: float | None = None


class MedicalEntity(WireModel):
	type: str
	value: str
	confidence: float | None = None
	context: str | None = None


class ClaimDocumentRef(WireModel):
	id: str
	name: str
	type: str | None = None
	url: str | None = None
	created_at: str | None = None


class DetailedClaim(WireModel):
	"""Claim record returned by the detail endpoint, including extraction output."""

	id: str
	document_id: str
	status: str
	created_at: str | None = None
	updated_at: str | None = None
	user_id: str | None = None
	amount: float | None = None
	service_date: str | None = None
	patient_name: str | None = None
	provider_name: str | None = None
	extracted_data: ExtractedData = Field(default_factory=ExtractedData)
	metadata: ExtractionMetadata | None = None
	extracted_medical_entities: list[MedicalEntity] = Field(default_factory=list)
	documents: list[ClaimDocumentRef] = Field(default_factory=list)


class DocumentType(str, Enum):
	INVOICE = "INVOICE"
	DISCHARGE_SUMMARY = "DISCHARGE_SUMMARY"
	PRESCRIPTION = "PRESCRIPTION"


class Document(WireModel):
	document_id: str
	file_name: str
	document_type: str
	description: str | None = None
	uploaded_at: str | None = None
	status: str
	claim_id: str | None = None


class DocumentStatus(WireModel):
	document_id: str
	status: str
	progress: float = 0.0
	started_at: str | None = None
	completed_at: str | None = None
	claim_id: str | None = None


class DocumentUrl(WireModel):
	document_id: str | None = None
	file_name: str | None = None
	presigned_url: str
	expires_at: str | None = None
