from __future__ import annotations

import pytest

from portal.extraction import format_key, group_claim, group_lines, rows_for_display
from portal.models import DetailedClaim, ExtractedLine


def _line(key: str, confidence: float, value: str = "x") -> ExtractedLine:
	return ExtractedLine(key=key, value=value, confidence=confidence)


def _keys(lines) -> list[str]:
	return [line.key for line in lines]


def test_reference_example() -> None:
	lines = [
		ExtractedLine(key="Name", value="Jane", confidence=0.95),
		ExtractedLine(key="DOB", value="1990", confidence=0.85),
		ExtractedLine(key="Gender", value="F", confidence=0.72),
		ExtractedLine(key="Other", value="misc", confidence=0.99),
	]

	grouped = group_lines(lines, 0.7)

	assert _keys(grouped.high) == ["Name"]
	assert _keys(grouped.medium) == ["DOB"]
	assert _keys(grouped.low) == ["Gender"]
	assert _keys(grouped.other) == ["Other"]


def test_lines_below_threshold_are_dropped() -> None:
	grouped = group_lines([_line("Payer", 0.65)], 0.7)
	assert grouped.total == 0


def test_other_key_wins_over_confidence_tier() -> None:
	grouped = group_lines([_line("Other", 0.95), _line("Other", 0.82), _line("Other", 0.71)], 0.7)
	assert len(grouped.other) == 3
	assert not grouped.high and not grouped.medium and not grouped.low


def test_other_key_still_respects_threshold() -> None:
	grouped = group_lines([_line("Other", 0.5)], 0.7)
	assert grouped.other == ()


@pytest.mark.parametrize(
	("confidence", "bucket"),
	[
		(1.0, "high"),
		(0.9, "high"),
		(0.895, "medium"),
		(0.89, "medium"),
		(0.8, "medium"),
		(0.7999, "low"),
		(0.5, "low"),
	],
)
def test_tier_boundaries(confidence: float, bucket: str) -> None:
	grouped = group_lines([_line("Field", confidence)], 0.0)
	assert len(getattr(grouped, bucket)) == 1
	assert grouped.total == 1


def test_default_threshold_applies_when_missing() -> None:
	grouped = group_lines([_line("A", 0.69), _line("B", 0.7)])
	assert grouped.threshold == pytest.approx(0.7)
	assert _keys(grouped.low) == ["B"]
	assert grouped.total == 1


def test_partition_is_exhaustive_disjoint_and_stable() -> None:
	lines = [
		_line("a", 0.99),
		_line("b", 0.3),
		_line("Other", 0.75),
		_line("c", 0.81),
		_line("d", 0.93),
		_line("e", 0.74),
		_line("f", 0.88),
		_line("Other", 0.97),
		_line("g", 0.6),
	]
	threshold = 0.6
	filtered = [line for line in lines if line.confidence >= threshold]

	grouped = group_lines(lines, threshold)

	assert grouped.total == len(filtered)
	seen = [id(line) for bucket in (grouped.high, grouped.medium, grouped.low, grouped.other) for line in bucket]
	assert len(seen) == len(set(seen))
	assert _keys(grouped.high) == ["a", "d"]
	assert _keys(grouped.medium) == ["c", "f"]
	assert _keys(grouped.low) == ["e", "g"]
	assert [line.confidence for line in grouped.other] == [0.75, 0.97]


def test_input_is_not_mutated() -> None:
	lines = [_line("a", 0.95), _line("b", 0.1)]
	before = [line.model_dump() for line in lines]
	group_lines(lines, 0.7)
	assert [line.model_dump() for line in lines] == before
	assert len(lines) == 2


def test_group_claim_reads_threshold_from_metadata() -> None:
	claim = DetailedClaim.model_validate(
		{
			"id": "c-1",
			"documentId": "d-1",
			"status": "APPROVED",
			"extractedData": {
				"lines": [
					{"key": "patient_name", "value": "Jane", "confidence": 0.92},
					{"key": "total", "value": "100", "confidence": 0.84},
				],
			},
			"metadata": {"confidenceThreshold": 0.85},
		}
	)

	grouped = group_claim(claim)

	assert grouped.threshold == pytest.approx(0.85)
	assert _keys(grouped.high) == ["patient_name"]
	assert grouped.total == 1


def test_group_claim_without_metadata_uses_default() -> None:
	claim = DetailedClaim.model_validate(
		{
			"id": "c-2",
			"documentId": "d-2",
			"status": "PROCESSING",
			"extractedData": {"lines": [{"key": "x", "value": "1", "confidence": 0.71}]},
		}
	)
	assert _keys(group_claim(claim).low) == ["x"]


def test_group_labels_carry_counts() -> None:
	grouped = group_lines([_line("a", 0.95), _line("b", 0.96), _line("Other", 0.8)], 0.7)
	assert [label for label, _ in grouped.groups()] == [
		"High Confidence (2)",
		"Medium Confidence (0)",
		"Low Confidence (0)",
		"Other (1)",
	]


@pytest.mark.parametrize(
	("raw", "expected"),
	[
		("patient_name", "Patient Name"),
		("insurance_id", "Insurance Id"),
		("DOB", "DOB"),
		("total amount", "Total Amount"),
		("", ""),
	],
)
def test_format_key(raw: str, expected: str) -> None:
	assert format_key(raw) == expected


def test_rows_for_display() -> None:
	rows = rows_for_display([_line("service_date", 0.953, "2024-01-01")])
	assert rows == [{"Field": "Service Date", "Value": "2024-01-01", "Confidence": "95.3%"}]
