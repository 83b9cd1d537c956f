"""Confidence grouping for extracted claim lines.

Lines below the claim's confidence threshold are dropped. The rest are split
into four disjoint buckets, keeping the order the server sent them in:

* ``other``: every line whose key is exactly ``"Other"``
* ``high``: confidence in [0.9, 1.0]
* ``medium``: confidence in [0.8, 0.9)
* ``low``: anything under 0.8 that passed the threshold
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from portal.config import DEFAULT_CONFIDENCE_THRESHOLD
from portal.formatting import format_confidence
from portal.models import DetailedClaim, ExtractedLine

OTHER_KEY = "Other"
HIGH_CONFIDENCE_FLOOR = 0.9
MEDIUM_CONFIDENCE_FLOOR = 0.8

_WORD_START = re.compile(r"\b\w")


@dataclass(frozen=True)
class GroupedExtraction:
	high: tuple[ExtractedLine, ...] = field(default_factory=tuple)
	medium: tuple[ExtractedLine, ...] = field(default_factory=tuple)
	low: tuple[ExtractedLine, ...] = field(default_factory=tuple)
	other: tuple[ExtractedLine, ...] = field(default_factory=tuple)
	threshold: float = DEFAULT_CONFIDENCE_THRESHOLD

	@property
	def total(self) -> int:
		return len(self.high) + len(self.medium) + len(self.low) + len(self.other)

	def groups(self) -> Iterator[tuple[str, tuple[ExtractedLine, ...]]]:
		"""Yield ``(label, lines)`` per bucket, labels carrying the line count."""

		for title, lines in (
			("High Confidence", self.high),
			("Medium Confidence", self.medium),
			("Low Confidence", self.low),
			("Other", self.other),
		):
			yield f"{title} ({len(lines)})", lines


def confidence_tier(confidence: float) -> str:
	if confidence >= HIGH_CONFIDENCE_FLOOR:
		return "high"
	if confidence >= MEDIUM_CONFIDENCE_FLOOR:
		return "medium"
	return "low"


def group_lines(lines: Iterable[ExtractedLine], threshold: float | None = None) -> GroupedExtraction:
	cutoff = DEFAULT_CONFIDENCE_THRESHOLD if threshold is None else float(threshold)
	buckets: dict[str, list[ExtractedLine]] = {"high": [], "medium": [], "low": [], "other": []}
	for line in lines:
		if line.confidence < cutoff:
			continue
		if line.key == OTHER_KEY:
			buckets["other"].append(line)
		else:
			buckets[confidence_tier(line.confidence)].append(line)
	return GroupedExtraction(
		high=tuple(buckets["high"]),
		medium=tuple(buckets["medium"]),
		low=tuple(buckets["low"]),
		other=tuple(buckets["other"]),
		threshold=cutoff,
	)


def group_claim(claim: DetailedClaim) -> GroupedExtraction:
	threshold = claim.metadata.confidence_threshold if claim.metadata else None
	return group_lines(claim.extracted_data.lines, threshold)


def format_key(key: str) -> str:
	"""Turn a raw extraction key such as ``patient_name`` into ``Patient Name``."""

	spaced = key.replace("_", " ")
	return _WORD_START.sub(lambda match: match.group(0).upper(), spaced)


def rows_for_display(lines: Sequence[ExtractedLine]) -> list[dict[str, str]]:
	return [
		{"Field": format_key(line.key), "Value": line.value, "Confidence": format_confidence(line.confidence)}
		for line in lines
	]
