from __future__ import annotations

from typing import Optional, Sequence

from cvss import CVSS3
from cvss.exceptions import CVSS3MalformedError


def base_score_from_vector(vector: Optional[str]) -> Optional[float]:
	"""Compute the CVSS base score of a v3.x vector string.

	Returns None for missing vectors, other CVSS versions and malformed vectors.
	"""
	if not vector or not vector.upper().startswith("CVSS:3."):
		return None
	try:
		scores = CVSS3(vector).scores()
	except CVSS3MalformedError:
		return None
	return float(scores[0])


def first_base_score(vectors: Sequence[str]) -> Optional[float]:
	"""Return the base score of the first computable vector."""
	for vector in vectors:
		score = base_score_from_vector(vector)
		if score is not None:
			return score
	return None
