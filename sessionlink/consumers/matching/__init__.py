"""Tracking-to-video matching: normalization, pre-filter and scoring."""

from sessionlink.consumers.matching.normalizer import (
    extract_keywords,
    name_similarity,
    normalize_name,
)
from sessionlink.consumers.matching.prefilter import is_potential_match
from sessionlink.consumers.matching.scoring import confidence_for, score_match

__all__ = [
    "confidence_for",
    "extract_keywords",
    "is_potential_match",
    "name_similarity",
    "normalize_name",
    "score_match",
]
