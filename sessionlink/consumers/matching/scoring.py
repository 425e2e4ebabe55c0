"""Multi-factor scoring of a tracking/video pair.

score_match() is pure: no I/O, no mutation, never raises. The score is a
plain sum of five independently weighted sub-scores:

1. Date proximity (max 25)
2. Name similarity (max 25, +5 club bonus)
3. Duration similarity (max 15)
4. Temporal relationship (max 10)
5. Data completeness (flat 10)

A sub-score that needs a timestamp which does not parse scores 0.
"""

import logging
from datetime import datetime

from sessionlink.consumers.matching.constants import (
    CLUB_BONUS_SCORE,
    CLUB_BONUS_SIMILARITY,
    CLUB_TIERS,
    COMPLETENESS_SCORE,
    CONFIDENT_THRESHOLD,
    DATE_TIERS,
    DURATION_TIERS,
    LIKELY_THRESHOLD,
    MINIMAL_TEAM_SCORE,
    MINIMAL_TEAM_SIMILARITY,
    OVERLAP_SCORE,
    POSSIBLE_THRESHOLD,
    TEAM_TIERS,
    TEMPORAL_TIERS,
)
from sessionlink.consumers.matching.normalizer import name_similarity
from sessionlink.core import Confidence, MatchScoreResult, TrackingEvent, VideoEvent
from sessionlink.utilities.tz import format_utc, hours_between, parse_timestamp

logger = logging.getLogger(__name__)

INVALID = "invalid"


def _tier_at_most(value: float, tiers: list[tuple[float, int]]) -> int:
    """Points for the first tier whose bound is >= value."""
    for bound, points in tiers:
        if value <= bound:
            return points
    return 0


def _tier_below(value: float, tiers: list[tuple[float, int]]) -> int:
    """Points for the first tier whose bound is > value."""
    for bound, points in tiers:
        if value < bound:
            return points
    return 0


def _tier_at_least(value: float, tiers: list[tuple[float, int]]) -> int | None:
    """Points for the first tier whose bound is <= value, None if no tier hit."""
    for bound, points in tiers:
        if value >= bound:
            return points
    return None


def _round(value: float) -> float:
    return round(value, 2)


def confidence_for(score: float) -> Confidence:
    """Map a raw score to its confidence label."""
    if score >= CONFIDENT_THRESHOLD:
        return Confidence.CONFIDENT
    if score >= LIKELY_THRESHOLD:
        return Confidence.LIKELY
    if score >= POSSIBLE_THRESHOLD:
        return Confidence.POSSIBLE
    return Confidence.UNLIKELY


def team_score(max_team_similarity: float, club_similarity: float) -> int:
    """Primary name tier from home/away similarity, falling back to club."""
    points = _tier_at_least(max_team_similarity, TEAM_TIERS)
    if points is not None:
        return points
    points = _tier_at_least(club_similarity, CLUB_TIERS)
    if points is not None:
        return points
    if max_team_similarity >= MINIMAL_TEAM_SIMILARITY:
        return MINIMAL_TEAM_SCORE
    return 0


def _has_overlap(
    tracking_start: datetime,
    tracking_end: datetime,
    video_start: datetime,
    video_end: datetime,
) -> bool:
    return tracking_start <= video_end and video_start <= tracking_end


def score_match(tracking: TrackingEvent, video: VideoEvent) -> MatchScoreResult:
    """Compute the composite match score for one tracking/video pair.

    Args:
        tracking: Tracking event
        video: Video event

    Returns:
        MatchScoreResult with raw score, confidence label and breakdown
    """
    details: dict[str, float | int | str] = {}

    tracking_start = parse_timestamp(tracking.start_time)
    tracking_end = parse_timestamp(tracking.end_time)
    video_start = parse_timestamp(video.start_time, video.timezone)
    video_end = parse_timestamp(video.end_time, video.timezone)

    details["tracking_start_utc"] = format_utc(tracking_start) if tracking_start else INVALID
    details["video_start_utc"] = format_utc(video_start) if video_start else INVALID

    starts_valid = tracking_start is not None and video_start is not None

    # ---- 1. Date proximity ----
    date_points = 0
    hour_diff = None
    if starts_valid:
        hour_diff = abs(hours_between(tracking_start, video_start))
        date_points = _tier_at_most(hour_diff, DATE_TIERS)
        details["hour_diff"] = _round(hour_diff)
        details["day_diff"] = _round(hour_diff / 24)
    else:
        details["hour_diff"] = INVALID
        details["day_diff"] = INVALID
    details["date_score"] = date_points

    # ---- 2. Team / club names ----
    home_similarity = name_similarity(tracking.team_name, video.home_name)
    away_similarity = name_similarity(tracking.team_name, video.away_name)
    club_similarity = name_similarity(tracking.team_name, video.club_name)

    name_points = team_score(max(home_similarity, away_similarity), club_similarity)
    club_bonus = CLUB_BONUS_SCORE if club_similarity >= CLUB_BONUS_SIMILARITY else 0
    details["team_score"] = name_points
    details["home_team_similarity"] = _round(home_similarity)
    details["away_team_similarity"] = _round(away_similarity)
    details["club_similarity"] = _round(club_similarity)
    details["additional_club_score"] = club_bonus

    # ---- 3. Duration ----
    duration_points = 0
    tracking_valid = tracking_start is not None and tracking_end is not None
    video_valid = video_start is not None and video_end is not None
    if tracking_valid and video_valid:
        tracking_hours = hours_between(tracking_start, tracking_end)
        video_hours = hours_between(video_start, video_end)
        duration_diff = abs(tracking_hours - video_hours)
        duration_points = _tier_below(duration_diff, DURATION_TIERS)
        details["tracking_duration_hours"] = _round(tracking_hours)
        details["video_duration_hours"] = _round(video_hours)
        details["duration_diff_hours"] = _round(duration_diff)
    else:
        details["duration_diff_hours"] = INVALID
    details["duration_score"] = duration_points

    # ---- 4. Temporal relationship ----
    temporal_points = 0
    overlap = tracking_valid and video_valid and _has_overlap(
        tracking_start, tracking_end, video_start, video_end
    )
    if overlap:
        temporal_points = OVERLAP_SCORE
    elif hour_diff is not None:
        temporal_points = _tier_at_most(hour_diff, TEMPORAL_TIERS)
    details["temporal_score"] = temporal_points
    details["has_time_overlap"] = "yes" if overlap else "no"

    # ---- 5. Data completeness ----
    completeness = COMPLETENESS_SCORE if tracking.has_activities else 0
    details["data_completeness"] = completeness

    score = date_points + name_points + club_bonus + duration_points + temporal_points + completeness
    confidence = confidence_for(score)

    logger.debug(
        "[SCORE] tracking=%s video=%s score=%d (%s)",
        tracking.id,
        video.id,
        score,
        confidence.value,
    )

    return MatchScoreResult(score=score, confidence=confidence, details=details)
