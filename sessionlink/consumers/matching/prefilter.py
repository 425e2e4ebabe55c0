"""Cheap necessary-condition check applied before full scoring.

Keeps the engine from running the scorer on pairs that cannot possibly
describe the same session.
"""

import logging

from sessionlink.config import PREFILTER_MAX_DAYS
from sessionlink.consumers.matching.normalizer import normalize_name
from sessionlink.core import TrackingEvent, VideoEvent
from sessionlink.utilities.tz import hours_between, parse_timestamp

logger = logging.getLogger(__name__)


def _names_overlap(team: str, others: list[str]) -> bool:
    """True if team contains, or is contained in, any of the other names.

    Names that normalize to an empty string never overlap; "" is a
    substring of everything.
    """
    if not team:
        return False
    for other in others:
        if other and (other in team or team in other):
            return True
    return False


def is_potential_match(
    tracking: TrackingEvent,
    video: VideoEvent,
    max_days: float = PREFILTER_MAX_DAYS,
    max_duration_diff_hours: float | None = None,
) -> bool:
    """Decide whether a pair is worth scoring.

    Requires:
    - both start times parse, and differ by at most max_days
    - the tracking team name overlaps the video club, home or away name
      (normalize_name form, substring in either direction)
    - optionally, durations differ by less than max_duration_diff_hours
      (only checked when both end times parse)

    Args:
        tracking: Tracking event
        video: Video event
        max_days: Maximum start-time difference in days
        max_duration_diff_hours: Optional duration guard, None to disable

    Returns:
        True if the pair should be scored
    """
    tracking_start = parse_timestamp(tracking.start_time)
    video_start = parse_timestamp(video.start_time, video.timezone)
    if tracking_start is None or video_start is None:
        logger.warning(
            "[PREFILTER] Invalid start time (tracking=%s %r, video=%s %r)",
            tracking.id,
            tracking.start_time,
            video.id,
            video.start_time,
        )
        return False

    if abs(hours_between(tracking_start, video_start)) > max_days * 24:
        return False

    team = normalize_name(tracking.team_name)
    others = [
        normalize_name(video.club_name),
        normalize_name(video.home_name),
        normalize_name(video.away_name),
    ]
    if not _names_overlap(team, others):
        return False

    if max_duration_diff_hours is None:
        return True

    tracking_end = parse_timestamp(tracking.end_time)
    video_end = parse_timestamp(video.end_time, video.timezone)
    if tracking_end is None or video_end is None:
        # Can't check duration, rely on name and time
        return True

    duration_diff = abs(
        hours_between(tracking_start, tracking_end) - hours_between(video_start, video_end)
    )
    return duration_diff < max_duration_diff_hours
