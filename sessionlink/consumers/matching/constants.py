"""Constants for the matching module.

Algorithm tuning constants for tracking-to-video scoring. The weights and
tier boundaries are empirical; changing any of them silently changes which
pairs get matched.
"""

# =============================================================================
# CONFIDENCE THRESHOLDS
# Raw score thresholds; the score is a sum of sub-scores, not a percentage.
# =============================================================================

CONFIDENT_THRESHOLD = 80
LIKELY_THRESHOLD = 60
POSSIBLE_THRESHOLD = 40

# =============================================================================
# SCORE TIERS
# Each tier list is (bound, points), checked in order; first hit wins.
# =============================================================================

# 1. Date proximity (max 25), bounds in hours
DATE_TIERS: list[tuple[float, int]] = [
    (2, 25),
    (6, 20),
    (24, 15),
    (3 * 24, 10),
    (7 * 24, 5),
]

# 2. Name similarity (max 25, plus club bonus)
TEAM_TIERS: list[tuple[float, int]] = [
    (0.8, 25),
    (0.6, 20),
    (0.4, 15),
]
CLUB_TIERS: list[tuple[float, int]] = [
    (0.6, 12),
    (0.4, 8),
]
MINIMAL_TEAM_SIMILARITY = 0.2
MINIMAL_TEAM_SCORE = 5
CLUB_BONUS_SIMILARITY = 0.8
CLUB_BONUS_SCORE = 5

# 3. Duration similarity (max 15), bounds in hours, strict "<"
DURATION_TIERS: list[tuple[float, int]] = [
    (0.25, 15),
    (0.5, 12),
    (1, 8),
    (2, 5),
]

# 4. Temporal relationship (max 10)
OVERLAP_SCORE = 10
TEMPORAL_TIERS: list[tuple[float, int]] = [
    (1, 8),
    (3, 6),
    (24, 4),
    (7 * 24, 2),
]

# 5. Data completeness
COMPLETENESS_SCORE = 10
