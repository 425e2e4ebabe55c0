"""Fuzzy string matching for team names.

Uses rapidfuzz for the edit distance and layers the keyword-overlap
similarity used by match scoring on top of it.
"""

from rapidfuzz.distance import Levenshtein

# Weight of each keyword-pair relationship in keyword_similarity()
EXACT_WEIGHT = 1.0
CONTAINS_WEIGHT = 0.7
FUZZY_WEIGHT = 0.5

# Fuzzy (edit-distance) matches only count for tokens longer than this.
# Short tokens like "ado" / "ajo" are two edits apart but unrelated.
FUZZY_MIN_TOKEN_LENGTH = 3
FUZZY_MAX_DISTANCE = 2


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance (insert, delete, substitute all cost 1)."""
    return Levenshtein.distance(a, b)


def keyword_similarity(keywords1: list[str], keywords2: list[str]) -> float:
    """Score the overlap between two keyword lists.

    Every pair of keywords contributes at most once:
    - exact match: 1.0
    - one contains the other: 0.7
    - edit distance <= 2 and both longer than 3 chars: 0.5

    The sum is divided by the longer list's length. The result is not
    clamped, so repeated keywords can push it above 1.0.

    Args:
        keywords1: Keywords from the first name
        keywords2: Keywords from the second name

    Returns:
        Similarity, 0.0 when either list is empty
    """
    if not keywords1 or not keywords2:
        return 0.0

    matches = 0.0
    for word1 in keywords1:
        for word2 in keywords2:
            if word1 == word2:
                matches += EXACT_WEIGHT
            elif word1 in word2 or word2 in word1:
                matches += CONTAINS_WEIGHT
            elif (
                min(len(word1), len(word2)) > FUZZY_MIN_TOKEN_LENGTH
                and levenshtein_distance(word1, word2) <= FUZZY_MAX_DISTANCE
            ):
                matches += FUZZY_WEIGHT

    return matches / max(len(keywords1), len(keywords2))
