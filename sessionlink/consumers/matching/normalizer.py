"""Team name normalization for matching.

Two independent normalizations are used:
- normalize_name(): coarse, squashed form for cheap substring pre-filtering
- extract_keywords(): word tokens for weighted similarity scoring

They strip different affix stoplists on purpose and must not be merged.
"""

import logging
import re

from unidecode import unidecode

from sessionlink.utilities.fuzzy_match import keyword_similarity

logger = logging.getLogger(__name__)

# Club prefixes, squad numbers and youth/team designators ("JO19", "team2")
PREFILTER_STOPWORDS = re.compile(r"\b(vv|fc|sc|1|2|3|jo\d+|team\d+)\b")

# Common Dutch club affixes and frequent opponents that carry no identity
KEYWORD_STOPWORDS = re.compile(r"\b(vv|fc|sc|sv|roda|jc|ajax|psv|az)\b")

NON_ALNUM = re.compile(r"[^a-z0-9]+")

# Keywords of this length or shorter are dropped
MIN_KEYWORD_LENGTH = 2


def _fold(text: str | None) -> str:
    """Strip accents (é→e, ü→u) and lowercase."""
    if not text:
        return ""
    return unidecode(text).lower()


def normalize_name(name: str | None) -> str:
    """Squash a team name for containment checks.

    "VV Capelle" -> "capelle", "Capelle 1" -> "capelle", "JO19-1 Sparta" -> "sparta"

    Args:
        name: Raw team or club name

    Returns:
        Lowercase alphanumeric string with no spaces
    """
    text = PREFILTER_STOPWORDS.sub("", _fold(name))
    return NON_ALNUM.sub("", text).strip()


def extract_keywords(name: str | None) -> list[str]:
    """Split a team name into significant keywords.

    "VV Capelle" -> ["capelle"], "Sparta Rotterdam 2" -> ["sparta", "rotterdam"]

    Args:
        name: Raw team or club name

    Returns:
        Keywords in input order, each longer than two characters
    """
    text = KEYWORD_STOPWORDS.sub("", _fold(name))
    text = " ".join(NON_ALNUM.sub(" ", text).split())
    return [word for word in text.split(" ") if len(word) > MIN_KEYWORD_LENGTH]


def name_similarity(name1: str | None, name2: str | None) -> float:
    """Keyword similarity between two raw team names."""
    return keyword_similarity(extract_keywords(name1), extract_keywords(name2))
