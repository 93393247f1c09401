"""
Player name normalization and comparison utilities.

Player names reach us in different shapes depending on the source:
- Sportradar competitors: "Sinner, Jannik"
- ATP website rankings: "Jannik Sinner"
- With accents: "Carlos Alcaraz" vs "Carlos Alcaráz"

These helpers turn them into one comparable form so a player seeded from the
ATP website can later be attached to their Sportradar competitor id without
creating a duplicate row.
"""

import unicodedata

import jellyfish
from rapidfuzz import fuzz

# Common name particles that belong to the last name
_PARTICLES = {"de", "del", "van", "von", "da", "di", "la", "le", "dos"}

_SUFFIXES = (" jr.", " jr", " sr.", " sr", " iii", " ii", " iv")


def normalize_name(name: str) -> str:
    """
    Normalize a player name for comparison.

    Normalization steps:
    1. Convert to lowercase
    2. Remove accents (é → e, ñ → n)
    3. Swap "Lastname, Firstname" (Sportradar format) to "firstname lastname"
    4. Remove common suffixes (Jr., Sr., III, etc.)
    5. Collapse whitespace

    Examples:
        >>> normalize_name("Sinner, Jannik")
        'jannik sinner'
        >>> normalize_name("Carlos Alcaráz")
        'carlos alcaraz'
    """
    if not name:
        return ""

    normalized = name.lower().strip()

    # NFD splits "é" into "e" + combining accent; drop the combining marks
    normalized = unicodedata.normalize("NFD", normalized)
    normalized = "".join(
        char for char in normalized
        if unicodedata.category(char) != "Mn"
    )

    if "," in normalized:
        last, first = normalized.split(",", 1)
        normalized = f"{first.strip()} {last.strip()}"

    for suffix in _SUFFIXES:
        if normalized.endswith(suffix):
            normalized = normalized[:-len(suffix)]

    return " ".join(normalized.split())


def normalize_country(country: str | None) -> str:
    """Upper-case 3-letter country code, ``UNK`` when missing."""
    if not country or not country.strip():
        return "UNK"
    return country.strip().upper()[:3]


def extract_last_name(name: str) -> str:
    """
    Extract the normalized last name from a full name.

    - "Jannik Sinner" → "sinner"
    - "Sinner, Jannik" → "sinner"
    - "Alex de Minaur" → "de minaur"
    """
    parts = normalize_name(name).split()
    if not parts:
        return ""

    if len(parts) >= 3 and parts[-2] in _PARTICLES:
        return f"{parts[-2]} {parts[-1]}"

    return parts[-1]


def compare_names(name1: str, name2: str) -> float:
    """
    Compare two player names and return a similarity score (0.0 - 1.0).

    Takes the best of Jaro-Winkler (typos), token sort ratio (word order)
    and partial ratio (abbreviations), plus a bonus when the last names
    match and one first name is an initial ("J. Sinner").
    """
    n1 = normalize_name(name1)
    n2 = normalize_name(name2)

    if not n1 or not n2:
        return 0.0
    if n1 == n2:
        return 1.0

    jw_score = jellyfish.jaro_winkler_similarity(n1, n2)
    token_sort = fuzz.token_sort_ratio(n1, n2) / 100.0
    partial = fuzz.partial_ratio(n1, n2) / 100.0

    abbreviated_bonus = 0.0
    parts1 = n1.split()
    parts2 = n2.split()
    if len(parts1) >= 2 and len(parts2) >= 2 and parts1[-1] == parts2[-1]:
        first1 = parts1[0].rstrip(".")
        first2 = parts2[0].rstrip(".")
        if len(first1) == 1 and first2.startswith(first1):
            abbreviated_bonus = 0.15
        elif len(first2) == 1 and first1.startswith(first2):
            abbreviated_bonus = 0.15

    return min(1.0, max(jw_score, token_sort, partial) + abbreviated_bonus)
