"""Jurisdiction parsing: sub-national region detection and catalog keys."""

import re

US_STATES: tuple[str, ...] = (
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado",
    "Connecticut", "Delaware", "Florida", "Georgia", "Hawaii", "Idaho",
    "Illinois", "Indiana", "Iowa", "Kansas", "Kentucky", "Louisiana", "Maine",
    "Maryland", "Massachusetts", "Michigan", "Minnesota", "Mississippi",
    "Missouri", "Montana", "Nebraska", "Nevada", "New Hampshire", "New Jersey",
    "New Mexico", "New York", "North Carolina", "North Dakota", "Ohio",
    "Oklahoma", "Oregon", "Pennsylvania", "Rhode Island", "South Carolina",
    "South Dakota", "Tennessee", "Texas", "Utah", "Vermont", "Virginia",
    "Washington", "West Virginia", "Wisconsin", "Wyoming",
)

# Longest first so "West Virginia" wins over "Virginia"
_STATE_PATTERNS = [
    (state, re.compile(rf"\b{re.escape(state)}\b", re.IGNORECASE))
    for state in sorted(US_STATES, key=len, reverse=True)
]

US_ALIASES = ("united states of america", "united states", "usa", "u.s.a.", "u.s.", "us", "america")

EU_COUNTRIES = (
    "Germany", "France", "Italy", "Spain", "Netherlands", "Belgium", "Austria", "Poland",
    "Ireland", "Portugal", "Sweden", "Denmark", "Finland", "Greece", "Czech Republic",
    "Czechia", "Hungary", "Romania", "Bulgaria", "Croatia", "Slovakia", "Slovenia",
    "Lithuania", "Latvia", "Estonia", "Luxembourg", "Malta", "Cyprus",
)
EU_ALIASES = ("european union", "eu")

US_CATALOG_KEY = "USA"
EU_CATALOG_KEY = "EU"


def detect_region(text: str) -> str | None:
    """
    Find a US state name in text.

    Args:
        text: Jurisdiction or query string, e.g. "United States Texas"

    Returns:
        Canonical state name, or None if no state is mentioned
    """
    for state, pattern in _STATE_PATTERNS:
        if pattern.search(text):
            return state
    return None


def remove_region(text: str, region: str) -> str:
    """Remove every mention of region from text and collapse whitespace."""
    stripped = re.sub(rf"\b{re.escape(region)}\b", " ", text, flags=re.IGNORECASE)
    return re.sub(r"\s+", " ", stripped).strip()


def _mentions(text: str, names: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(
        re.search(rf"(?<![\w.]){re.escape(name.lower())}(?![\w])", lowered) for name in names
    )


def catalog_key(jurisdiction: str) -> str | None:
    """
    Map a jurisdiction string to its curated-catalog country key.

    Args:
        jurisdiction: Country, optionally followed by a region

    Returns:
        "USA", "EU", or None for countries without curated sources
    """
    region = detect_region(jurisdiction)
    country = remove_region(jurisdiction, region) if region else jurisdiction

    if region or _mentions(country, US_ALIASES):
        return US_CATALOG_KEY
    if _mentions(country, EU_ALIASES) or _mentions(country, EU_COUNTRIES):
        return EU_CATALOG_KEY
    return None


def state_catalog_key(region: str) -> str:
    return f"{US_CATALOG_KEY}-{region}"
