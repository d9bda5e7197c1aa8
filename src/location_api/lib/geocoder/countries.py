"""Country code ↔ country name table shared by every component."""

COUNTRY_NAMES: dict[str, str] = {
    "DE": "Germany",
    "IT": "Italy",
    "ES": "Spain",
    "FR": "France",
    "AT": "Austria",
    "CH": "Switzerland",
    "NL": "Netherlands",
    "BE": "Belgium",
    "US": "United States",
    "GB": "United Kingdom",
}

_CODES_BY_NAME: dict[str, str] = {name.lower(): code for code, name in COUNTRY_NAMES.items()}

# Countries whose name is omitted from display names
HOME_MARKETS: frozenset[str] = frozenset({"DE", "IT", "ES", "FR"})

DEFAULT_COUNTRY_CODE = "DE"


def country_name(code: str) -> str:
    """Return the English country name for an ISO alpha-2 code, or the code itself if unknown."""
    return COUNTRY_NAMES.get(code.strip().upper(), code)


def country_code(name: str) -> str:
    """Return the ISO alpha-2 code for an English country name, defaulting to ``DE``."""
    return _CODES_BY_NAME.get(name.strip().lower(), DEFAULT_COUNTRY_CODE)


def to_country_code(value: str | None) -> str | None:
    """Interpret a country given either as a code or as a name.

    Returns:
        Upper-case ISO alpha-2 code, or None when the value is empty or unknown.
    """
    if not value or not value.strip():
        return None
    candidate = value.strip()
    if candidate.upper() in COUNTRY_NAMES:
        return candidate.upper()
    return _CODES_BY_NAME.get(candidate.lower())


def country_flag(code: str) -> str:
    """Return the flag emoji for a known country code, or a globe for anything else."""
    code = code.strip().upper()
    if code not in COUNTRY_NAMES:
        return "\N{EARTH GLOBE EUROPE-AFRICA}"
    return "".join(chr(0x1F1E6 + ord(ch) - ord("A")) for ch in code)
