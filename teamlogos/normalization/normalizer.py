import re
from typing import Dict

# Accented / special Latin characters mapped to their closest ASCII spelling.
SPECIAL_CHAR_MAP: Dict[str, str] = {
    "ü": "u", "ö": "o", "ä": "a",
    "Ü": "U", "Ö": "O", "Ä": "A",
    "ß": "ss",
    "é": "e", "è": "e", "ê": "e", "ë": "e",
    "É": "E", "È": "E", "Ê": "E", "Ë": "E",
    "á": "a", "à": "a", "â": "a", "å": "a", "ã": "a",
    "Á": "A", "À": "A", "Â": "A", "Å": "A", "Ã": "A",
    "í": "i", "ì": "i", "î": "i", "ï": "i",
    "Í": "I", "Ì": "I", "Î": "I", "Ï": "I",
    "ó": "o", "ò": "o", "ô": "o", "õ": "o",
    "Ó": "O", "Ò": "O", "Ô": "O", "Õ": "O",
    "ú": "u", "ù": "u", "û": "u",
    "Ú": "U", "Ù": "U", "Û": "U",
    "ñ": "n", "Ñ": "N",
    "ç": "c", "Ç": "C",
    "ø": "o", "Ø": "O",
    "æ": "ae", "Æ": "AE",
    "œ": "oe", "Œ": "OE",
}

_TRANSLATION = str.maketrans(SPECIAL_CHAR_MAP)

# Organizational suffixes and founding years, only as whole trailing words
_TRAILING_SUFFIX_RE = re.compile(r"(?:^|\s+)(?:AFC|FC|CF|SC|AC|\d{4})$")
_AMPERSAND_RE = re.compile(r"\s*&\s*")


def fold_special_characters(name: str) -> str:
    """Replaces accented characters using SPECIAL_CHAR_MAP and trims the result."""
    return name.translate(_TRANSLATION).strip()


def normalize_team_name(name: str) -> str:
    """Turns a display name into an ASCII search term for provider keyword search.

    "Bayern München" -> "Bayern Munchen", "Arsenal FC" -> "Arsenal",
    "Club 1909" -> "Club". Suffixes are stripped until none remain, so the
    function is idempotent.
    """
    normalized = fold_special_characters(name)
    normalized = _AMPERSAND_RE.sub(" and ", normalized).strip()

    while True:
        stripped = _TRAILING_SUFFIX_RE.sub("", normalized).strip()
        if stripped == normalized:
            return stripped
        normalized = stripped
