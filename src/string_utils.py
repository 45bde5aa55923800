"""
Shared string normalization helpers for artist names and genres.

Artist uniqueness uses ``normalize_name`` (trim + lowercase).
Target-artist matching uses ``normalize_artist_key``, which also folds
typography, diacritics and punctuation.
"""
import re
import unicodedata

# Typography normalization for artist keys
_ARTIST_TYPOGRAPHY_TRANSLATION = {
    ord("‘"): "'",  # left single quotation mark
    ord("’"): "'",  # right single quotation mark
    ord("‚"): "'",  # single low-9 quotation mark
    ord("′"): "'",  # prime
    ord("“"): '"',  # left double quotation mark
    ord("”"): '"',  # right double quotation mark
    ord("‐"): "-",  # hyphen
    ord("‑"): "-",  # non-breaking hyphen
    ord("–"): "-",  # en dash
    ord("—"): "-",  # em dash
    ord("−"): "-",  # minus sign
}

_GENRE_ABBREVIATIONS = {
    "rnb": "r&b",
    "r and b": "r&b",
    "hiphop": "hip hop",
    "dnb": "drum and bass",
    "edm": "edm",
}


def normalize_text(text: str, lowercase: bool = True, strip: bool = True) -> str:
    """
    Normalize text for consistent comparisons.

    Applies Unicode NFC, optional case folding and whitespace stripping.
    """
    if text is None:
        return ""

    text = unicodedata.normalize('NFC', str(text))
    if lowercase:
        text = text.casefold()
    if strip:
        text = text.strip()
    return text


def normalize_name(value) -> str:
    """Trim and lowercase an artist name. ``None`` and blanks map to ''."""
    if not value:
        return ""
    return str(value).strip().lower()


def normalize_artist_key(name: str) -> str:
    """
    Normalize an artist name to a stable comparison key.

    Steps:
    - Normalize typography variants (quotes/dashes)
    - Unicode NFKD + remove combining marks (diacritics)
    - Casefold
    - Replace punctuation with spaces and collapse whitespace
    """
    if not name:
        return ""

    text = str(name).strip()
    if not text:
        return ""

    text = text.translate(_ARTIST_TYPOGRAPHY_TRANSLATION)
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.casefold()

    normalized = "".join(
        " " if unicodedata.category(ch).startswith("P") else ch for ch in text
    )
    normalized = " ".join(normalized.split())
    if normalized:
        return normalized

    # Punctuation-only names ("!!!") keep their punctuation as the key
    return " ".join(text.split())


def normalize_genre(genre: str) -> str:
    """
    Normalize a genre tag for cluster lookups.

    "Hip-Hop" -> "hip hop", "R and B" -> "r&b", "Synth_Pop" -> "synth pop".
    """
    if not genre:
        return ""

    genre = normalize_text(genre)
    genre = genre.replace("-", " ").replace("_", " ").replace("/", " ")
    genre = re.sub(r"\s+", " ", genre).strip()
    return _GENRE_ABBREVIATIONS.get(genre, genre)
