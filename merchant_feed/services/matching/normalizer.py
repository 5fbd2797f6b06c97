"""Text canonicalization for search comparisons."""
import unicodedata
from typing import Optional


def normalize(text: Optional[str]) -> str:
    """Lowercase, strip diacritics and trim.

    Uses canonical decomposition (NFD) and drops combining marks, so
    ``normalize("Açaí") == normalize("ACAI") == "acai"``. Idempotent.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip()
