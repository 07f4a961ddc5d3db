import unicodedata


def normalize_text(text: str | None) -> str:
    """Lowercase and strip diacritics ("Mês Passado" -> "mes passado")."""
    decomposed = unicodedata.normalize("NFD", (text or "").lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))
