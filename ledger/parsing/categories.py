import re

from ledger.parsing.text import normalize_text

FALLBACK_CATEGORY = "Diversos"

CANONICAL_CATEGORIES = (
    "Paiol/cigarro",
    "Maconha",
    "Energeticos",
    "Bebidas alcoólicas",
    "Ifood",
    "Jogos",
    "transporte/uber",
    "transporte/combustivel",
    "transporte",
    "mercado",
    "saude/farmacia",
    FALLBACK_CATEGORY,
)

# Informal term -> canonical category. Keys are written the way people type
# them; lookups go through normalize_text, so accents are optional.
CATEGORY_SYNONYMS = {
    "paiol": "Paiol/cigarro",
    "cigarro": "Paiol/cigarro",
    "cigarros": "Paiol/cigarro",
    "tabaco": "Paiol/cigarro",
    "maconha": "Maconha",
    "erva": "Maconha",
    "ganja": "Maconha",
    "beck": "Maconha",
    "monster": "Energeticos",
    "redbull": "Energeticos",
    "red bull": "Energeticos",
    "energetico": "Energeticos",
    "energeticos": "Energeticos",
    "energético": "Energeticos",
    "energéticos": "Energeticos",
    "cerveja": "Bebidas alcoólicas",
    "vodka": "Bebidas alcoólicas",
    "vinho": "Bebidas alcoólicas",
    "whisky": "Bebidas alcoólicas",
    "cachaça": "Bebidas alcoólicas",
    "pinga": "Bebidas alcoólicas",
    "bebida": "Bebidas alcoólicas",
    "bebidas": "Bebidas alcoólicas",
    "álcool": "Bebidas alcoólicas",
    "ifood": "Ifood",
    "i-food": "Ifood",
    "jogo": "Jogos",
    "jogos": "Jogos",
    "steam": "Jogos",
    "psn": "Jogos",
    "xbox": "Jogos",
    "game pass": "Jogos",
    "uber": "transporte/uber",
    "99": "transporte/uber",
    "gasolina": "transporte/combustivel",
    "gasolinao": "transporte/combustivel",
    "combustível": "transporte/combustivel",
    "transportes": "transporte",
    "onibus": "transporte",
    "ônibus": "transporte",
    "metrô": "transporte",
    "mercado": "mercado",
    "supermercado": "mercado",
    "farmácia": "saude/farmacia",
    "remédio": "saude/farmacia",
    "remédios": "saude/farmacia",
    "diversos": FALLBACK_CATEGORY,
    "outros": FALLBACK_CATEGORY,
    "misc": FALLBACK_CATEGORY,
}


def _build_lookup() -> dict[str, str]:
    lookup = {normalize_text(name): name for name in CANONICAL_CATEGORIES}
    for key, canonical in CATEGORY_SYNONYMS.items():
        lookup[normalize_text(key)] = canonical
    return lookup


_LOOKUP = _build_lookup()

# Longest key first so "red bull" is tried before "red"-like fragments and
# "game pass" before any shorter key. Equal lengths fall back to alphabetical
# order, which keeps the scan deterministic.
_SCAN_ORDER = sorted(_LOOKUP, key=lambda k: (-len(k), k))
_SCAN_PATTERNS = [
    (re.compile(rf"(?<!\w){re.escape(key)}(?!\w)"), _LOOKUP[key]) for key in _SCAN_ORDER
]


def normalize_category(raw: str | None) -> str:
    """Map a free-text category token to its canonical name.

    Unknown or empty tokens map to "Diversos"; no raw text ever leaves here.
    """
    key = normalize_text(raw).strip()
    if not key:
        return FALLBACK_CATEGORY
    return _LOOKUP.get(key, FALLBACK_CATEGORY)


def find_category_in_text(text: str | None) -> str | None:
    """Return the canonical category of the longest synonym mentioned in text."""
    normalized = normalize_text(text)
    for pattern, canonical in _SCAN_PATTERNS:
        if pattern.search(normalized):
            return canonical
    return None


def is_canonical(category: str) -> bool:
    return category in CANONICAL_CATEGORIES
