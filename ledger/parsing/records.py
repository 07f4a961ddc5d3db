import re

from ledger.models.schemas import ParsedRecord
from ledger.parsing.amounts import InvalidAmount, normalize_amount
from ledger.parsing.categories import normalize_category

# "<category> [sep] [R$] <amount>", e.g. "uber 29,90", "red bull: 12", "mercado R$ 1.234,56"
# The category never swallows the "R" of an "R$" marker.
_SINGLE_RECORD = re.compile(
    r"^(?!R\$)(?P<cat>[^\W\d_](?:(?!R\$)[^\W\d_]|[\s\-_/]){0,30})"
    r"\s*[:\- ]*(?:R?\$\s*)?"
    r"(?P<val>-?\d{1,3}(?:\.\d{3})+,\d{1,2}|-?\d+(?:[.,]\d{1,2})?)",
    re.IGNORECASE,
)

# Conjunctions and list punctuation. A comma between two digits is a decimal
# comma ("12,90") and never splits.
_CHUNK_SEPARATOR = re.compile(r"\s+(?:e|&|\+)\s+|;+|,(?!\d)|(?<!\d),", re.IGNORECASE)


def extract_single(text: str | None) -> ParsedRecord | None:
    m = _SINGLE_RECORD.match(str(text or "").strip())
    if not m:
        return None
    try:
        amount = normalize_amount(m.group("val"))
    except InvalidAmount:
        return None
    if not amount:
        return None
    category = normalize_category(m.group("cat").strip(" -_/"))
    return ParsedRecord(category=category, amount=amount)


def extract_multiple(text: str | None) -> list[ParsedRecord]:
    """Split a message into independent records, dropping chunks that don't parse."""
    if not text:
        return []
    collapsed = re.sub(r"\s{2,}", " ", str(text))
    records = []
    for chunk in _CHUNK_SEPARATOR.split(collapsed):
        record = extract_single(chunk.strip())
        if record:
            records.append(record)
    return records
