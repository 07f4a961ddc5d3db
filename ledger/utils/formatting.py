from datetime import datetime
from zoneinfo import ZoneInfo


def format_brl(amount: float) -> str:
    """Format amount in BRL style: R$ 1.234,56."""
    text = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if amount < 0 else ""
    return f"{sign}R$ {text}"


def format_timestamp(dt: datetime, tz: ZoneInfo) -> str:
    """'dd/mm/aaaa HH:MM' in the ledger's time zone."""
    return dt.astimezone(tz).strftime("%d/%m/%Y %H:%M")


def chunk_lines(lines: list[str], max_chars: int) -> list[str]:
    """Join lines into reply-sized chunks, never splitting a line."""
    chunks: list[str] = []
    buf = ""
    for line in lines:
        if not buf:
            buf = line
        elif len(buf) + 1 + len(line) > max_chars:
            chunks.append(buf)
            buf = line
        else:
            buf += "\n" + line
    if buf:
        chunks.append(buf)
    return chunks
