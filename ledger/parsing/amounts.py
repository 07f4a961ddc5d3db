import math
import re


class InvalidAmount(ValueError):
    """Raised when a value cannot be read as a finite amount."""


_THOUSANDS_WITH_DECIMAL = re.compile(r"^-?\d{1,3}(?:\.\d{3})+,\d{1,2}$|^-?\d+\.\d{3},\d{2}$")
_DECIMAL_COMMA = re.compile(r"^-?\d+,\d{1,2}$")
_NOISE = re.compile(r"\s|r\$", re.IGNORECASE)


def normalize_amount(raw: str | int | float | None) -> float:
    """Parse a Brazilian-formatted amount.

    "1.234,56" -> 1234.56, "12,9" -> 12.9, "29.90" -> 29.9. Numbers pass
    through unchanged.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidAmount(f"not an amount: {raw!r}")

    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        s = _NOISE.sub("", str(raw))
        if _THOUSANDS_WITH_DECIMAL.match(s):
            s = s.replace(".", "").replace(",", ".")
        elif _DECIMAL_COMMA.match(s):
            s = s.replace(",", ".")
        try:
            value = float(s)
        except ValueError as e:
            raise InvalidAmount(f"not an amount: {raw!r}") from e

    if not math.isfinite(value):
        raise InvalidAmount(f"not a finite amount: {raw!r}")
    return value
