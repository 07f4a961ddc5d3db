import re
from collections.abc import Callable
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from ledger.models.schemas import PeriodWindow
from ledger.parsing.text import normalize_text


def _month_start(dt: datetime) -> datetime:
    return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _next_month_start(dt: datetime) -> datetime:
    start = _month_start(dt)
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


def _previous_month_start(dt: datetime) -> datetime:
    start = _month_start(dt)
    if start.month == 1:
        return start.replace(year=start.year - 1, month=12)
    return start.replace(month=start.month - 1)


def _day_start(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _week_start(dt: datetime) -> datetime:
    # Weeks start on Monday
    return _day_start(dt) - timedelta(days=dt.weekday())


def _current_month(now: datetime) -> tuple[datetime, datetime, str]:
    return _month_start(now), _next_month_start(now), "este mês"


def _previous_month(now: datetime) -> tuple[datetime, datetime, str]:
    return _previous_month_start(now), _month_start(now), "mês passado"


def _current_year(now: datetime) -> tuple[datetime, datetime, str]:
    start = _month_start(now).replace(month=1)
    return start, start.replace(year=start.year + 1), "este ano"


def _previous_year(now: datetime) -> tuple[datetime, datetime, str]:
    start = _month_start(now).replace(year=now.year - 1, month=1)
    return start, start.replace(year=start.year + 1), "ano passado"


def _today(now: datetime) -> tuple[datetime, datetime, str]:
    start = _day_start(now)
    return start, start + timedelta(days=1), "hoje"


def _yesterday(now: datetime) -> tuple[datetime, datetime, str]:
    end = _day_start(now)
    return end - timedelta(days=1), end, "ontem"


def _this_week(now: datetime) -> tuple[datetime, datetime, str]:
    start = _week_start(now)
    return start, start + timedelta(days=7), "esta semana"


def _last_week(now: datetime) -> tuple[datetime, datetime, str]:
    end = _week_start(now)
    return end - timedelta(days=7), end, "semana passada"


# Checked in order; the first keyword set that matches wins
PERIOD_RULES: tuple[tuple[re.Pattern, Callable[[datetime], tuple[datetime, datetime, str]]], ...] = (
    (re.compile(r"\b(?:este|neste|nesse) mes\b|\bmes atual\b"), _current_month),
    (re.compile(r"\bmes passado\b|\bmes anterior\b|\bultimo mes\b"), _previous_month),
    (re.compile(r"\banual\b|\beste ano\b|\bano atual\b|\bno ano\b|\bano todo\b"), _current_year),
    (re.compile(r"\bano passado\b"), _previous_year),
    (re.compile(r"\bhoje\b"), _today),
    (re.compile(r"\bontem\b"), _yesterday),
    (re.compile(r"\besta semana\b|\bsemana atual\b"), _this_week),
    (re.compile(r"\bsemana passada\b"), _last_week),
)


class PeriodResolver:
    """Maps period keywords in a message to a half-open [start, end) window."""

    def __init__(self, timezone: str, clock: Callable[[], datetime] | None = None):
        self.tz = ZoneInfo(timezone)
        self._clock = clock

    def now(self) -> datetime:
        if self._clock is None:
            return datetime.now(self.tz)
        return self._clock().astimezone(self.tz)

    def resolve(self, text: str | None) -> PeriodWindow | None:
        normalized = normalize_text(text)
        if not normalized:
            return None
        for pattern, window in PERIOD_RULES:
            if pattern.search(normalized):
                start, end, label = window(self.now())
                return PeriodWindow(start=start, end=end, label=label)
        return None

    def current_month(self) -> PeriodWindow:
        start, end, label = _current_month(self.now())
        return PeriodWindow(start=start, end=end, label=label)

    def resolve_or_default(self, text: str | None) -> PeriodWindow:
        """Explicit period from the text, otherwise the current month (never all time)."""
        return self.resolve(text) or self.current_month()
