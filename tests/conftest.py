"""Shared fixtures: a fixed "now", a controllable monotonic clock, a scripted
classifier and a fully wired interpreter over a throwaway TinyDB file.

``ledger.deps`` builds module-level singletons from the environment, so the
database path is pointed at a temporary file before anything imports it.
"""

import os
import tempfile
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

os.environ.setdefault("DB_PATH", str(Path(tempfile.mkdtemp()) / "expenses.json"))
os.environ.setdefault("LLM_API_KEY", "")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "")

from ledger.core.interpreter import Interpreter  # noqa: E402
from ledger.core.queries import QueryBuilder  # noqa: E402
from ledger.db.repository import ExpenseRepository  # noqa: E402
from ledger.models.schemas import (  # noqa: E402
    Classification,
    IncomingMessage,
    OracleResult,
)
from ledger.parsing.payers import PayerDirectory  # noqa: E402
from ledger.parsing.periods import PeriodResolver  # noqa: E402
from ledger.state.reference_cache import ReferenceCache  # noqa: E402

TZ_NAME = "America/Sao_Paulo"
TZ = ZoneInfo(TZ_NAME)
NOW = datetime(2026, 10, 17, 15, 30, tzinfo=TZ)

GROUP = "120363000000000000@g.us"
OTHER_GROUP = "120363999999999999@g.us"
ME = "5531999999999@c.us"
SPOUSE = "5531888888888@c.us"


class ManualClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class StubClassifier:
    """Stands in for ExpenseClassifier; returns a scripted result and records calls."""

    def __init__(self, result: OracleResult | None = None):
        self.result = result or OracleResult.success(Classification(action="other"))
        self.calls: list[tuple[str, dict]] = []

    def returns(self, **fields) -> None:
        self.result = OracleResult.success(Classification(**fields))

    def fails(self, reason: str = "boom") -> None:
        self.result = OracleResult.failure(reason)

    def classify(self, text: str, hints: dict | None = None) -> OracleResult:
        self.calls.append((text, hints or {}))
        return self.result


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def periods() -> PeriodResolver:
    return PeriodResolver(TZ_NAME, clock=lambda: NOW)


@pytest.fixture
def repo(tmp_path: Path) -> ExpenseRepository:
    return ExpenseRepository(str(tmp_path / "expenses.json"))


@pytest.fixture
def cache(clock: ManualClock) -> ReferenceCache:
    return ReferenceCache(ttl_seconds=1800, clock=clock)


@pytest.fixture
def classifier() -> StubClassifier:
    return StubClassifier()


@pytest.fixture
def payers() -> PayerDirectory:
    return PayerDirectory("5531999999999", "5531888888888")


@pytest.fixture
def queries(repo, cache, periods) -> QueryBuilder:
    return QueryBuilder(repo, cache, periods, max_rows=200, chunk_chars=3000)


@pytest.fixture
def interpreter(repo, classifier, cache, queries, payers) -> Interpreter:
    return Interpreter(repo, classifier, cache, queries, payers)


@pytest.fixture
def send(interpreter):
    """Send a group message as `sender` and return the replies."""

    def _send(text: str, sender: str = ME, conversation_id: str = GROUP) -> list[str]:
        return interpreter.handle(
            IncomingMessage(conversation_id=conversation_id, sender_id=sender, text=text)
        )

    return _send
