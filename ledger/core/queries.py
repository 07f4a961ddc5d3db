import re
from zoneinfo import ZoneInfo

from loguru import logger

from ledger.db.repository import ExpenseRepository
from ledger.models.schemas import ExpenseFilter, PeriodWindow
from ledger.parsing.periods import PeriodResolver
from ledger.parsing.text import normalize_text
from ledger.state.reference_cache import ReferenceCache
from ledger.utils.formatting import chunk_lines, format_brl, format_timestamp

_LIST_VERB = re.compile(
    r"\b(?:mostrar|mostra|listar|liste|lista|me\s+mostra|me\s+liste|me\s+lista"
    r"|todos(?:\s+os)?|todas(?:\s+as)?)\b"
)
_LIST_NOUN = re.compile(r"\b(?:gastos?|lancamentos?)\b")

LISTING_ACTIONS_HELP = (
    "\n\nAções:\n"
    "- Mover:   mover #2 para transporte\n"
    "- Alterar: alterar #2 para 12,90\n"
    "- Apagar:  apagar #1\n"
    "- Também aceita short id (6): apagar c67f04"
)


def is_list_request(text: str | None) -> bool:
    """A listing verb plus "gastos"/"lançamentos" ("me liste os gastos de ifood")."""
    s = normalize_text(text)
    return bool(_LIST_VERB.search(s) and _LIST_NOUN.search(s))


class QueryBuilder:
    """Builds conversation-scoped filters and renders listings and totals."""

    def __init__(
        self,
        repo: ExpenseRepository,
        cache: ReferenceCache,
        periods: PeriodResolver,
        max_rows: int = 200,
        chunk_chars: int = 3000,
    ):
        self.repo = repo
        self.cache = cache
        self.periods = periods
        self.max_rows = max_rows
        self.chunk_chars = chunk_chars

    @property
    def tz(self) -> ZoneInfo:
        return self.periods.tz

    def build(
        self,
        conversation_id: str,
        text: str | None,
        category: str | None = None,
        payer: str | None = None,
    ) -> tuple[ExpenseFilter, PeriodWindow]:
        period = self.periods.resolve_or_default(text)
        flt = ExpenseFilter(
            conversation_id=conversation_id,
            category=category,
            payer=payer,
            start=period.start,
            end=period.end,
        )
        return flt, period

    def listing(
        self,
        conversation_id: str,
        category: str,
        payer: str | None,
        text: str | None,
    ) -> list[str]:
        flt, period = self.build(conversation_id, text, category, payer)
        expenses = self.repo.find(flt, limit=self.max_rows)
        self.cache.store(conversation_id, [e.id for e in expenses])
        logger.info(
            "Listed {} expenses in {} for {} ({})",
            len(expenses), category, conversation_id, period.label,
        )

        who = f" ({payer})" if payer else ""
        if not expenses:
            return [f"Não encontrei lançamentos em *{category}*{who} ({period.label})."]

        total = sum(e.amount for e in expenses)
        header = (
            f"🧾 {len(expenses)} lançamento(s) em *{category}*{who}"
            f" • Total: *{format_brl(total)}* • ({period.label})"
        )
        rows = [
            f"[#{i}] {format_timestamp(e.timestamp, self.tz)} | {format_brl(e.amount)}"
            f" | {e.payer or '—'} | id:{e.short_id}"
            for i, e in enumerate(expenses, 1)
        ]
        chunks = chunk_lines([header, *rows], self.chunk_chars)
        chunks[-1] += LISTING_ACTIONS_HELP
        return chunks

    def summation(
        self,
        conversation_id: str,
        category: str | None,
        payer: str | None,
        text: str | None,
    ) -> str:
        flt, period = self.build(conversation_id, text, category, payer)
        total, count = self.repo.aggregate_sum(flt)

        where = f' em "{category}"' if category else ""
        who = f" ({payer})" if payer else ""
        if count == 0:
            return f"Não encontrei gastos{where}{who} ({period.label})."
        return (
            f"Você gastou *{format_brl(total)}*{where}{who}"
            f" em *{count}* lançamento(s) ({period.label})."
        )
