from ledger.config import get_settings
from ledger.core.interpreter import Interpreter
from ledger.core.queries import QueryBuilder
from ledger.db.repository import ExpenseRepository
from ledger.llm.classifier import ExpenseClassifier
from ledger.parsing.payers import PayerDirectory
from ledger.parsing.periods import PeriodResolver
from ledger.state.reference_cache import ReferenceCache

settings = get_settings()

repo = ExpenseRepository(settings.db_path)
classifier = ExpenseClassifier(
    api_key=settings.llm_api_key, model=settings.llm_model, base_url=settings.llm_base_url
)
cache = ReferenceCache(ttl_seconds=settings.lastlist_ttl_seconds)
periods = PeriodResolver(settings.timezone)
payers = PayerDirectory(
    settings.my_sender_id,
    settings.spouse_sender_id,
    my_name=settings.my_payer_name,
    spouse_name=settings.spouse_payer_name,
)
queries = QueryBuilder(
    repo,
    cache,
    periods,
    max_rows=settings.max_list_rows,
    chunk_chars=settings.reply_chunk_chars,
)
interpreter = Interpreter(
    repo,
    classifier,
    cache,
    queries,
    payers,
    allow_all_groups=settings.allow_all_groups,
    group_ids=settings.group_ids,
)
