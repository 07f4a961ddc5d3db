"""
Message router: turns one chat message into records, a query or an edit.

Branches are tried in a fixed order and the first one that applies answers
the message:

1. admin commands (move / alter / delete / "listar gastos diversos")
2. explicit listing requests ("listar gastos de ifood")
3. two or more records in one message ("paiol 16 e monster 11")
4. the LLM classifier: record, query or other
"""
import re
import threading
import weakref

from loguru import logger

from ledger.core.queries import QueryBuilder, is_list_request
from ledger.db.repository import ExpenseRepository
from ledger.llm.classifier import ExpenseClassifier
from ledger.models.schemas import (
    AdminCommand,
    ChangeAmount,
    Classification,
    DeleteRecord,
    Expense,
    ExpenseFilter,
    IncomingMessage,
    ListCategory,
    MoveCategory,
    ParsedRecord,
)
from ledger.parsing.admin import parse_admin_command
from ledger.parsing.amounts import InvalidAmount, normalize_amount
from ledger.parsing.categories import find_category_in_text, normalize_category
from ledger.parsing.payers import PayerDirectory
from ledger.parsing.records import extract_multiple, extract_single
from ledger.state.reference_cache import ReferenceCache
from ledger.utils.formatting import format_brl

UNRESOLVED_REF = (
    "Não consegui identificar o gasto (#n expirou?). "
    "Liste novamente e use #n, short id (6) ou id completo."
)
RECORD_NOT_FOUND = "Gasto não encontrado. Liste novamente e tente com o id completo."
INVALID_AMOUNT = "Valor inválido. Ex.: alterar #2 para 120,50"
NEED_CATEGORY = (
    'Diga a categoria, por exemplo: "listar gastos de energeticos" '
    'ou "listar gastos de ifood".'
)
RECORD_NOT_UNDERSTOOD = 'Não entendi o lançamento. Exemplos: "paiol 16", "monster 11", "uber 29,90".'
DEFAULT_REPLY = (
    "Período padrão: mês atual. Para mês anterior ou anual, cite isso na mensagem. "
    'Ex.: "listar gastos de energeticos mês passado".'
)
PROCESSING_ERROR = "Ocorreu um erro ao processar."
HELP_TEXT = (
    "Regras de período: por padrão SEMPRE mostro o mês atual.\n"
    'Para outro período, especifique no texto: "mês passado"/"mês anterior" ou "anual/este ano".\n\n'
    "Exemplos:\n"
    "- Lançar múltiplos:  paiol 16 e monster 11\n"
    "- Listar (mês atual): me liste individualmente todos os gastos de energeticos\n"
    "- Listar (mês passado): listar gastos de energeticos do mês passado\n"
    "- Listar (anual):      listar gastos de energeticos anual\n"
    "- Somar (mês atual):   quanto gastei com energeticos\n"
    "- Somar (mês passado): quanto gastei com energeticos mês anterior\n"
    "- Editar:              mover #2 para transporte | alterar #2 para 12,90 | apagar #1\n"
    "- Também aceita short id (6): apagar c67f04"
)

_HELP_REQUEST = re.compile(r"^\s*/?(?:help|ajuda)\s*$", re.IGNORECASE)


class Interpreter:
    def __init__(
        self,
        repo: ExpenseRepository,
        classifier: ExpenseClassifier,
        cache: ReferenceCache,
        queries: QueryBuilder,
        payers: PayerDirectory,
        allow_all_groups: bool = True,
        group_ids: list[str] | None = None,
    ):
        self.repo = repo
        self.classifier = classifier
        self.cache = cache
        self.queries = queries
        self.payers = payers
        self.allow_all_groups = allow_all_groups
        self.group_ids = set(group_ids or [])
        # Entries disappear once no message of that conversation holds the lock
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def accepts(self, message: IncomingMessage) -> bool:
        """Group messages from other people, in an allowed group."""
        if message.is_from_self or not message.is_group:
            return False
        if not self.allow_all_groups and self.group_ids:
            return message.conversation_id in self.group_ids
        return True

    def _conversation_lock(self, conversation_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(conversation_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[conversation_id] = lock
            return lock

    def handle(self, message: IncomingMessage) -> list[str]:
        """Process one message and return the reply chunks, in order."""
        if not self.accepts(message):
            return []
        # One message at a time per conversation, so a listing's cache write
        # lands before a following "apagar #1" is resolved.
        with self._conversation_lock(message.conversation_id):
            try:
                return self._dispatch(message)
            except Exception as e:
                logger.exception("Error handling message in {}: {}", message.conversation_id, e)
                return [PROCESSING_ERROR]

    def _dispatch(self, message: IncomingMessage) -> list[str]:
        text = message.text or ""
        cid = message.conversation_id
        payer = self.payers.payer_for(message.sender_id)

        command = parse_admin_command(text)
        if command is not None:
            logger.info("Admin command {} in {}", command.op, cid)
            return self._run_admin(cid, command, text)

        if is_list_request(text):
            category = find_category_in_text(text)
            if category is None:
                return [NEED_CATEGORY]
            explicit_payer = self.payers.explicit_filter(text, payer)
            return self.queries.listing(cid, category, explicit_payer, text)

        records = extract_multiple(text)
        if len(records) >= 2:
            return [self._record_many(message, payer, records)]

        result = self.classifier.classify(text, {"payer_hint": payer})
        if not result.ok:
            logger.warning("Classifier unavailable, answering as 'other': {}", result.error)
            return [self._other_reply(text)]

        classification = result.classification
        logger.info("Classified message in {} as {}", cid, classification.action)
        if classification.action == "record":
            return [self._record_single(message, payer, classification)]
        if classification.action == "query":
            return [self._summation(cid, text, payer, classification)]
        return [self._other_reply(text)]

    # Records

    def _new_expense(self, message: IncomingMessage, payer: str | None, record: ParsedRecord) -> Expense:
        return Expense(
            conversation_id=message.conversation_id,
            message_id=message.message_id,
            timestamp=self.queries.periods.now(),
            original_text=message.text,
            amount=record.amount,
            category=normalize_category(record.category),
            payer=payer,
        )

    def _record_many(self, message: IncomingMessage, payer: str | None, records: list[ParsedRecord]) -> str:
        expenses = self.repo.insert_many([self._new_expense(message, payer, r) for r in records])
        summary = ", ".join(f"{e.category} {format_brl(e.amount)}" for e in expenses)
        return f"✅ {len(expenses)} gastos adicionados: {summary} ({payer or 'indefinido'})."

    def _record_single(self, message: IncomingMessage, payer: str | None, classification: Classification) -> str:
        record = extract_single(message.text)
        if record is None:
            try:
                amount = normalize_amount(classification.amount)
            except InvalidAmount:
                amount = None
            if not amount:
                return RECORD_NOT_UNDERSTOOD
            record = ParsedRecord(category=normalize_category(classification.category), amount=amount)

        expense = self.repo.insert_one(self._new_expense(message, payer, record))
        return (
            f"✅ Gasto *{expense.category}* de *{format_brl(expense.amount)}* "
            f"({payer or 'indefinido'}) adicionado com sucesso."
        )

    # Queries

    def _summation(self, cid: str, text: str, payer: str | None, classification: Classification) -> str:
        """Sum for the category named by the classifier or found in the text.

        With no category at all the sum covers every category instead of
        falling back to Diversos.
        """
        category = None
        if classification.filters.category:
            category = normalize_category(classification.filters.category)
        category = category or find_category_in_text(text)
        explicit_payer = self.payers.explicit_filter(text, payer)
        return self.queries.summation(cid, category, explicit_payer, text)

    def _other_reply(self, text: str) -> str:
        if _HELP_REQUEST.match(text):
            return HELP_TEXT
        return DEFAULT_REPLY

    # Admin commands

    def _run_admin(self, cid: str, command: AdminCommand, text: str) -> list[str]:
        if isinstance(command, ListCategory):
            return self.queries.listing(cid, command.category, None, text)
        if isinstance(command, MoveCategory):
            return [self._move_category(cid, command)]
        if isinstance(command, ChangeAmount):
            return [self._change_amount(cid, command)]
        if isinstance(command, DeleteRecord):
            return [self._delete(cid, command)]
        raise ValueError(f"Unknown admin command: {command!r}")

    def _lookup(self, cid: str, record_id: str) -> Expense | None:
        # Scoped to the conversation first, then by id alone so a record
        # listed elsewhere can still be fixed with its full id
        return self.repo.find_one(
            ExpenseFilter(conversation_id=cid, record_id=record_id)
        ) or self.repo.find_one(ExpenseFilter(conversation_id=None, record_id=record_id))

    def _move_category(self, cid: str, command: MoveCategory) -> str:
        record_id = self.cache.resolve(cid, command.ref)
        if record_id is None:
            return UNRESOLVED_REF
        category = normalize_category(command.category)

        expense = self._lookup(cid, record_id)
        if expense is None:
            return RECORD_NOT_FOUND

        self.repo.update_one(expense.id, category=category, conversation_id=cid)
        return (
            f"✅ Categoria atualizada para *{category}* em "
            f"{format_brl(expense.amount)} (id:{expense.short_id})."
        )

    def _change_amount(self, cid: str, command: ChangeAmount) -> str:
        record_id = self.cache.resolve(cid, command.ref)
        if record_id is None:
            return UNRESOLVED_REF
        try:
            amount = normalize_amount(command.amount)
        except InvalidAmount:
            return INVALID_AMOUNT
        if not amount:
            return INVALID_AMOUNT

        expense = self._lookup(cid, record_id)
        if expense is None:
            return RECORD_NOT_FOUND

        self.repo.update_one(expense.id, amount=amount, conversation_id=cid)
        return (
            f"✅ Valor atualizado para *{format_brl(amount)}* na categoria "
            f"*{expense.category}* (id:{expense.short_id})."
        )

    def _delete(self, cid: str, command: DeleteRecord) -> str:
        record_id = self.cache.resolve(cid, command.ref)
        if record_id is None:
            return UNRESOLVED_REF

        expense = self._lookup(cid, record_id)
        if expense is None:
            return "Gasto não encontrado para este grupo. Liste novamente e tente com o id completo."

        if self.repo.delete_one(expense.id):
            return (
                f"🗑️ Gasto apagado: *{format_brl(expense.amount)}* em "
                f"*{expense.category}* (id:{expense.short_id})."
            )
        return "Não consegui apagar. Tente novamente com o id completo."
