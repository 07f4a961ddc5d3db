import threading
import uuid
from datetime import datetime

from loguru import logger
from tinydb import Query, TinyDB

from ledger.models.schemas import Expense, ExpenseFilter
from ledger.parsing.categories import normalize_category


def new_record_id() -> str:
    """24 lowercase hex chars, the shape users can type back as a full id."""
    return uuid.uuid4().hex[:24]


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


class ExpenseRepository:
    def __init__(self, db_path: str = "expenses.json"):
        self.db = TinyDB(db_path)
        self.table = self.db.table("expenses")
        self._lock = threading.RLock()

    def _condition(self, flt: ExpenseFilter):
        Ex = Query()
        conditions = []
        if flt.conversation_id is not None:
            conditions.append(Ex.conversation_id == flt.conversation_id)
        if flt.record_id is not None:
            conditions.append(Ex.id == flt.record_id.lower())
        if flt.category is not None:
            wanted = flt.category.lower()
            conditions.append(Ex.category.test(lambda val: str(val).lower() == wanted))
        if flt.payer is not None:
            conditions.append(Ex.payer == flt.payer)
        if flt.start is not None:
            start = flt.start
            conditions.append(Ex.timestamp.test(lambda val: _as_datetime(val) >= start))
        if flt.end is not None:
            end = flt.end
            conditions.append(Ex.timestamp.test(lambda val: _as_datetime(val) < end))

        if not conditions:
            return Ex.noop()
        cond = conditions[0]
        for extra in conditions[1:]:
            cond = cond & extra
        return cond

    def _to_document(self, expense: Expense) -> dict:
        expense.id = expense.id or new_record_id()
        expense.category = normalize_category(expense.category)
        return expense.model_dump(mode="json")

    def insert_one(self, expense: Expense) -> Expense:
        with self._lock:
            self.table.insert(self._to_document(expense))
        logger.info("Stored expense {} ({} {})", expense.id, expense.category, expense.amount)
        return expense

    def insert_many(self, expenses: list[Expense]) -> list[Expense]:
        if not expenses:
            return []
        with self._lock:
            self.table.insert_multiple([self._to_document(e) for e in expenses])
        logger.info("Stored {} expenses", len(expenses))
        return expenses

    def find_one(self, flt: ExpenseFilter) -> Expense | None:
        with self._lock:
            doc = self.table.get(self._condition(flt))
        if doc is None:
            return None
        return Expense(**doc)

    def find(self, flt: ExpenseFilter, limit: int | None = None) -> list[Expense]:
        """Matching expenses, newest first."""
        with self._lock:
            docs = self.table.search(self._condition(flt))
        docs.sort(key=lambda doc: _as_datetime(doc["timestamp"]), reverse=True)
        if limit is not None:
            docs = docs[:limit]
        return [Expense(**doc) for doc in docs]

    def update_one(self, record_id: str, **fields) -> Expense | None:
        updates = {k: v for k, v in fields.items() if v is not None}
        if "category" in updates:
            updates["category"] = normalize_category(updates["category"])
        Ex = Query()
        with self._lock:
            if not self.table.contains(Ex.id == record_id):
                return None
            if updates:
                self.table.update(updates, Ex.id == record_id)
            doc = self.table.get(Ex.id == record_id)
        return Expense(**doc)

    def delete_one(self, record_id: str) -> bool:
        Ex = Query()
        with self._lock:
            removed = self.table.remove(Ex.id == record_id)
        return len(removed) == 1

    def aggregate_sum(self, flt: ExpenseFilter) -> tuple[float, int]:
        """(total amount, number of expenses) over the filter."""
        with self._lock:
            docs = self.table.search(self._condition(flt))
        return sum(doc.get("amount") or 0 for doc in docs), len(docs)
