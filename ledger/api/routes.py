from fastapi import APIRouter
from loguru import logger

from ledger.deps import interpreter, queries
from ledger.models.schemas import Expense, IncomingMessage, MessageReply
from ledger.parsing.categories import normalize_category

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/messages", response_model=MessageReply)
def receive_message(message: IncomingMessage):
    """Entry point for chat gateways (e.g. a WhatsApp relay) that post each message."""
    logger.info("Gateway message in {}: {}", message.conversation_id, message.text)
    replies = interpreter.handle(message)
    return MessageReply(conversation_id=message.conversation_id, replies=replies)


@router.get("/conversations/{conversation_id}/expenses", response_model=list[Expense])
def list_expenses(
    conversation_id: str,
    category: str | None = None,
    payer: str | None = None,
    period: str | None = None,
):
    """Expenses of one conversation, current month unless `period` names another."""
    canonical = normalize_category(category) if category else None
    flt, _ = queries.build(conversation_id, period, canonical, payer)
    return queries.repo.find(flt, limit=queries.max_rows)
