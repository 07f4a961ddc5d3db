from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class Expense(BaseModel):
    id: str | None = None
    conversation_id: str
    message_id: str | None = None
    timestamp: datetime
    amount: float
    currency: str = "BRL"
    category: str
    payer: str | None = None
    original_text: str = ""

    @property
    def short_id(self) -> str:
        return (self.id or "")[-6:].lower()


class ParsedRecord(BaseModel):
    category: str
    amount: float


class PeriodWindow(BaseModel):
    start: datetime
    end: datetime
    label: str


class ExpenseFilter(BaseModel):
    """Storage-agnostic selection of expenses, always scoped to a conversation."""

    conversation_id: str | None
    record_id: str | None = None
    category: str | None = None
    payer: str | None = None
    start: datetime | None = None
    end: datetime | None = None


# Admin commands: one tagged variant per template


class ListCategory(BaseModel):
    op: Literal["list_category"] = "list_category"
    category: str


class MoveCategory(BaseModel):
    op: Literal["move_category"] = "move_category"
    ref: str
    category: str


class ChangeAmount(BaseModel):
    op: Literal["change_amount"] = "change_amount"
    ref: str
    amount: str


class DeleteRecord(BaseModel):
    op: Literal["delete"] = "delete"
    ref: str


AdminCommand = ListCategory | MoveCategory | ChangeAmount | DeleteRecord


# Classifier oracle


class ClassificationFilters(BaseModel):
    category: str | None = None
    payer: str | None = None
    start: str | None = None
    end: str | None = None


class Classification(BaseModel):
    action: Literal["record", "query", "other"] = "other"
    amount: float | str | None = None
    currency: str | None = "BRL"
    category: str | None = None
    notes: str | None = None
    date: str | None = None
    filters: ClassificationFilters = Field(default_factory=ClassificationFilters)

    @field_validator("filters", mode="before")
    @classmethod
    def _null_filters(cls, value):
        return {} if value is None else value


class OracleResult(BaseModel):
    """Either a classification or the reason the oracle call failed."""

    classification: Classification | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.classification is not None

    @classmethod
    def success(cls, classification: Classification) -> "OracleResult":
        return cls(classification=classification)

    @classmethod
    def failure(cls, reason: str) -> "OracleResult":
        return cls(error=reason)


# Transport


class IncomingMessage(BaseModel):
    conversation_id: str
    sender_id: str | None = None
    text: str = ""
    is_from_self: bool = False
    is_group: bool = True
    message_id: str | None = None


class MessageReply(BaseModel):
    conversation_id: str
    replies: list[str]
