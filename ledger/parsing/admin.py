"""
Grammar for the edit/delete commands users send after a listing.

Each template is an independent matcher returning a tagged command or None.
They are evaluated in ``ADMIN_MATCHERS`` order and the first hit wins. The
parser only extracts syntax: references are resolved later against the
reference cache.
"""
import re
from collections.abc import Callable

from ledger.models.schemas import (
    AdminCommand,
    ChangeAmount,
    DeleteRecord,
    ListCategory,
    MoveCategory,
)
from ledger.parsing.categories import FALLBACK_CATEGORY

# "#3", "c67f04", "65f1c0e2a9b3d4e5f6a7b8c9", optionally written as "id c67f04" / "id:c67f04"
REF = r"(?:id\s*:?\s*)?(#\d+|[a-f0-9]{24}\b|[a-f0-9]{6}\b)"

_SHORTCUT_LIST = re.compile(
    r"(?:mostrar|mostra|listar|liste|lista|todos|todas).*\bgastos?\b.*\b(?:diversos|outros|misc)\b"
)
_MOVE = re.compile(rf"\b(?:mover|mudar|trocar|colocar)\s+{REF}\s+(?:para|pra)\s+(.+)$")
_MOVE_BY_ORDINAL = re.compile(r"\bgasto\s+(#\d+)\b.*(?:categoria|para)\s+(.+)$")
_CHANGE_AMOUNT = re.compile(
    rf"\b(?:alterar|editar|mudar)\s+{REF}\s+(?:valor\s+)?(?:para\s+|pra\s+|=\s*)?(?:r\$\s*)?(-?[\d.,]*\d)"
)
_DELETE = re.compile(rf"\b(?:apagar|excluir|deletar|remover)\s+{REF}")

_NUMERIC_OPERAND = re.compile(r"^(?:r\$\s*)?-?[\d.,]*\d$")


def _clean_operand(value: str) -> str:
    return value.strip().rstrip(".!?").strip()


def _match_shortcut(s: str) -> ListCategory | None:
    if _SHORTCUT_LIST.search(s):
        return ListCategory(category=FALLBACK_CATEGORY)
    return None


def _match_move(s: str) -> MoveCategory | None:
    m = _MOVE.search(s) or _MOVE_BY_ORDINAL.search(s)
    if not m:
        return None
    category = _clean_operand(m.group(2))
    # "mudar #2 para 12,90" changes the amount, not the category
    if not category or _NUMERIC_OPERAND.match(category):
        return None
    return MoveCategory(ref=m.group(1), category=category)


def _match_change_amount(s: str) -> ChangeAmount | None:
    m = _CHANGE_AMOUNT.search(s)
    if not m:
        return None
    return ChangeAmount(ref=m.group(1), amount=m.group(2))


def _match_delete(s: str) -> DeleteRecord | None:
    m = _DELETE.search(s)
    if not m:
        return None
    return DeleteRecord(ref=m.group(1))


ADMIN_MATCHERS: tuple[Callable[[str], AdminCommand | None], ...] = (
    _match_shortcut,
    _match_move,
    _match_change_amount,
    _match_delete,
)


def parse_admin_command(text: str | None) -> AdminCommand | None:
    if not text:
        return None
    s = text.lower().strip()
    for matcher in ADMIN_MATCHERS:
        command = matcher(s)
        if command is not None:
            return command
    return None
