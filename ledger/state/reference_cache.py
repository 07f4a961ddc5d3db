"""
Per-conversation memory of the last listing shown to the user.

Lets "apagar #1" or "alterar c67f04 para 12,90" find the record the user saw.
"""
import re
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from loguru import logger

_ORDINAL = re.compile(r"^#(\d+)$")
_SHORT_ID = re.compile(r"^[a-f0-9]{6}$", re.IGNORECASE)
_FULL_ID = re.compile(r"^[a-f0-9]{24}$", re.IGNORECASE)


@dataclass
class CachedListing:
    created_at: float
    record_ids: list[str] = field(default_factory=list)


class ReferenceCache:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CachedListing] = {}
        self._lock = threading.Lock()

    def store(self, conversation_id: str, record_ids: Sequence[str]) -> None:
        """Replace the conversation's listing, valid or not."""
        with self._lock:
            self._entries[conversation_id] = CachedListing(
                created_at=self._clock(), record_ids=list(record_ids)
            )

    def get(self, conversation_id: str) -> list[str] | None:
        with self._lock:
            entry = self._entries.get(conversation_id)
            if entry is None:
                return None
            if self._clock() - entry.created_at > self.ttl_seconds:
                del self._entries[conversation_id]
                logger.debug("Listing cache expired for {}", conversation_id)
                return None
            return list(entry.record_ids)

    def evict(self, conversation_id: str) -> None:
        with self._lock:
            self._entries.pop(conversation_id, None)

    def resolve(self, conversation_id: str, ref: str | None) -> str | None:
        """Turn "#n", a 6-char short id or a full id into a record id."""
        if not ref:
            return None
        ref = ref.strip()

        m = _ORDINAL.match(ref)
        if m:
            index = int(m.group(1)) - 1
            ids = self.get(conversation_id) or []
            if 0 <= index < len(ids):
                return ids[index]
            return None

        if _SHORT_ID.match(ref):
            # Only the last listing is searched, never the whole store
            short = ref.lower()
            for record_id in self.get(conversation_id) or []:
                if record_id.lower()[-6:] == short:
                    return record_id
            return None

        if _FULL_ID.match(ref):
            return ref.lower()

        return None
