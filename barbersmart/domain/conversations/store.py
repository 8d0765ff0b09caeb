"""
Conversation context store.

Short-lived per-conversation state (for example, the reschedule slots
offered to a client) keyed by barbershop and phone number, kept in Redis
with a TTL so it survives restarts and is shared between instances.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from ...cache import Cache, cache
from ...config import CONVERSATION_TTL_SECONDS
from ...shared.validators import normalize_br_phone

logger = logging.getLogger(__name__)


@dataclass
class ConversationContext:
    step: str = "idle"
    data: dict[str, Any] = field(default_factory=dict)


def conversation_key(barbershop_id: int, phone: str) -> str:
    return f"conversation:{barbershop_id}:{normalize_br_phone(phone)}"


class ConversationStore:
    def __init__(self, backend: Optional[Cache] = None, ttl: int = CONVERSATION_TTL_SECONDS):
        self.backend = backend or cache
        self.ttl = ttl

    def get(self, barbershop_id: int, phone: str) -> Optional[ConversationContext]:
        raw = self.backend.get(conversation_key(barbershop_id, phone))
        if not isinstance(raw, dict):
            return None
        return ConversationContext(step=raw.get("step", "idle"), data=raw.get("data") or {})

    def save(self, barbershop_id: int, phone: str, context: ConversationContext) -> bool:
        saved = self.backend.set(conversation_key(barbershop_id, phone), asdict(context), self.ttl)
        if not saved:
            logger.warning(f"⚠️ Conversation context for barbershop {barbershop_id} was not saved")
        return saved
