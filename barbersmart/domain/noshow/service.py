"""No-show recovery service - Reschedule offers for missed appointments"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import BUSINESS_TIMEZONE, NO_SHOW_BATCH_LIMIT
from ...models import NO_SHOW_STATUS, Appointment
from ..availability.service import AvailabilityService, OpenSlot
from ..conversations.store import ConversationContext, ConversationStore
from .repository import NoShowRepository
from .settings import ClientNotificationPreferences, NotificationSettings

logger = logging.getLogger(__name__)

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

STEP_AWAITING_CHOICE = "awaiting_reschedule_choice"
STEP_AWAITING_CONFIRMATION = "awaiting_reschedule_confirmation"

REPLY_PATTERN = re.compile(r"^\s*(\d+)\s*$")


@dataclass(frozen=True)
class SuggestedSlot:
    date: date
    time: str
    formatted: str

    @classmethod
    def from_open_slot(cls, slot: OpenSlot) -> "SuggestedSlot":
        return cls(date=slot.date, time=slot.time, formatted=f"{format_day(slot.date)} at {slot.time}")

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "time": self.time, "formatted": self.formatted}

    @classmethod
    def from_dict(cls, raw: dict) -> "SuggestedSlot":
        return cls(date=date.fromisoformat(raw["date"]), time=raw["time"], formatted=raw.get("formatted", ""))


@dataclass
class RescheduleSuggestion:
    appointment_id: int
    client_id: int
    phone: str
    slots: list[SuggestedSlot]
    message: str


@dataclass
class NoShowRunResult:
    processed: int = 0
    suggestions: list[RescheduleSuggestion] = field(default_factory=list)
    skipped: dict[int, str] = field(default_factory=dict)  # appointment id -> reason


def format_day(target: date) -> str:
    """e.g. ``Wednesday, 15 Jan``"""
    return f"{DAY_NAMES[target.weekday()]}, {target.day} {MONTH_NAMES[target.month - 1]}"


def build_reschedule_message(client_name: Optional[str], missed_time: str, slots: list[SuggestedSlot], barbershop_name: str) -> str:
    first_name = (client_name or "").split(" ")[0] or "there"
    options = "\n".join(f"{index}. {slot.formatted}" for index, slot in enumerate(slots, start=1))
    return (
        f"Hi {first_name}! 👋\n\n"
        f"We missed you today at {missed_time[:5]}.\n\n"
        f"Would you like to reschedule? These times are open:\n\n"
        f"{options}\n\n"
        f"Reply with the number of the time you want, or get in touch for other options.\n\n"
        f"See you soon! 💈\n\n"
        f"_{barbershop_name}_"
    )


def business_today() -> date:
    return datetime.now(ZoneInfo(BUSINESS_TIMEZONE)).date()


class NoShowRecoveryService:
    """Service layer for no-show reschedule suggestions"""

    def __init__(self, db: Session, store: Optional[ConversationStore] = None):
        self.db = db
        self.repo = NoShowRepository()
        self.availability = AvailabilityService(db)
        self.store = store or ConversationStore()

    def skip_reason(self, appointment: Appointment, settings: NotificationSettings) -> Optional[str]:
        """Why no suggestion should go out for this appointment, if any"""
        client = appointment.client
        if client is None:
            return "no client"

        preferences = ClientNotificationPreferences.from_client(client)
        if not preferences.enabled:
            return "client notifications disabled"
        if not preferences.no_show_reschedule:
            return "client opted out of no-show reschedule"
        if not settings.no_show_reschedule.enabled:
            return "barbershop disabled no-show reschedule"
        if not client.phone:
            return "client has no phone"
        return None

    def build_suggestions(self, barbershop_id: Optional[int] = None, today: Optional[date] = None) -> NoShowRunResult:
        """
        Find open slots for recent no-shows and compose the offer messages.
        Delivery is left to the messaging layer, which reports back through
        ``mark_delivered``.
        """
        today = today or business_today()
        appointments = self.repo.get_pending_no_shows(self.db, barbershop_id, NO_SHOW_BATCH_LIMIT)
        logger.info(f"🔍 Found {len(appointments)} no-show appointments to process")

        result = NoShowRunResult(processed=len(appointments))
        for appointment in appointments:
            settings = NotificationSettings.from_barbershop_settings(appointment.barbershop.settings)
            reason = self.skip_reason(appointment, settings)
            if reason:
                logger.info(f"⏭️ Skipping appointment {appointment.id}: {reason}")
                result.skipped[appointment.id] = reason
                continue

            duration = (appointment.service.duration if appointment.service else None) or appointment.duration or 30
            open_slots = self.availability.find_next_open_slots(
                appointment.barbershop_id,
                appointment.staff_id,
                duration,
                today,
                max_slots=settings.no_show_reschedule.max_suggestions,
                days_to_search=settings.no_show_reschedule.search_days,
                unit_id=appointment.unit_id,
            )
            if not open_slots:
                logger.info(f"⏭️ No open slots for appointment {appointment.id}")
                result.skipped[appointment.id] = "no open slots"
                continue

            slots = [SuggestedSlot.from_open_slot(slot) for slot in open_slots]
            result.suggestions.append(
                RescheduleSuggestion(
                    appointment_id=appointment.id,
                    client_id=appointment.client.id,
                    phone=appointment.client.phone,
                    slots=slots,
                    message=build_reschedule_message(
                        appointment.client.name, appointment.time, slots, appointment.barbershop.name
                    ),
                )
            )

        logger.info(
            f"✅ No-show run: {len(result.suggestions)} suggestions, {len(result.skipped)} skipped"
        )
        return result

    def mark_delivered(self, barbershop_id: int, appointment_id: int, slots: list[SuggestedSlot]) -> Appointment:
        """Record that the offer went out and remember the offered slots for the reply"""
        appointment = self.repo.get_appointment(self.db, barbershop_id, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        if appointment.status != NO_SHOW_STATUS:
            raise HTTPException(status_code=400, detail="Appointment is not a no-show")
        if not appointment.client or not appointment.client.phone:
            raise HTTPException(status_code=400, detail="Client has no phone")

        saved = self.store.save(
            barbershop_id,
            appointment.client.phone,
            ConversationContext(
                step=STEP_AWAITING_CHOICE,
                data={"appointment_id": appointment.id, "slots": [slot.to_dict() for slot in slots]},
            ),
        )
        if not saved:
            logger.error(f"❌ Could not store reschedule offer for appointment {appointment.id}")
            raise HTTPException(status_code=503, detail="Conversation store unavailable, offer not recorded")
        return self.repo.mark_suggested(self.db, appointment, datetime.now(timezone.utc).replace(tzinfo=None))

    def resolve_reply(self, barbershop_id: int, phone: str, message: str) -> Optional[tuple[int, SuggestedSlot]]:
        """
        Match a client reply against the slots offered to them.

        Returns ``(appointment_id, slot)`` when the reply is the number of one
        of the offered slots, ``None`` when it is not a reschedule reply.
        """
        match = REPLY_PATTERN.match(message or "")
        if not match:
            return None

        context = self.store.get(barbershop_id, phone)
        if context is None or context.step != STEP_AWAITING_CHOICE:
            return None

        slots = context.data.get("slots") or []
        choice = int(match.group(1))
        if not 1 <= choice <= len(slots):
            return None

        selected = SuggestedSlot.from_dict(slots[choice - 1])
        context.step = STEP_AWAITING_CONFIRMATION
        context.data["selected_slot"] = selected.to_dict()
        self.store.save(barbershop_id, phone, context)

        logger.info(f"📩 Client chose slot {choice} for appointment {context.data.get('appointment_id')}")
        return context.data.get("appointment_id"), selected
