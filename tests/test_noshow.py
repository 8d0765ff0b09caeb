from datetime import date

import pytest
import redis
from fastapi import HTTPException

from barbersmart.cache import Cache
from barbersmart.domain.conversations.store import ConversationStore
from barbersmart.domain.noshow.service import (
    STEP_AWAITING_CHOICE,
    STEP_AWAITING_CONFIRMATION,
    NoShowRecoveryService,
    SuggestedSlot,
    format_day,
)
from barbersmart.domain.noshow.settings import (
    ClientNotificationPreferences,
    NoShowRescheduleSettings,
    NotificationSettings,
)
from barbersmart.models import Appointment, Client

FRIDAY = date(2025, 1, 10)
SATURDAY = date(2025, 1, 11)


class UnwritableRedis:
    def get(self, key):
        return None

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("connection reset")


@pytest.fixture
def no_show(db, shop):
    client = Client(barbershop_id=shop.barbershop.id, name="João Silva", phone="(11) 99999-8888")
    db.add(client)
    db.flush()
    appointment = Appointment(
        barbershop_id=shop.barbershop.id,
        staff_id=shop.staff.id,
        client_id=client.id,
        service_id=shop.service.id,
        date=FRIDAY,
        time="15:00",
        duration=30,
        status="no_show",
    )
    db.add(appointment)
    db.commit()
    return appointment


class TestSettings:
    def test_defaults(self):
        settings = NotificationSettings.from_barbershop_settings(None)
        assert settings.no_show_reschedule == NoShowRescheduleSettings(True, 3, 7)

    def test_partial_override_keeps_sibling_defaults(self):
        settings = NotificationSettings.from_barbershop_settings(
            {"notification_config": {"no_show_reschedule": {"max_suggestions": 5}}}
        )
        assert settings.no_show_reschedule == NoShowRescheduleSettings(True, 5, 7)

    def test_garbage_values_fall_back(self):
        settings = NoShowRescheduleSettings.from_raw({"max_suggestions": "lots", "search_days": -1})
        assert (settings.max_suggestions, settings.search_days) == (3, 7)

    def test_client_preferences_only_explicit_false_opts_out(self):
        client = Client(name="A", notification_enabled=True, notification_types=None)
        assert ClientNotificationPreferences.from_client(client).no_show_reschedule
        client.notification_types = {"no_show_reschedule": False}
        assert not ClientNotificationPreferences.from_client(client).no_show_reschedule


def test_format_day():
    assert format_day(date(2025, 1, 15)) == "Wednesday, 15 Jan"


class TestBuildSuggestions:
    def test_suggests_next_open_slots(self, db, shop, store, no_show):
        result = NoShowRecoveryService(db, store=store).build_suggestions(shop.barbershop.id, today=FRIDAY)

        assert result.processed == 1
        assert result.skipped == {}
        suggestion = result.suggestions[0]
        assert suggestion.appointment_id == no_show.id
        assert [(s.date, s.time) for s in suggestion.slots] == [
            (SATURDAY, "09:00"),
            (SATURDAY, "09:30"),
            (SATURDAY, "10:00"),
        ]
        assert "1. Saturday, 11 Jan at 09:00" in suggestion.message
        assert suggestion.message.startswith("Hi João!")
        assert "15:00" in suggestion.message

    def test_respects_tenant_max_suggestions(self, db, shop, store, no_show):
        shop.barbershop.settings = {"notification_config": {"no_show_reschedule": {"max_suggestions": 1}}}
        db.commit()
        result = NoShowRecoveryService(db, store=store).build_suggestions(shop.barbershop.id, today=FRIDAY)
        assert len(result.suggestions[0].slots) == 1

    def test_tenant_disabled(self, db, shop, store, no_show):
        shop.barbershop.settings = {"notification_config": {"no_show_reschedule": {"enabled": False}}}
        db.commit()
        result = NoShowRecoveryService(db, store=store).build_suggestions(shop.barbershop.id, today=FRIDAY)
        assert result.suggestions == []
        assert result.skipped == {no_show.id: "barbershop disabled no-show reschedule"}

    def test_client_opted_out(self, db, shop, store, no_show):
        no_show.client.notification_types = {"no_show_reschedule": False}
        db.commit()
        result = NoShowRecoveryService(db, store=store).build_suggestions(shop.barbershop.id, today=FRIDAY)
        assert result.skipped[no_show.id] == "client opted out of no-show reschedule"

    def test_client_without_phone(self, db, shop, store, no_show):
        no_show.client.phone = None
        db.commit()
        result = NoShowRecoveryService(db, store=store).build_suggestions(shop.barbershop.id, today=FRIDAY)
        assert result.skipped[no_show.id] == "client has no phone"

    def test_already_suggested_is_not_picked_again(self, db, shop, store, no_show):
        service = NoShowRecoveryService(db, store=store)
        service.mark_delivered(shop.barbershop.id, no_show.id, [SuggestedSlot(SATURDAY, "09:00", "Saturday")])
        assert service.build_suggestions(shop.barbershop.id, today=FRIDAY).processed == 0


class TestDeliveryAndReply:
    def offer(self, db, shop, store, no_show):
        service = NoShowRecoveryService(db, store=store)
        slots = [
            SuggestedSlot(SATURDAY, "09:00", "Saturday, 11 Jan at 09:00"),
            SuggestedSlot(SATURDAY, "09:30", "Saturday, 11 Jan at 09:30"),
        ]
        service.mark_delivered(shop.barbershop.id, no_show.id, slots)
        return service

    def test_mark_delivered_stores_context(self, db, shop, store, no_show):
        self.offer(db, shop, store, no_show)

        assert no_show.reschedule_suggested_at is not None
        context = store.get(shop.barbershop.id, "11999998888")
        assert context.step == STEP_AWAITING_CHOICE
        assert context.data["appointment_id"] == no_show.id
        assert len(context.data["slots"]) == 2

    def test_reply_selects_slot(self, db, shop, store, no_show):
        service = self.offer(db, shop, store, no_show)

        appointment_id, slot = service.resolve_reply(shop.barbershop.id, "+55 11 99999-8888", " 2 ")

        assert appointment_id == no_show.id
        assert (slot.date, slot.time) == (SATURDAY, "09:30")
        context = store.get(shop.barbershop.id, "11999998888")
        assert context.step == STEP_AWAITING_CONFIRMATION
        assert context.data["selected_slot"]["time"] == "09:30"

    @pytest.mark.parametrize("message", ["3", "0", "yes", "12"])
    def test_reply_not_matching_an_offer(self, db, shop, store, no_show, message):
        service = self.offer(db, shop, store, no_show)
        assert service.resolve_reply(shop.barbershop.id, "11999998888", message) is None

    def test_reply_selects_two_digit_slot(self, db, shop, store, no_show):
        service = NoShowRecoveryService(db, store=store)
        slots = [SuggestedSlot(SATURDAY, f"{9 + i // 2:02d}:{30 * (i % 2):02d}", f"slot {i + 1}") for i in range(10)]
        service.mark_delivered(shop.barbershop.id, no_show.id, slots)

        appointment_id, slot = service.resolve_reply(shop.barbershop.id, "11999998888", "10")

        assert appointment_id == no_show.id
        assert slot.formatted == "slot 10"
        assert slot.time == "13:30"

    def test_mark_delivered_fails_when_offer_cannot_be_stored(self, db, shop, no_show):
        broken = ConversationStore(backend=Cache(client=UnwritableRedis()))
        service = NoShowRecoveryService(db, store=broken)

        with pytest.raises(HTTPException) as exc:
            service.mark_delivered(shop.barbershop.id, no_show.id, [SuggestedSlot(SATURDAY, "09:00", "Saturday")])

        assert exc.value.status_code == 503
        db.refresh(no_show)
        assert no_show.reschedule_suggested_at is None
        assert service.build_suggestions(shop.barbershop.id, today=FRIDAY).processed == 1

    def test_reply_without_offer(self, db, shop, store):
        assert NoShowRecoveryService(db, store=store).resolve_reply(shop.barbershop.id, "11999998888", "1") is None

    def test_mark_delivered_unknown_appointment(self, db, shop, store):
        with pytest.raises(HTTPException) as exc:
            NoShowRecoveryService(db, store=store).mark_delivered(shop.barbershop.id, 999, [])
        assert exc.value.status_code == 404


class TestNoShowApi:
    def url(self, shop, path):
        return f"/barbershops/{shop.barbershop.id}/no-show{path}"

    def test_suggestions(self, client, shop, no_show):
        response = client.get(self.url(shop, "/suggestions"), params={"today": "2025-01-10"})
        assert response.status_code == 200
        body = response.json()
        assert (body["processed"], body["suggested"], body["skipped"]) == (1, 1, 0)
        assert body["suggestions"][0]["slots"][0] == {
            "date": "2025-01-11",
            "time": "09:00",
            "formatted": "Saturday, 11 Jan at 09:00",
        }

    def test_delivered_then_reply(self, client, shop, no_show):
        response = client.post(
            self.url(shop, f"/appointments/{no_show.id}/delivered"),
            json={"slots": [{"date": "2025-01-11", "time": "09:00", "formatted": "Saturday, 11 Jan at 09:00"}]},
        )
        assert response.status_code == 200
        assert response.json()["appointment_id"] == no_show.id

        reply = client.post(self.url(shop, "/replies"), json={"phone": "11999998888", "message": "1"}).json()
        assert reply["matched"] is True
        assert reply["appointment_id"] == no_show.id
        assert reply["slot"]["time"] == "09:00"

    def test_delivered_requires_slots(self, client, shop, no_show):
        response = client.post(self.url(shop, f"/appointments/{no_show.id}/delivered"), json={"slots": []})
        assert response.status_code == 422

    def test_unrelated_reply(self, client, shop):
        reply = client.post(self.url(shop, "/replies"), json={"phone": "11999998888", "message": "hello"}).json()
        assert reply == {"matched": False, "appointment_id": None, "slot": None}
