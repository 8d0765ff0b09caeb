"""No-show repository - Missed appointments awaiting a reschedule offer"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import NO_SHOW_STATUS, Appointment


class NoShowRepository:
    @staticmethod
    def get_pending_no_shows(db: Session, barbershop_id: Optional[int], limit: int) -> list[Appointment]:
        """No-shows with no suggestion sent yet, most recent first"""
        query = (
            db.query(Appointment)
            .options(
                joinedload(Appointment.client),
                joinedload(Appointment.service),
                joinedload(Appointment.barbershop),
            )
            .filter(
                Appointment.status == NO_SHOW_STATUS,
                Appointment.reschedule_suggested_at.is_(None),
            )
        )
        if barbershop_id is not None:
            query = query.filter(Appointment.barbershop_id == barbershop_id)
        return query.order_by(Appointment.date.desc(), Appointment.time.desc()).limit(limit).all()

    @staticmethod
    def get_appointment(db: Session, barbershop_id: int, appointment_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.barbershop_id == barbershop_id)
            .first()
        )

    @staticmethod
    def mark_suggested(db: Session, appointment: Appointment, when: datetime) -> Appointment:
        appointment.reschedule_suggested_at = when
        db.commit()
        db.refresh(appointment)
        return appointment
