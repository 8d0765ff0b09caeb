"""Availability repository - Read-only queries for schedule sources and bookings"""

from datetime import date
from typing import Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import (
    BOOKED_STATUSES,
    Appointment,
    Barbershop,
    BlockedDate,
    BusinessHours,
    SpecialHours,
    Staff,
)


class AvailabilityRepository:
    """Repository for schedule source queries, always scoped by barbershop"""

    @staticmethod
    def get_barbershop(db: Session, barbershop_id: int) -> Optional[Barbershop]:
        return db.query(Barbershop).filter(Barbershop.id == barbershop_id).first()

    @staticmethod
    def get_business_hours(db: Session, barbershop_id: int, unit_id: Optional[int] = None) -> list[BusinessHours]:
        """Barbershop-wide rows, plus the unit's own rows when a unit is given"""
        query = db.query(BusinessHours).filter(BusinessHours.barbershop_id == barbershop_id)
        if unit_id is not None:
            query = query.filter(
                or_(BusinessHours.unit_id.is_(None), BusinessHours.unit_id == unit_id)
            )
        else:
            query = query.filter(BusinessHours.unit_id.is_(None))
        return query.order_by(BusinessHours.day_of_week).all()

    @staticmethod
    def get_special_hours(
        db: Session,
        barbershop_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[SpecialHours]:
        query = db.query(SpecialHours).filter(SpecialHours.barbershop_id == barbershop_id)
        if start_date:
            query = query.filter(SpecialHours.special_date >= start_date)
        if end_date:
            query = query.filter(SpecialHours.special_date <= end_date)
        return query.all()

    @staticmethod
    def get_blocked_dates(
        db: Session,
        barbershop_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[date]:
        query = db.query(BlockedDate.blocked_date).filter(BlockedDate.barbershop_id == barbershop_id)
        if start_date:
            query = query.filter(BlockedDate.blocked_date >= start_date)
        if end_date:
            query = query.filter(BlockedDate.blocked_date <= end_date)
        return [row.blocked_date for row in query.all()]

    @staticmethod
    def get_staff_schedules(db: Session, barbershop_id: int) -> dict[int, Optional[dict]]:
        """Schedules of active staff, keyed by staff id"""
        rows = (
            db.query(Staff.id, Staff.schedule)
            .filter(Staff.barbershop_id == barbershop_id, Staff.active.is_(True))
            .all()
        )
        return {row.id: row.schedule for row in rows}

    @staticmethod
    def get_staff(db: Session, barbershop_id: int, staff_id: int) -> Optional[Staff]:
        return (
            db.query(Staff)
            .filter(Staff.id == staff_id, Staff.barbershop_id == barbershop_id)
            .first()
        )

    @staticmethod
    def get_booked_appointments(
        db: Session,
        barbershop_id: int,
        staff_id: Optional[int],
        dates: Iterable[date],
    ) -> list[Appointment]:
        """Appointments occupying the staff member's time on any of the given dates"""
        dates = list(dates)
        if not dates:
            return []

        query = db.query(Appointment).filter(
            Appointment.barbershop_id == barbershop_id,
            Appointment.date.in_(dates),
            Appointment.status.in_(BOOKED_STATUSES),
        )
        if staff_id is not None:
            query = query.filter(Appointment.staff_id == staff_id)
        return query.order_by(Appointment.date, Appointment.time).all()
