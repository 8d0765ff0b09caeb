import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Appointment statuses that occupy a staff member's time
BOOKED_STATUSES = ("pending", "scheduled", "confirmed")
NO_SHOW_STATUS = "no_show"


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class Barbershop(Base):
    """Tenant - the unit of data isolation"""

    __tablename__ = "barbershops"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    name = Column(String(255), nullable=False)
    # Free-form tenant settings, e.g. {"notification_config": {"no_show_reschedule": {"enabled": true}}}
    settings = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    units = relationship("Unit", back_populates="barbershop", cascade="all, delete-orphan")
    staff = relationship("Staff", back_populates="barbershop", cascade="all, delete-orphan")


class Unit(Base):
    """Physical location belonging to a barbershop"""

    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    barbershop_id = Column(Integer, ForeignKey("barbershops.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)

    barbershop = relationship("Barbershop", back_populates="units")


class BusinessHours(Base):
    """Recurring weekly opening hours, one row per weekday (0=Sunday .. 6=Saturday)"""

    __tablename__ = "business_hours"
    __table_args__ = (
        UniqueConstraint("barbershop_id", "unit_id", "day_of_week", name="uq_business_hours_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    barbershop_id = Column(Integer, ForeignKey("barbershops.id"), nullable=False, index=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True)  # null = whole barbershop
    day_of_week = Column(Integer, nullable=False)
    is_open = Column(Boolean, default=True, nullable=False)
    open_time = Column(String(5), nullable=False, default="09:00")  # HH:MM
    close_time = Column(String(5), nullable=False, default="18:00")
    break_start = Column(String(5), nullable=True)
    break_end = Column(String(5), nullable=True)


class SpecialHours(Base):
    """One-off override for an exact date (holiday, custom hours)"""

    __tablename__ = "special_hours"

    id = Column(Integer, primary_key=True, index=True)
    barbershop_id = Column(Integer, ForeignKey("barbershops.id"), nullable=False, index=True)
    special_date = Column(Date, nullable=False, index=True)
    is_open = Column(Boolean, default=False, nullable=False)
    open_time = Column(String(5), nullable=True)
    close_time = Column(String(5), nullable=True)
    break_start = Column(String(5), nullable=True)
    break_end = Column(String(5), nullable=True)
    description = Column(String(255), nullable=True)


class BlockedDate(Base):
    """Hard closure - no bookings at all on this date"""

    __tablename__ = "blocked_dates"

    id = Column(Integer, primary_key=True, index=True)
    barbershop_id = Column(Integer, ForeignKey("barbershops.id"), nullable=False, index=True)
    blocked_date = Column(Date, nullable=False, index=True)
    reason = Column(String(255), nullable=True)


class Staff(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True)
    barbershop_id = Column(Integer, ForeignKey("barbershops.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    # Individual working hours:
    # {"monday": {"enabled": true, "start": "09:00", "end": "18:00", "break_start": null, "break_end": null}, ...}
    # optionally with per-unit overrides: {"units": {"<unit_id>": {"monday": {...}, ...}}}
    schedule = Column(JSON, nullable=True)

    barbershop = relationship("Barbershop", back_populates="staff")


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    barbershop_id = Column(Integer, ForeignKey("barbershops.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    notification_enabled = Column(Boolean, default=True, nullable=False)
    # Per-type opt outs, e.g. {"no_show_reschedule": false}
    notification_types = Column(JSON, nullable=True)


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    barbershop_id = Column(Integer, ForeignKey("barbershops.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    duration = Column(Integer, nullable=False, default=30)  # minutes
    price = Column(Float, nullable=True)


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    barbershop_id = Column(Integer, ForeignKey("barbershops.id"), nullable=False, index=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)  # HH:MM
    duration = Column(Integer, nullable=True)  # minutes
    status = Column(String(50), default="scheduled")  # pending, scheduled, confirmed, completed, cancelled, no_show
    reschedule_suggested_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client")
    service = relationship("Service")
    barbershop = relationship("Barbershop")
