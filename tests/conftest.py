import os

# Must be set before barbersmart.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from types import SimpleNamespace

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from barbersmart.cache import Cache
from barbersmart.database import Base, get_db
from barbersmart.domain.conversations.store import ConversationStore
from barbersmart.domain.noshow.router import get_no_show_service
from barbersmart.domain.noshow.service import NoShowRecoveryService
from barbersmart.main import app
from barbersmart.models import Barbershop, BusinessHours, Service, Staff


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def store(fake_redis):
    return ConversationStore(backend=Cache(client=fake_redis))


@pytest.fixture
def shop(db):
    """
    A barbershop open Monday-Friday 09:00-18:00 with a 12:00-13:00 break,
    Saturday 09:00-13:00, closed Sunday. One staff member without an
    individual schedule and one 30-minute service.
    """
    barbershop = Barbershop(name="Navalha de Ouro", settings={})
    db.add(barbershop)
    db.flush()

    for day in range(1, 6):
        db.add(
            BusinessHours(
                barbershop_id=barbershop.id,
                day_of_week=day,
                is_open=True,
                open_time="09:00",
                close_time="18:00",
                break_start="12:00",
                break_end="13:00",
            )
        )
    db.add(
        BusinessHours(
            barbershop_id=barbershop.id, day_of_week=6, is_open=True, open_time="09:00", close_time="13:00"
        )
    )
    db.add(BusinessHours(barbershop_id=barbershop.id, day_of_week=0, is_open=False))

    staff = Staff(barbershop_id=barbershop.id, name="Carlos", schedule=None)
    service = Service(barbershop_id=barbershop.id, name="Corte", duration=30, price=45.0)
    db.add_all([staff, service])
    db.commit()

    return SimpleNamespace(barbershop=barbershop, staff=staff, service=service)


@pytest.fixture
def client(db, store):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_no_show_service] = lambda: NoShowRecoveryService(db, store=store)
    yield TestClient(app)
    app.dependency_overrides.clear()
