"""Shared test fixtures: in-memory database, API client, demo shop."""

import os

# Must be set before grooming.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from grooming.database import get_db
from grooming.main import app
from grooming.models.generated import (
    Base,
    Bookings as DBBookings,
    Services as DBServices,
    Shops as DBShops,
)

MONDAY = "2030-01-07"
SUNDAY = "2030-01-06"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def shop(db):
    obj = DBShops(
        name="정리하개 강남점",
        slug="gangnam",
        phone="02-123-4567",
        address="서울 강남구 테헤란로 123",
        is_approved=1,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def services(db, shop):
    rows = [
        DBServices(shop_id=shop.id, name="전체미용", duration=120, price=50000),
        DBServices(shop_id=shop.id, name="부분미용", duration=60, price=30000),
        DBServices(shop_id=shop.id, name="목욕", duration=60, price=20000),
    ]
    db.add_all(rows)
    db.commit()
    for row in rows:
        db.refresh(row)
    return {"full": rows[0], "partial": rows[1], "bath": rows[2]}


@pytest.fixture
def owner_headers(shop):
    return {"X-Shop-Id": str(shop.id)}


def make_booking(
    db,
    shop,
    service,
    date: str = MONDAY,
    time: str = "10:00",
    status: str = "pending",
    phone: str = "01012345678",
    name: str = "김철수",
    customer=None,
) -> DBBookings:
    """Insert a booking row directly, bypassing the API."""
    booking = DBBookings(
        shop_id=shop.id,
        service_id=service.id,
        customer_id=customer.id if customer else None,
        date=date,
        time=time,
        customer_name=name,
        customer_phone=phone,
        status=status,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking
