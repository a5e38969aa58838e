import os

# app.core.database は import 時にエンジンを作るので、先に差し替えておく
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import app.models  # noqa: F401
from app.core.auth import Actor
from app.models import Product


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    yield eng
    SQLModel.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as ses:
        yield ses


@pytest.fixture()
def products(session):
    rows = [
        Product(product_number="12345-67890-71", location_number="123456", box_type="A", location_capacity=50),
        Product(product_number="22222-00000-01", location_number="200101", box_type="B", location_capacity=0),
        Product(product_number="33333-00000-02", location_number="300202", box_type=None, location_capacity=120),
    ]
    session.add_all(rows)
    session.commit()
    return rows


@pytest.fixture()
def actor():
    return Actor(display_name="熊沢")


@pytest.fixture()
def t0():
    return datetime(2024, 6, 1, 9, 0, 0)
