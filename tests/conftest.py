from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base, Product, Sale
from app.db.session import get_db
from app.main import app
from app.routers.insight_router import get_insight_generator

NOW = datetime(2025, 6, 30, 12, 0, 0)


class FakeInsightGenerator:
    """Records prompts and returns canned text."""

    def __init__(self, reply="HEALTH SCORE: 7", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate_insight_text(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def make_product(db):
    """Insert a product row directly, bypassing validation."""

    def _make(name="Cement", sku="CEM01", quantity=50, price=300.0, reorder_level=10,
              last_sold_at=None, created_at=NOW):
        product = Product(
            name=name, sku=sku, quantity=quantity, price=price, reorder_level=reorder_level,
            last_sold_at=last_sold_at, created_at=created_at, updated_at=created_at,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_sale(db):
    def _make(product_id, quantity, price, sale_date):
        sale = Sale(product_id=product_id, quantity=quantity, price=price, sale_date=sale_date)
        db.add(sale)
        db.commit()
        db.refresh(sale)
        return sale

    return _make


@pytest.fixture
def insight_generator():
    return FakeInsightGenerator()


@pytest.fixture
def client(engine, insight_generator):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_insight_generator] = lambda: insight_generator
    yield TestClient(app)
    app.dependency_overrides.clear()
