import os

# Must be set before lpg_orders is imported: the engine is built at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ADMIN_ACCESS_KEY", "test-admin-key")

from datetime import date
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

import lpg_orders.models  # noqa: F401
from lpg_orders.core.config import settings
from lpg_orders.core.db import Base, get_db
from lpg_orders.main import app
from lpg_orders.models.coupon import Coupon
from lpg_orders.models.product import Product

ADMIN_KEY = "test-admin-key"


@pytest.fixture
async def engine(tmp_path):
    # File-backed so separate sessions really contend for the same rows
    eng = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}",
        connect_args={"timeout": 30},
    )

    @event.listens_for(eng.sync_engine, "connect")
    def _enable_fks(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def _settings(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_ACCESS_KEY", ADMIN_KEY)
    monkeypatch.setattr(settings, "ORDER_COMMIT_MODE", "atomic")
    monkeypatch.setattr(settings, "DEFAULT_USAGE_LIMIT", 100)


@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.fixture
def add_product(session_factory):
    async def _add(category="Domestic", price="2500.00", in_stock=True, name=None):
        async with session_factory() as session:
            product = Product(
                name=name or f"{category} cylinder",
                category=category,
                price=Decimal(price),
                in_stock=in_stock,
            )
            session.add(product)
            await session.commit()
            await session.refresh(product)
            return product

    return _add


@pytest.fixture
def add_coupon(session_factory):
    async def _add(
        code="WELCOME10",
        discount_type="percentage",
        discount_value="10",
        applicable_cylinder_type="Both",
        min_order_amount=None,
        expiry_date: date | None = None,
        usage_limit=100,
        is_active=True,
    ):
        async with session_factory() as session:
            coupon = Coupon(
                code=code,
                discount_type=discount_type,
                discount_value=Decimal(discount_value),
                applicable_cylinder_type=applicable_cylinder_type,
                min_order_amount=Decimal(min_order_amount) if min_order_amount is not None else None,
                expiry_date=expiry_date,
                usage_limit=usage_limit,
                is_active=is_active,
            )
            session.add(coupon)
            await session.commit()
            await session.refresh(coupon)
            return coupon

    return _add
