"""
Shared fixtures.

Every test gets its own SQLite file database under tmp_path, so sessions opened
by the cart engine behave like independent connections to a real store.
"""
import os

# settings are read at import time, so these must be set before any app import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["TXN_RETRY_MIN_WAIT"] = "0"
os.environ["TXN_RETRY_MAX_WAIT"] = "0"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from app.data import models  # noqa: F401
from app.data.database import Base, get_db, get_session_factory, make_engine, make_session_factory
from app.data.models.category import CategoryModel
from app.data.models.product import ProductModel
from app.data.models.user import UserModel
from app.services.token_service import TokenService
from app.services.user_service import hash_password


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'shop.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def client(session_factory):
    """
    FastAPI TestClient wired to the per-test database.
    Lifespan is not entered, so nothing touches the default engine.
    """
    from app.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def make_product(session_factory):
    """Insert a product directly (bypassing the API) and return its id."""

    def _make(name="Keyboard", price="100.00", stock=10, is_on_sale=False, sale_price=None, category="general"):
        with session_factory() as s:
            cat = s.execute(select(CategoryModel).where(CategoryModel.name == category)).scalar_one_or_none()
            if cat is None:
                cat = CategoryModel(name=category, image_url=f"https://img.example/{category}.png")
                s.add(cat)
                s.flush()
            product = ProductModel(
                name=name,
                price=Decimal(price),
                image=f"{name.lower()}.png",
                stock=stock,
                category_id=cat.id,
                is_on_sale=is_on_sale,
                sale_price=Decimal(sale_price) if sale_price is not None else None,
            )
            s.add(product)
            s.commit()
            return product.id

    return _make


@pytest.fixture
def stock_of(session_factory):
    def _stock(product_id):
        with session_factory() as s:
            return s.get(ProductModel, product_id).stock

    return _stock


@pytest.fixture
def make_user(session_factory):
    """Insert a user and return (user_id, auth headers)."""
    counter = {"n": 0}

    def _make(role="customer", email=None, password="secret123"):
        counter["n"] += 1
        email = email or f"{role}{counter['n']}@example.com"
        with session_factory() as s:
            user = UserModel(
                name=f"{role.title()} {counter['n']}",
                email=email,
                password_hash=hash_password(password),
                role=role,
            )
            s.add(user)
            s.commit()
            token = TokenService().issue(user.id, role)
            return user.id, {"Authorization": f"Bearer {token}"}

    return _make
