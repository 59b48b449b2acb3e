import os

# must be set before storefront.utils.settings is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"

from typing import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.deps import get_lock_service, get_payment_client, get_token_service
from storefront.data.database import Base, get_db
from storefront.data.models import CartItemModel, CartModel, ProductModel, UserModel
from storefront.services.payment_client import PaymentIntent
from storefront.utils.security import TokenService, get_password_hash


# markers by folder
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests against in-memory sqlite and mocks")
    config.addinivalue_line("markers", "integration: tests through the HTTP API")


@pytest.fixture()
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


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def make_user(db_session):
    def _make(username: str = "alice", password: str = "secret", is_admin: bool = False) -> UserModel:
        user = UserModel(
            username=username,
            password_hash=get_password_hash(password),
            is_admin=is_admin,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_product(db_session):
    def _make(name: str = "Keyboard", price: int = 1000, inventory: int = 5, active: bool = True, description=None) -> ProductModel:
        product = ProductModel(
            name=name,
            description=description,
            price=price,
            inventory=inventory,
            active=active,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make


@pytest.fixture()
def make_cart(db_session):
    """Stores a cart with the given (product, quantity) lines, snapshotting name and price."""

    def _make(user: UserModel, lines=()) -> CartModel:
        cart = CartModel(user_id=user.id, version=1)
        for product, quantity in lines:
            cart.items.append(
                CartItemModel(
                    product_id=product.id,
                    quantity=quantity,
                    name=product.name,
                    unit_price=product.price,
                )
            )
        db_session.add(cart)
        db_session.commit()
        db_session.refresh(cart)
        return cart

    return _make


@pytest.fixture()
def inventory_of(db_session):
    def _inventory(product_id: int) -> int:
        db_session.expire_all()
        return db_session.get(ProductModel, product_id).inventory

    return _inventory


@pytest.fixture()
def payment_client():
    client = MagicMock()
    client.create_intent.return_value = PaymentIntent(id="pi_test_123", client_secret="pi_test_123_secret_abc")
    return client


@pytest.fixture()
def lock_service():
    lock = MagicMock()
    lock.new_token.return_value = "lock-token"
    lock.acquire_checkout_lock.return_value = True
    lock.release_checkout_lock.return_value = True
    return lock


@pytest.fixture()
def token_service():
    return TokenService(secret="test-secret")


@pytest.fixture()
def app(monkeypatch):
    import storefront.main as main

    # tables come from the engine fixture, not the startup hook
    monkeypatch.setattr(main, "init_db", lambda: None)
    return main.app


@pytest.fixture()
def client(app, db_session, payment_client, lock_service, token_service) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_client] = lambda: payment_client
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_token_service] = lambda: token_service

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(token_service):
    def _headers(user: UserModel) -> dict:
        token = token_service.create_access_token(user.id, user.is_admin)
        return {"Authorization": f"Bearer {token}"}

    return _headers
