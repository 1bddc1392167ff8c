"""Pytest fixtures for storefront tests."""

import os

# Must be set before storefront.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEFAULT_ADMIN_EMAIL"] = ""
os.environ["DEFAULT_ADMIN_PASSWORD"] = ""

import pytest
from fastapi.testclient import TestClient
from pydantic import BaseModel
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.domain.models.order import Order
from storefront.domain.models.product import Product
from storefront.domain.models.user import Role, User
from storefront.domain.schemas.auth import Principal
from storefront.infrastructure.database import Base, get_db
from storefront.main import app


class FakeRepository:
    """Dict-backed stand-in for SQLAlchemyRepository."""

    def __init__(self, model):
        self.model = model
        self.items = {}

    def get_by_id(self, id):
        return self.items.get(id)

    def list(self, skip=0, limit=100):
        return [self.items[k] for k in sorted(self.items)][skip:skip + limit]

    def add(self, obj):
        if obj.id is None:
            obj.id = max(self.items, default=0) + 1
        self.items[obj.id] = obj
        return obj

    def create(self, obj_in):
        data = obj_in.model_dump() if isinstance(obj_in, BaseModel) else dict(obj_in)
        return self.add(self.model(**data))

    def update(self, db_obj, obj_in):
        for field, value in obj_in.items():
            setattr(db_obj, field, value)
        return db_obj

    def delete(self, id):
        return self.items.pop(id, None)


class FakeUserRepository(FakeRepository):
    def get_by_email(self, email):
        return next((u for u in self.items.values() if u.email == email), None)


class FakeProductRepository(FakeRepository):
    def get_by_name(self, name):
        return next((p for p in self.items.values() if p.name == name), None)

    def get_many(self, ids, for_update=False):
        return [self.items[i] for i in sorted(set(ids)) if i in self.items]

    def reserve_stock(self, product_id, quantity):
        product = self.items[product_id]
        if product.stock < quantity:
            return False
        product.stock -= quantity
        return True

    def release_stock(self, product_id, quantity):
        self.items[product_id].stock += quantity


class FakeOrderRepository(FakeRepository):
    def __init__(self, model):
        super().__init__(model)
        self._next_item_id = 1

    def get_for_update(self, id):
        return self.get_by_id(id)

    def list_by_user(self, user_id):
        return [o for o in self.list(limit=10_000) if o.user_id == user_id]

    def add_item(self, order, item):
        item.id = self._next_item_id
        self._next_item_id += 1
        item.order_id = order.id
        order.items.append(item)
        return item

    def remove_item(self, order, item):
        order.items.remove(item)


class FakeUnitOfWork:
    """In-memory unit of work; rollback restores the state seen at __enter__."""

    def __init__(self):
        self.users = FakeUserRepository(User)
        self.products = FakeProductRepository(Product)
        self.orders = FakeOrderRepository(Order)
        self.commits = 0
        self.rollbacks = 0
        self._snapshot = None

    def __enter__(self):
        self._snapshot = self._take_snapshot()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1
        users, products, orders = self._snapshot
        self.users.items = dict(users)
        self.products.items = {pid: product for pid, (product, _) in products.items()}
        for product, stock in products.values():
            product.stock = stock
        self.orders.items = {oid: state[0] for oid, state in orders.items()}
        for order, status, total_price, lines in orders.values():
            order.status = status
            order.total_price = total_price
            order.items[:] = [item for item, _ in lines]
            for item, quantity in lines:
                item.quantity = quantity

    def _take_snapshot(self):
        return (
            dict(self.users.items),
            {pid: (p, p.stock) for pid, p in self.products.items.items()},
            {
                oid: (o, o.status, o.total_price, [(i, i.quantity) for i in o.items])
                for oid, o in self.orders.items.items()
            },
        )


@pytest.fixture
def uow():
    return FakeUnitOfWork()


@pytest.fixture
def principal():
    return Principal(
        user_id=1,
        name="Budi Santoso",
        email="budi@example.com",
        role=Role.HELPER,
        phone_number="+6281234567890",
        address="Jl. Merdeka 1, Bandung",
    )


@pytest.fixture
def other_principal():
    return Principal(user_id=2, name="Siti", email="siti@example.com", role=Role.HELPER)


@pytest.fixture
def admin_principal():
    return Principal(user_id=99, name="Admin", email="admin@example.com", role=Role.ADMIN)


@pytest.fixture
def add_product(uow):
    """Seed a product straight into the fake catalog."""

    def _add(name="Kopi Gayo", price=10, stock=5):
        return uow.products.add(
            Product(name=name, description=f"{name} 250g", price=price, stock=stock)
        )

    return _add


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    def _register(email="budi@example.com", password="rahasia123", name="Budi Santoso", **extra):
        response = client.post(
            "/auth/register",
            json={"name": name, "email": email, "password": password, **extra},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register


@pytest.fixture
def login(client):
    def _login(email="budi@example.com", password="rahasia123"):
        response = client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['data']['token']}"}

    return _login


@pytest.fixture
def auth_headers(register, login):
    register()
    return login()


@pytest.fixture
def create_product(client):
    def _create(name="Kopi Gayo", price=10, stock=5, description="Kopi arabika 250g"):
        response = client.post(
            "/product",
            json={"name": name, "description": description, "price": price, "stock": stock},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
