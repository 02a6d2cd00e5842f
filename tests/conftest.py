from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base, get_db
from app.core.security import hash_password
from app.main import app
from app.models import Business, Client, Employee, Membership, User


@pytest.fixture()
def session_factory() -> Generator[sessionmaker, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    business_a = Business(name="Business A")
    business_b = Business(name="Business B")
    db.add_all([business_a, business_b])
    db.flush()

    maria = Employee(business_id=business_a.id, name="Maria", rate_cents=2000, pay_type="hourly")
    dev = Employee(business_id=business_a.id, name="Dev", rate_cents=1800, pay_type="hourly")
    bob = Employee(business_id=business_b.id, name="Bob", rate_cents=1500, pay_type="per_job")
    db.add_all([maria, dev, bob])
    db.flush()

    db.add_all(
        [
            Client(business_id=business_a.id, name="Hendersons", service_rate_cents=12000, service_rate_type="flat"),
            Client(business_id=business_b.id, name="Other Co", service_rate_cents=5000, service_rate_type="hourly"),
        ]
    )

    owner = User(email="owner@test.local", full_name="Owner", password_hash=hash_password("pass1234"))
    admin = User(email="admin@test.local", full_name="Admin", password_hash=hash_password("pass1234"))
    crew = User(email="crew@test.local", full_name="Crew", password_hash=hash_password("pass1234"))
    db.add_all([owner, admin, crew])
    db.flush()

    db.add_all(
        [
            Membership(business_id=business_a.id, user_id=owner.id, role="owner"),
            Membership(business_id=business_b.id, user_id=owner.id, role="admin"),
            Membership(business_id=business_a.id, user_id=admin.id, role="admin"),
            Membership(business_id=business_a.id, user_id=crew.id, role="employee", employee_id=maria.id),
        ]
    )
    db.commit()
    db.close()

    yield TestingSessionLocal

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory) -> Generator[TestClient, None, None]:
    def override_get_db():
        test_db = session_factory()
        try:
            yield test_db
        finally:
            test_db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
