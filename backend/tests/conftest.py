"""Shared fixtures: isolated in-memory database, service, API client and tokens."""
import os

# Must be set before medrecords reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("BOOTSTRAP_ADMIN_EMAIL", None)
os.environ.pop("BOOTSTRAP_ADMIN_PASSWORD", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from medrecords.core.security import create_access_token  # noqa: E402
from medrecords.main import app  # noqa: E402
from medrecords.models.base import Base, get_db  # noqa: E402
from medrecords.models.patient import Role  # noqa: E402
from medrecords.services.patient_service import PatientService  # noqa: E402

PASSWORD = "password1"


@pytest.fixture()
def session_factory():
    """A fresh in-memory SQLite database shared by every session of one test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def service(db):
    return PatientService(db)


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def token_for(account) -> str:
    return create_access_token(
        {"sub": str(account["id"]), "email": account["email"], "role": account["role"]}
    )


def bearer(account) -> dict:
    return {"Authorization": f"Bearer {token_for(account)}"}


@pytest.fixture()
def admin(service):
    return service.create_patient("admin@example.com", PASSWORD, name="Admin", role=Role.ADMIN)


@pytest.fixture()
def user(service):
    return service.create_patient("jane@example.com", PASSWORD, name="Jane Doe")
