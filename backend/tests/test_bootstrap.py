"""Tests for the first-admin bootstrap."""
import pytest

from medrecords import bootstrap
from medrecords.core.security import verify_password
from medrecords.models.patient import CREDENTIAL_FIELDS, Role

ADMIN_EMAIL = "root@example.com"
ADMIN_PASSWORD = "Admin1234"


@pytest.fixture()
def bootstrap_db(session_factory, monkeypatch):
    """Point the bootstrap at the test database."""
    monkeypatch.setattr(bootstrap, "SessionLocal", session_factory)


class TestBootstrapAdmin:
    def test_creates_admin(self, bootstrap_db, service):
        admin_id = bootstrap.bootstrap_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
        admin = service.get_patient_by_email(ADMIN_EMAIL)
        assert admin["id"] == admin_id
        assert admin["role"] == Role.ADMIN

    def test_password_is_hashed(self, bootstrap_db, service):
        bootstrap.bootstrap_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
        stored = service.get_patient_by_email(ADMIN_EMAIL, fields=CREDENTIAL_FIELDS)
        assert stored["hashed_password"] != ADMIN_PASSWORD
        assert verify_password(ADMIN_PASSWORD, stored["hashed_password"])

    def test_idempotent_on_second_call(self, bootstrap_db, service):
        first = bootstrap.bootstrap_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
        second = bootstrap.bootstrap_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
        assert first == second
        assert service.query_patients({"role": Role.ADMIN}).total_results == 1

    def test_existing_account_is_left_alone(self, bootstrap_db, service):
        existing = service.create_patient(ADMIN_EMAIL, "userpass1", name="Already here")
        assert bootstrap.bootstrap_admin(ADMIN_EMAIL, ADMIN_PASSWORD) == existing["id"]
        assert service.get_patient_by_email(ADMIN_EMAIL)["role"] == Role.USER

    def test_not_configured(self, bootstrap_db, service):
        assert bootstrap.bootstrap_admin() is None
        assert service.query_patients({}).total_results == 0

    def test_reads_settings(self, bootstrap_db, service, monkeypatch):
        monkeypatch.setattr(bootstrap.settings, "BOOTSTRAP_ADMIN_EMAIL", ADMIN_EMAIL)
        monkeypatch.setattr(bootstrap.settings, "BOOTSTRAP_ADMIN_PASSWORD", ADMIN_PASSWORD)
        assert bootstrap.bootstrap_admin() is not None
        assert service.get_patient_by_email(ADMIN_EMAIL)["role"] == Role.ADMIN
