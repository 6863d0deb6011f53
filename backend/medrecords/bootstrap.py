"""
First-admin bootstrap.

Every write route needs ``manageRecords``, so a fresh database has no way
to create its first admin through the API. When ``BOOTSTRAP_ADMIN_EMAIL``
and ``BOOTSTRAP_ADMIN_PASSWORD`` are both configured, an ``admin`` record is
created with those credentials on startup.

Idempotent: an existing record with that email is left untouched, whatever
its role.
"""
import logging
from typing import Optional

from .core.config import settings
from .models.base import SessionLocal
from .models.patient import Role
from .services.patient_service import PatientService

logger = logging.getLogger(__name__)


def bootstrap_admin(email: Optional[str] = None, password: Optional[str] = None) -> Optional[int]:
    """Create the admin record if missing. Returns its id, or None when not configured."""
    email = email or settings.BOOTSTRAP_ADMIN_EMAIL
    password = password or settings.BOOTSTRAP_ADMIN_PASSWORD
    if not email or not password:
        return None

    db = SessionLocal()
    try:
        service = PatientService(db)
        existing = service.get_patient_by_email(email, fields=("id",))
        if existing:
            return existing["id"]
        admin = service.create_patient(email, password, name="Administrator", role=Role.ADMIN)
        logger.info("Bootstrapped admin account %s (id=%s)", email, admin["id"])
        return admin["id"]
    finally:
        db.close()
