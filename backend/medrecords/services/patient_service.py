"""
Patient repository.

CRUD and paged queries over the ``patients`` table with field projection.
Every read returns a plain dict holding only the projected columns; the
password hash is selected only when a caller asks for it explicitly.

Email uniqueness is checked read-then-write for a friendly error. Two
concurrent writers can both pass that check, so the unique index on
``patients.email`` is what actually enforces it; an ``IntegrityError`` from
the store is reported as ``DuplicateEmail`` as well.
"""
import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import DuplicateEmail, NotFound, StoreError, ValidationError
from ..core.security import get_password_hash, verify_password
from ..models.patient import (
    CREDENTIAL_FIELDS,
    FILTERABLE_FIELDS,
    PROFILE_FIELDS,
    PROJECTABLE_FIELDS,
    SAFE_FIELDS,
    SORTABLE_FIELDS,
    Patient,
    Role,
)
from ..schemas import PatientUpdate

logger = logging.getLogger(__name__)

SORT_ASC = "asc"
SORT_DESC = "desc"


@dataclass
class QueryResult:
    results: List[Dict[str, Any]] = field(default_factory=list)
    page: int = 1
    limit: int = 10
    total_pages: int = 0
    total_results: int = 0


def page_offset(page: int, limit: int) -> int:
    """Rows to skip before ``page`` (1-based)."""
    return (page - 1) * limit


class PatientService:
    """Repository for patient records, bound to one session."""

    def __init__(self, db: Session):
        self.db = db

    # ── projection helpers ──────────────────────────────────────────────────

    @staticmethod
    def _columns(fields: Optional[Sequence[str]]):
        fields = tuple(fields) if fields else SAFE_FIELDS
        unknown = [f for f in fields if f not in PROJECTABLE_FIELDS]
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(unknown)}")
        return [getattr(Patient, f) for f in fields]

    def _select_one(self, criterion, fields: Optional[Sequence[str]]) -> Optional[Dict[str, Any]]:
        row = self.db.query(*self._columns(fields)).filter(criterion).first()
        return dict(row._mapping) if row is not None else None

    @contextmanager
    def _write(self, action: str):
        """Run statements and commit, translating store failures."""
        try:
            yield
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateEmail()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Store failure during %s: %s", action, exc)
            raise StoreError() from exc

    # ── reads ───────────────────────────────────────────────────────────────

    def get_patient_by_id(self, patient_id: int, fields: Optional[Sequence[str]] = None) -> Optional[Dict[str, Any]]:
        return self._select_one(Patient.id == patient_id, fields)

    def get_patient_by_email(self, email: str, fields: Optional[Sequence[str]] = None) -> Optional[Dict[str, Any]]:
        return self._select_one(Patient.email == email, fields)

    def query_patients(
        self,
        filters: Optional[Dict[str, Any]] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_type: Optional[str] = None,
        fields: Optional[Sequence[str]] = None,
    ) -> QueryResult:
        """
        Equality-filtered, single-field sorted page of patients.

        ``page`` defaults to 1 and ``limit`` to ``DEFAULT_PAGE_LIMIT``, capped
        at ``MAX_PAGE_LIMIT``. Sort
        direction defaults to descending; results are unsorted when
        ``sort_by`` is omitted.
        """
        page = 1 if page is None else page
        limit = settings.DEFAULT_PAGE_LIMIT if limit is None else limit
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")
        if limit > settings.MAX_PAGE_LIMIT:
            raise ValidationError(f"limit may not exceed {settings.MAX_PAGE_LIMIT}")
        sort_type = (sort_type or SORT_DESC).lower()
        if sort_type not in (SORT_ASC, SORT_DESC):
            raise ValidationError("sortType must be 'asc' or 'desc'")

        criteria = []
        for name, value in (filters or {}).items():
            if value is None:
                continue
            if name not in FILTERABLE_FIELDS:
                raise ValidationError(f"Cannot filter on '{name}'")
            criteria.append(getattr(Patient, name) == value)

        q = self.db.query(*self._columns(fields)).filter(*criteria)
        if sort_by:
            if sort_by not in SORTABLE_FIELDS:
                raise ValidationError(f"Cannot sort on '{sort_by}'")
            column = getattr(Patient, sort_by)
            q = q.order_by(column.asc() if sort_type == SORT_ASC else column.desc())

        rows = q.offset(page_offset(page, limit)).limit(limit).all()
        total = self.db.query(Patient.id).filter(*criteria).count()
        logger.debug("Found %d patients out of %d total", len(rows), total)

        return QueryResult(
            results=[dict(r._mapping) for r in rows],
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
            total_results=total,
        )

    # ── writes ──────────────────────────────────────────────────────────────

    def create_patient(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: Optional[str] = None,
        **profile: Any,
    ) -> Dict[str, Any]:
        if self.get_patient_by_email(email, fields=("id",)):
            raise DuplicateEmail()
        unknown = set(profile) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        patient = Patient(
            email=email,
            name=name,
            hashed_password=get_password_hash(password),
            role=role or Role.USER,
            **profile,
        )
        with self._write("create"):
            self.db.add(patient)
        self.db.refresh(patient)
        logger.info("Created patient %s", patient.id)
        return self.get_patient_by_id(patient.id)

    def update_patient_by_id(self, patient_id: int, patch: PatientUpdate) -> Dict[str, Any]:
        """Apply only the fields present in ``patch``."""
        current = self.get_patient_by_id(patient_id, fields=("id", "email"))
        if not current:
            raise NotFound()

        changes = patch.changes()
        new_email = changes.get("email")
        if new_email and new_email != current["email"]:
            owner = self.get_patient_by_email(new_email, fields=("id",))
            if owner and owner["id"] != patient_id:
                raise DuplicateEmail()

        password = changes.pop("password", None)
        if password:
            changes["hashed_password"] = get_password_hash(password)

        if changes:
            with self._write("update"):
                self.db.query(Patient).filter(Patient.id == patient_id).update(
                    changes, synchronize_session=False
                )
        logger.info("Updated patient %s (%s)", patient_id, ", ".join(sorted(patch.model_fields_set)))
        return self.get_patient_by_id(patient_id)

    def delete_patient_by_id(self, patient_id: int) -> Dict[str, Any]:
        """Delete and return the pre-deletion projection (without credential)."""
        patient = self.get_patient_by_id(patient_id)
        if not patient:
            raise NotFound()
        with self._write("delete"):
            self.db.query(Patient).filter(Patient.id == patient_id).delete(synchronize_session=False)
        logger.info("Deleted patient %s", patient_id)
        return patient

    # ── credentials ─────────────────────────────────────────────────────────

    def authenticate(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """The principal projection of the account if ``password`` matches."""
        account = self.get_patient_by_email(email, fields=CREDENTIAL_FIELDS)
        if not account or not verify_password(password, account.pop("hashed_password")):
            return None
        return account

