"""
Authorization gate for the records API.

Each request runs through one ``AuthorizationGate``:

    UNAUTHENTICATED -> AUTHENTICATING -> AUTHORIZED | DENIED

Authentication verifies the bearer token and re-reads the account from the
store by email, so a token whose account was deleted or changed stops
working. Authorization checks the route's required rights against the
role-rights table; when they are missing, a request whose ``record_id``
path parameter is the caller's own id is still let through.

Handlers receive the resulting ``Principal`` through ``Depends(auth(...))``.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..models.base import get_db
from ..models.patient import PRINCIPAL_FIELDS
from ..services.patient_service import PatientService
from .errors import Forbidden, Unauthorized
from .permissions import has_rights
from .security import TOKEN_TYPE_ACCESS, decode_access_token

logger = logging.getLogger(__name__)

SUBJECT_PATH_PARAM = "record_id"

bearer_scheme = HTTPBearer(auto_error=False)


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHORIZED = "authorized"
    DENIED = "denied"


@dataclass
class Principal:
    """The authenticated account, as re-read from the store."""
    id: int
    email: str
    role: str
    name: Optional[str] = None
    is_email_verified: bool = False
    via_self_access: bool = False


class AuthorizationGate:
    def __init__(self, db: Session):
        self.patients = PatientService(db)
        self.state = AuthState.UNAUTHENTICATED

    def _deny(self, error):
        self.state = AuthState.DENIED
        raise error

    def authenticate(self, token: Optional[str]) -> Principal:
        self.state = AuthState.AUTHENTICATING
        if not token:
            self._deny(Unauthorized())

        payload = decode_access_token(token)
        if not payload or payload.get("type") != TOKEN_TYPE_ACCESS:
            self._deny(Unauthorized())
        email, subject = payload.get("email"), payload.get("sub")
        if not email or subject is None:
            self._deny(Unauthorized())

        account = self.patients.get_patient_by_email(email, fields=PRINCIPAL_FIELDS)
        if not account or str(account["id"]) != str(subject):
            logger.warning("Token for %s does not match a current account", subject)
            self._deny(Unauthorized())
        return Principal(**account)

    def authorize(
        self,
        principal: Principal,
        required_rights: Sequence[str] = (),
        subject_id: Optional[str] = None,
    ) -> Principal:
        if required_rights and not has_rights(principal.role, required_rights):
            if subject_id is None or subject_id != str(principal.id):
                logger.warning(
                    "Denied %s (role=%s) missing rights %s",
                    principal.id, principal.role, ", ".join(required_rights),
                )
                self._deny(Forbidden())
            principal.via_self_access = True
        self.state = AuthState.AUTHORIZED
        return principal

    def check(
        self,
        token: Optional[str],
        required_rights: Sequence[str] = (),
        subject_id: Optional[str] = None,
    ) -> Principal:
        """Authenticate then authorize in one pass."""
        principal = self.authenticate(token)
        return self.authorize(principal, required_rights, subject_id)


def auth(*required_rights: str):
    """Dependency factory: ``Depends(auth(PERM_MANAGE_RECORDS))``."""

    def dependency(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        db: Session = Depends(get_db),
    ) -> Principal:
        token = credentials.credentials if credentials else None
        gate = AuthorizationGate(db)
        return gate.check(token, required_rights, request.path_params.get(SUBJECT_PATH_PARAM))

    return dependency


get_current_user = auth()
