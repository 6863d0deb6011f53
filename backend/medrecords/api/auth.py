"""Authentication endpoints: login and the current account."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..core.auth import Principal, get_current_user
from ..core.errors import Unauthorized
from ..core.security import create_access_token, create_refresh_token
from ..models.base import get_db
from ..schemas import LoginRequest, PatientResponse, TokenResponse
from ..services.patient_service import PatientService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse, status_code=status.HTTP_200_OK)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate and receive JWT access + refresh tokens."""
    account = PatientService(db).authenticate(req.email, req.password)
    if not account:
        raise Unauthorized("Incorrect email or password")

    claims = {"sub": str(account["id"]), "email": account["email"], "role": account["role"]}
    return TokenResponse(
        access_token=create_access_token(claims),
        refresh_token=create_refresh_token({"sub": str(account["id"])}),
    )


@router.get("/me", response_model=PatientResponse, response_model_exclude_unset=True)
def get_me(
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Return the currently authenticated account's record."""
    return PatientService(db).get_patient_by_id(current_user.id)
