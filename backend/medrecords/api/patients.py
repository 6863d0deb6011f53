from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic.alias_generators import to_snake
from sqlalchemy.orm import Session

from ..core.auth import Principal, auth
from ..core.errors import Forbidden, NotFound
from ..core.permissions import PERM_GET_RECORDS, PERM_MANAGE_RECORDS
from ..models.base import get_db
from ..schemas import PatientCreate, PatientPage, PatientResponse, PatientUpdate
from ..services.patient_service import PatientService

router = APIRouter(prefix="/records", tags=["records"])


def get_patient_service(db: Session = Depends(get_db)) -> PatientService:
    return PatientService(db)


def _split_sort(sort_by: Optional[str], sort_type: Optional[str]):
    """
    Accept ``sortBy=name`` with ``sortType=asc`` or the combined ``sortBy=name:asc``.
    The field may be given by its camelCase wire name (``createdAt``).
    """
    if sort_by and ":" in sort_by:
        sort_by, _, direction = sort_by.partition(":")
        sort_type = sort_type or direction
    return (to_snake(sort_by) if sort_by else None), sort_type or None


@router.post(
    "",
    response_model=PatientResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
def create_record(
    patient_in: PatientCreate,
    service: PatientService = Depends(get_patient_service),
    _principal: Principal = Depends(auth(PERM_MANAGE_RECORDS)),
):
    return service.create_patient(
        patient_in.email,
        patient_in.password,
        name=patient_in.name,
        role=patient_in.role,
        **patient_in.profile_fields(),
    )


@router.get("", response_model=PatientPage, response_model_exclude_unset=True)
def list_records(
    name: Optional[str] = None,
    role: Optional[str] = None,
    gender: Optional[str] = None,
    insurance_provider: Optional[str] = Query(None, alias="insuranceProvider"),
    blood_type: Optional[str] = Query(None, alias="bloodType"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="field or field:asc|desc"),
    sort_type: Optional[str] = Query(None, alias="sortType", pattern="^(asc|desc)$"),
    limit: Optional[int] = Query(None, ge=1),
    page: Optional[int] = Query(None, ge=1),
    service: PatientService = Depends(get_patient_service),
    _principal: Principal = Depends(auth(PERM_GET_RECORDS)),
):
    sort_by, sort_type = _split_sort(sort_by, sort_type)
    filters = {
        "name": name,
        "role": role,
        "gender": gender,
        "insurance_provider": insurance_provider,
        "blood_type": blood_type,
    }
    result = service.query_patients(
        filters,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_type=sort_type,
    )
    return PatientPage(
        results=[PatientResponse(**r) for r in result.results],
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
        total_results=result.total_results,
    )


@router.get("/{record_id}", response_model=PatientResponse, response_model_exclude_unset=True)
def get_record(
    record_id: int,
    service: PatientService = Depends(get_patient_service),
    _principal: Principal = Depends(auth(PERM_GET_RECORDS)),
):
    patient = service.get_patient_by_id(record_id)
    if not patient:
        raise NotFound()
    return patient


@router.patch("/{record_id}", response_model=PatientResponse, response_model_exclude_unset=True)
def update_record(
    record_id: int,
    patch: PatientUpdate,
    service: PatientService = Depends(get_patient_service),
    principal: Principal = Depends(auth(PERM_MANAGE_RECORDS)),
):
    # Self-access lets a patient edit their own profile, not their role
    if principal.via_self_access and "role" in patch.model_fields_set and patch.role != principal.role:
        raise Forbidden()
    return service.update_patient_by_id(record_id, patch)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_record(
    record_id: int,
    service: PatientService = Depends(get_patient_service),
    _principal: Principal = Depends(auth(PERM_MANAGE_RECORDS)),
):
    service.delete_patient_by_id(record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
