"""Request / response schemas. Wire format is camelCase, Python attributes snake_case."""
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .models.patient import BloodType, Gender, Role

_LETTER = re.compile(r"[A-Za-z]")
_DIGIT = re.compile(r"\d")


def _check_password(value: str) -> str:
    if len(value) < 8:
        raise ValueError("password must be at least 8 characters")
    if not _LETTER.search(value) or not _DIGIT.search(value):
        raise ValueError("password must contain at least 1 letter and 1 number")
    return value


def _check_choice(value: Optional[str], choices: List[str], label: str) -> Optional[str]:
    if value is not None and value not in choices:
        raise ValueError(f"invalid {label}, choose from: {choices}")
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Address(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class Medication(CamelModel):
    name: str
    dosage: str
    frequency: str


class PatientProfile(CamelModel):
    """Clinical and contact attributes shared by create and update bodies."""

    name: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Union[Address, str]] = None
    blood_type: Optional[str] = None
    allergies: Optional[List[str]] = None
    conditions: Optional[List[str]] = None
    medications: Optional[List[Union[Medication, str]]] = None
    last_visit: Optional[datetime] = None

    @field_validator("gender")
    @classmethod
    def check_gender(cls, v):
        return _check_choice(v, Gender.ALL, "gender")

    @field_validator("blood_type")
    @classmethod
    def check_blood_type(cls, v):
        return _check_choice(v, BloodType.ALL, "blood type")


class PatientCreate(PatientProfile):
    email: EmailStr
    password: str
    name: str
    role: Optional[str] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return _check_password(v)

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        return _check_choice(v, Role.ALL, "role")

    def profile_fields(self) -> Dict[str, Any]:
        """Supplied profile attributes as storable python values."""
        return self.model_dump(
            exclude={"email", "password", "name", "role"},
            exclude_unset=True,
        )


class PatientUpdate(PatientProfile):
    """
    Partial update. Only attributes present in the request body are applied;
    ``model_fields_set`` is what tells an absent field from an explicit null.
    """

    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if v is None:
            raise ValueError("name may not be null")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        if v is None:
            raise ValueError("email may not be null")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if v is None:
            raise ValueError("password may not be null")
        return _check_password(v)

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        if v is None:
            raise ValueError("role may not be null")
        return _check_choice(v, Role.ALL, "role")

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("at least one field must be supplied")
        return self

    def changes(self) -> Dict[str, Any]:
        """Only the supplied fields, nested models flattened to dicts."""
        return self.model_dump(exclude_unset=True)


class PatientResponse(CamelModel):
    """Projection of a patient. Fields outside the projection are left unset."""

    id: Optional[int] = None
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    is_email_verified: Optional[bool] = None
    insurance_provider: Optional[str] = None
    insurance_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Union[Address, str]] = None
    blood_type: Optional[str] = None
    allergies: Optional[List[str]] = None
    conditions: Optional[List[str]] = None
    medications: Optional[List[Union[Medication, str]]] = None
    last_visit: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PatientPage(CamelModel):
    results: List[PatientResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
