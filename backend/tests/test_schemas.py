import pydantic
import pytest

from medrecords.schemas import PatientCreate, PatientUpdate


def test_update_tracks_only_supplied_fields():
    patch = PatientUpdate.model_validate({"name": "A", "phone": None})
    assert patch.model_fields_set == {"name", "phone"}
    assert patch.changes() == {"name": "A", "phone": None}


def test_update_accepts_snake_case_names():
    assert PatientUpdate(insurance_provider="Acme").changes() == {"insurance_provider": "Acme"}


def test_update_requires_a_field():
    with pytest.raises(pydantic.ValidationError):
        PatientUpdate.model_validate({})


@pytest.mark.parametrize("field", ["name", "email", "password", "role"])
def test_update_rejects_null_for_non_nullable_fields(field):
    with pytest.raises(pydantic.ValidationError):
        PatientUpdate.model_validate({field: None})


def test_create_profile_excludes_account_fields():
    body = PatientCreate.model_validate(
        {
            "email": "a@example.com",
            "password": "secret123",
            "name": "A",
            "role": "ADMIN",
            "insuranceNumber": "INS-1",
            "medications": ["aspirin", {"name": "Metformin", "dosage": "500mg", "frequency": "daily"}],
        }
    )
    assert body.profile_fields() == {
        "insurance_number": "INS-1",
        "medications": ["aspirin", {"name": "Metformin", "dosage": "500mg", "frequency": "daily"}],
    }


@pytest.mark.parametrize("gender", ["Male", "Female", "Other"])
def test_gender_choices(gender):
    assert PatientUpdate.model_validate({"gender": gender}).gender == gender


def test_gender_is_case_sensitive():
    with pytest.raises(pydantic.ValidationError):
        PatientUpdate.model_validate({"gender": "male"})
