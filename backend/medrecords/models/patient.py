from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, JSON
from .base import Base, TimestampMixin


class Role:
    USER = "USER"
    ADMIN = "ADMIN"

    ALL = [USER, ADMIN]


class Gender:
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"

    ALL = [MALE, FEMALE, OTHER]


class BloodType:
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"

    ALL = [A_POS, A_NEG, B_POS, B_NEG, AB_POS, AB_NEG, O_POS, O_NEG]


class Patient(Base, TimestampMixin):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Unique index is the real uniqueness guarantee; service-level checks are advisory
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=Role.USER)
    is_email_verified = Column(Boolean, nullable=False, default=False)

    insurance_provider = Column(String(200), nullable=True, index=True)
    insurance_number = Column(String(100), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(JSON, nullable=True)  # free-form text or {street, city, state, zip_code}
    blood_type = Column(String(3), nullable=True)
    allergies = Column(JSON, nullable=True)
    conditions = Column(JSON, nullable=True)
    medications = Column(JSON, nullable=True)  # strings or {name, dosage, frequency}
    last_visit = Column(DateTime, nullable=True)


# Projections. The credential column is only ever selected by CREDENTIAL_FIELDS.
SAFE_FIELDS = (
    "id",
    "email",
    "name",
    "role",
    "is_email_verified",
    "created_at",
    "updated_at",
    "insurance_provider",
    "insurance_number",
    "date_of_birth",
    "gender",
    "phone",
    "address",
    "blood_type",
    "allergies",
    "conditions",
    "medications",
    "last_visit",
)
PRINCIPAL_FIELDS = ("id", "email", "name", "role", "is_email_verified")
CREDENTIAL_FIELDS = PRINCIPAL_FIELDS + ("hashed_password",)
PROJECTABLE_FIELDS = frozenset(SAFE_FIELDS + ("hashed_password",))

FILTERABLE_FIELDS = frozenset({"name", "role", "gender", "insurance_provider", "blood_type"})
SORTABLE_FIELDS = frozenset(SAFE_FIELDS) - {"address", "allergies", "conditions", "medications"}
PROFILE_FIELDS = frozenset(SAFE_FIELDS) - {"id", "email", "name", "role", "created_at", "updated_at"}
