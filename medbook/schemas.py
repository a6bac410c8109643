"""
Request and response models shared by the routers and the client.

JSON payloads use camelCase keys; attributes stay snake_case. Joined query
results have explicit composed types (``DoctorDetail``, ``PatientDetail``,
``AppointmentDetail``) built straight from the ORM rows.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from medbook.models.appointment import AppointmentStatus
from medbook.models.user import UserRole


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Users and registration

class PatientDetailsCreate(CamelModel):
    age: int = Field(ge=0)
    gender: str = Field(min_length=1)
    contact: str = Field(min_length=1)
    medical_history: Optional[str] = None


class DoctorDetailsCreate(CamelModel):
    specialization: str = Field(min_length=1)
    hospital_id: Optional[int] = None
    experience: int = Field(ge=0)
    availability: List[str] = Field(default_factory=list)
    consultation_fee: int = Field(ge=0)


class UserCreate(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: UserRole
    name: str = Field(min_length=1)
    email: EmailStr
    patient_details: Optional[PatientDetailsCreate] = None
    doctor_details: Optional[DoctorDetailsCreate] = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        # bcrypt only hashes the first 72 bytes
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password cannot be longer than 72 bytes")
        return v

    @model_validator(mode="after")
    def details_match_role(self):
        if self.patient_details is not None and self.role != UserRole.PATIENT:
            raise ValueError("patientDetails can only be supplied for the patient role")
        if self.doctor_details is not None and self.role != UserRole.DOCTOR:
            raise ValueError("doctorDetails can only be supplied for the doctor role")
        return self


class UserLogin(BaseModel):
    username: str
    password: str


class UserResponse(CamelModel):
    id: int
    username: str
    role: UserRole
    name: str
    email: str
    created_at: Optional[datetime] = None


# Profiles and hospitals

class HospitalResponse(CamelModel):
    id: int
    name: str
    location: str
    contact: str
    specializations: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None


class PatientResponse(CamelModel):
    id: int
    user_id: int
    age: int
    gender: str
    contact: str
    medical_history: Optional[str] = None


class PatientDetail(PatientResponse):
    user: UserResponse


class DoctorResponse(CamelModel):
    id: int
    user_id: int
    specialization: str
    hospital_id: Optional[int] = None
    experience: int
    availability: List[str] = Field(default_factory=list)
    consultation_fee: int


class DoctorDetail(DoctorResponse):
    user: UserResponse
    hospital: Optional[HospitalResponse] = None


# Appointments

class AppointmentCreate(CamelModel):
    doctor_id: int
    date: datetime
    reason: str = Field(min_length=1)

    @field_validator("date")
    @classmethod
    def date_as_naive_utc(cls, v: datetime) -> datetime:
        """Dates are stored naive; offset-aware input is normalised to UTC first."""
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class AppointmentStatusUpdate(CamelModel):
    status: AppointmentStatus


class AppointmentResponse(CamelModel):
    id: int
    patient_id: int
    doctor_id: int
    date: datetime
    status: AppointmentStatus
    reason: str
    created_at: Optional[datetime] = None


class AppointmentDetail(AppointmentResponse):
    patient: PatientDetail
    doctor: DoctorDetail


# Prescriptions

class Medicine(CamelModel):
    name: str = Field(min_length=1)
    dosage: str = Field(min_length=1)
    frequency: str = Field(min_length=1)


class PrescriptionCreate(CamelModel):
    appointment_id: int
    medicines: List[Medicine] = Field(default_factory=list)
    instructions: Optional[str] = None


class PrescriptionResponse(CamelModel):
    id: int
    appointment_id: int
    medicines: List[Medicine] = Field(default_factory=list)
    instructions: Optional[str] = None
    date: Optional[datetime] = None
