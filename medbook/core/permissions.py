"""
Role gates and ownership checks for the appointment lifecycle.

Role gates on mutations answer 401 (the caller is not authenticated *as* the
required role); a resolved caller that does not own the resource gets 403.
"""
import logging
from typing import Callable, Tuple

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from medbook import storage
from medbook.core.security import get_current_active_user
from medbook.models.appointment import Appointment
from medbook.models.doctor import Doctor
from medbook.models.patient import Patient
from medbook.models.user import User, UserRole

logger = logging.getLogger(__name__)


def require_role(role: UserRole) -> Callable[..., User]:
    """Dependency factory: the session user must hold ``role``."""
    def dependency(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role != role:
            logger.warning("User %s with role %s denied %s-only action", current_user.id, current_user.role.value, role.value)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Only {role.value}s can perform this action"
            )
        return current_user

    return dependency


def resolve_doctor_profile(db: Session, user: User) -> Doctor:
    doctor = storage.get_doctor_by_user_id(db, user.id)
    if not doctor:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Doctor profile required"
        )
    return doctor


def ensure_doctor_owns(doctor: Doctor, appointment: Appointment) -> None:
    if appointment.doctor_id != doctor.id:
        logger.warning("Doctor %s denied access to appointment %s", doctor.id, appointment.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to modify this appointment"
        )


def resolve_scope(db: Session, user: User) -> Tuple[UserRole, int]:
    """
    Map the caller to the profile whose records they may list.

    Returns ``(role, profile_id)``. Admins have no implicit access to everyone's
    records (403); a patient or doctor without a profile is mis-registered (404).
    """
    if user.role == UserRole.PATIENT:
        patient = storage.get_patient_by_user_id(db, user.id)
        if not patient:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Patient profile not found"
            )
        return UserRole.PATIENT, patient.id

    if user.role == UserRole.DOCTOR:
        doctor = storage.get_doctor_by_user_id(db, user.id)
        if not doctor:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Doctor profile not found"
            )
        return UserRole.DOCTOR, doctor.id

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Not authorized to view these records"
    )


def ensure_participant(db: Session, user: User, appointment: Appointment) -> None:
    """The caller must be the appointment's patient or its doctor."""
    role, profile_id = resolve_scope(db, user)
    if role == UserRole.PATIENT and appointment.patient_id == profile_id:
        return
    if role == UserRole.DOCTOR and appointment.doctor_id == profile_id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Not authorized to view this appointment"
    )


def patient_for_booking(db: Session, user: User) -> Patient:
    patient = storage.get_patient_by_user_id(db, user.id)
    if not patient:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Patient profile required"
        )
    return patient
