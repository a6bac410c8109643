import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from medbook import storage
from medbook.core.permissions import (
    ensure_doctor_owns,
    ensure_participant,
    patient_for_booking,
    require_role,
    resolve_doctor_profile,
    resolve_scope,
)
from medbook.core.security import get_current_active_user
from medbook.database import get_db
from medbook.models.appointment import Appointment, AppointmentStatus, can_transition
from medbook.models.user import User, UserRole
from medbook.schemas import AppointmentCreate, AppointmentDetail, AppointmentResponse, AppointmentStatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


@router.get("", response_model=List[AppointmentDetail])
async def list_appointments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    role, profile_id = resolve_scope(db, current_user)
    if role == UserRole.PATIENT:
        return storage.get_appointments_by_patient(db, profile_id)
    return storage.get_appointments_by_doctor(db, profile_id)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.PATIENT))
):
    # The patient id always comes from the session, never from the request body
    patient = patient_for_booking(db, current_user)

    if not storage.get_doctor(db, appointment.doctor_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Doctor not found"
        )

    db_appointment = storage.create_appointment(db, Appointment(
        patient_id=patient.id,
        doctor_id=appointment.doctor_id,
        date=appointment.date,
        reason=appointment.reason,
        status=AppointmentStatus.PENDING,
    ))
    logger.info("Patient %s booked appointment %s with doctor %s", patient.id, db_appointment.id, db_appointment.doctor_id)
    return db_appointment


@router.get("/{appointment_id}", response_model=AppointmentDetail)
async def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    appointment = storage.get_appointment_with_details(db, appointment_id)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )

    # Only the appointment's patient or doctor may view it
    ensure_participant(db, current_user, appointment)
    return appointment


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    update: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.DOCTOR))
):
    doctor = resolve_doctor_profile(db, current_user)

    appointment = storage.get_appointment_for_update(db, appointment_id)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )

    # Verify the current doctor owns the appointment
    ensure_doctor_owns(doctor, appointment)

    if not can_transition(appointment.status, update.status):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot change appointment status from {appointment.status.value} to {update.status.value}"
        )

    previous = appointment.status
    appointment = storage.update_appointment_status(db, appointment, update.status)
    logger.info("Appointment %s moved from %s to %s by doctor %s", appointment.id, previous.value, appointment.status.value, doctor.id)
    return appointment
