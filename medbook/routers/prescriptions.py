import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from medbook import storage
from medbook.core.pdf import render_prescription_pdf
from medbook.core.permissions import ensure_doctor_owns, ensure_participant, require_role, resolve_doctor_profile, resolve_scope
from medbook.core.security import get_current_active_user
from medbook.database import get_db
from medbook.models.user import User, UserRole
from medbook.schemas import PrescriptionCreate, PrescriptionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/prescriptions", tags=["prescriptions"])


@router.get("", response_model=List[PrescriptionResponse])
async def list_prescriptions(
    appointment_id: Optional[int] = Query(None, alias="appointmentId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    role, profile_id = resolve_scope(db, current_user)
    if role == UserRole.PATIENT:
        return storage.get_prescriptions_for_patient(db, profile_id, appointment_id=appointment_id)
    return storage.get_prescriptions_for_doctor(db, profile_id, appointment_id=appointment_id)


@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_prescription(
    prescription: PrescriptionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.DOCTOR))
):
    doctor = resolve_doctor_profile(db, current_user)

    appointment = storage.get_appointment_for_update(db, prescription.appointment_id)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )

    # Only the doctor holding the appointment may prescribe
    ensure_doctor_owns(doctor, appointment)

    if storage.get_prescriptions_by_appointment(db, appointment.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Prescription already exists for this appointment"
        )

    try:
        db_prescription = storage.issue_prescription(
            db,
            appointment,
            medicines=[med.model_dump() for med in prescription.medicines],
            instructions=prescription.instructions,
        )
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Prescription already exists for this appointment"
        )

    logger.info("Doctor %s issued prescription %s; appointment %s completed", doctor.id, db_prescription.id, appointment.id)
    return db_prescription


@router.get("/{prescription_id}/pdf")
async def get_prescription_pdf(
    prescription_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    prescription = storage.get_prescription(db, prescription_id)
    if not prescription:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prescription not found"
        )

    ensure_participant(db, current_user, prescription.appointment)

    return Response(
        content=render_prescription_pdf(prescription),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="prescription_{prescription_id}.pdf"'},
    )
