from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from medbook import storage
from medbook.database import get_db
from medbook.schemas import DoctorDetail

router = APIRouter(prefix="/api/doctors", tags=["doctors"])


@router.get("", response_model=List[DoctorDetail])
async def list_doctors(
    specialization: Optional[str] = None,
    hospital_id: Optional[int] = Query(None, alias="hospitalId"),
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return storage.get_doctors(
        db,
        specialization=specialization,
        hospital_id=hospital_id,
        search=search,
    )


@router.get("/{doctor_id}", response_model=DoctorDetail)
async def get_doctor(
    doctor_id: int,
    db: Session = Depends(get_db)
):
    doctor = storage.get_doctor_with_user(db, doctor_id)
    if not doctor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Doctor not found"
        )

    return doctor
