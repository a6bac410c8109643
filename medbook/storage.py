"""
Storage access: typed CRUD and join queries over the ORM.

No authorization happens here; callers pass an open ``Session`` and decide who
may do what. Writes commit unless noted otherwise.
"""
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager, joinedload

from medbook.models.appointment import Appointment, AppointmentStatus
from medbook.models.doctor import Doctor
from medbook.models.hospital import Hospital
from medbook.models.patient import Patient
from medbook.models.prescription import Prescription
from medbook.models.user import User


def _save(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def _appointment_details():
    return (
        joinedload(Appointment.patient).joinedload(Patient.user),
        joinedload(Appointment.doctor).joinedload(Doctor.user),
        joinedload(Appointment.doctor).joinedload(Doctor.hospital),
    )


# Users

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def register_user(
    db: Session,
    user: User,
    patient: Optional[Patient] = None,
    doctor: Optional[Doctor] = None,
) -> User:
    """Insert a user together with its role profile in one transaction."""
    try:
        db.add(user)
        db.flush()
        if patient is not None:
            patient.user_id = user.id
            db.add(patient)
        if doctor is not None:
            doctor.user_id = user.id
            db.add(doctor)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(user)
    return user


# Patients

def get_patient_by_user_id(db: Session, user_id: int) -> Optional[Patient]:
    return db.query(Patient).filter(Patient.user_id == user_id).first()


# Doctors

def get_doctor(db: Session, doctor_id: int) -> Optional[Doctor]:
    return db.get(Doctor, doctor_id)


def get_doctor_by_user_id(db: Session, user_id: int) -> Optional[Doctor]:
    return db.query(Doctor).filter(Doctor.user_id == user_id).first()


def get_doctor_with_user(db: Session, doctor_id: int) -> Optional[Doctor]:
    return (
        db.query(Doctor)
        .options(joinedload(Doctor.user), joinedload(Doctor.hospital))
        .filter(Doctor.id == doctor_id)
        .first()
    )


def get_doctors(
    db: Session,
    specialization: Optional[str] = None,
    hospital_id: Optional[int] = None,
    search: Optional[str] = None,
) -> List[Doctor]:
    """Directory listing; all given filters must match."""
    query = (
        db.query(Doctor)
        .join(Doctor.user)
        .options(contains_eager(Doctor.user), joinedload(Doctor.hospital))
    )

    if specialization:
        query = query.filter(Doctor.specialization == specialization)
    if hospital_id is not None:
        query = query.filter(Doctor.hospital_id == hospital_id)
    if search:
        query = query.filter(User.name.icontains(search, autoescape=True))

    return query.order_by(Doctor.id).all()


# Hospitals

def create_hospital(db: Session, hospital: Hospital) -> Hospital:
    return _save(db, hospital)


def get_hospitals(db: Session) -> List[Hospital]:
    return db.query(Hospital).order_by(Hospital.id).all()


def get_hospital(db: Session, hospital_id: int) -> Optional[Hospital]:
    return db.get(Hospital, hospital_id)


# Appointments

def create_appointment(db: Session, appointment: Appointment) -> Appointment:
    return _save(db, appointment)


def appointment_for_update(db: Session, appointment_id: int):
    """Row-locking query for an appointment about to change status."""
    return db.query(Appointment).filter(Appointment.id == appointment_id).with_for_update()


def get_appointment_for_update(db: Session, appointment_id: int) -> Optional[Appointment]:
    """
    Load an appointment holding a row lock until the session commits.

    Status checks made after this call cannot be overtaken by a concurrent
    writer on databases that support ``SELECT ... FOR UPDATE``.
    """
    return appointment_for_update(db, appointment_id).first()


def get_appointment_with_details(db: Session, appointment_id: int) -> Optional[Appointment]:
    return (
        db.query(Appointment)
        .options(*_appointment_details())
        .filter(Appointment.id == appointment_id)
        .first()
    )


def get_appointments_by_patient(db: Session, patient_id: int) -> List[Appointment]:
    return (
        db.query(Appointment)
        .options(*_appointment_details())
        .filter(Appointment.patient_id == patient_id)
        .order_by(Appointment.date.desc(), Appointment.id.desc())
        .all()
    )


def get_appointments_by_doctor(db: Session, doctor_id: int) -> List[Appointment]:
    return (
        db.query(Appointment)
        .options(*_appointment_details())
        .filter(Appointment.doctor_id == doctor_id)
        .order_by(Appointment.date.desc(), Appointment.id.desc())
        .all()
    )


def update_appointment_status(db: Session, appointment: Appointment, status: AppointmentStatus) -> Appointment:
    appointment.status = status
    db.commit()
    db.refresh(appointment)
    return appointment


# Prescriptions

def issue_prescription(
    db: Session,
    appointment: Appointment,
    medicines: Iterable[dict],
    instructions: Optional[str] = None,
) -> Prescription:
    """
    Record a prescription and move its appointment to ``completed``.

    Both writes share one commit, so a failure leaves neither applied.
    """
    prescription = Prescription(
        appointment_id=appointment.id,
        medicines=list(medicines),
        instructions=instructions,
    )
    try:
        db.add(prescription)
        appointment.status = AppointmentStatus.COMPLETED
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(prescription)
    return prescription


def get_prescription(db: Session, prescription_id: int) -> Optional[Prescription]:
    return db.get(Prescription, prescription_id)


def get_prescriptions_by_appointment(db: Session, appointment_id: int) -> List[Prescription]:
    return db.query(Prescription).filter(Prescription.appointment_id == appointment_id).all()


def get_prescriptions_for_patient(db: Session, patient_id: int, appointment_id: Optional[int] = None) -> List[Prescription]:
    query = db.query(Prescription).join(Prescription.appointment).filter(Appointment.patient_id == patient_id)
    if appointment_id is not None:
        query = query.filter(Prescription.appointment_id == appointment_id)
    return query.order_by(Prescription.id.desc()).all()


def get_prescriptions_for_doctor(db: Session, doctor_id: int, appointment_id: Optional[int] = None) -> List[Prescription]:
    query = db.query(Prescription).join(Prescription.appointment).filter(Appointment.doctor_id == doctor_id)
    if appointment_id is not None:
        query = query.filter(Prescription.appointment_id == appointment_id)
    return query.order_by(Prescription.id.desc()).all()
