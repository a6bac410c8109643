import logging

from sqlalchemy.orm import Session

from medbook import storage
from medbook.core.security import get_password_hash
from medbook.models.doctor import Doctor
from medbook.models.hospital import Hospital
from medbook.models.patient import Patient
from medbook.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"


def seed_database(db: Session) -> bool:
    """Insert demo hospitals and accounts; a no-op once any hospital exists."""
    if storage.get_hospitals(db):
        return False

    logger.info("Seeding database...")
    hashed_password = get_password_hash(DEMO_PASSWORD)

    city_general = storage.create_hospital(db, Hospital(
        name="City General Hospital",
        location="Downtown",
        contact="555-0123",
        specializations=["Cardiology", "Neurology", "General Surgery"],
    ))
    sunrise = storage.create_hospital(db, Hospital(
        name="Sunrise Pediatrics",
        location="Westside",
        contact="555-0199",
        specializations=["Pediatrics", "Vaccination"],
    ))

    storage.register_user(db, User(
        username="admin",
        password=hashed_password,
        role=UserRole.ADMIN,
        name="Admin User",
        email="admin@health.com",
    ))

    storage.register_user(
        db,
        User(
            username="doctor1",
            password=hashed_password,
            role=UserRole.DOCTOR,
            name="Dr. Sarah Smith",
            email="sarah@citygeneral.com",
        ),
        doctor=Doctor(
            specialization="Cardiology",
            hospital_id=city_general.id,
            experience=10,
            consultation_fee=150,
            availability=["Mon 09:00-17:00", "Wed 09:00-17:00", "Fri 09:00-13:00"],
        ),
    )
    storage.register_user(
        db,
        User(
            username="doctor2",
            password=hashed_password,
            role=UserRole.DOCTOR,
            name="Dr. John Doe",
            email="john@sunrise.com",
        ),
        doctor=Doctor(
            specialization="Pediatrics",
            hospital_id=sunrise.id,
            experience=5,
            consultation_fee=100,
            availability=["Tue 09:00-17:00", "Thu 09:00-17:00"],
        ),
    )

    storage.register_user(
        db,
        User(
            username="patient1",
            password=hashed_password,
            role=UserRole.PATIENT,
            name="Alice Johnson",
            email="alice@example.com",
        ),
        patient=Patient(age=30, gender="Female", contact="555-1001", medical_history="None"),
    )

    logger.info("Database seeded successfully")
    return True
