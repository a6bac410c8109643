import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from medbook import storage
from medbook.core.security import (
    get_current_active_user,
    get_password_hash,
    login_user,
    logout_user,
    verify_password,
)
from medbook.database import get_db
from medbook.models.doctor import Doctor
from medbook.models.patient import Patient
from medbook.models.user import User
from medbook.schemas import UserCreate, UserLogin, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, request: Request, db: Session = Depends(get_db)):
    # Check if username is taken
    if storage.get_user_by_username(db, user_data.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists"
        )

    patient = None
    if user_data.patient_details is not None:
        patient = Patient(**user_data.patient_details.model_dump())

    doctor = None
    if user_data.doctor_details is not None:
        details = user_data.doctor_details
        if details.hospital_id is not None and not storage.get_hospital(db, details.hospital_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Hospital not found"
            )
        doctor = Doctor(**details.model_dump())

    db_user = User(
        username=user_data.username,
        password=get_password_hash(user_data.password),
        role=user_data.role,
        name=user_data.name,
        email=user_data.email,
    )

    try:
        db_user = storage.register_user(db, db_user, patient=patient, doctor=doctor)
    except IntegrityError:
        # Lost a race on the unique username
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists"
        )

    logger.info("Registered %s %s (user %s)", db_user.role.value, db_user.username, db_user.id)
    login_user(request, db_user)
    return db_user


@router.post("/login", response_model=UserResponse)
async def login(user_data: UserLogin, request: Request, db: Session = Depends(get_db)):
    user = storage.get_user_by_username(db, user_data.username)
    if not user or not verify_password(user_data.password, user.password):
        logger.warning("Failed login for %s", user_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password"
        )

    login_user(request, user)
    logger.info("User %s logged in", user.id)
    return user


@router.post("/logout")
async def logout(request: Request):
    logout_user(request)
    return {"message": "Logged out"}


@router.get("/user", response_model=UserResponse)
async def get_user(current_user: User = Depends(get_current_active_user)):
    return current_user
