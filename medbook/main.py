import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from medbook.core.config import get_settings
from medbook.core.errors import register_exception_handlers
from medbook.core.logging_config import setup_logging
from medbook.core.seed import seed_database
from medbook.database import SessionLocal, init_db
from medbook.routers import appointments, auth, doctors, hospitals, prescriptions

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

# Create database tables
init_db()

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Session cookie carrying the logged-in user id
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
)

register_exception_handlers(app)

# Include routers
app.include_router(auth.router)
app.include_router(doctors.router)
app.include_router(hospitals.router)
app.include_router(appointments.router)
app.include_router(prescriptions.router)


@app.on_event("startup")
async def startup_event():
    logger.info("Starting %s %s", settings.PROJECT_NAME, settings.VERSION)
    if not settings.SEED_DATABASE:
        return
    db = SessionLocal()
    try:
        seed_database(db)
    finally:
        db.close()


@app.get("/")
async def root():
    return {"message": "Welcome to MedBook Appointment API"}
