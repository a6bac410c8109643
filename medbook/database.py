from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from medbook.core.config import get_settings

settings = get_settings()


def create_database_engine(database_url: str, echo: bool = False):
    if database_url.startswith("sqlite"):
        # Requests run in a threadpool
        return create_engine(database_url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


engine = create_database_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None) -> None:
    # Import models so every table is registered on Base.metadata
    from medbook.models import appointment, doctor, hospital, patient, prescription, user  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
