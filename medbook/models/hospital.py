from sqlalchemy import JSON, Column, Integer, String
from sqlalchemy.orm import relationship

from medbook.database import Base


class Hospital(Base):
    __tablename__ = "hospitals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    location = Column(String, nullable=False)
    contact = Column(String, nullable=False)
    specializations = Column(JSON, default=list)
    image_url = Column(String, nullable=True)

    # Relationships
    doctors = relationship("Doctor", back_populates="hospital")
