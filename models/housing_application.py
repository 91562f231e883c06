from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from utils.time_utils import utc_now

GOVERNORATES = [
    "New Cairo", "6th of October", "New Administrative Capital",
    "El Alamein", "New Mansoura", "Borg El Arab",
    "New Assiut", "New Sohag", "New Minya",
]

HOUSING_TYPES = [
    "Studio Apartment", "1-Bedroom", "2-Bedroom", "3-Bedroom", "Villa",
]

EMPLOYMENT_STATUSES = ["employed", "self-employed", "seeking", "student", "retired"]

APPLICATION_STATUSES = ["pending", "approved", "rejected"]


class HousingApplication(Base):
    __tablename__ = "housing_applications"

    id = Column(Integer, primary_key=True)
    profile_id = Column(Integer, ForeignKey("profiles.id"), index=True, nullable=False)
    full_name = Column(String(100), nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String(50), nullable=True)
    governorate = Column(String(100), nullable=False)
    housing_type = Column(String(50), nullable=False)
    family_size = Column(Integer, nullable=True)
    employment_status = Column(String(50), nullable=True)
    message = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending", server_default="pending")
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)

    profile = relationship("Profile", back_populates="applications")
