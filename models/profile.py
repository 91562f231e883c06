from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from database import Base
from utils.time_utils import utc_now


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(10), unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)  # stored lower-cased
    full_name = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    password_hash = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default="USER", server_default="USER")  # USER | ADMIN
    created_at = Column(DateTime, nullable=False, default=utc_now)

    applications = relationship("HousingApplication", back_populates="profile")
