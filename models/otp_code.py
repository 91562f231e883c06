from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index
from database import Base
from utils.time_utils import utc_now


class OtpCode(Base):
    __tablename__ = "otp_codes"

    id = Column(Integer, primary_key=True)
    email = Column(String, index=True, nullable=False)  # not unique, issuance history is retained
    full_name = Column(String(100), nullable=False)
    code = Column(String(6), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_otp_codes_email_used_created", "email", "used", "created_at"),
    )
