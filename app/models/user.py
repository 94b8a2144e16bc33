from sqlalchemy import Column, String, DateTime
from app.core.database import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    registration_otp = Column(String(255), nullable=True)
    registration_otp_expiration = Column(DateTime(timezone=True), nullable=True)
    reset_otp = Column(String(255), nullable=True)
    reset_otp_expiration = Column(DateTime(timezone=True), nullable=True)
    # pending -> verified (OTP confirmed); admins toggle verified <-> blocked
    state = Column(String(16), default="pending", nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    last_login = Column(DateTime(timezone=True), nullable=True)
