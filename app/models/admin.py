from sqlalchemy import Column, String, DateTime
from app.core.database import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow


class Admin(Base):
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    last_login = Column(DateTime(timezone=True), nullable=True)
