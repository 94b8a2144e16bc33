from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from app.core.database import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    deadline = Column(DateTime(timezone=True), nullable=True)
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    is_approved = Column(Boolean, default=False, nullable=False)
    status = Column(String(32), default="active", nullable=False)
    priority = Column(String(32), default="medium", nullable=False)
    # Denormalized count of project_users rows, the creator counts as one
    noUsers = Column(Integer, default=1, nullable=False)
