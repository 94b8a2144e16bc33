from sqlalchemy import Column, DateTime, ForeignKey, String
from app.core.database import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow


class ProjectUser(Base):
    __tablename__ = "project_users"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), default=utcnow)
