from sqlalchemy import Column, DateTime, ForeignKey, String
from app.core.database import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow


class ProjectApproval(Base):
    __tablename__ = "project_approvals"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    admin_id = Column(String(36), ForeignKey("admins.id"), nullable=False)
    status = Column(String(16), nullable=False)
    approval_date = Column(DateTime(timezone=True), default=utcnow)
