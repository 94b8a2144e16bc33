from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from app.core.database import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow


class ProjectStatistic(Base):
    __tablename__ = "project_statistics"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id"), unique=True, nullable=False)
    total_tasks = Column(Integer, default=0, nullable=False)
    completed_tasks = Column(Integer, default=0, nullable=False)
    overdue_tasks = Column(Integer, default=0, nullable=False)
    completion_percentage = Column(Float, default=0.0, nullable=False)
    last_updated = Column(DateTime(timezone=True), default=utcnow)
