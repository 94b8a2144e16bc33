from sqlalchemy import Column, DateTime, String, Text
from app.core.database import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow


class TaskHistory(Base):
    """Append-only audit trail; rows outlive the task they describe."""

    __tablename__ = "task_history"

    id = Column(String(36), primary_key=True, default=new_id)
    task_id = Column(String(36), nullable=False, index=True)
    project_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(36), nullable=True)
    action = Column(String(64), nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    action_time = Column(DateTime(timezone=True), default=utcnow)
