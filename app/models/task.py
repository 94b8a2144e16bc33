from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow

TODO = "0"
IN_PROGRESS = "1"
COMPLETED = "2"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    deadline = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(1), nullable=False, default=TODO)
    priority = Column(String(1), nullable=False, default="0")
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)
    project_name = Column(String(255), nullable=False)

    assignee_links = relationship(
        "TaskAssignee",
        order_by="TaskAssignee.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def assignees(self):
        return [link.user_id for link in self.assignee_links]

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED


class TaskAssignee(Base):
    __tablename__ = "task_assignees"

    task_id = Column(String(36), ForeignKey("tasks.id"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)
    assigned_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (UniqueConstraint("task_id", "position"),)
