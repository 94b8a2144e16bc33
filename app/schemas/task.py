from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from enum import Enum
from datetime import datetime


class TaskStatus(str, Enum):
    TODO = "0"
    IN_PROGRESS = "1"
    COMPLETED = "2"


class TaskPriority(str, Enum):
    LOW = "0"
    MEDIUM = "1"
    HIGH = "2"


class TaskCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=1, description="Title, unique within the project")
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    status: TaskStatus = Field(..., description="0 (to do), 1 (in progress) or 2 (completed)")
    priority: TaskPriority = Field(..., description="0 (low), 1 (medium) or 2 (high)")
    assignees: List[str] = Field(default_factory=list, description="Assigned user ids")
    project_name: Optional[str] = None


class TaskEdit(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    deadline: Optional[datetime] = None
    status: Optional[TaskStatus] = None


class AddAssigneeRequest(BaseModel):
    assignee_ids: List[str] = Field(..., description="User ids to assign")


class TaskResponse(BaseModel):
    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    status: TaskStatus
    priority: TaskPriority
    creator_id: str
    assignees: List[str] = []
    created_at: datetime
    updated_at: datetime
    project_name: str

    model_config = {"from_attributes": True}


class TaskResult(BaseModel):
    message: str
    task: TaskResponse


class TaskHistoryResponse(BaseModel):
    id: str
    task_id: str
    user_id: Optional[str] = None
    action: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    action_time: datetime

    model_config = {"from_attributes": True}
