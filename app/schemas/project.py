from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from enum import Enum
from datetime import datetime


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    REVIEWING = "reviewing"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class ProjectPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProjectCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=4, description="The name of the project")
    description: str = Field(..., min_length=4, description="Project description")
    tags: List[str] = Field(default_factory=list, description="Tag names")
    deadline: Optional[datetime] = Field(None, description="Project deadline")
    priority: ProjectPriority = Field(ProjectPriority.MEDIUM, description="Project priority")


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    description: Optional[str] = Field(None, description="Updated description")
    status: Optional[ProjectStatus] = Field(None, description="Updated project status")
    deadline: Optional[datetime] = Field(None, description="Updated deadline")


class AddUsersRequest(BaseModel):
    user_ids: List[str] = Field(..., min_length=1, description="Users to add")


class AddUsersResponse(BaseModel):
    message: str
    added: List[str]


class AddTagsRequest(BaseModel):
    tags: List[str] = Field(..., min_length=1)


class ProjectResponse(BaseModel):
    id: str = Field(..., description="Project unique ID")
    name: str = Field(..., description="Project name")
    description: str = Field(..., description="Project description")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deadline: Optional[datetime] = None
    creator_id: str = Field(..., description="ID of the user who created the project")
    is_approved: bool
    status: ProjectStatus
    priority: ProjectPriority
    noUsers: int = Field(..., description="Number of members")

    model_config = {"from_attributes": True}


class ProjectWithTagsResponse(ProjectResponse):
    tags: List[str] = []


class ProjectStatisticResponse(BaseModel):
    project_id: str
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int
    completion_percentage: float
    last_updated: Optional[datetime] = None

    model_config = {"from_attributes": True}
