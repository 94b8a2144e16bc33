from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from enum import Enum


class AdminSignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)


class ApprovalDecision(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class ProjectApprovalRequest(BaseModel):
    project_id: str = Field(..., min_length=1, description="Project to decide on")
    status: ApprovalDecision = Field(..., description="Admin decision")


class ProjectApprovalResponse(BaseModel):
    id: str
    project_id: str
    admin_id: str
    status: ApprovalDecision
    approval_date: datetime

    model_config = {"from_attributes": True}


class ApprovalResult(BaseModel):
    message: str
    approval: ProjectApprovalResponse
