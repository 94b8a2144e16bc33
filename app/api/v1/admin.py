import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_admin
from app.core.database import get_db
from app.core.errors import ConflictError, NotFoundError
from app.core.security import create_access_token, verify_password
from app.models.admin import Admin
from app.models.user import User
from app.schemas.admin import (
    AdminSignInRequest,
    ApprovalResult,
    ProjectApprovalRequest,
    ProjectApprovalResponse,
)
from app.schemas.auth import MessageResponse, TokenResponse
from app.schemas.project import ProjectStatisticResponse, ProjectWithTagsResponse
from app.schemas.user import UserResponse, UserStateRequest
from app.services.approval_service import ApprovalService
from app.services.project_service import ProjectService
from app.services.statistics_service import StatisticsService
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def admin_sign_in(body: AdminSignInRequest, db: Session = Depends(get_db)):
    admin = db.query(Admin).filter(Admin.email == body.email).first()
    if not admin or not verify_password(body.password, admin.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )
    admin.last_login = utcnow()
    db.commit()

    token = create_access_token(data={"sub": admin.email, "role": "admin"})
    return {"access_token": token, "token_type": "bearer", "name": admin.name}


@router.post("/approve-project", response_model=ApprovalResult)
def approve_project(
    body: ProjectApprovalRequest,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    approval = ApprovalService(db).approve(
        body.project_id, current_admin.id, body.status.value
    )
    return {
        "message": f"Project has been {approval.status} successfully.",
        "approval": approval,
    }


@router.get("/projects/{project_id}/approvals", response_model=List[ProjectApprovalResponse])
def get_project_approvals(
    project_id: str,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    ProjectService(db).get(project_id)
    return ApprovalService(db).history(project_id)


@router.get("/users", response_model=List[UserResponse])
def get_all_users(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return (
        db.query(User)
        .filter(User.state != "pending")
        .order_by(User.created_at.asc())
        .all()
    )


@router.get("/projects", response_model=List[ProjectWithTagsResponse])
def get_all_projects(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return ProjectService(db).list_all()


@router.put("/user-state", response_model=MessageResponse)
def toggle_user_state(
    body: UserStateRequest,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    user = db.query(User).filter(User.id == body.user_id).first()
    if not user:
        raise NotFoundError("User not found")

    if user.state == "verified":
        user.state = "blocked"
    elif user.state == "blocked":
        user.state = "verified"
    else:
        raise ConflictError("User not verified yet")

    db.commit()
    logger.info(f"Admin {current_admin.id} set user {user.id} to {user.state}")
    return {"message": "User state updated successfully"}


@router.post(
    "/projects/{project_id}/reconcile-statistics",
    response_model=ProjectStatisticResponse,
)
def reconcile_statistics(
    project_id: str,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    ProjectService(db).get(project_id)
    return StatisticsService(db).reconcile(project_id)
