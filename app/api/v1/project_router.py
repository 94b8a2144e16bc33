from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.core.errors import ForbiddenError
from app.models.project import Project
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.project import (
    AddTagsRequest,
    AddUsersRequest,
    AddUsersResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectStatisticResponse,
    ProjectUpdate,
    ProjectWithTagsResponse,
)
from app.schemas.user import MemberResponse
from app.services.membership_service import MembershipService
from app.services.project_service import ProjectService
from app.services.statistics_service import StatisticsService

router = APIRouter()


def ensure_member(db: Session, project_id: str, user: User) -> Project:
    project = ProjectService(db).get(project_id)
    if not MembershipService(db).is_member(project_id, user.id):
        raise ForbiddenError("User is not part of this project")
    return project


@router.post("/", response_model=ProjectResponse, status_code=201)
def create_project(
    body: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ProjectService(db).create(
        creator_id=current_user.id,
        name=body.name,
        description=body.description,
        deadline=body.deadline,
        priority=body.priority,
        tags=body.tags,
    )


@router.get("/my-created-projects", response_model=List[ProjectWithTagsResponse])
def get_my_created_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ProjectService(db).list_created_by(current_user.id)


@router.get("/my-assigned-projects", response_model=List[ProjectWithTagsResponse])
def get_my_assigned_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ProjectService(db).list_assigned_to(current_user.id)


@router.get("/{project_id}", response_model=ProjectWithTagsResponse)
def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project = ensure_member(db, project_id, current_user)
    return ProjectService(db).with_tags([project])[0]


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    body: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ProjectService(db).update(
        project_id,
        current_user.id,
        description=body.description,
        status=body.status,
        deadline=body.deadline,
    )


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ProjectService(db).delete(project_id, current_user.id)
    return {"message": "Project deleted successfully"}


@router.post("/{project_id}/users", response_model=AddUsersResponse)
def add_users(
    project_id: str,
    body: AddUsersRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ProjectService(db).get_owned(project_id, current_user.id)
    added = MembershipService(db).add_members(project_id, body.user_ids)
    return {"message": "Users added successfully", "added": added}


@router.get("/{project_id}/users", response_model=List[MemberResponse])
def get_project_users(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_member(db, project_id, current_user)
    return MembershipService(db).list_members(project_id)


@router.post("/{project_id}/tags", response_model=List[str])
def add_project_tags(
    project_id: str,
    body: AddTagsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ProjectService(db).get_owned(project_id, current_user.id)
    return ProjectService(db).add_tags(project_id, body.tags)


@router.get("/{project_id}/statistics", response_model=ProjectStatisticResponse)
def get_project_statistics(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_member(db, project_id, current_user)
    return StatisticsService(db).get_statistics(project_id)
