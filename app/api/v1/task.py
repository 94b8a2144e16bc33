from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.api.v1.project_router import ensure_member
from app.core.database import get_db
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.task import (
    AddAssigneeRequest,
    TaskCreate,
    TaskEdit,
    TaskHistoryResponse,
    TaskResponse,
    TaskResult,
)
from app.schemas.user import UserResponse
from app.services.task_service import TaskService

router = APIRouter()


@router.post("/project/{project_id}/create-task", response_model=TaskResult, status_code=201)
def create_task(
    project_id: str,
    body: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_member(db, project_id, current_user)
    task = TaskService(db).create(
        project_id=project_id,
        title=body.title,
        description=body.description,
        deadline=body.deadline,
        status=body.status,
        priority=body.priority,
        creator_id=current_user.id,
        assignees=body.assignees,
        project_name=body.project_name,
    )
    return {"message": "Task created successfully", "task": task}


@router.get("/project/{project_id}/view-tasks", response_model=List[TaskResponse])
def view_tasks_by_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_member(db, project_id, current_user)
    return TaskService(db).list_by_project(project_id)


@router.delete("/project/{project_id}/delete-task/{task_id}", response_model=MessageResponse)
def delete_task(
    project_id: str,
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_member(db, project_id, current_user)
    TaskService(db).delete(task_id, project_id, actor_id=current_user.id)
    return {"message": "Task deleted successfully"}


@router.post("/{task_id}/add-assignee", response_model=TaskResult)
def add_assignee(
    task_id: str,
    body: AddAssigneeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = TaskService(db)
    ensure_member(db, service.get(task_id).project_id, current_user)
    task = service.add_assignees(task_id, body.assignee_ids, actor_id=current_user.id)
    return {"message": "Assignee added successfully", "task": task}


@router.put("/{task_id}/edit-details", response_model=TaskResult)
def edit_task_details(
    task_id: str,
    body: TaskEdit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = TaskService(db)
    ensure_member(db, service.get(task_id).project_id, current_user)
    task = service.edit_details(
        task_id, body.model_dump(exclude_unset=True), actor_id=current_user.id
    )
    return {"message": "Task updated successfully", "task": task}


@router.get("/{task_id}/assigned-users", response_model=List[UserResponse])
def get_assigned_users(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return TaskService(db).list_assigned_users(task_id)


@router.get("/{task_id}/history", response_model=List[TaskHistoryResponse])
def get_task_history(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = TaskService(db)
    ensure_member(db, service.get(task_id).project_id, current_user)
    return service.history(task_id)


@router.get("/user/{user_id}/created-tasks", response_model=List[TaskResponse])
def get_tasks_created_by_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return TaskService(db).list_created_by(user_id)


@router.get("/user/{user_id}/assigned-tasks", response_model=List[TaskResponse])
def get_tasks_assigned_to_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return TaskService(db).list_assigned_to(user_id)
