from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.models.user import User
from app.schemas.user import UserResponse
from app.schemas.task import TaskResponse
from app.api.v1.auth import get_current_user
from app.services.task_service import TaskService

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def get_user_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/all", response_model=List[UserResponse])
def get_all_users(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # Pending accounts cannot sign in, so they are not offered as members
    return (
        db.query(User)
        .filter(User.state != "pending")
        .order_by(User.created_at.asc())
        .all()
    )


@router.get("/me/created-tasks", response_model=List[TaskResponse])
def get_my_created_tasks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TaskService(db).list_created_by(current_user.id)


@router.get("/me/assigned-tasks", response_model=List[TaskResponse])
def get_my_assigned_tasks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TaskService(db).list_assigned_to(current_user.id)
