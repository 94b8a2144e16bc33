import base64
import binascii
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.api.v1.project_router import ensure_member
from app.core.database import get_db
from app.core.errors import InvalidInputError
from app.models.user import User
from app.schemas.comment import (
    CommentCreate,
    CommentCreated,
    CommentResponse,
    FilesRequest,
    MessagesRequest,
    ReactionRequest,
    ReactionResponse,
)
from app.services.comment_service import CommentService

router = APIRouter()


@router.post("/send-message", response_model=CommentCreated, status_code=201)
def send_message(
    body: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment_id = CommentService(db).post(
        project_id=body.project_id,
        creator_id=current_user.id,
        content=body.content,
        file=body.file.model_dump() if body.file else None,
        task_id=body.task_id,
    )
    return {"message": "Message sent successfully.", "comment_id": comment_id}


@router.post("/messages", response_model=List[CommentResponse])
def get_messages(
    body: MessagesRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_member(db, body.project_id, current_user)
    return CommentService(db).list_by_scope(body.project_id, body.task_id)


@router.post("/get-files", response_model=List[CommentResponse])
def get_files(
    body: FilesRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_member(db, body.project_id, current_user)
    return CommentService(db).list_files_by_project(body.project_id)


@router.get("/download/{comment_id}")
def download_file(
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = CommentService(db).get_file(comment_id)
    ensure_member(db, comment.project_id, current_user)
    try:
        payload = base64.b64decode(comment.file_data, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInputError("Stored file is not valid base64")
    return Response(
        content=payload,
        media_type=comment.file_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{comment.file_name}"'},
    )


@router.put("/like-dislike", response_model=ReactionResponse)
def like_dislike(
    body: ReactionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    reaction = CommentService(db).toggle_reaction(
        body.comment_id, current_user.id, like=body.like == 1
    )
    return {"message": "Like/Dislike updated successfully", "reaction": reaction}
