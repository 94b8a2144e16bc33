from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class FileSchema(BaseModel):
    fileName: str
    fileType: str
    fileSize: int
    data: str = Field(..., description="Base64 encoded file data")


class CommentCreate(BaseModel):
    project_id: str = Field(..., min_length=1, description="Project ID is required.")
    task_id: Optional[str] = None
    content: Optional[str] = None
    file: Optional[FileSchema] = None


class CommentCreated(BaseModel):
    success: bool = True
    message: str
    comment_id: str


class MessagesRequest(BaseModel):
    project_id: str = Field(..., min_length=1)
    task_id: Optional[str] = None


class FilesRequest(BaseModel):
    project_id: str = Field(..., min_length=1)


class ReactionRequest(BaseModel):
    comment_id: str
    # 1 = like, 0 = dislike
    like: int = Field(..., ge=0, le=1)


class ReactionState(str, Enum):
    NONE = "none"
    LIKED = "liked"
    DISLIKED = "disliked"


class ReactionResponse(BaseModel):
    success: bool = True
    message: str
    reaction: ReactionState


class CommentResponse(BaseModel):
    id: str
    project_id: str
    task_id: Optional[str] = None
    creator_id: str
    content: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    file_data: Optional[str] = None
    created_at: datetime
    likes: List[str] = []
    dislike: List[str] = []

    model_config = {"from_attributes": True}
