"""
Task comment endpoints.

Endpoints:
- GET /api/v1/tasks/{id}/comments - List comments, oldest first
- POST /api/v1/tasks/{id}/comments - Post a comment
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.base import get_db
from taskhub.core.deps import get_acting_user
from taskhub.core.identity import ActingUser
from taskhub.models.comment import Comment
from taskhub.schemas.task import CommentCreate, CommentResponse
from taskhub.services import comments as comment_service

router = APIRouter()


def comment_to_response(comment: Comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        taskId=comment.task_id,
        userId=comment.user_id,
        userDisplayName=comment.user_display_name,
        userEmail=comment.user_email,
        text=comment.text,
        createdAt=comment.created,
    )


@router.get("/{task_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    comments = await comment_service.list_comments(db, task_id, actor)
    return [comment_to_response(c) for c in comments]


@router.post("/{task_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    task_id: str,
    comment_data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    comment = await comment_service.add_comment(db, task_id, comment_data.text, actor)
    return comment_to_response(comment)
