"""
Task comments. Anyone who can see a task can read and post comments;
comments cannot be edited or deleted.
"""
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from taskhub.core.errors import ValidationError
from taskhub.core.identity import ActingUser
from taskhub.db.base import translate_store_errors
from taskhub.models.comment import Comment
from taskhub.services.tasks import load_task_context

logger = logging.getLogger(__name__)


async def add_comment(db: AsyncSession, task_id: str, text: str, actor: ActingUser) -> Comment:
    text = text.strip()
    if not text:
        raise ValidationError("Comment cannot be empty")

    await load_task_context(db, task_id, actor)
    comment = Comment(
        task_id=task_id,
        user_id=actor.id,
        user_display_name=actor.display_name or "Anonymous",
        user_email=actor.email,
        text=text,
    )
    async with translate_store_errors(db, "post the comment"):
        db.add(comment)
        await db.commit()

    logger.info("Comment posted task=%s user=%s", task_id, actor.id)
    return comment


async def list_comments(db: AsyncSession, task_id: str, actor: ActingUser) -> list[Comment]:
    """Oldest first."""
    await load_task_context(db, task_id, actor)
    async with translate_store_errors(db, "load comments"):
        result = await db.execute(
            select(Comment).where(Comment.task_id == task_id).order_by(Comment.created.asc(), Comment.id)
        )
        return list(result.scalars().all())
