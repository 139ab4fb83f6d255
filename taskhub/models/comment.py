"""
Task comment model. Comments are append-only.
"""
from typing import Optional
from sqlalchemy import String, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from taskhub.models.base import BaseModel


class Comment(BaseModel):
    __tablename__ = "comments"

    task_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[str] = mapped_column(String(15), nullable=False)
    user_display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    user_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Comment {self.id} on {self.task_id}>"
