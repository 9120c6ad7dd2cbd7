"""Community Q&A database models."""

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ratemyrez.core.database import Base


class Question(Base):
    """Question asked about a property."""

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    app_id: Mapped[str] = mapped_column(String(100), index=True)
    property_id: Mapped[str] = mapped_column(String(200), index=True)
    property_name: Mapped[str] = mapped_column(String(200))
    user_id: Mapped[str] = mapped_column(String(64))
    text: Mapped[str] = mapped_column(Text)
    reply_count: Mapped[int] = mapped_column(default=0)  # written once, never maintained
    timestamp: Mapped[datetime | None] = mapped_column(nullable=True, index=True)


class Reply(Base):
    """Answer in a question's reply thread.

    ``question_id`` is a plain filter field, not a foreign key.
    """

    __tablename__ = "replies"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    app_id: Mapped[str] = mapped_column(String(100), index=True)
    question_id: Mapped[int] = mapped_column(index=True)
    user_id: Mapped[str] = mapped_column(String(64))
    text: Mapped[str] = mapped_column(Text)
    timestamp: Mapped[datetime | None] = mapped_column(nullable=True, index=True)
