"""Review database models."""

from datetime import UTC, datetime

from sqlalchemy import JSON, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ratemyrez.core.database import Base


class Review(Base):
    """Star-rated review of a property."""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    app_id: Mapped[str] = mapped_column(String(100), index=True)

    # Denormalized property copy for display without a join
    property_id: Mapped[str] = mapped_column(String(200), index=True)
    property_name: Mapped[str] = mapped_column(String(200))
    category: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Author, immutable after creation
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    user_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    rating: Mapped[int]
    location_rating: Mapped[int | None] = mapped_column(default=0, nullable=True)  # 0 = unset
    rent: Mapped[float | None] = mapped_column(default=0, nullable=True)  # 0 = unset
    distance: Mapped[float | None] = mapped_column(default=0, nullable=True)  # minutes walking
    comment: Mapped[str] = mapped_column(Text, default="")
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)  # data URL
    student_level: Mapped[str | None] = mapped_column(String(20), nullable=True)

    helpful_count: Mapped[int] = mapped_column(default=0)

    # Server-assigned times
    timestamp: Mapped[datetime | None] = mapped_column(nullable=True, index=True)
    last_edited: Mapped[datetime | None] = mapped_column(nullable=True)

    votes: Mapped[list["ReviewVote"]] = relationship(
        back_populates="review",
        order_by="ReviewVote.id",
        cascade="all, delete-orphan",
    )

    @property
    def voted_uids(self) -> list[str]:
        return [vote.voter_uid for vote in self.votes]


class ReviewVote(Base):
    """One helpful-vote; a voter appears at most once per review."""

    __tablename__ = "review_votes"
    __table_args__ = (UniqueConstraint("review_id", "voter_uid", name="uq_review_vote"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    review_id: Mapped[int] = mapped_column(ForeignKey("reviews.id"), index=True)
    voter_uid: Mapped[str] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    review: Mapped[Review] = relationship(back_populates="votes")
