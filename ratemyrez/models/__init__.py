"""Database models - import all so Base.metadata knows every table."""

from ratemyrez.models.account import Account, PasswordResetToken
from ratemyrez.models.question import Question, Reply
from ratemyrez.models.review import Review, ReviewVote

__all__ = [
    "Account",
    "PasswordResetToken",
    "Question",
    "Reply",
    "Review",
    "ReviewVote",
]
