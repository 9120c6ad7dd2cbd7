"""Question and reply Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel


class QuestionRecord(BaseModel):
    id: int
    property_id: str
    property_name: str
    user_id: str
    text: str
    reply_count: int = 0
    timestamp: datetime | None = None

    model_config = {"from_attributes": True}


class ReplyRecord(BaseModel):
    id: int
    question_id: int
    user_id: str
    text: str
    timestamp: datetime | None = None

    model_config = {"from_attributes": True}
