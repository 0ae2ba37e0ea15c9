"""
History Model - saved quick-proposal (chat) answers, scoped by user
"""

import uuid

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class History(Base):
    __tablename__ = "history"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    fit_score = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
