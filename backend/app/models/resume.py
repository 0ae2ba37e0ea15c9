"""
ResumeChunk Model - indexed unit of a user's professional background

The relational row is the source of truth (full content, embedding as a
JSON array); the Chroma collection holds the same vector for distance
ordered retrieval.
"""

import uuid

from sqlalchemy import Column, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class ResumeChunk(Base):
    __tablename__ = "resume_chunks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    domain = Column(String(50), nullable=True, index=True)
    role = Column(String(200), nullable=False, default="Manual Upload")
    description = Column(String(500), nullable=False, default="")
    content = Column(Text, nullable=False)
    embedding = Column(JSON, nullable=True)  # Store as JSON array
    chunk_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime, server_default=func.now())
