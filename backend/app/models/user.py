"""
User Model - the pieces of a user the pipeline reads

Authentication and user administration live outside this service; the
pipeline only needs the configured domain and the role.
"""

import uuid
from enum import Enum

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from app.database import Base

# Configured-domain value that bypasses the eligibility gate
ADMIN_DOMAIN = "ADMIN"


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(320), nullable=False, unique=True)
    name = Column(String(200), nullable=False, default="")
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    domain = Column(String(50), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN.value

    @property
    def has_domain_override(self) -> bool:
        return self.is_super_admin or self.domain == ADMIN_DOMAIN
