"""Generated fitness plan ORM model."""
from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Index, String, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base
from app.db.types import JSONBCompat


class Plan(Base):
    __tablename__ = "plans"
    __table_args__ = (Index("ix_plans_user_id_active", "user_id", "is_active"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    # Identity-provider user id as sent by the voice assistant, not users.id.
    user_id = Column(String(length=255), nullable=False)
    name = Column(String(length=255), nullable=False)
    workout_plan = Column(JSONBCompat, nullable=False)
    diet_plan = Column(JSONBCompat, nullable=False)
    is_active = Column(Boolean, nullable=False, server_default="true")
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )
