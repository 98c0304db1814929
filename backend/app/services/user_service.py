"""Persistence helpers for identity-provider users."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.user import User

if TYPE_CHECKING:
    from app.services.event_dispatcher import UserSyncRecord

logger = logging.getLogger(__name__)


def get_user_by_clerk_id(db: Session, clerk_id: str) -> Optional[User]:
    return db.query(User).filter(User.clerk_id == clerk_id).one_or_none()


def sync_user(db: Session, record: UserSyncRecord) -> User:
    """Insert the user on first sight; an existing row is returned untouched."""
    existing = get_user_by_clerk_id(db, record.clerk_id)
    if existing:
        return existing

    user = User(clerk_id=record.clerk_id, email=record.email, name=record.name, image=record.image)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent delivery for the same account won the insert.
        db.rollback()
        existing = get_user_by_clerk_id(db, record.clerk_id)
        if existing:
            return existing
        raise
    db.refresh(user)
    return user


def update_user(db: Session, record: UserSyncRecord) -> Optional[User]:
    """Apply profile changes to a known user; unknown accounts are ignored."""
    user = get_user_by_clerk_id(db, record.clerk_id)
    if not user:
        logger.warning("user.updated received for unknown clerk_id=%s; skipping", record.clerk_id)
        return None

    user.email = record.email
    user.name = record.name
    user.image = record.image
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
