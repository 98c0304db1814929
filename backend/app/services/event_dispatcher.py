"""Route verified identity-provider events to user persistence."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.schemas.webhook import ClerkUserData, ClerkWebhookEvent
from app.core.exceptions import MalformedEvent
from app.services.user_service import sync_user, update_user

logger = logging.getLogger(__name__)

USER_CREATED = "user.created"
USER_UPDATED = "user.updated"


@dataclass(frozen=True)
class UserSyncRecord:
    clerk_id: str
    email: str
    name: str
    image: Optional[str]


def build_user_sync_record(data: Mapping[str, Any]) -> UserSyncRecord:
    """Project a Clerk user payload onto the fields we persist."""
    try:
        user = ClerkUserData.model_validate(data)
    except ValidationError as exc:
        raise MalformedEvent(f"Invalid user payload: {exc.error_count()} error(s)") from exc
    if not user.email_addresses:
        raise MalformedEvent(f"User {user.id} has no email addresses")

    name = f"{user.first_name or ''} {user.last_name or ''}".strip()
    return UserSyncRecord(
        clerk_id=user.id,
        email=user.email_addresses[0].email_address,
        name=name,
        image=user.image_url,
    )


def dispatch_event(db: Session, event: ClerkWebhookEvent) -> Optional[str]:
    """Run the sync operation for the event kind.

    Returns the handled kind, or None when the event was ignored. Unsupported
    kinds and events without an email address are skipped so the delivery can
    still be acknowledged.
    """
    handlers = {USER_CREATED: sync_user, USER_UPDATED: update_user}
    handler = handlers.get(event.type)
    if handler is None:
        logger.debug("Ignoring webhook event type=%s", event.type)
        return None

    try:
        record = build_user_sync_record(event.data)
    except MalformedEvent as exc:
        logger.warning("Skipping %s event: %s", event.type, exc)
        return None

    handler(db, record)
    logger.info("Processed %s for clerk_id=%s", event.type, record.clerk_id)
    return event.type
