"""Schemas for identity-provider webhook deliveries."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ClerkWebhookEvent(BaseModel):
    """Verified event envelope; `data` stays loose until the kind is known."""

    model_config = ConfigDict(extra="ignore")

    type: str
    data: Dict[str, Any] = Field(default_factory=dict)


class EmailAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email_address: str


class ClerkUserData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None
    email_addresses: List[EmailAddress] = Field(default_factory=list)
