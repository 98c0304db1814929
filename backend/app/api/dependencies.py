"""Component providers wired from the process settings."""
from __future__ import annotations

from app.core.config import settings
from app.services.completion_client import CompletionClient
from app.services.plan_pipeline import PlanPipeline
from app.services.signature_verifier import SignatureVerifier


def get_signature_verifier() -> SignatureVerifier:
    return SignatureVerifier(settings.clerk_webhook_secret, tolerance_seconds=settings.webhook_tolerance_seconds)


def get_plan_pipeline() -> PlanPipeline:
    return PlanPipeline(CompletionClient.from_settings(settings), settings)
