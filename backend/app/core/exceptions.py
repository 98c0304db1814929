"""Error taxonomy shared by the webhook and plan generation paths."""
from __future__ import annotations


class FitPlanError(Exception):
    """Base class for every error raised by the service."""


class ConfigurationError(FitPlanError):
    """A required secret or setting is missing; the process should not serve."""


class WebhookError(FitPlanError):
    """Failure while authenticating or interpreting a webhook delivery."""


class MissingHeaders(WebhookError):
    """One of the svix-id / svix-timestamp / svix-signature headers is absent."""


class InvalidSignature(WebhookError):
    """Signature, timestamp or payload did not verify."""


class MalformedEvent(WebhookError):
    """A verified event is missing data needed to build a user record."""


class GenerationError(FitPlanError):
    """Any failure inside the plan generation pipeline."""

    stage = "generation"


class InvalidRequest(GenerationError):
    stage = "request"


class ProviderError(GenerationError):
    """The LLM provider returned a non-success status or was unreachable."""

    stage = "completion"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedProviderResponse(GenerationError):
    stage = "completion"


class JSONParseError(GenerationError):
    stage = "parse"


class StructuralMismatch(GenerationError):
    stage = "validate"
