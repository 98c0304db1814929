"""Identity-provider webhook receiver."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.api.dependencies import get_signature_verifier
from app.core.exceptions import InvalidSignature, MissingHeaders
from app.db.deps import get_db
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.event_dispatcher import dispatch_event
from app.services.signature_verifier import SignatureVerifier

logger = logging.getLogger(__name__)

router = APIRouter()

ACK_MESSAGE = "Webhooks processed successfully"


@router.post("/clerk-webhook", response_class=PlainTextResponse, tags=["webhooks"])
async def clerk_webhook(
    request: Request,
    db: Session = Depends(get_db),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> PlainTextResponse:
    request_id = getattr(request.state, "request_id", None)
    raw_body = await request.body()

    try:
        event = verifier.verify(raw_body, request.headers)
    except MissingHeaders:
        log_metric("webhook.rejected", 1, metadata={"reason": "missing_headers"})
        return PlainTextResponse("No svix headers found", status_code=status.HTTP_400_BAD_REQUEST)
    except InvalidSignature as exc:
        logger.error("Error verifying webhook: %s", exc)
        log_metric("webhook.rejected", 1, metadata={"reason": "invalid_signature"})
        return PlainTextResponse("Error occurred", status_code=status.HTTP_400_BAD_REQUEST)

    metadata = {"event_type": event.type, "svix_id": request.headers.get("svix-id"), "request_id": request_id}
    with trace("webhook.clerk", metadata=metadata, request_id=request_id):
        handled = await run_in_threadpool(dispatch_event, db, event)

    log_metric("webhook.processed", 1, metadata={"event_type": event.type, "handled": bool(handled)})
    return PlainTextResponse(ACK_MESSAGE, status_code=status.HTTP_200_OK)
