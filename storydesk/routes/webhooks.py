"""Identity provider webhook receiver."""

import json
import logging

from fastapi import APIRouter, HTTPException, Request
from svix.webhooks import Webhook, WebhookVerificationError

from storydesk import cloud
from storydesk.webhooks import handle_event

from .deps import require_cloud

logger = logging.getLogger(__name__)

router = APIRouter()

_SVIX_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


@router.post("/webhooks/identity")
async def identity_webhook(request: Request):
    """Verify a signed account event and mirror it into profiles."""
    secret: str | None = request.app.state.webhook_secret
    if not secret:
        raise HTTPException(500, "Webhook secret not configured")

    headers = {name: request.headers.get(name) for name in _SVIX_HEADERS}
    if not all(headers.values()):
        raise HTTPException(400, "Missing svix headers")

    body = await request.body()
    try:
        event = json.loads(body)
    except ValueError:
        raise HTTPException(400, "Invalid payload")
    if not isinstance(event, dict):
        raise HTTPException(400, "Invalid payload")

    # Only the signature check is used; verify() returns None on svix 2.x.
    try:
        Webhook(secret).verify(body, headers)
    except WebhookVerificationError as e:
        logger.warning("Webhook signature verification failed: %s", e)
        raise HTTPException(400, "Invalid signature")

    require_cloud()
    try:
        await handle_event(event)
    except cloud.PersistenceError as e:
        logger.error("Error processing webhook %s: %s", event.get("type"), e)
        raise HTTPException(500, "Error processing webhook")
    return {"message": "Webhook processed successfully"}
