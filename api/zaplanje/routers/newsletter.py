"""Newsletter subscription endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Response, status

from .. import schemas
from ..auth import require_authenticated
from ..deps import get_store
from ..store import SqlContentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/newsletter", tags=["Newsletter"])


@router.post(
    "/subscribe",
    response_model=schemas.NewsletterSubscription,
    status_code=status.HTTP_201_CREATED,
)
def subscribe(
    payload: schemas.NewsletterSubscribe,
    store: SqlContentStore = Depends(get_store),
) -> schemas.NewsletterSubscription:
    """
    Subscribe an email address.

    **Public endpoint** - No authentication required. Subscribing an address
    twice is rejected by the unique constraint on email.
    """
    subscription = store.insert(
        "newsletter_subscriptions",
        {"email": payload.email.lower(), "name": payload.name},
    )
    return schemas.NewsletterSubscription.model_validate(subscription)


@router.post("/unsubscribe", status_code=status.HTTP_204_NO_CONTENT)
def unsubscribe(
    payload: schemas.NewsletterUnsubscribe,
    store: SqlContentStore = Depends(get_store),
) -> Response:
    """
    Unsubscribe an email address.

    Always answers 204 so the endpoint cannot be used to probe which
    addresses are subscribed.
    """
    rows = store.update_where(
        "newsletter_subscriptions",
        {"email": payload.email.lower()},
        {"status": "unsubscribed", "unsubscribed_at": datetime.now(timezone.utc)},
    )
    logger.debug(f"Unsubscribe request matched {len(rows)} subscriptions")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/subscriptions", response_model=list[schemas.NewsletterSubscription])
def list_subscriptions(
    status_filter: schemas.SubscriptionStatus | None = Query(None, alias="status"),
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> list[schemas.NewsletterSubscription]:
    filters = {"status": status_filter} if status_filter else None
    rows = store.list("newsletter_subscriptions", filters, order=[("subscribed_at", True)])
    return [schemas.NewsletterSubscription.model_validate(r) for r in rows]
