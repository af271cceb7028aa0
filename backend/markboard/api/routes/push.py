from fastapi import APIRouter, Query, status

from markboard.api.deps import PushDep, SubscriptionStoreDep
from markboard.schemas import OkResponse, PublicKeyRead, PushSubscriptionCreate

router = APIRouter()


@router.get("/public-key", response_model=PublicKeyRead)
def get_vapid_public_key(dispatcher: PushDep) -> dict:
    """Get VAPID public key for push subscription."""
    return {"publicKey": dispatcher.settings.VAPID_PUBLIC_KEY}


@router.post("/subscribe", response_model=OkResponse, status_code=status.HTTP_201_CREATED)
def subscribe_to_push(
    payload: PushSubscriptionCreate,
    dispatcher: PushDep,
    store: SubscriptionStoreDep,
) -> dict:
    """Subscribe to web push notifications about new marks."""
    store.insert(payload.endpoint, payload.keys.model_dump())
    return {"ok": True}


@router.delete("/subscribe", response_model=OkResponse)
def unsubscribe_from_push(
    dispatcher: PushDep,
    store: SubscriptionStoreDep,
    endpoint: str = Query(..., min_length=1),
) -> dict:
    """Unsubscribe from web push notifications. Unknown endpoints are ignored."""
    store.delete_by_endpoint(endpoint)
    return {"ok": True}
