from pydantic import BaseModel, Field


class PushKeys(BaseModel):
    """Keys from PushSubscription.getKey() on the client."""

    p256dh: str = Field(..., min_length=1, max_length=200, description="Encryption key")
    auth: str = Field(..., min_length=1, max_length=100, description="Auth secret")


class PushSubscriptionCreate(BaseModel):
    """Create push subscription."""

    endpoint: str = Field(..., min_length=1, max_length=1000)
    keys: PushKeys


class PublicKeyRead(BaseModel):
    publicKey: str


class OkResponse(BaseModel):
    ok: bool = True
