from typing import List

from fastapi import APIRouter, Request, status

from markboard.api.deps import LifecycleDep, MarkStoreDep
from markboard.core.config import settings
from markboard.core.limiter import limiter
from markboard.models import Mark
from markboard.schemas import MarkCreate, MarkRead

router = APIRouter()


@router.get("", response_model=List[MarkRead])
def list_marks(store: MarkStoreDep) -> List[Mark]:
    """List marks that have not expired yet."""
    return store.list_live()


@router.post("", response_model=MarkRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.MARKS_RATE_LIMIT)
async def create_mark(
    request: Request,
    payload: MarkCreate,
    lifecycle: LifecycleDep,
) -> Mark:
    """Drop a new mark; it is broadcast to viewers and expires in 30 minutes."""
    return await lifecycle.create_mark(payload)
