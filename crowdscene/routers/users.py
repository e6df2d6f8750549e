# crowdscene/routers/users.py
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from ..dependencies import get_store
from ..schemas.user import UserCreate, UserResponse
from ..services import EventStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/anon", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_anonymous_user(
    user_data: Optional[UserCreate] = Body(None),
    store: EventStore = Depends(get_store)
):
    """Issue an anonymous identity"""
    user = await store.create_user(user_data.name if user_data else None)
    logger.info(f"New anonymous user: {user.id}")
    return UserResponse.model_validate(user)
