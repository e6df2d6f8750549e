# crowdscene/routers/reviews.py
import logging

from fastapi import APIRouter, Depends, status

from ..dependencies import get_store
from ..schemas.review import ReviewCreate, ReviewResponse
from ..services import EventStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: ReviewCreate,
    store: EventStore = Depends(get_store)
):
    """Leave a review. Identical payloads create separate reviews."""
    review = await store.append_review(
        user_id=review_data.user_id,
        venue_id=review_data.venue_id,
        stars=review_data.stars,
        text=review_data.text,
    )
    logger.info(f"Review created: user={review.user_id}, venue={review.venue_id}, stars={review.stars}")
    return ReviewResponse(id=review.id)
