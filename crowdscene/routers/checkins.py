# crowdscene/routers/checkins.py
from fastapi import APIRouter, Depends

from ..dependencies import get_checkin_service
from ..schemas.checkin import CheckinCreate, CheckinResponse
from ..services import CheckinService

router = APIRouter(prefix="/checkins", tags=["Check-ins"])


@router.post("", response_model=CheckinResponse)
async def create_checkin(
    checkin_data: CheckinCreate,
    service: CheckinService = Depends(get_checkin_service)
):
    """Check in at a venue; returns the venue's new crowd score"""
    result = await service.check_in(checkin_data.user_id, checkin_data.venue_id)
    return CheckinResponse(id=result.id, crowd=result.crowd)
