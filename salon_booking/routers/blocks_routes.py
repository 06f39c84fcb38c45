# salon_booking/routers/blocks_routes.py

from fastapi import APIRouter, Depends

from salon_booking import booking
from salon_booking.booking import BookingError
from salon_booking.deps import get_store, http_error
from salon_booking.schemas import BlockCreate, BlockPublic
from salon_booking.store import SchedulingStore

router = APIRouter(
    prefix="/blocks",
    tags=["blocks"],
)


@router.post("", response_model=BlockPublic, status_code=201)
def create_block(
    block: BlockCreate,
    store: SchedulingStore = Depends(get_store),
):
    try:
        db_block = booking.create_block(store, block)
    except BookingError as exc:
        raise http_error(exc)

    return {
        "id": db_block.id,
        "professional_id": db_block.professional_id,
        "starts_at": db_block.starts_at,
        "ends_at": db_block.ends_at,
        "reason": db_block.reason,
    }
