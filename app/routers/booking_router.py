from typing import Any

from fastapi import APIRouter, Depends

from app.container import get_booking_service
from app.services.booking_service import BookingService

router = APIRouter(prefix="/api", tags=["Booking"])


@router.get("/booking/{slot_id}", summary="Booking link and phone number of a slot")
def get_booking(slot_id: str, service: BookingService = Depends(get_booking_service)) -> dict[str, Any]:
    return service.get_booking(slot_id)
