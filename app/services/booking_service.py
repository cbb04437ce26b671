from typing import Any, Dict

from fastapi import HTTPException

from app.services.fhir.extensions import get_booking_details
from app.services.store.resource_store import ResourceStore


def booking_instructions(link: str | None, phone: str | None) -> str:
    if link:
        return f"To book this appointment, visit: {link}"
    if phone:
        return f"To book this appointment, call: {phone}"
    return "Contact the provider directly to book this appointment."


class BookingService:
    def __init__(self, resource_store: ResourceStore) -> None:
        self.__resource_store = resource_store

    def get_booking(self, slot_id: str) -> Dict[str, Any]:
        slot = self.__resource_store.get_slot(slot_id)
        if slot is None:
            raise HTTPException(status_code=404, detail="Slot not found")

        link, phone = get_booking_details(slot.extension)
        return {
            "slotId": slot_id,
            "bookingLink": link,
            "bookingPhone": phone,
            "instructions": booking_instructions(link, phone),
            "slot": slot.to_fhir(),
        }
