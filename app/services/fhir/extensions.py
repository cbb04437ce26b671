from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Union

BOOKING_DEEP_LINK_URL = "http://fhir-registry.smarthealthit.org/StructureDefinition/booking-deep-link"
BOOKING_PHONE_URL = "http://fhir-registry.smarthealthit.org/StructureDefinition/booking-phone"
APPOINTMENT_TYPE_URL = "http://fhir-registry.smarthealthit.org/StructureDefinition/appointment-type"
VIRTUAL_SERVICE_URL = "http://fhir-registry.smarthealthit.org/StructureDefinition/virtual-service-base"
VIRTUAL_SERVICE_MARKER = "virtual-service"


@dataclass(frozen=True)
class BookingDeepLink:
    url: str | None


@dataclass(frozen=True)
class BookingPhone:
    phone: str | None


@dataclass(frozen=True)
class AppointmentType:
    text: str | None


@dataclass(frozen=True)
class VirtualService:
    url: str


SlotExtension = Union[BookingDeepLink, BookingPhone, AppointmentType, VirtualService]


def _appointment_type_text(ext: Dict[str, Any]) -> str | None:
    value = ext.get("valueString")
    if isinstance(value, str) and value:
        return value

    concept = ext.get("valueCodeableConcept")
    if not isinstance(concept, dict):
        return None

    text = concept.get("text")
    if isinstance(text, str) and text:
        return text

    codings = concept.get("coding")
    if isinstance(codings, list) and codings and isinstance(codings[0], dict):
        display = codings[0].get("display")
        if isinstance(display, str) and display:
            return display

    return None


def decode_extension(ext: Any) -> SlotExtension | None:
    """
    Decodes one FHIR extension into a known SMART Scheduling Links variant. Unknown or
    malformed extensions return None and are ignored by the callers.
    """
    if not isinstance(ext, dict):
        return None

    url = ext.get("url")
    if not isinstance(url, str):
        return None

    if url == BOOKING_DEEP_LINK_URL:
        return BookingDeepLink(url=ext.get("valueUrl"))
    if url == BOOKING_PHONE_URL:
        return BookingPhone(phone=ext.get("valueString"))
    if url == APPOINTMENT_TYPE_URL:
        return AppointmentType(text=_appointment_type_text(ext))
    if url == VIRTUAL_SERVICE_URL or VIRTUAL_SERVICE_MARKER in url:
        return VirtualService(url=url)

    return None


def decode_extensions(extensions: Iterable[Any] | None) -> List[SlotExtension]:
    if not isinstance(extensions, list):
        return []

    decoded = (decode_extension(ext) for ext in extensions)
    return [d for d in decoded if d is not None]


def get_appointment_type(extensions: Iterable[Any] | None) -> str | None:
    for ext in decode_extensions(extensions):
        if isinstance(ext, AppointmentType):
            return ext.text

    return None


def has_virtual_service(extensions: Iterable[Any] | None) -> bool:
    return any(isinstance(ext, VirtualService) for ext in decode_extensions(extensions))


def get_booking_details(extensions: Iterable[Any] | None) -> tuple[str | None, str | None]:
    """
    Returns the (deep link, phone) pair. When an extension repeats, the last one wins.
    """
    link = None
    phone = None
    for ext in decode_extensions(extensions):
        if isinstance(ext, BookingDeepLink):
            link = ext.url
        elif isinstance(ext, BookingPhone):
            phone = ext.phone

    return link, phone
