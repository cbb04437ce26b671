import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Set

from app.models.resources.dto import LocationDto, PractitionerRoleDto, SlotDto, ensure_utc
from app.models.search.dto import ProviderAvailability, SearchFilters, SearchResult
from app.services.fhir.references import reference_id, reference_ids
from app.services.store.resource_store import ResourceStore

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(days=30)


def _contains(value: Any, query: str) -> bool:
    return isinstance(value, str) and query in value.lower()


def _any_contains(entries: List[Dict[str, Any]] | None, key: str, query: str) -> bool:
    return any(_contains(e.get(key), query) for e in entries or [] if isinstance(e, dict))


def matches_specialty(role: PractitionerRoleDto, specialty: str) -> bool:
    query = specialty.lower()
    for concept in role.specialty:
        if _contains(concept.get("text"), query):
            return True
        for coding in concept.get("coding") or []:
            if not isinstance(coding, dict):
                continue
            if _contains(coding.get("display"), query):
                return True
            code = coding.get("code")
            if isinstance(code, str) and code.lower() == query:
                return True

    return _contains(role.display_name, query)


def matches_location(location: LocationDto, query: str) -> bool:
    query = query.lower()
    if _contains(location.name, query):
        return True

    address = location.address or {}
    return any(_contains(address.get(key), query) for key in ("city", "state", "postalCode"))


def matches_insurance(role: PractitionerRoleDto, insurance: List[str]) -> bool:
    return any(_any_contains(role.insurance_accepted, "type", i.lower()) for i in insurance)


def matches_language(role: PractitionerRoleDto, languages: List[str]) -> bool:
    for language in languages:
        query = language.lower()
        for spoken in role.languages_spoken or []:
            if _contains(spoken.get("language"), query):
                return True
            code = spoken.get("code")
            if isinstance(code, str) and code.lower() == query:
                return True

    return False


def is_linked_to(role: PractitionerRoleDto, location_ids: Set[str]) -> bool:
    """
    Roles without any location reference are kept. Otherwise one of the references has to survive.
    """
    referenced = reference_ids(role.location, "Location")
    if not referenced and not role.location:
        return True
    return len(referenced & location_ids) > 0


class QueryEngine:
    """
    Narrows the PractitionerRole, Location and Slot collections with a set of filters. Slots only
    survive a practitioner filter when they are reachable through Slot -> Schedule -> actor.
    Dangling references never match.
    """

    def __init__(self, resource_store: ResourceStore) -> None:
        self.__resource_store = resource_store

    def search(self, filters: SearchFilters) -> SearchResult:
        practitioners = self.__resource_store.get_all_practitioner_roles()
        locations = self.__resource_store.get_all_locations()
        practitioner_filtered = False

        if filters.search_query:
            query = filters.search_query.lower()
            practitioners = [p for p in practitioners if _contains(p.display_name, query)]
            locations = [loc for loc in locations if _contains(loc.name, query)]
            practitioner_filtered = True

        if filters.specialty:
            practitioners = [p for p in practitioners if matches_specialty(p, filters.specialty)]
            practitioner_filtered = True

        if filters.location:
            locations = [loc for loc in locations if matches_location(loc, filters.location)]
            if locations:
                location_ids = {loc.id for loc in locations}
                practitioners = [p for p in practitioners if is_linked_to(p, location_ids)]
                practitioner_filtered = True

        if filters.insurance:
            practitioners = [p for p in practitioners if matches_insurance(p, filters.insurance)]
            practitioner_filtered = True

        if filters.languages:
            practitioners = [p for p in practitioners if matches_language(p, filters.languages)]
            practitioner_filtered = True

        slots = self.__filter_slots(filters)
        if practitioner_filtered:
            slots = self.__reachable_slots(practitioners, slots)

        logger.debug(
            "Search matched %s practitioners, %s locations and %s slots",
            len(practitioners),
            len(locations),
            len(slots),
        )
        return SearchResult(practitioners=practitioners, locations=locations, available_slots=slots)

    def get_provider_availability(
        self,
        provider_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> ProviderAvailability:
        now = datetime.now(timezone.utc)
        start = ensure_utc(start) if start is not None else now
        end = ensure_utc(end) if end is not None else now + DEFAULT_WINDOW

        schedule_ids = self.__schedule_ids_for({provider_id})
        slots = [
            s for s in self.__resource_store.get_slots_by_time_range(start, end)
            if reference_id(s.schedule, "Schedule") in schedule_ids
        ]
        return ProviderAvailability(provider_id=provider_id, slots=slots)

    def __filter_slots(self, filters: SearchFilters) -> List[SlotDto]:
        if filters.date_from is not None or filters.date_to is not None:
            now = datetime.now(timezone.utc)
            start = filters.date_from or now
            end = filters.date_to or now + DEFAULT_WINDOW
            slots = self.__resource_store.get_slots_by_time_range(start, end)
        else:
            slots = self.__resource_store.get_all_slots()

        if filters.available_only:
            slots = [s for s in slots if s.status == "free"]

        if filters.appointment_type:
            appointment_type = filters.appointment_type.lower()
            slots = [
                s for s in slots
                if s.appointment_type is not None and s.appointment_type.lower() == appointment_type
            ]

        return slots

    def __schedule_ids_for(self, practitioner_role_ids: Set[str]) -> Set[str]:
        if not practitioner_role_ids:
            return set()

        return {
            schedule.id
            for schedule in self.__resource_store.get_all_schedules()
            if reference_ids(schedule.actor, "PractitionerRole") & practitioner_role_ids
        }

    def __reachable_slots(self, practitioners: List[PractitionerRoleDto], slots: List[SlotDto]) -> List[SlotDto]:
        schedule_ids = self.__schedule_ids_for({p.id for p in practitioners})
        if not schedule_ids:
            return []

        return [s for s in slots if reference_id(s.schedule, "Schedule") in schedule_ids]
