from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Sequence

from app.models.fhir.types import SchedulingResources
from app.models.resources.dto import (
    ENRICHMENT_FIELDS,
    LocationDto,
    PractitionerRoleDto,
    ResourceDto,
    ScheduleDto,
    SlotDto,
)


class ResourceStore(ABC):
    """
    Abstract base class for the store holding the four SMART Scheduling Links resource types.

    Every collection is keyed by the resource id. Bulk upserts are idempotent per id: the last
    written record for an id wins, regardless of which publisher supplied it. An existing
    enrichment overlay on a PractitionerRole is kept when the incoming record carries none, so
    a re-sync does not undo enrichment.

    No cross-type transaction is offered. Readers may observe a Slot whose Schedule has not been
    written yet and must treat such references as dangling.
    """

    @abstractmethod
    def get(self, resource_type: SchedulingResources, id: str) -> ResourceDto | None: ...

    @abstractmethod
    def get_all(self, resource_type: SchedulingResources) -> List[ResourceDto]: ...

    @abstractmethod
    def count(self, resource_type: SchedulingResources) -> int: ...

    @abstractmethod
    def bulk_upsert(
        self, resource_type: SchedulingResources, records: Sequence[ResourceDto]
    ) -> List[ResourceDto]: ...

    @abstractmethod
    def get_slots_by_time_range(self, start: datetime, end: datetime) -> List[SlotDto]: ...

    @abstractmethod
    def update_practitioner_role(self, id: str, **fields: Any) -> PractitionerRoleDto | None: ...

    @abstractmethod
    def apply_enrichment(self, id: str, **fields: Any) -> PractitionerRoleDto | None:
        """
        Writes an enrichment overlay, but only while the stored role has no NPI. The check and the write
        are atomic. Returns None when the role is unknown or already enriched.
        """
        ...

    @abstractmethod
    def is_healthy(self) -> bool: ...

    def get_available_slots(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> List[SlotDto]:
        slots = [s for s in self.get_all_slots() if s.status == "free"]
        if start is not None:
            slots = [s for s in slots if s.start >= start]
        if end is not None:
            slots = [s for s in slots if s.start <= end]

        return slots

    def find_practitioner_role_by_npi(self, npi: str) -> PractitionerRoleDto | None:
        return next((r for r in self.get_all_practitioner_roles() if r.npi == npi), None)

    def get_location(self, id: str) -> LocationDto | None:
        return self.get(SchedulingResources.LOCATION, id)  # type: ignore[return-value]

    def get_practitioner_role(self, id: str) -> PractitionerRoleDto | None:
        return self.get(SchedulingResources.PRACTITIONER_ROLE, id)  # type: ignore[return-value]

    def get_schedule(self, id: str) -> ScheduleDto | None:
        return self.get(SchedulingResources.SCHEDULE, id)  # type: ignore[return-value]

    def get_slot(self, id: str) -> SlotDto | None:
        return self.get(SchedulingResources.SLOT, id)  # type: ignore[return-value]

    def get_all_locations(self) -> List[LocationDto]:
        return self.get_all(SchedulingResources.LOCATION)  # type: ignore[return-value]

    def get_all_practitioner_roles(self) -> List[PractitionerRoleDto]:
        return self.get_all(SchedulingResources.PRACTITIONER_ROLE)  # type: ignore[return-value]

    def get_all_schedules(self) -> List[ScheduleDto]:
        return self.get_all(SchedulingResources.SCHEDULE)  # type: ignore[return-value]

    def get_all_slots(self) -> List[SlotDto]:
        return self.get_all(SchedulingResources.SLOT)  # type: ignore[return-value]

    @staticmethod
    def carry_over_enrichment(
        existing: PractitionerRoleDto | None, incoming: PractitionerRoleDto
    ) -> PractitionerRoleDto:
        if existing is None or existing.npi is None or incoming.npi is not None:
            return incoming

        return incoming.model_copy(update={f: getattr(existing, f) for f in ENRICHMENT_FIELDS})
