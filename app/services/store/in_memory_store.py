import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence

from app.models.fhir.types import SchedulingResources
from app.models.resources.dto import PractitionerRoleDto, ResourceDto, SlotDto
from app.services.store.resource_store import ResourceStore


class InMemoryResourceStore(ResourceStore):
    def __init__(self) -> None:
        self.__data: Dict[SchedulingResources, Dict[str, ResourceDto]] = {
            r: {} for r in SchedulingResources
        }
        self.__lock = threading.Lock()

    def get(self, resource_type: SchedulingResources, id: str) -> ResourceDto | None:
        return self.__data[resource_type].get(id)

    def get_all(self, resource_type: SchedulingResources) -> List[ResourceDto]:
        return list(self.__data[resource_type].values())

    def count(self, resource_type: SchedulingResources) -> int:
        return len(self.__data[resource_type])

    def bulk_upsert(
        self, resource_type: SchedulingResources, records: Sequence[ResourceDto]
    ) -> List[ResourceDto]:
        stored: List[ResourceDto] = []
        with self.__lock:
            collection = self.__data[resource_type]
            for record in records:
                if isinstance(record, PractitionerRoleDto):
                    record = self.carry_over_enrichment(
                        collection.get(record.id), record  # type: ignore[arg-type]
                    )
                collection[record.id] = record
                stored.append(record)

        return stored

    def get_slots_by_time_range(self, start: datetime, end: datetime) -> List[SlotDto]:
        return [s for s in self.get_all_slots() if start <= s.start <= end]

    def update_practitioner_role(self, id: str, **fields: Any) -> PractitionerRoleDto | None:
        return self.__update_role(id, fields, only_unenriched=False)

    def apply_enrichment(self, id: str, **fields: Any) -> PractitionerRoleDto | None:
        return self.__update_role(id, fields, only_unenriched=True)

    def __update_role(self, id: str, fields: Dict[str, Any], only_unenriched: bool) -> PractitionerRoleDto | None:
        with self.__lock:
            collection = self.__data[SchedulingResources.PRACTITIONER_ROLE]
            existing = collection.get(id)
            if existing is None:
                return None
            if only_unenriched and existing.npi is not None:  # type: ignore[attr-defined]
                return None

            updated = existing.model_copy(
                update={**fields, "updated_at": datetime.now(timezone.utc)}
            )
            collection[id] = updated
            return updated  # type: ignore[return-value]

    def is_healthy(self) -> bool:
        return True
