import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Type

from sqlalchemy import inspect

from app.db.db import Database
from app.db.repositories.resource_repository import (
    LocationRepository,
    PractitionerRoleRepository,
    ResourceRepository,
    ScheduleRepository,
    SlotRepository,
)
from app.models.fhir.types import SchedulingResources
from app.models.resources.dto import (
    RESOURCE_DTOS,
    PractitionerRoleDto,
    ResourceDto,
    SlotDto,
    ensure_utc,
)
from app.services.store.resource_store import ResourceStore

logger = logging.getLogger(__name__)

REPOSITORIES: Dict[SchedulingResources, Type[ResourceRepository]] = {
    SchedulingResources.LOCATION: LocationRepository,
    SchedulingResources.PRACTITIONER_ROLE: PractitionerRoleRepository,
    SchedulingResources.SCHEDULE: ScheduleRepository,
    SchedulingResources.SLOT: SlotRepository,
}


def _column_names(entity_class: Any) -> List[str]:
    return [c.key for c in inspect(entity_class).column_attrs]


def to_dto(resource_type: SchedulingResources, entity: Any) -> ResourceDto:
    data = {name: getattr(entity, name) for name in _column_names(type(entity))}
    if isinstance(data.get("updated_at"), datetime):
        data["updated_at"] = ensure_utc(data["updated_at"])

    return RESOURCE_DTOS[resource_type].model_validate(data)


def to_entity(resource_type: SchedulingResources, dto: ResourceDto) -> Any:
    entity_class = REPOSITORIES[resource_type].model_class
    data = dto.model_dump(include=set(_column_names(entity_class)))
    if data.get("updated_at") is None:
        data["updated_at"] = datetime.now(timezone.utc)

    return entity_class(**data)


class DbResourceStore(ResourceStore):
    """
    Resource store backed by a relational database. Upserts merge on the primary key (the FHIR id).
    """

    def __init__(self, database: Database) -> None:
        self.__database = database

    def get(self, resource_type: SchedulingResources, id: str) -> ResourceDto | None:
        with self.__database.get_db_session() as session:
            repository = session.get_repository(REPOSITORIES[resource_type])
            entity = repository.get(id)
            return to_dto(resource_type, entity) if entity is not None else None

    def get_all(self, resource_type: SchedulingResources) -> List[ResourceDto]:
        with self.__database.get_db_session() as session:
            repository = session.get_repository(REPOSITORIES[resource_type])
            return [to_dto(resource_type, e) for e in repository.get_all()]

    def count(self, resource_type: SchedulingResources) -> int:
        with self.__database.get_db_session() as session:
            return session.get_repository(REPOSITORIES[resource_type]).count()

    def bulk_upsert(
        self, resource_type: SchedulingResources, records: Sequence[ResourceDto]
    ) -> List[ResourceDto]:
        if len(records) == 0:
            return []

        with self.__database.get_db_session() as session:
            repository = session.get_repository(REPOSITORIES[resource_type])
            if resource_type == SchedulingResources.PRACTITIONER_ROLE:
                records = [
                    self.carry_over_enrichment(self.__existing_role(repository, r.id), r)  # type: ignore[arg-type]
                    for r in records
                ]

            # Last record wins when a batch repeats an id
            unique = {r.id: r for r in records}
            merged = repository.upsert_many([to_entity(resource_type, r) for r in unique.values()])
            logger.debug("Upserted %s %s records", len(merged), resource_type.value)

        return list(unique.values())

    def get_slots_by_time_range(self, start: datetime, end: datetime) -> List[SlotDto]:
        with self.__database.get_db_session() as session:
            repository = session.get_repository(SlotRepository)
            entities = repository.get_by_time_range(ensure_utc(start), ensure_utc(end))
            return [to_dto(SchedulingResources.SLOT, e) for e in entities]  # type: ignore[misc]

    def update_practitioner_role(self, id: str, **fields: Any) -> PractitionerRoleDto | None:
        with self.__database.get_db_session() as session:
            repository = session.get_repository(PractitionerRoleRepository)
            entity = repository.get(id)
            if entity is None:
                return None

            for key, value in fields.items():
                setattr(entity, key, value)
            entity.updated_at = datetime.now(timezone.utc)
            updated = repository.update(entity)
            return to_dto(SchedulingResources.PRACTITIONER_ROLE, updated)  # type: ignore[return-value]

    def apply_enrichment(self, id: str, **fields: Any) -> PractitionerRoleDto | None:
        with self.__database.get_db_session() as session:
            repository = session.get_repository(PractitionerRoleRepository)
            if not repository.update_unenriched(id, {**fields, "updated_at": datetime.now(timezone.utc)}):
                return None

            entity = repository.get(id)
            return to_dto(SchedulingResources.PRACTITIONER_ROLE, entity)  # type: ignore[return-value]

    def find_practitioner_role_by_npi(self, npi: str) -> PractitionerRoleDto | None:
        with self.__database.get_db_session() as session:
            entity = session.get_repository(PractitionerRoleRepository).get_by_npi(npi)
            if entity is None:
                return None
            return to_dto(SchedulingResources.PRACTITIONER_ROLE, entity)  # type: ignore[return-value]

    def is_healthy(self) -> bool:
        return self.__database.is_healthy()

    @staticmethod
    def __existing_role(repository: ResourceRepository, id: str) -> PractitionerRoleDto | None:
        entity = repository.get(id)
        if entity is None:
            return None
        return to_dto(SchedulingResources.PRACTITIONER_ROLE, entity)  # type: ignore[return-value]
