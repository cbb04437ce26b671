from collections.abc import Sequence
from datetime import datetime
import logging
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import DatabaseError

from app.db.decorator import repository
from app.db.entities.location import Location
from app.db.entities.practitioner_role import PractitionerRole
from app.db.entities.schedule import Schedule
from app.db.entities.slot import Slot
from app.db.repositories.repository_base import RepositoryBase

logger = logging.getLogger(__name__)


class ResourceRepository(RepositoryBase):
    """
    Shared CRUD for the resource tables. Every table is keyed by the FHIR resource id.
    """

    def get(self, id_: str) -> Any | None:
        return self.db_session.session.get(self.model_class, id_)

    def get_all(self) -> Sequence[Any]:
        stmt = select(self.model_class)
        return self.db_session.session.scalars(stmt).all()

    def count(self) -> int:
        stmt = select(func.count()).select_from(self.model_class)
        return int(self.db_session.session.execute(stmt).scalar_one())

    def upsert_many(self, entities: Sequence[Any]) -> list[Any]:
        try:
            merged = [self.db_session.merge(e) for e in entities]
            self.db_session.commit()
            return merged
        except DatabaseError as e:
            self.db_session.rollback()
            logger.error(f"Failed to upsert {len(entities)} {self.model_class.__tablename__}: {e}")
            raise

    def update(self, entity: Any) -> Any:
        try:
            self.db_session.add(entity)
            self.db_session.commit()
            self.db_session.session.refresh(entity)
            return entity
        except DatabaseError as e:
            self.db_session.rollback()
            logger.error(f"Failed to update {self.model_class.__tablename__} {entity.id}: {e}")
            raise


@repository(Location)
class LocationRepository(ResourceRepository):
    pass


@repository(PractitionerRole)
class PractitionerRoleRepository(ResourceRepository):
    def get_by_npi(self, npi: str) -> PractitionerRole | None:
        stmt = select(PractitionerRole).where(PractitionerRole.npi == npi)
        return self.db_session.session.scalars(stmt).first()

    def update_unenriched(self, id_: str, values: dict[str, Any]) -> bool:
        """
        Updates the role only while its npi column is still empty. Returns whether a row was written.
        """
        stmt = (
            update(PractitionerRole)
            .where(PractitionerRole.id == id_, PractitionerRole.npi.is_(None))
            .values(**values)
        )
        try:
            result = self.db_session.session.execute(stmt)
            self.db_session.commit()
        except DatabaseError as e:
            self.db_session.rollback()
            logger.error(f"Failed to enrich practitioner_roles {id_}: {e}")
            raise

        return result.rowcount > 0  # type: ignore[attr-defined]


@repository(Schedule)
class ScheduleRepository(ResourceRepository):
    pass


@repository(Slot)
class SlotRepository(ResourceRepository):
    def get_by_time_range(self, start: datetime, end: datetime) -> Sequence[Slot]:
        stmt = select(Slot).where(Slot.start >= start, Slot.start <= end)
        return self.db_session.session.scalars(stmt).all()
