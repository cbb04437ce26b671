from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from app.models.fhir.types import SchedulingResources


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ResourceDto(BaseModel):
    """
    Internal representation of a stored FHIR resource. Field names follow python conventions and
    serialize to the FHIR camelCase names. Fields listed in `internal_fields` are bookkeeping that
    never leaves the service in a FHIR export.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    resource_type: ClassVar[SchedulingResources]
    internal_fields: ClassVar[set[str]] = {"publisher_url", "updated_at"}

    id: str
    publisher_url: str | None = None
    updated_at: datetime | None = None

    def to_fhir(self) -> Dict[str, Any]:
        """
        Returns a standards-clean FHIR resource with the resourceType injected.
        """
        data = self.model_dump(
            mode="json",
            by_alias=True,
            exclude=self.internal_fields,
            exclude_none=True,
        )
        return {"resourceType": self.resource_type.value, **data}

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class LocationDto(ResourceDto):
    resource_type = SchedulingResources.LOCATION

    name: str | None = None
    telecom: List[Dict[str, Any]] = []
    address: Dict[str, Any] | None = None
    identifier: List[Dict[str, Any]] | None = None
    description: str | None = None
    position: Dict[str, Any] | None = None

    @property
    def state(self) -> str | None:
        if self.address is None:
            return None
        state = self.address.get("state")
        return state if isinstance(state, str) and state.strip() else None


ENRICHMENT_FIELDS = (
    "npi",
    "insurance_accepted",
    "languages_spoken",
    "education",
    "board_certifications",
    "hospital_affiliations",
    "enrichment_data",
)


class PractitionerRoleDto(ResourceDto):
    resource_type = SchedulingResources.PRACTITIONER_ROLE
    internal_fields = {"publisher_url", "updated_at", *ENRICHMENT_FIELDS}

    identifier: List[Dict[str, Any]] | None = None
    active: bool = True
    practitioner: Dict[str, Any] | None = None
    organization: Dict[str, Any] | None = None
    code: List[Dict[str, Any]] = []
    specialty: List[Dict[str, Any]] = []
    location: List[Dict[str, Any]] = []
    telecom: List[Dict[str, Any]] | None = None

    # Enrichment overlay, populated by the practitioner directory matcher
    npi: str | None = None
    insurance_accepted: List[Dict[str, Any]] | None = None
    languages_spoken: List[Dict[str, Any]] | None = None
    education: List[Dict[str, Any]] | None = None
    board_certifications: List[Dict[str, Any]] | None = None
    hospital_affiliations: List[Dict[str, Any]] | None = None
    enrichment_data: Dict[str, Any] | None = None

    @field_validator("active", mode="before")
    def validate_active(cls, v: Any) -> bool:
        return True if v is None else bool(v)

    @property
    def display_name(self) -> str | None:
        if self.practitioner is None:
            return None
        display = self.practitioner.get("display")
        return display if isinstance(display, str) else None

    def enrichment_overlay(self) -> Dict[str, Any]:
        return {f: getattr(self, f) for f in ENRICHMENT_FIELDS}


class ScheduleDto(ResourceDto):
    resource_type = SchedulingResources.SCHEDULE

    identifier: List[Dict[str, Any]] | None = None
    active: bool = True
    service_type: List[Dict[str, Any]] = []
    actor: List[Dict[str, Any]] = []
    extension: List[Dict[str, Any]] | None = None

    @field_validator("active", mode="before")
    def validate_active(cls, v: Any) -> bool:
        return True if v is None else bool(v)


class SlotDto(ResourceDto):
    resource_type = SchedulingResources.SLOT
    internal_fields = {"publisher_url", "updated_at", "appointment_type", "is_virtual"}

    schedule: Dict[str, Any]
    status: str
    start: datetime
    end: datetime
    extension: List[Dict[str, Any]] | None = None

    # Derived from the extension list once, at ingestion time
    appointment_type: str | None = None
    is_virtual: bool = False

    @field_validator("start", "end")
    def validate_instant(cls, v: datetime) -> datetime:
        return ensure_utc(v)


RESOURCE_DTOS: Dict[SchedulingResources, type[ResourceDto]] = {
    SchedulingResources.LOCATION: LocationDto,
    SchedulingResources.PRACTITIONER_ROLE: PractitionerRoleDto,
    SchedulingResources.SCHEDULE: ScheduleDto,
    SchedulingResources.SLOT: SlotDto,
}
