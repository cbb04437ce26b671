from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.resources.dto import LocationDto, PractitionerRoleDto, SlotDto, ensure_utc


class SearchFilters(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    search_query: str | None = None
    specialty: str | None = None
    location: str | None = None
    insurance: List[str] | None = None
    languages: List[str] | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    appointment_type: str | None = None
    available_only: bool = Field(default=False)

    @field_validator("search_query", "specialty", "location", "appointment_type", mode="before")
    def validate_blank_text(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @field_validator("insurance", "languages", mode="before")
    def validate_lists(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, list):
            v = [i.strip() for i in v if isinstance(i, str) and i.strip()]
        return v

    @field_validator("date_from", "date_to")
    def validate_dates(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None


class SearchResult(BaseModel):
    practitioners: List[PractitionerRoleDto] = []
    locations: List[LocationDto] = []
    available_slots: List[SlotDto] = []

    def to_api(self) -> Dict[str, Any]:
        return {
            "practitioners": [p.to_api() for p in self.practitioners],
            "locations": [loc.to_api() for loc in self.locations],
            "availableSlots": [s.to_api() for s in self.available_slots],
            "totalProviders": len(self.practitioners),
            "totalLocations": len(self.locations),
            "totalSlots": len(self.available_slots),
        }


class ProviderAvailability(BaseModel):
    provider_id: str
    slots: List[SlotDto] = []

    def to_api(self) -> Dict[str, Any]:
        return {
            "providerId": self.provider_id,
            "slots": [s.to_api() for s in self.slots],
            "totalSlots": len(self.slots),
            "availableSlots": len([s for s in self.slots if s.status == "free"]),
        }
