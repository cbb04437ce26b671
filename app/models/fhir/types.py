from enum import Enum


class SchedulingResources(Enum):
    LOCATION = "Location"
    PRACTITIONER_ROLE = "PractitionerRole"
    SCHEDULE = "Schedule"
    SLOT = "Slot"


# Legacy NDJSON file names that were published before the per-type naming
LEGACY_NDJSON_NAMES = {
    "locations": SchedulingResources.LOCATION,
    "practitioners": SchedulingResources.PRACTITIONER_ROLE,
    "schedules": SchedulingResources.SCHEDULE,
    "slots": SchedulingResources.SLOT,
}


def resource_type_from_name(name: str) -> SchedulingResources | None:
    """
    Resolves either a FHIR resource type ("Slot") or a legacy file name ("slots").
    """
    for r in SchedulingResources:
        if r.value == name:
            return r

    return LEGACY_NDJSON_NAMES.get(name.lower())
