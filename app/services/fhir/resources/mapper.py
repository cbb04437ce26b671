from datetime import datetime, timezone
from typing import Any, Dict

from app.models.fhir.types import SchedulingResources
from app.models.resources.dto import RESOURCE_DTOS, ResourceDto
from app.services.fhir.extensions import get_appointment_type, has_virtual_service
from app.services.fhir.resources.factory import create_resource


def map_resource(
    resource_type: SchedulingResources,
    data: Dict[str, Any],
    publisher_url: str,
) -> ResourceDto:
    """
    Validates a raw FHIR resource and maps it onto the internal schema for its type, tagging it
    with the publisher it came from. Slots get their derived extension fields computed here so
    queries never re-parse the extension list.
    """
    create_resource(data, expected_type=resource_type.value)

    fields = {k: v for k, v in data.items() if k != "resourceType"}
    fields["publisherUrl"] = publisher_url
    fields["updatedAt"] = datetime.now(timezone.utc)

    if resource_type == SchedulingResources.SLOT:
        fields["appointmentType"] = get_appointment_type(data.get("extension"))
        fields["isVirtual"] = has_virtual_service(data.get("extension"))

    dto_class = RESOURCE_DTOS[resource_type]
    return dto_class.model_validate(fields)
