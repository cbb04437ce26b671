from typing import Dict, Any

from fhir.resources.R4B.domainresource import DomainResource
from fhir.resources.R4B.location import Location
from fhir.resources.R4B.practitioner import Practitioner
from fhir.resources.R4B.practitionerrole import PractitionerRole
from fhir.resources.R4B.schedule import Schedule
from fhir.resources.R4B.slot import Slot


def get_resource_type(resource: Dict[str, Any]) -> str | None:
    res_type_key = "resource_type" if "resource_type" in resource else "resourceType"
    resource_type = resource.get(res_type_key)

    return resource_type if isinstance(resource_type, str) else None


def create_resource(data: Dict[str, Any], expected_type: str | None = None) -> DomainResource:
    """
    Validates raw FHIR json against the R4B model of its resource type. When expected_type is
    given, a resource declaring another type is rejected.
    """
    resource_type = get_resource_type(data) or expected_type
    if resource_type is None:
        raise ValueError("Model is not a valid FHIR model")

    if expected_type is not None and resource_type != expected_type:
        raise ValueError(f"Expected {expected_type} but got {resource_type}")

    match resource_type:
        case "Location":
            return Location.model_validate(data)

        case "PractitionerRole":
            return PractitionerRole.model_validate(data)

        case "Schedule":
            return Schedule.model_validate(data)

        case "Slot":
            return Slot.model_validate(data)

        case "Practitioner":
            return Practitioner.model_validate(data)

        case _:
            raise ValueError(
                f"Unable to create model for {resource_type}, value: \n{data}"
            )
