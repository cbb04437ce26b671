import pytest

from app.models.fhir.types import SchedulingResources
from app.models.resources.dto import LocationDto, PractitionerRoleDto, SlotDto
from app.services.fhir.resources.factory import create_resource, get_resource_type
from app.services.fhir.resources.mapper import map_resource
from tests import mock_data


def test_map_location_tags_provenance() -> None:
    dto = map_resource(SchedulingResources.LOCATION, mock_data.location(), "http://publisher-a.test")

    assert isinstance(dto, LocationDto)
    assert dto.publisher_url == "http://publisher-a.test"
    assert dto.updated_at is not None
    assert dto.state == "MA"
    assert dto.address is not None and dto.address["postalCode"] == "02115"


def test_map_slot_precomputes_extension_fields() -> None:
    data = mock_data.slot(
        extensions=[
            mock_data.booking_link_extension(),
            mock_data.appointment_type_extension("Consultation"),
            mock_data.virtual_service_extension(),
        ]
    )

    dto = map_resource(SchedulingResources.SLOT, data, "http://publisher-a.test")

    assert isinstance(dto, SlotDto)
    assert dto.appointment_type == "Consultation"
    assert dto.is_virtual is True
    assert dto.start.tzinfo is not None


def test_map_slot_without_extensions() -> None:
    dto = map_resource(SchedulingResources.SLOT, mock_data.slot(), "http://publisher-a.test")

    assert isinstance(dto, SlotDto)
    assert dto.appointment_type is None
    assert dto.is_virtual is False


def test_map_rejects_mismatched_resource_type() -> None:
    with pytest.raises(ValueError):
        map_resource(SchedulingResources.SLOT, mock_data.location(), "http://publisher-a.test")


def test_map_rejects_invalid_fhir() -> None:
    data = mock_data.slot()
    del data["schedule"]

    with pytest.raises(ValueError):
        map_resource(SchedulingResources.SLOT, data, "http://publisher-a.test")


def test_to_fhir_strips_internal_fields() -> None:
    role = map_resource(SchedulingResources.PRACTITIONER_ROLE, mock_data.practitioner_role(), "http://publisher-a.test")
    assert isinstance(role, PractitionerRoleDto)
    enriched = role.model_copy(update={"npi": "1234567890", "languages_spoken": [{"language": "English"}]})

    fhir = enriched.to_fhir()

    assert fhir["resourceType"] == "PractitionerRole"
    assert fhir["id"] == "role-1"
    for field in ("publisherUrl", "updatedAt", "npi", "languagesSpoken", "enrichmentData"):
        assert field not in fhir
    assert fhir["practitioner"]["display"] == "Dr. Jane Smith"


def test_create_resource_unknown_type_raises() -> None:
    with pytest.raises(ValueError):
        create_resource({"resourceType": "Patient", "id": "p1"})


def test_get_resource_type() -> None:
    assert get_resource_type({"resourceType": "Slot"}) == "Slot"
    assert get_resource_type({"resource_type": "Location"}) == "Location"
    assert get_resource_type({}) is None
