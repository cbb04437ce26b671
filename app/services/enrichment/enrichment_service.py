import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List

from app.models.enrichment.dto import EnrichmentData, EnrichmentReport
from app.models.resources.dto import PractitionerRoleDto
from app.services.api.practitioner_directory_api import PractitionerDirectoryApi
from app.services.enrichment.extractors import (
    extract_affiliations,
    extract_certifications,
    extract_education,
    extract_insurance,
    extract_languages,
    extract_npi,
    get_full_name,
)
from app.services.enrichment.name_matcher import NameMatcher
from app.services.fhir.resources.factory import create_resource
from app.services.store.resource_store import ResourceStore

logger = logging.getLogger(__name__)

DIRECTORY_SOURCE = "practitioner_directory"
DEMO_SOURCE = "demo"


def build_enrichment_data(practitioner: Dict[str, Any], npi: str) -> EnrichmentData:
    meta = practitioner.get("meta") or {}
    return EnrichmentData(
        npi=npi,
        insurance_accepted=extract_insurance(practitioner),
        languages_spoken=extract_languages(practitioner),
        education=extract_education(practitioner),
        board_certifications=extract_certifications(practitioner),
        hospital_affiliations=extract_affiliations(practitioner),
        enrichment_data={
            "fullName": get_full_name(practitioner),
            "qualifications": practitioner.get("qualification") or [],
            "birthDate": practitioner.get("birthDate"),
            "gender": practitioner.get("gender"),
            "active": practitioner.get("active"),
            "lastUpdated": meta.get("lastUpdated"),
            "source": DIRECTORY_SOURCE,
        },
    )


def build_demo_enrichment_data(role: PractitionerRoleDto) -> EnrichmentData:
    return EnrichmentData(
        npi="1234567890",
        insurance_accepted=[
            {"type": "Medicare", "accepted": True},
            {"type": "Medicaid", "accepted": True},
            {"type": "Blue Cross Blue Shield", "accepted": True},
            {"type": "Aetna", "accepted": True},
            {"type": "UnitedHealthcare", "accepted": True},
            {"type": "Cigna", "accepted": True},
            {"type": "Commercial Insurance", "accepted": True},
        ],
        languages_spoken=[
            {"language": "English", "code": "en"},
            {"language": "Spanish", "code": "es"},
        ],
        education=[
            {"degree": "MD - Doctor of Medicine", "institution": "Harvard Medical School", "period": "2015-2019"},
            {"degree": "BS - Biochemistry", "institution": "MIT", "period": "2011-2015"},
        ],
        board_certifications=[
            {
                "certification": "Board Certified in Dermatology",
                "board": "American Board of Dermatology",
                "period": "2020-Present",
            },
            {
                "certification": "FAAD - Fellow American Academy of Dermatology",
                "board": "AAD",
                "period": "2020-Present",
            },
        ],
        hospital_affiliations=[
            {"organization": "Massachusetts General Hospital", "type": "Hospital Affiliation"},
        ],
        enrichment_data={
            "fullName": role.display_name or "Unknown",
            "source": DEMO_SOURCE,
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        },
    )


class EnrichmentService:
    """
    Merges practitioner directory data (NPI, insurance, languages, education, certifications and
    affiliations) onto stored PractitionerRoles that have not been enriched yet. Roles that already
    carry an NPI are never modified.
    """

    def __init__(
        self,
        resource_store: ResourceStore,
        directory_api: PractitionerDirectoryApi,
        name_matcher: NameMatcher,
        page_size: int,
        enabled: bool = True,
        demo_mode: bool = False,
    ) -> None:
        self.__resource_store = resource_store
        self.__directory_api = directory_api
        self.__name_matcher = name_matcher
        self.__page_size = page_size
        self.__enabled = enabled
        self.__demo_mode = demo_mode
        self.__lock = threading.Lock()

    def enrich(self) -> EnrichmentReport:
        """
        Runs one enrichment pass. A pass requested while another one is running is skipped.
        """
        if not self.__enabled:
            return EnrichmentReport(status="disabled")

        if not self.__lock.acquire(blocking=False):
            logger.info("Enrichment pass already running, skipping this trigger")
            return EnrichmentReport(status="skipped", reason="already_running")

        try:
            return self.__run()
        finally:
            self.__lock.release()

    def __run(self) -> EnrichmentReport:
        candidates = [r for r in self.__resource_store.get_all_practitioner_roles() if r.npi is None]

        try:
            practitioners = self.__directory_api.search_practitioners(self.__page_size)
        except Exception as e:
            logger.exception("Failed to fetch practitioners from the directory")
            return EnrichmentReport(status="error", error=str(e))

        logger.info("Processing %s directory practitioners against %s candidates", len(practitioners), len(candidates))
        report = EnrichmentReport(status="success", fetched=len(practitioners))
        for practitioner in practitioners:
            try:
                create_resource(practitioner, expected_type="Practitioner")
            except ValueError as e:
                logger.warning("Skipping invalid directory practitioner %s: %s", practitioner.get("id"), e)
                continue

            npi = extract_npi(practitioner)
            if npi is None:
                report.without_npi += 1
                continue

            if self.__resource_store.find_practitioner_role_by_npi(npi) is not None:
                logger.debug("NPI %s is already assigned, skipping", npi)
                continue

            if self.__enrich_one(practitioner, npi, candidates):
                report.matched += 1

        logger.info("Enriched %s practitioners with directory data", report.matched)
        if report.matched == 0:
            report.demo_seeded = self.__seed_demo(candidates)

        return report

    def __enrich_one(self, practitioner: Dict[str, Any], npi: str, candidates: List[PractitionerRoleDto]) -> bool:
        full_name = get_full_name(practitioner)
        if full_name is None:
            return False

        role = self.__name_matcher.match(full_name, candidates)
        if role is None:
            return False

        candidates.remove(role)
        overlay = build_enrichment_data(practitioner, npi).as_overlay()
        if self.__resource_store.apply_enrichment(role.id, **overlay) is None:
            logger.info("Practitioner %s (%s) was enriched elsewhere, leaving it untouched", role.display_name, role.id)
            return False

        logger.info("Enriched practitioner %s (%s) with NPI %s", role.display_name, role.id, npi)
        return True

    def __seed_demo(self, candidates: List[PractitionerRoleDto]) -> bool:
        if not self.__demo_mode or len(candidates) == 0:
            return False

        # One demonstration role is enough, later passes keep it as is
        for existing in self.__resource_store.get_all_practitioner_roles():
            if (existing.enrichment_data or {}).get("source") == DEMO_SOURCE:
                logger.debug("Demonstration data already lives on %s", existing.id)
                return False

        role = candidates[0]
        if self.__resource_store.apply_enrichment(role.id, **build_demo_enrichment_data(role).as_overlay()) is None:
            return False

        logger.info("Added demonstration enrichment data to %s", role.display_name or role.id)
        candidates.remove(role)
        return True
