from typing import Any, Dict, List, Literal

from pydantic import BaseModel


class EnrichmentData(BaseModel):
    """
    Attributes taken from one practitioner directory entry, ready to be merged onto a PractitionerRole.
    """

    npi: str
    insurance_accepted: List[Dict[str, Any]] = []
    languages_spoken: List[Dict[str, Any]] = []
    education: List[Dict[str, Any]] = []
    board_certifications: List[Dict[str, Any]] = []
    hospital_affiliations: List[Dict[str, Any]] = []
    enrichment_data: Dict[str, Any] = {}

    def as_overlay(self) -> Dict[str, Any]:
        return self.model_dump()


class EnrichmentReport(BaseModel):
    status: Literal["success", "error", "disabled", "skipped"]
    reason: str | None = None
    fetched: int = 0
    without_npi: int = 0
    matched: int = 0
    demo_seeded: bool = False
    error: str | None = None
