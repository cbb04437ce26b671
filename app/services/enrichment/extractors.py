from typing import Any, Dict, List

NPI_SYSTEMS = (
    "http://hl7.org/fhir/sid/us-npi",
    "https://nppes.cms.hhs.gov/NPPES/Welcome.do",
)

# Used when the directory has no payer information for a practitioner. Placeholder data, not signal.
FALLBACK_INSURANCE = [
    {"type": "Medicare", "accepted": True},
    {"type": "Medicaid", "accepted": True},
    {"type": "Commercial Insurance", "accepted": True},
    {"type": "Blue Cross Blue Shield", "accepted": True},
    {"type": "Aetna", "accepted": True},
    {"type": "UnitedHealthcare", "accepted": True},
    {"type": "Cigna", "accepted": True},
]

DEFAULT_LANGUAGES = [{"language": "English", "code": "en"}]


def _dicts(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _first_coding(concept: Any) -> Dict[str, Any]:
    if not isinstance(concept, dict):
        return {}
    codings = _dicts(concept.get("coding"))
    return codings[0] if codings else {}


def _concept_text(concept: Any) -> str | None:
    if not isinstance(concept, dict):
        return None
    return concept.get("text") or _first_coding(concept).get("display")


def extract_npi(practitioner: Dict[str, Any]) -> str | None:
    """
    Returns the NPI of a practitioner. An identifier in one of the NPI systems is preferred over
    one that is merely marked as official.
    """
    identifiers = [i for i in _dicts(practitioner.get("identifier")) if i.get("value")]

    for identifier in identifiers:
        if identifier.get("system") in NPI_SYSTEMS:
            return str(identifier["value"])

    for identifier in identifiers:
        if identifier.get("use") == "official":
            return str(identifier["value"])

    return None


def format_practitioner_name(name: Dict[str, Any]) -> str:
    parts: List[str] = []
    parts.extend(name.get("prefix") or [])
    parts.extend(name.get("given") or [])
    if name.get("family"):
        parts.append(name["family"])
    parts.extend(name.get("suffix") or [])

    if not parts and name.get("text"):
        return str(name["text"])

    return " ".join(str(p) for p in parts)


def get_full_name(practitioner: Dict[str, Any]) -> str | None:
    names = _dicts(practitioner.get("name"))
    if not names:
        return None
    return format_practitioner_name(names[0]) or None


def extract_insurance(practitioner: Dict[str, Any]) -> List[Dict[str, Any]]:
    insurance = []
    for ext in _dicts(practitioner.get("extension")):
        url = ext.get("url") or ""
        if "insurance" not in url and "payor" not in url:
            continue

        concept = ext.get("valueCodeableConcept")
        coding = _first_coding(concept)
        insurance.append(
            {
                "type": ext.get("valueString") or (concept or {}).get("text") or "Unknown",
                "code": coding.get("code"),
                "system": coding.get("system"),
            }
        )

    if len(insurance) == 0:
        return [dict(i) for i in FALLBACK_INSURANCE]

    return insurance


def extract_languages(practitioner: Dict[str, Any]) -> List[Dict[str, Any]]:
    communication = practitioner.get("communication")
    if not isinstance(communication, list):
        return [dict(lang) for lang in DEFAULT_LANGUAGES]

    languages = []
    for concept in _dicts(communication):
        language = _concept_text(concept)
        if language is None:
            continue
        languages.append({"language": language, "code": _first_coding(concept).get("code")})

    return languages


def _qualifications(practitioner: Dict[str, Any], system_keyword: str, text_keyword: str) -> List[Dict[str, Any]]:
    matched = []
    for qualification in _dicts(practitioner.get("qualification")):
        code = qualification.get("code") or {}
        system = _first_coding(code).get("system") or ""
        text = (code.get("text") or "").lower()
        if system_keyword in system or text_keyword in text:
            matched.append(qualification)

    return matched


def extract_education(practitioner: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {
            "degree": _concept_text(q.get("code")),
            "institution": (q.get("issuer") or {}).get("display"),
            "period": q.get("period"),
        }
        for q in _qualifications(practitioner, "education", "degree")
    ]


def extract_certifications(practitioner: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {
            "certification": _concept_text(q.get("code")),
            "board": (q.get("issuer") or {}).get("display"),
            "period": q.get("period"),
        }
        for q in _qualifications(practitioner, "certification", "board")
    ]


def extract_affiliations(practitioner: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {
            "organization": ext.get("valueString") or (ext.get("valueReference") or {}).get("display"),
            "type": "Hospital Affiliation",
        }
        for ext in _dicts(practitioner.get("extension"))
        if "affiliation" in (ext.get("url") or "")
    ]
