import logging
from typing import Any, Iterable, Set

logger = logging.getLogger(__name__)


def parse_reference(ref: Any) -> tuple[str, str] | None:
    """
    Returns (resource_type, id) for either a relative ("Schedule/123") or an absolute
    ("https://example.org/fhir/Schedule/123") reference. Anything else returns None.
    """
    if isinstance(ref, dict):
        ref = ref.get("reference")
    if not isinstance(ref, str) or ref == "":
        return None

    parts = [p for p in ref.split("?")[0].split("/") if p]
    if len(parts) < 2:
        logger.debug("Failed to parse reference: %s", ref)
        return None

    # Versioned references end in .../_history/<vid>
    if len(parts) >= 4 and parts[-2] == "_history":
        parts = parts[:-2]

    return parts[-2], parts[-1]


def reference_id(ref: Any, resource_type: str) -> str | None:
    parsed = parse_reference(ref)
    if parsed is None or parsed[0] != resource_type:
        return None

    return parsed[1]


def reference_ids(refs: Iterable[Any] | None, resource_type: str) -> Set[str]:
    if not isinstance(refs, list):
        return set()

    ids = (reference_id(r, resource_type) for r in refs)
    return {i for i in ids if i is not None}
