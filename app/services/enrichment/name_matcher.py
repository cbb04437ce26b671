import logging
from abc import ABC, abstractmethod
from typing import Sequence

from app.models.resources.dto import PractitionerRoleDto

logger = logging.getLogger(__name__)


def tokenize(name: str) -> list[str]:
    return [w for w in name.lower().split(" ") if len(w) > 2]


def calculate_name_similarity(name1: str, name2: str) -> float:
    """
    Share of tokens on one side that overlap (as a substring, either direction) with some token on the
    other side, divided by the larger token count.
    """
    words1 = tokenize(name1)
    words2 = tokenize(name2)
    if not words1 or not words2:
        return 0.0

    matches = 0
    for word1 in words1:
        if any(word1 in word2 or word2 in word1 for word2 in words2):
            matches += 1

    return matches / max(len(words1), len(words2))


class NameMatcher(ABC):
    @abstractmethod
    def match(self, full_name: str, candidates: Sequence[PractitionerRoleDto]) -> PractitionerRoleDto | None:
        """
        Picks the PractitionerRole that belongs to a directory entry with the given full name, or None.
        """
        ...


class TokenOverlapNameMatcher(NameMatcher):
    """
    Accepts the first candidate scoring above the threshold. Greedy and order-dependent.
    """

    def __init__(self, threshold: float = 0.6) -> None:
        self.__threshold = threshold

    def match(self, full_name: str, candidates: Sequence[PractitionerRoleDto]) -> PractitionerRoleDto | None:
        for role in candidates:
            display = role.display_name
            if not display:
                continue

            similarity = calculate_name_similarity(display, full_name)
            logger.debug("Comparing names %r vs %r: %s", display, full_name, similarity)
            if similarity > self.__threshold:
                return role

        return None
