"""
Application service for the dog matching feed.
"""

from __future__ import annotations

import logging
from typing import Collection, List, Optional, Protocol

from ..domain.matching import (
    DEFAULT_LIMIT,
    DEFAULT_MIN_SCORE,
    CompatibilityScorer,
    RankedCandidate,
    ScoreBreakdown,
    is_potential_match,
)
from ..domain.models import MatchCandidate
from .ports import Clock

logger = logging.getLogger(__name__)


class CandidateRepository(Protocol):
    """Protocol describing the record store queries needed for matching."""

    async def get_candidate(self, dog_id: str) -> MatchCandidate:
        """Return one dog; raise ``RecordNotFoundError`` if unknown."""

    async def list_candidates(self) -> List[MatchCandidate]:
        """Return all active dogs."""

    async def list_matched_dog_ids(self, dog_id: str) -> Collection[str]:
        """Return ids of dogs that already have a match record with ``dog_id``."""


class MatchFinderService:
    """
    Builds the potential-match feed for a dog.

    Scores are recomputed on every call from the current attributes; the
    reference date for ages comes from the injected clock.
    """

    def __init__(
        self,
        repository: CandidateRepository,
        clock: Clock,
        min_score: int = DEFAULT_MIN_SCORE,
        limit: int = DEFAULT_LIMIT,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._min_score = min_score
        self._limit = limit

    def _scorer(self) -> CompatibilityScorer:
        return CompatibilityScorer(as_of=self._clock.now().date())

    async def find_potential_matches(
        self,
        dog_id: str,
        limit: Optional[int] = None,
    ) -> List[RankedCandidate]:
        """Return the best-scoring dogs for ``dog_id``, highest score first."""
        subject = await self._repository.get_candidate(dog_id)
        candidates = await self._repository.list_candidates()
        matched_ids = set(await self._repository.list_matched_dog_ids(dog_id))

        eligible = [
            candidate
            for candidate in candidates
            if is_potential_match(subject, candidate, matched_ids)
        ]
        logger.info(
            "Dog %s: %d eligible of %d candidates", dog_id, len(eligible), len(candidates)
        )

        return self._scorer().rank(
            subject,
            eligible,
            min_score=self._min_score,
            limit=limit if limit is not None else self._limit,
        )

    async def compare(self, dog_id_a: str, dog_id_b: str) -> ScoreBreakdown:
        """Score two specific dogs against each other."""
        dog_a = await self._repository.get_candidate(dog_id_a)
        dog_b = await self._repository.get_candidate(dog_id_b)
        return self._scorer().breakdown(dog_a, dog_b)
