"""
Compatibility scoring between two dogs.

The score is a weighted sum of independent, symmetric sub-scores, each in
[0, 1]. When either owner has no coordinates the geographic weight is simply
not earned and the remaining weights are not rescaled, so such pairs top
out at 85.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date as date_type
from typing import Collection, Iterable, List, Optional

import pendulum
from pendulum import Date

from .exceptions import ValidationError
from .geo import haversine_km
from .models import (
    ACTIVITY_ORDER,
    SIZE_ORDER,
    ActivityLevel,
    DogSize,
    MatchAction,
    MatchCandidate,
    MatchStatus,
)

logger = logging.getLogger(__name__)

SIZE_WEIGHT = 20
AGE_WEIGHT = 15
ACTIVITY_WEIGHT = 20
TEMPERAMENT_WEIGHT = 20
GEO_WEIGHT = 15
GENDER_WEIGHT = 10

MAX_DISTANCE_KM = 50.0
DEFAULT_MIN_SCORE = 60
DEFAULT_LIMIT = 10


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def size_compatibility(size1: DogSize, size2: DogSize) -> float:
    difference = abs(SIZE_ORDER.index(size1) - SIZE_ORDER.index(size2))
    return max(0.0, 1 - difference * 0.2)


def age_compatibility(age1: int, age2: int) -> float:
    difference = abs(age1 - age2)
    if difference <= 2:
        return 1.0
    if difference <= 4:
        return 0.7
    if difference <= 6:
        return 0.4
    return 0.1


def activity_compatibility(level1: ActivityLevel, level2: ActivityLevel) -> float:
    difference = abs(ACTIVITY_ORDER.index(level1) - ACTIVITY_ORDER.index(level2))
    return max(0.0, 1 - difference * 0.25)


def temperament_compatibility(traits1: Collection[str], traits2: Collection[str]) -> float:
    """Jaccard overlap of two trait sets; 0.5 when either side has no traits."""
    if not traits1 or not traits2:
        return 0.5
    set1, set2 = set(traits1), set(traits2)
    return len(set1 & set2) / len(set1 | set2)


def proximity_compatibility(distance_km: float) -> float:
    return max(0.0, 1 - distance_km / MAX_DISTANCE_KM)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Weighted contribution of every sub-score, before rounding."""
    size: float
    age: float
    activity: float
    temperament: float
    geo: float
    gender: float
    distance_km: Optional[float] = None

    @property
    def total(self) -> int:
        raw = self.size + self.age + self.activity + self.temperament + self.geo + self.gender
        return min(100, max(0, round_half_up(raw)))


class CompatibilityScorer:
    """
    Scores dog pairs for the matching feed.

    Ages are measured at ``as_of`` so that identical inputs always produce the
    same score; callers pass today's date from their clock.
    """

    def __init__(self, as_of: date_type):
        self.as_of: Date = pendulum.date(as_of.year, as_of.month, as_of.day)

    def breakdown(self, dog1: MatchCandidate, dog2: MatchCandidate) -> ScoreBreakdown:
        distance_km: Optional[float] = None
        geo = 0.0
        if dog1.owner_location is not None and dog2.owner_location is not None:
            distance_km = haversine_km(dog1.owner_location, dog2.owner_location)
            geo = proximity_compatibility(distance_km) * GEO_WEIGHT

        gender = 1.0 if dog1.gender != dog2.gender else 0.7

        return ScoreBreakdown(
            size=size_compatibility(dog1.size, dog2.size) * SIZE_WEIGHT,
            age=age_compatibility(
                dog1.age_in_years(self.as_of), dog2.age_in_years(self.as_of)
            ) * AGE_WEIGHT,
            activity=activity_compatibility(dog1.activity_level, dog2.activity_level)
            * ACTIVITY_WEIGHT,
            temperament=temperament_compatibility(dog1.temperament, dog2.temperament)
            * TEMPERAMENT_WEIGHT,
            geo=geo,
            gender=gender * GENDER_WEIGHT,
            distance_km=distance_km,
        )

    def score(self, dog1: MatchCandidate, dog2: MatchCandidate) -> int:
        """Return the 0-100 compatibility score of two dogs."""
        return self.breakdown(dog1, dog2).total

    def rank(
        self,
        subject: MatchCandidate,
        candidates: Iterable[MatchCandidate],
        min_score: int = DEFAULT_MIN_SCORE,
        limit: int = DEFAULT_LIMIT,
    ) -> List["RankedCandidate"]:
        """
        Score every candidate against ``subject``, keep those reaching
        ``min_score`` and return the best ``limit`` of them, highest first.

        Raises:
            ValidationError: If ``limit`` is not positive
        """
        if limit <= 0:
            raise ValidationError(f"limit must be greater than zero, got {limit}")

        scored = [
            RankedCandidate(candidate=candidate, score=self.score(subject, candidate))
            for candidate in candidates
        ]
        kept = [entry for entry in scored if entry.score >= min_score]
        kept.sort(key=lambda entry: entry.score, reverse=True)

        logger.debug(
            "Ranked %d candidates for %s: %d above %d",
            len(scored),
            subject.dog_id or "<unnamed>",
            len(kept),
            min_score,
        )
        return kept[:limit]


@dataclass(frozen=True)
class RankedCandidate:
    candidate: MatchCandidate
    score: int


def score_compatibility(
    dog1: MatchCandidate,
    dog2: MatchCandidate,
    *,
    as_of: date_type,
) -> int:
    """
    Return the 0-100 compatibility score of two dogs.

    Ages are measured at ``as_of``; callers take it from their clock.
    """
    return CompatibilityScorer(as_of).score(dog1, dog2)


def rank_candidates(
    subject: MatchCandidate,
    candidates: Iterable[MatchCandidate],
    *,
    as_of: date_type,
    min_score: int = DEFAULT_MIN_SCORE,
    limit: int = DEFAULT_LIMIT,
) -> List[RankedCandidate]:
    return CompatibilityScorer(as_of).rank(subject, candidates, min_score=min_score, limit=limit)


def is_potential_match(
    subject: MatchCandidate,
    other: MatchCandidate,
    matched_dog_ids: Collection[str] = (),
) -> bool:
    """
    Prefilter used before scoring: another owner's dog, not already paired
    with ``subject``, sharing either size or activity level.
    """
    if other.dog_id and other.dog_id == subject.dog_id:
        return False
    if other.owner_id and other.owner_id == subject.owner_id:
        return False
    if other.dog_id in matched_dog_ids:
        return False
    return other.size == subject.size or other.activity_level == subject.activity_level


def derive_match_status(action1: MatchAction, action2: MatchAction) -> MatchStatus:
    """Status of a match given both owners' actions."""
    action1, action2 = MatchAction(action1), MatchAction(action2)
    if action1 == MatchAction.LIKED and action2 == MatchAction.LIKED:
        return MatchStatus.MATCHED
    if MatchAction.PASSED in (action1, action2):
        return MatchStatus.REJECTED
    return MatchStatus.PENDING
