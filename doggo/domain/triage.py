"""
Medical triage scoring.

A fixed questionnaire is scored into a 0-100 urgency score and mapped to an
urgency band with recommendations for the owner.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

Answer = Union[bool, int, float, str]


class QuestionType(str, Enum):
    BOOLEAN = "boolean"
    SCALE = "scale"
    MULTIPLE = "multiple"


class QuestionCategory(str, Enum):
    SYMPTOMS = "symptoms"
    BEHAVIOR = "behavior"
    HISTORY = "history"
    URGENCY = "urgency"


class UrgencyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class TriageQuestion:
    id: str
    question: str
    type: QuestionType
    weight: int
    category: QuestionCategory
    options: Tuple[str, ...] = ()
    # Positive-phrased yes/no questions: a "no" is the worrying answer.
    inverted: bool = False
    scale_max: int = 10


@dataclass(frozen=True)
class TriageResponse:
    question_id: str
    answer: Answer


@dataclass(frozen=True)
class TriageResult:
    score: int
    urgency_level: UrgencyLevel
    recommendations: List[str] = field(default_factory=list)
    suggested_actions: List[str] = field(default_factory=list)
    requires_veterinarian: bool = False
    requires_emergency_services: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "score": self.score,
            "urgencyLevel": self.urgency_level.value,
            "recommendations": list(self.recommendations),
            "suggestedActions": list(self.suggested_actions),
            "requiresVeterinarian": self.requires_veterinarian,
            "requiresEmergencyServices": self.requires_emergency_services,
        }


QUESTIONS: Tuple[TriageQuestion, ...] = (
    TriageQuestion(
        id="breathing_difficulty",
        question="Il cane ha difficoltà respiratorie?",
        type=QuestionType.BOOLEAN,
        weight=10,
        category=QuestionCategory.SYMPTOMS,
    ),
    TriageQuestion(
        id="consciousness",
        question="Il cane è cosciente e reattivo?",
        type=QuestionType.BOOLEAN,
        weight=9,
        category=QuestionCategory.SYMPTOMS,
        inverted=True,
    ),
    TriageQuestion(
        id="bleeding",
        question="È presente sanguinamento?",
        type=QuestionType.MULTIPLE,
        weight=8,
        category=QuestionCategory.SYMPTOMS,
        options=("Nessuno", "Lieve", "Moderato", "Grave"),
    ),
    TriageQuestion(
        id="pain_level",
        question="Livello di dolore percepito (0-10)",
        type=QuestionType.SCALE,
        weight=7,
        category=QuestionCategory.SYMPTOMS,
    ),
    TriageQuestion(
        id="vomiting",
        question="Ha vomitato nelle ultime 24 ore?",
        type=QuestionType.BOOLEAN,
        weight=5,
        category=QuestionCategory.SYMPTOMS,
    ),
    TriageQuestion(
        id="appetite",
        question="Ha appetito normale?",
        type=QuestionType.BOOLEAN,
        weight=4,
        category=QuestionCategory.BEHAVIOR,
        inverted=True,
    ),
    TriageQuestion(
        id="mobility",
        question="Ha difficoltà a camminare?",
        type=QuestionType.BOOLEAN,
        weight=6,
        category=QuestionCategory.SYMPTOMS,
    ),
    TriageQuestion(
        id="previous_issues",
        question="Ha avuto problemi simili in passato?",
        type=QuestionType.BOOLEAN,
        weight=3,
        category=QuestionCategory.HISTORY,
    ),
)


@dataclass(frozen=True)
class _Band:
    level: UrgencyLevel
    min_score: int
    recommendations: Tuple[str, ...]
    suggested_actions: Tuple[str, ...]
    requires_veterinarian: bool
    requires_emergency_services: bool


# Highest threshold first.
BANDS: Tuple[_Band, ...] = (
    _Band(
        level=UrgencyLevel.CRITICAL,
        min_score=80,
        recommendations=(
            "Contattare immediatamente i servizi di emergenza veterinaria",
            "Non spostare il cane se non necessario",
            "Mantenere il cane calmo e al caldo",
        ),
        suggested_actions=("Chiamare emergenza veterinaria", "Prepararsi al trasporto"),
        requires_veterinarian=True,
        requires_emergency_services=True,
    ),
    _Band(
        level=UrgencyLevel.HIGH,
        min_score=60,
        recommendations=(
            "Consultare un veterinario entro 2-4 ore",
            "Monitorare attentamente i sintomi",
            "Non somministrare farmaci senza consulto",
        ),
        suggested_actions=("Prenotare visita urgente", "Preparare documenti sanitari"),
        requires_veterinarian=True,
        requires_emergency_services=False,
    ),
    _Band(
        level=UrgencyLevel.MEDIUM,
        min_score=30,
        recommendations=(
            "Consultare un veterinario entro 24-48 ore",
            "Tenere sotto osservazione",
            "Offrire acqua e cibo leggero se gradito",
        ),
        suggested_actions=("Prenotare visita", "Monitorare sintomi"),
        requires_veterinarian=True,
        requires_emergency_services=False,
    ),
    _Band(
        level=UrgencyLevel.LOW,
        min_score=0,
        recommendations=(
            "Situazione non urgente",
            "Continuare a monitorare",
            "Consultare il veterinario se i sintomi peggiorano",
        ),
        suggested_actions=("Monitoraggio domestico", "Consultazione opzionale"),
        requires_veterinarian=False,
        requires_emergency_services=False,
    ),
)


class TriageScorer:
    """
    Scores questionnaire answers against a question bank.

    Unanswered questions earn nothing but still count towards the maximum, so
    missing information never inflates the score.
    """

    def __init__(self, questions: Iterable[TriageQuestion] = QUESTIONS):
        self.questions: Tuple[TriageQuestion, ...] = tuple(questions)
        self.max_possible_score = sum(question.weight for question in self.questions)

    def score(self, responses: Iterable[TriageResponse]) -> TriageResult:
        answers = self._first_answers(responses)
        total = 0.0

        for question in self.questions:
            if question.id not in answers:
                continue
            total += self.question_score(question, answers[question.id])

        if self.max_possible_score > 0:
            normalized = int(math.floor(total / self.max_possible_score * 100 + 0.5))
        else:
            normalized = 0
        normalized = min(100, max(0, normalized))

        return self.result_for_score(normalized)

    @staticmethod
    def result_for_score(score: int) -> TriageResult:
        band = next(band for band in BANDS if score >= band.min_score)
        return TriageResult(
            score=score,
            urgency_level=band.level,
            recommendations=list(band.recommendations),
            suggested_actions=list(band.suggested_actions),
            requires_veterinarian=band.requires_veterinarian,
            requires_emergency_services=band.requires_emergency_services,
        )

    @staticmethod
    def question_score(question: TriageQuestion, answer: Answer) -> float:
        """Weighted contribution of a single answer."""
        if question.type == QuestionType.BOOLEAN:
            worrying = not question.inverted
            # Strict identity: 0/1 or "yes" are not booleans.
            return float(question.weight) if answer is worrying else 0.0

        if question.type == QuestionType.SCALE:
            if isinstance(answer, bool) or not isinstance(answer, (int, float)):
                logger.warning("Ignoring non-numeric answer %r for %s", answer, question.id)
                return 0.0
            value = min(question.scale_max, max(0, answer))
            return value / question.scale_max * question.weight

        if question.type == QuestionType.MULTIPLE:
            index = _option_index(question, answer)
            if index is None or len(question.options) < 2:
                logger.warning("Ignoring unknown option %r for %s", answer, question.id)
                return 0.0
            return index / (len(question.options) - 1) * question.weight

        return 0.0

    def _first_answers(self, responses: Iterable[TriageResponse]) -> Dict[str, Answer]:
        answers: Dict[str, Answer] = {}
        for response in responses:
            answers.setdefault(response.question_id, response.answer)
        return answers

    def get_question(self, question_id: str) -> Optional[TriageQuestion]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


def _option_index(question: TriageQuestion, answer: Answer) -> Optional[int]:
    if isinstance(answer, str) and answer in question.options:
        return question.options.index(answer)
    return None


def score_triage(responses: Iterable[TriageResponse]) -> TriageResult:
    """Score triage responses against the standard question bank."""
    return TriageScorer().score(responses)


def get_questions() -> List[TriageQuestion]:
    return list(QUESTIONS)


def urgency_score(result: TriageResult) -> int:
    """Map a triage result onto the 1-10 urgency scale stored on bookings."""
    return max(1, math.ceil(result.score / 10))
