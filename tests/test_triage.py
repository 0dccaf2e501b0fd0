"""
Tests for triage scoring.
"""

import itertools

import pytest

from doggo.domain.triage import (
    QUESTIONS,
    TriageResponse,
    TriageScorer,
    UrgencyLevel,
    get_questions,
    score_triage,
    urgency_score,
)


def _responses(**answers) -> list:
    return [TriageResponse(question_id=key, answer=value) for key, value in answers.items()]


WORST_CASE = _responses(
    breathing_difficulty=True,
    consciousness=False,
    bleeding="Grave",
    pain_level=10,
    vomiting=True,
    appetite=False,
    mobility=True,
    previous_issues=True,
)

HEALTHY = _responses(
    breathing_difficulty=False,
    consciousness=True,
    bleeding="Nessuno",
    pain_level=0,
    vomiting=False,
    appetite=True,
    mobility=False,
    previous_issues=False,
)


class TestQuestionBank:
    """Tests for the fixed question bank."""

    def test_total_weight(self):
        assert TriageScorer().max_possible_score == 52

    def test_inverted_questions(self):
        inverted = {question.id for question in get_questions() if question.inverted}

        assert inverted == {"consciousness", "appetite"}

    def test_question_ids_are_unique(self):
        ids = [question.id for question in QUESTIONS]

        assert len(ids) == len(set(ids))


class TestTriageScorer:
    """Tests for TriageScorer."""

    def test_no_responses(self):
        result = score_triage([])

        assert result.score == 0
        assert result.urgency_level == UrgencyLevel.LOW
        assert not result.requires_veterinarian
        assert not result.requires_emergency_services

    def test_worst_case_is_critical(self):
        result = score_triage(WORST_CASE)

        assert result.score == 100
        assert result.urgency_level == UrgencyLevel.CRITICAL
        assert result.requires_veterinarian
        assert result.requires_emergency_services
        assert result.recommendations[0].startswith("Contattare immediatamente")

    def test_healthy_answers_score_zero(self):
        assert score_triage(HEALTHY).score == 0

    def test_all_false_only_counts_inverted_questions(self):
        """'No' to consciousness (9) and appetite (4) -> 13/52 = 25."""
        answers = [TriageResponse(question_id=q.id, answer=False) for q in QUESTIONS]

        result = score_triage(answers)

        assert result.score == 25
        assert result.urgency_level == UrgencyLevel.LOW

    def test_unanswered_questions_still_count_in_denominator(self):
        """Breathing difficulty alone is 10 of 52 points."""
        result = score_triage(_responses(breathing_difficulty=True))

        assert result.score == 19
        assert result.urgency_level == UrgencyLevel.LOW

    def test_scale_answer(self):
        """Pain 5/10 of weight 7 -> 3.5/52 -> 7."""
        assert score_triage(_responses(pain_level=5)).score == 7

    def test_scale_answer_is_clamped(self):
        assert score_triage(_responses(pain_level=15)).score == score_triage(_responses(pain_level=10)).score
        assert score_triage(_responses(pain_level=-3)).score == 0

    def test_multiple_choice_answer(self):
        """'Moderato' is option 2 of 0..3: 2/3 of weight 8."""
        assert score_triage(_responses(bleeding="Moderato")).score == 10

    def test_unknown_option_scores_nothing(self):
        assert score_triage(_responses(bleeding="Tantissimo")).score == 0

    @pytest.mark.parametrize("answer", [1, "true", "si", None])
    def test_boolean_answers_must_be_real_booleans(self, answer):
        assert score_triage(_responses(breathing_difficulty=answer)).score == 0

    def test_non_numeric_scale_answer_scores_nothing(self):
        assert score_triage(_responses(pain_level="molto")).score == 0
        assert score_triage(_responses(pain_level=True)).score == 0

    def test_unknown_question_is_ignored(self):
        assert score_triage(_responses(favourite_toy="ball")).score == 0

    def test_first_response_per_question_wins(self):
        responses = [
            TriageResponse(question_id="breathing_difficulty", answer=False),
            TriageResponse(question_id="breathing_difficulty", answer=True),
        ]

        assert score_triage(responses).score == 0

    @pytest.mark.parametrize(
        "answers, score, level",
        [
            (dict(breathing_difficulty=True, consciousness=False), 37, UrgencyLevel.MEDIUM),
            (dict(breathing_difficulty=True, consciousness=False, bleeding="Grave", pain_level=10), 65, UrgencyLevel.HIGH),
            (
                dict(breathing_difficulty=True, consciousness=False, bleeding="Grave",
                     pain_level=10, vomiting=True, mobility=True),
                87,
                UrgencyLevel.CRITICAL,
            ),
        ],
    )
    def test_realistic_cases(self, answers, score, level):
        result = score_triage(_responses(**answers))

        assert result.score == score
        assert result.urgency_level == level

    def test_score_is_always_within_bounds(self):
        booleans = [q.id for q in QUESTIONS if q.type.value == "boolean"]
        for values in itertools.product([True, False, None], repeat=3):
            for pain, bleeding in [(0, "Nessuno"), (10, "Grave"), (7, "Lieve")]:
                answers = dict(zip(booleans[:3], values), pain_level=pain, bleeding=bleeding)
                result = score_triage(_responses(**answers))

                assert 0 <= result.score <= 100


class TestUrgencyBands:
    """Tests for band thresholds and flags."""

    @pytest.mark.parametrize(
        "score, level, vet, emergency",
        [
            (100, UrgencyLevel.CRITICAL, True, True),
            (80, UrgencyLevel.CRITICAL, True, True),
            (79, UrgencyLevel.HIGH, True, False),
            (60, UrgencyLevel.HIGH, True, False),
            (59, UrgencyLevel.MEDIUM, True, False),
            (30, UrgencyLevel.MEDIUM, True, False),
            (29, UrgencyLevel.LOW, False, False),
            (0, UrgencyLevel.LOW, False, False),
        ],
    )
    def test_band_thresholds(self, score, level, vet, emergency):
        result = TriageScorer.result_for_score(score)

        assert result.urgency_level == level
        assert result.requires_veterinarian is vet
        assert result.requires_emergency_services is emergency
        assert len(result.recommendations) == 3
        assert result.suggested_actions

    def test_to_dict(self):
        payload = score_triage(WORST_CASE).to_dict()

        assert payload["score"] == 100
        assert payload["urgencyLevel"] == "critical"
        assert payload["requiresEmergencyServices"] is True

    @pytest.mark.parametrize("score, expected", [(0, 1), (5, 1), (10, 1), (11, 2), (45, 5), (81, 9), (100, 10)])
    def test_booking_urgency_score(self, score, expected):
        assert urgency_score(TriageScorer.result_for_score(score)) == expected
