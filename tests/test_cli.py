"""
Tests for the command line interface, run against the bundled sample data.
"""

import pytest
from typer.testing import CliRunner

from doggo.cli.app import app, parse_answers
from doggo.domain.triage import TriageScorer

runner = CliRunner()

WORST_CASE_ANSWERS = [
    "-a", "breathing_difficulty=si",
    "-a", "consciousness=no",
    "-a", "bleeding=Grave",
    "-a", "pain_level=10",
    "-a", "vomiting=si",
    "-a", "appetite=no",
    "-a", "mobility=si",
    "-a", "previous_issues=si",
]


def test_slots():
    result = runner.invoke(app, ["slots", "vet-rossi", "--date", "2024-11-25"])

    assert result.exit_code == 0
    assert "09:00" in result.output
    assert "10:30" in result.output
    assert "10:00" not in result.output


def test_slots_closed_day():
    result = runner.invoke(app, ["slots", "vet-rossi", "--date", "2024-11-27"])

    assert result.exit_code == 0
    assert "Nessuno slot" in result.output


def test_slots_unknown_vet():
    result = runner.invoke(app, ["slots", "vet-nobody", "--date", "2024-11-25"])

    assert result.exit_code == 1
    assert "Errore" in result.output


def test_slots_invalid_date():
    result = runner.invoke(app, ["slots", "vet-rossi", "--date", "25/11/2024"])

    assert result.exit_code == 1


def test_book_free_slot():
    result = runner.invoke(app, ["book", "vet-rossi", "--at", "2024-11-25 09:30"])

    assert result.exit_code == 0
    assert "Urgenza: 1/10" in result.output
    assert "giulia.rossi@example.com" in result.output


def test_book_with_triage():
    result = runner.invoke(
        app,
        ["book", "vet-rossi", "--at", "2024-11-25 11:00", "-a", "breathing_difficulty=si", "-a", "consciousness=no"],
    )

    assert result.exit_code == 0
    assert "Urgenza: 4/10" in result.output


def test_book_taken_slot():
    result = runner.invoke(app, ["book", "vet-rossi", "--at", "2024-11-25 10:00"])

    assert result.exit_code == 1
    assert "Errore" in result.output


def test_matches():
    result = runner.invoke(app, ["matches", "dog-fido"])

    assert result.exit_code == 0
    assert "Luna" in result.output
    assert "Kira" in result.output
    assert "Rex" not in result.output
    assert "Birba" not in result.output


@pytest.mark.parametrize("limit", ["0", "-1"])
def test_matches_rejects_non_positive_limit(limit):
    result = runner.invoke(app, ["matches", "dog-fido", "--limit", limit])

    assert result.exit_code == 2


def test_compare():
    result = runner.invoke(app, ["compare", "dog-fido", "dog-kira"])

    assert result.exit_code == 0
    assert "posizione mancante" in result.output


def test_triage_with_answers():
    result = runner.invoke(app, ["triage", *WORST_CASE_ANSWERS])

    assert result.exit_code == 0
    assert "100/100" in result.output
    assert "critical" in result.output


def test_triage_invalid_answer():
    result = runner.invoke(app, ["triage", "-a", "pain_level=molto"])

    assert result.exit_code == 1


def test_questions():
    result = runner.invoke(app, ["questions"])

    assert result.exit_code == 0
    assert "breathing_difficulty" in result.output
    assert "pain_level" in result.output


def test_alert():
    result = runner.invoke(app, ["alert", "--lat", "45.4642", "--lon", "9.19", "--reporter", "u-anna"])

    assert result.exit_code == 0
    assert "1 utenti avvisati" in result.output


class TestParseAnswers:
    """Tests for command-line answer parsing."""

    def test_typed_answers(self):
        responses = parse_answers(
            ["breathing_difficulty=yes", "appetite=NO", "pain_level=7", "bleeding=grave"], TriageScorer()
        )

        assert [response.answer for response in responses] == [True, False, 7, "Grave"]

    def test_option_by_index(self):
        responses = parse_answers(["bleeding=1"], TriageScorer())

        assert responses[0].answer == "Lieve"

    @pytest.mark.parametrize("raw", ["pain_level", "unknown=1", "vomiting=forse", "bleeding=Tantissimo"])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_answers([raw], TriageScorer())
