"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.console import ConsoleNotifier, SystemClock
from ..adapters.json_store import JsonRecordStore
from ..config import AppConfig, load_config
from ..domain.exceptions import DoggoError
from ..domain.models import Coordinates
from ..domain.triage import (
    QuestionType,
    TriageQuestion,
    TriageResponse,
    TriageResult,
    TriageScorer,
    UrgencyLevel,
    get_questions,
)
from ..services.availability import AvailabilityService
from ..services.booking import BookingIntakeService
from ..services.emergency import EmergencyAlertService
from ..services.matching import MatchFinderService

app = typer.Typer(
    name="doggo",
    help="Veterinarian availability, dog matching and triage scoring",
    add_completion=False,
)

console = Console()

TRUE_WORDS = {"true", "yes", "si", "sì", "y", "s", "1"}
FALSE_WORDS = {"false", "no", "n", "0"}

URGENCY_STYLES = {
    UrgencyLevel.LOW: "green",
    UrgencyLevel.MEDIUM: "yellow",
    UrgencyLevel.HIGH: "dark_orange",
    UrgencyLevel.CRITICAL: "bold red",
}

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
AnswerOption = Annotated[
    Optional[List[str]],
    typer.Option("--answer", "-a", help="Triage answer as question_id=value (repeatable)"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """doggo command line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Errore:[/bold red] {error}")
    raise typer.Exit(1)


def _open_store(config: AppConfig) -> JsonRecordStore:
    return JsonRecordStore(data_file=config.data_file, default_timezone=config.timezone)


def _parse_date(value: str, tz: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as exc:
        raise ValueError(f"Data non valida '{value}' (formato YYYY-MM-DD)") from exc


def _coerce_answer(question: TriageQuestion, raw: str):
    """Turn a command-line string into the answer type the question expects."""
    value = raw.strip()

    if question.type == QuestionType.BOOLEAN:
        if value.lower() in TRUE_WORDS:
            return True
        if value.lower() in FALSE_WORDS:
            return False
        raise ValueError(f"Risposta sì/no non valida per '{question.id}': {raw}")

    if question.type == QuestionType.SCALE:
        try:
            number = float(value)
        except ValueError as exc:
            raise ValueError(f"Valore numerico non valido per '{question.id}': {raw}") from exc
        return int(number) if number.is_integer() else number

    if value.isdigit() and int(value) < len(question.options):
        return question.options[int(value)]
    for option in question.options:
        if option.lower() == value.lower():
            return option
    raise ValueError(
        f"Opzione non valida per '{question.id}': {raw} "
        f"(valori ammessi: {', '.join(question.options)})"
    )


def parse_answers(raw_answers: List[str], scorer: TriageScorer) -> List[TriageResponse]:
    """Parse ``question_id=value`` pairs into triage responses."""
    responses: List[TriageResponse] = []

    for item in raw_answers:
        question_id, sep, raw_value = item.partition("=")
        if not sep:
            raise ValueError(f"Risposta non valida '{item}' (formato atteso: domanda=valore)")

        question = scorer.get_question(question_id.strip())
        if question is None:
            raise ValueError(f"Domanda sconosciuta: '{question_id.strip()}'")

        responses.append(TriageResponse(question_id=question.id, answer=_coerce_answer(question, raw_value)))

    return responses


def _run_triage_wizard(scorer: TriageScorer) -> List[TriageResponse]:
    """Ask every triage question interactively."""
    responses: List[TriageResponse] = []

    for idx, question in enumerate(scorer.questions, 1):
        console.print(f"\n[bold]{idx}. {question.question}[/bold]")

        if question.type == QuestionType.BOOLEAN:
            answer = typer.confirm("→ Risposta", default=question.inverted)
        elif question.type == QuestionType.SCALE:
            answer = typer.prompt(f"→ Valore (0-{question.scale_max})", default=0, type=int)
        else:
            for option_idx, option in enumerate(question.options):
                console.print(f"  {option_idx}. {option}")
            choice = typer.prompt("→ Numero opzione", default=0, type=int)
            answer = _coerce_answer(question, str(choice))

        responses.append(TriageResponse(question_id=question.id, answer=answer))

    return responses


def _print_triage_result(result: TriageResult) -> None:
    style = URGENCY_STYLES[result.urgency_level]
    lines = [
        f"[bold]Punteggio:[/bold] {result.score}/100",
        f"[bold]Urgenza:[/bold] [{style}]{result.urgency_level.value}[/{style}]",
        f"[bold]Veterinario necessario:[/bold] {'sì' if result.requires_veterinarian else 'no'}",
        f"[bold]Servizi di emergenza:[/bold] {'sì' if result.requires_emergency_services else 'no'}",
        "",
        "[bold]Raccomandazioni:[/bold]",
        *[f"  • {item}" for item in result.recommendations],
        "",
        "[bold]Azioni suggerite:[/bold]",
        *[f"  • {item}" for item in result.suggested_actions],
    ]
    console.print(Panel.fit("\n".join(lines), title="🩺 Triage"))


@app.command()
def slots(
    vet_id: Annotated[str, typer.Argument(help="Veterinarian id")],
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Day (YYYY-MM-DD), defaults to today")] = None,
    slot_size: Annotated[Optional[int], typer.Option("--slot-size", help="Slot length in minutes")] = None,
    config_file: ConfigOption = None,
):
    """
    List the free booking slots of a veterinarian on one day.

    Examples:

        doggo slots vet-rossi --date 2024-11-25
        doggo slots vet-rossi --slot-size 15
    """
    try:
        config = load_config(config_file)
        store = _open_store(config)
        day = _parse_date(date, config.timezone) if date else pendulum.today(config.timezone).date()

        service = AvailabilityService(store, default_slot_size_minutes=config.scheduling.slot_size_minutes)

        async def _run():
            return await store.get_provider_name(vet_id), await service.find_slots(vet_id, day, slot_size)

        name, free = asyncio.run(_run())
    except (DoggoError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(f"\n[bold cyan]🗓️  {name}[/bold cyan] - {day.format('DD/MM/YYYY')}\n")
    if not free:
        console.print("[yellow]⚠ Nessuno slot disponibile per questo giorno.[/yellow]\n")
        return

    console.print(f"[bold green]✓ {len(free)} slot disponibili:[/bold green]")
    console.print("  " + "  ".join(free) + "\n")


@app.command()
def book(
    vet_id: Annotated[str, typer.Argument(help="Veterinarian id")],
    at: Annotated[str, typer.Option("--at", help="Appointment start (YYYY-MM-DD HH:mm, vet's local time)")],
    duration: Annotated[int, typer.Option("--duration", help="Duration in minutes")] = 30,
    answers: AnswerOption = None,
    config_file: ConfigOption = None,
):
    """
    Check a booking request: slot availability, triage urgency, vet notification.
    """
    try:
        config = load_config(config_file)
        store = _open_store(config)
        scorer = TriageScorer()
        responses = parse_answers(answers or [], scorer)
        notifier = ConsoleNotifier(console)

        availability = AvailabilityService(store, default_slot_size_minutes=config.scheduling.slot_size_minutes)
        intake = BookingIntakeService(availability, notifier=notifier, triage_scorer=scorer)

        async def _run():
            schedule = await store.get_schedule(vet_id)
            try:
                requested_at = pendulum.from_format(at, "YYYY-MM-DD HH:mm", tz=schedule.timezone)
            except ValueError as exc:
                raise ValueError(f"Orario non valido '{at}' (formato YYYY-MM-DD HH:mm)") from exc
            return await intake.prepare_booking(
                provider_id=vet_id,
                requested_at=requested_at,
                duration_minutes=duration,
                responses=responses,
                provider_contact=await store.get_provider_contact(vet_id),
            )

        draft = asyncio.run(_run())
    except (DoggoError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(
        f"\n[bold green]✓ Slot disponibile:[/bold green] "
        f"{draft.scheduled_at.format('DD/MM/YYYY HH:mm')} ({draft.duration_minutes} min)"
    )
    console.print(f"   Urgenza: {draft.urgency_score}/10")
    if draft.triage_notes:
        console.print(f"   Note triage: {draft.triage_notes}")
    console.print()


@app.command()
def matches(
    dog_id: Annotated[str, typer.Argument(help="Dog id")],
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", min=1, help="Maximum number of results")] = None,
    config_file: ConfigOption = None,
):
    """
    Show the best potential matches for a dog.
    """
    try:
        config = load_config(config_file)
        store = _open_store(config)
        service = MatchFinderService(
            store,
            clock=SystemClock(config.timezone),
            min_score=config.matching.min_score,
            limit=config.matching.limit,
        )
        ranked = asyncio.run(service.find_potential_matches(dog_id, limit=limit))
    except (DoggoError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if not ranked:
        console.print(
            f"[yellow]⚠ Nessun match con punteggio ≥ {config.matching.min_score}.[/yellow]"
        )
        return

    table = Table(title=f"Match potenziali per {dog_id}", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Cane", style="bold yellow")
    table.add_column("Taglia")
    table.add_column("Attività")
    table.add_column("Punteggio", justify="right", style="bold")

    for idx, entry in enumerate(ranked, 1):
        dog = entry.candidate
        table.add_row(
            str(idx),
            dog.name or dog.dog_id,
            dog.size.value,
            dog.activity_level.value,
            str(entry.score),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def compare(
    dog_a: Annotated[str, typer.Argument(help="First dog id")],
    dog_b: Annotated[str, typer.Argument(help="Second dog id")],
    config_file: ConfigOption = None,
):
    """
    Show the compatibility score of two dogs, component by component.
    """
    try:
        config = load_config(config_file)
        store = _open_store(config)
        service = MatchFinderService(store, clock=SystemClock(config.timezone))
        breakdown = asyncio.run(service.compare(dog_a, dog_b))
    except (DoggoError, FileNotFoundError, ValueError) as e:
        _fail(e)

    table = Table(title=f"{dog_a} ↔ {dog_b}", show_header=True, header_style="bold cyan")
    table.add_column("Criterio")
    table.add_column("Punti", justify="right")
    table.add_column("Max", justify="right", style="dim")

    table.add_row("Taglia", f"{breakdown.size:.1f}", "20")
    table.add_row("Età", f"{breakdown.age:.1f}", "15")
    table.add_row("Attività", f"{breakdown.activity:.1f}", "20")
    table.add_row("Temperamento", f"{breakdown.temperament:.1f}", "20")
    if breakdown.distance_km is None:
        table.add_row("Distanza (posizione mancante)", "0.0", "15")
    else:
        table.add_row(f"Distanza ({breakdown.distance_km:.1f} km)", f"{breakdown.geo:.1f}", "15")
    table.add_row("Sesso", f"{breakdown.gender:.1f}", "10")
    table.add_row("[bold]Totale[/bold]", f"[bold]{breakdown.total}[/bold]", "100")

    console.print()
    console.print(table)
    console.print()


@app.command()
def triage(
    answers: AnswerOption = None,
):
    """
    Score a triage questionnaire. Without --answer the questions are asked interactively.

    Examples:

        doggo triage
        doggo triage -a breathing_difficulty=si -a bleeding=Grave -a pain_level=8
    """
    scorer = TriageScorer()
    try:
        responses = parse_answers(answers, scorer) if answers else _run_triage_wizard(scorer)
    except ValueError as e:
        _fail(e)

    _print_triage_result(scorer.score(responses))


@app.command()
def questions():
    """
    List the triage questions.
    """
    table = Table(title="Domande di triage", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Domanda")
    table.add_column("Tipo", style="dim")
    table.add_column("Peso", justify="right")

    for question in get_questions():
        kind = question.type.value
        if question.options:
            kind = f"{kind}: {' / '.join(question.options)}"
        table.add_row(question.id, question.question, kind, str(question.weight))

    console.print()
    console.print(table)
    console.print()


@app.command()
def alert(
    latitude: Annotated[float, typer.Option("--lat", help="Emergency latitude")],
    longitude: Annotated[float, typer.Option("--lon", help="Emergency longitude")],
    reporter: Annotated[str, typer.Option("--reporter", help="Id of the reporting user")] = "",
    description: Annotated[str, typer.Option("--description", help="Short description")] = "",
    config_file: ConfigOption = None,
):
    """
    Alert users living near an emergency.
    """
    try:
        config = load_config(config_file)
        store = _open_store(config)
        service = EmergencyAlertService(ConsoleNotifier(console), radius_km=config.emergency.radius_km)

        async def _run():
            return await service.alert_nearby(
                location=Coordinates(latitude=latitude, longitude=longitude),
                recipients=await store.list_recipients(),
                reporter_id=reporter,
                description=description,
            )

        notified = asyncio.run(_run())
    except (DoggoError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(
        f"\n[bold green]✓ {len(notified)} utenti avvisati[/bold green] "
        f"(raggio {config.emergency.radius_km:g} km)\n"
    )


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]doggo[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
