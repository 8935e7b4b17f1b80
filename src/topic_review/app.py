"""Interactive CLI application."""
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from topic_review.config import DEFAULT_DB_PATH, DEFAULT_USER
from topic_review.db import init_db
from topic_review.engine import ReviewEngine
from topic_review.errors import EmptyRoundError, NoReviewHistoryError, ReviewError
from topic_review.models import MULTIPLE
from topic_review.questions import QuestionRepository
from topic_review.report import generate_user_report
from topic_review.seed import is_seeded, seed_all
from topic_review.settings import get_max_rounds, set_max_rounds
from topic_review.store import SessionStore

console = Console()

EXIT_WORDS = ("q", "menu")

LEVEL_COLORS = {"mastered": "green", "in-progress": "yellow", "not-started": "dim"}


class SessionExitRequested(Exception):
    """Raised when the user leaves a review round from a prompt."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def build_engine(db_path: str) -> ReviewEngine:
    return ReviewEngine(
        QuestionRepository(db_path),
        SessionStore(db_path),
        max_rounds=get_max_rounds(db_path),
    )


def show_welcome():
    console.print(Panel(
        "[bold]Topic Review[/bold]\n[dim]Answer until every question sticks[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("topics", "List topics"),
        ("review", "Start or resume a topic review"),
        ("mastery", "Mastery overview"),
        ("history", "Past reviews of a topic"),
        ("report", "Review report"),
        ("settings", "Round cap"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def ask_answer(question: dict):
    """Prompt for one question. Returns a key, or a list of keys for multi-select."""
    keys = [o["key"] for o in question["options"]]
    if question["question_type"] == MULTIPLE:
        raw = session_prompt(
            f"\nYour answers (choose {question['max_selections']}, comma-separated)"
        )
        return [k.strip().upper() for k in raw.split(",") if k.strip()]
    choices = [k.lower() for k in keys] + list(EXIT_WORDS)
    return session_prompt("\nYour answer", choices=choices).upper()


def run_review_round(engine: ReviewEngine, round_data: dict):
    """Serve one round, submit it and print the per-question results."""
    questions = round_data["questions"]
    console.print(
        f"\n[bold]Round {round_data['round']}[/bold] — {len(questions)} questions "
        "[dim](q to leave)[/dim]\n"
    )
    answers = {}
    for i, q in enumerate(questions, 1):
        console.print(f"[bold]Q{i}.[/bold] {q['question']}\n")
        for option in q["options"]:
            console.print(f"  [cyan]{option['key']})[/cyan] {option['text']}")
        answers[q["id"]] = ask_answer(q)
        console.print()

    result = engine.submit_round(round_data["session_id"], answers)
    for r in result.results:
        if r.is_correct:
            console.print(f"[green]Q{r.question_id} correct[/green]")
        else:
            console.print(f"[red]Q{r.question_id} incorrect.[/red] Answer: [green]{r.correct_answer}[/green]")
            if r.explanation:
                console.print(f"[dim]{r.explanation}[/dim]")
    console.print(
        f"\n[bold]Round {result.round_number}: {result.correct_count}/{result.total_count} "
        f"({result.percentage}%)[/bold]"
    )
    return result


def show_summary(summary):
    color = "green" if summary.mastery_achieved else "yellow"
    status = "Mastered" if summary.mastery_achieved else "Not mastered"
    console.print(Panel(
        f"Rounds: [bold]{summary.total_rounds}[/bold]  |  "
        f"Final score: [bold]{summary.final_score}%[/bold]  |  "
        f"Time: [bold]{summary.time_spent}s[/bold]\n[{color}]{status}[/{color}]",
        title=f"Review complete: {summary.topic}", border_style=color,
    ))


def pick_topic(engine: ReviewEngine) -> str | None:
    topics = engine.questions.list_topics()
    if not topics:
        console.print("[yellow]No questions in the bank yet.[/yellow]")
        return None
    for i, t in enumerate(topics, 1):
        console.print(f"  [cyan]{i}[/cyan]) {t['title']} ({t['question_count']} questions)")
    choice = IntPrompt.ask("Select topic", choices=[str(i) for i in range(1, len(topics) + 1)])
    return topics[choice - 1]["topic"]


def cmd_topics(db_path: str):
    engine = build_engine(db_path)
    table = Table(title="Topics")
    table.add_column("Topic", style="cyan")
    table.add_column("Title")
    table.add_column("Domain")
    table.add_column("Questions", justify="right")
    for t in engine.questions.list_topics():
        table.add_row(t["topic"], t["title"], t["domain"], str(t["question_count"]))
    console.print(table)


def cmd_review(db_path: str, user_id: str = DEFAULT_USER):
    engine = build_engine(db_path)
    topic = pick_topic(engine)
    if topic is None:
        return
    active = [s for s in engine.store.list_by_user_and_topic(user_id, topic) if not s.is_completed]
    if active:
        session_id = active[-1].id
        console.print(f"[dim]Resuming review session {session_id}[/dim]")
    else:
        round_data = engine.start(user_id, topic)
        session_id = round_data["session_id"]

    try:
        if active:
            round_data = engine.get_next_round(session_id)
        while True:
            result = run_review_round(engine, round_data)
            if result.is_complete:
                break
            round_data = engine.get_next_round(session_id)
    except SessionExitRequested:
        finish = Prompt.ask("Finish this review now without mastery?", choices=["y", "n"], default="n")
        if finish != "y":
            console.print(f"[dim]Review {session_id} kept open. Pick the topic again to resume.[/dim]")
            return
    except EmptyRoundError:
        console.print("[yellow]The questions left in this review are no longer in the bank.[/yellow]")
    show_summary(engine.complete(session_id))


def cmd_mastery(db_path: str, user_id: str = DEFAULT_USER):
    overview = build_engine(db_path).mastery_overview(user_id)
    table = Table(title="Topic Mastery")
    table.add_column("Topic", style="cyan")
    table.add_column("Level")
    table.add_column("Sessions", justify="right")
    table.add_column("Avg Rounds", justify="right")
    table.add_column("Last Practiced")
    for record in overview["mastery"]:
        color = LEVEL_COLORS[record.mastery_level]
        table.add_row(
            record.title or record.topic,
            f"[{color}]{record.mastery_level}[/{color}]",
            str(record.total_sessions),
            f"{record.average_rounds_to_mastery}" if record.average_rounds_to_mastery else "-",
            (record.last_practiced or "-")[:16],
        )
    console.print(table)
    overall = overview["overall"]
    console.print(f"\n  Mastered: [bold]{overall['topics_mastered']}[/bold]  |  "
                  f"In progress: [bold]{overall['topics_in_progress']}[/bold]  |  "
                  f"Not started: [bold]{overall['topics_not_started']}[/bold]  |  "
                  f"Avg rounds: [bold]{overall['average_rounds_to_mastery']}[/bold]  |  "
                  f"Time: [bold]{overall['total_time_spent']}s[/bold]")


def cmd_history(db_path: str, user_id: str = DEFAULT_USER):
    engine = build_engine(db_path)
    topic = pick_topic(engine)
    if topic is None:
        return
    sessions = engine.history(user_id, topic)
    if not sessions:
        console.print(f"[yellow]No completed reviews for {topic} yet.[/yellow]")
        return
    table = Table(title=f"History: {topic}")
    table.add_column("Started")
    table.add_column("Rounds", justify="right")
    table.add_column("Final", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Mastery")
    for s in sessions:
        table.add_row(
            s["started_at"][:16],
            str(s["rounds"]),
            f"{s['final_score']}%",
            f"{s['time_spent']}s",
            "[green]yes[/green]" if s["mastery_achieved"] else "[red]no[/red]",
        )
    console.print(table)


def cmd_report(db_path: str, user_id: str = DEFAULT_USER):
    try:
        report = generate_user_report(SessionStore(db_path), user_id)
    except NoReviewHistoryError:
        console.print("[yellow]No reviews yet. Start one with 'review'.[/yellow]")
        return
    breakdown = report["difficulty_breakdown"]
    times = report["time_analysis"]
    console.print(Panel(
        f"Completed reviews: [bold]{report['total_sessions']}[/bold]\n"
        f"Mastered {breakdown['mastered']}  |  Good {breakdown['good']}  |  "
        f"Needs work {breakdown['needs_work']}  |  Struggling {breakdown['struggling']}\n"
        f"Study time: {times['total_study_minutes']} min "
        f"(avg {times['average_session_minutes']} min, "
        f"{times['sessions_last_7_days']} reviews this week)",
        title="Review Report", border_style="blue",
    ))
    for rec in report["recommendations"]:
        console.print(f"  [yellow]{rec['message']}:[/yellow] {', '.join(rec['topics'])}")


def cmd_settings(db_path: str):
    current = get_max_rounds(db_path)
    console.print(f"Round cap: [bold]{current if current else 'none'}[/bold]")
    rounds = IntPrompt.ask("New round cap (0 for none)", default=current or 0)
    set_max_rounds(db_path, rounds)
    console.print("[green]Saved.[/green]")


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main():
    setup_logging(verbose="-v" in sys.argv[1:])
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Loading sample questions...[/dim]")
    seed_all(db_path)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        try:
            if choice == "topics":
                cmd_topics(db_path)
            elif choice == "review":
                cmd_review(db_path)
            elif choice == "mastery":
                cmd_mastery(db_path)
            elif choice == "history":
                cmd_history(db_path)
            elif choice == "report":
                cmd_report(db_path)
            elif choice == "settings":
                cmd_settings(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Bye![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except ReviewError as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
