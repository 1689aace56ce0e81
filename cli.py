import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from typing import Optional, List
from datetime import datetime
from itertools import groupby

from tracker.database import SessionLocal, init_db, drop_db
from tracker.crud import (
    create_topic, find_topics, list_topics, archive_topic,
    create_study_entry, get_topic_snapshots, get_review_snapshots,
    get_activity_timestamps, load_due_items, save_grade, reset_progress,
    REVIEW_COMPLETED
)
from tracker.schemas import TopicCreate, StudyEntryCreate, FeedMode
from tracker.errors import TrackerError, InvalidInputError, PersistenceError, StaleReviewError
from tracker.feed import get_daily_feed, completion_message, missed_day_message
from tracker.logging_config import configure_logging
from tracker.mastery import compute_coverage
from tracker.progress import compute_progress
from tracker.review_session import start_session, current_item, reveal, set_confidence, grade, advance
from tracker.sm2 import QUALITY_MAP, quality_for
from tracker.streak import compute_streak
from tracker.timeutils import now_ms

app = typer.Typer(help="Study Tracker CLI - spaced repetition for your study topics")
console = Console()

MODE_STYLE = {
    FeedMode.REVIEW: "red",
    FeedMode.STRENGTHEN: "yellow",
    FeedMode.NEW: "green",
}

def _fmt_ms(timestamp: Optional[int]) -> str:
    if timestamp is None:
        return "-"
    return datetime.fromtimestamp(timestamp / 1000).strftime("%Y-%m-%d %H:%M")

def _fail(message: str):
    console.print(f"[red]✗[/red] {message}")
    raise typer.Exit(code=1)

def _select_topic(db, search: str):
    """Resolve a search term to one active topic, prompting on ambiguity"""
    matches = find_topics(db, search)
    if not matches:
        _fail(f"No topics found matching '{search}'")
    if len(matches) == 1:
        return matches[0]

    console.print(f"[yellow]Multiple topics found:[/yellow]")
    for i, topic in enumerate(matches[:10], 1):
        console.print(f"  {i}. {topic.name} [dim]({topic.status})[/dim]")

    choice = typer.prompt("Select topic number", type=int)
    if choice < 1 or choice > min(len(matches), 10):
        _fail("Invalid selection")
    return matches[choice - 1]

@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    """Configure logging before any command runs"""
    configure_logging("DEBUG" if verbose else None)

@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")

@app.command()
def reset_db():
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA including topics. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    console.print("[yellow]Dropping all tables...[/yellow]")
    drop_db()
    console.print("[yellow]Recreating tables...[/yellow]")
    init_db()
    console.print("[green]✓[/green] Database reset complete! All data deleted.")

@app.command("reset-progress")
def reset_progress_cmd():
    """Reset all study progress, keeping registered topics"""
    confirm = typer.confirm("Reset all study progress? This cannot be undone.")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    db = SessionLocal()
    try:
        count = reset_progress(db)
        console.print(f"[green]✓[/green] Progress reset for {count} topics.")
    except TrackerError as e:
        _fail(str(e))
    finally:
        db.close()

@app.command()
def add_topic(
    name: str = typer.Option(..., prompt="Topic name"),
    url: str = typer.Option(..., prompt="Reference URL")
):
    """Register a new study topic"""
    db = SessionLocal()
    try:
        topic = create_topic(db, TopicCreate(name=name, reference_url=url))
        console.print(f"[green]✓[/green] Topic added: {topic.name} (under '{topic.letter}')")
    except TrackerError as e:
        _fail(str(e))
    finally:
        db.close()

@app.command("list")
def list_cmd(
    letter: Optional[str] = typer.Option(None, help="Only show topics starting with this letter"),
    archived: bool = typer.Option(False, help="Include archived topics")
):
    """List topics grouped by first letter, with coverage"""
    db = SessionLocal()
    try:
        topics = list_topics(db, include_archived=archived, letter=letter)
        if not topics:
            console.print("[yellow]No topics yet. Add one with 'add-topic'.[/yellow]")
            return

        topics = sorted(topics, key=lambda t: (t.letter, t.name.casefold()))
        for key, group in groupby(topics, key=lambda t: t.letter):
            group = list(group)
            coverage = compute_coverage(t.status for t in group)
            console.print(
                f"\n[bold]{key}[/bold]  [dim]{coverage.studied}/{coverage.total} studied "
                f"({coverage.pct}%), {coverage.mastered} mastered[/dim]"
            )

            table = Table(show_header=True, header_style="bold magenta")
            table.add_column("Topic", style="cyan")
            table.add_column("Status", style="green")
            table.add_column("Mastery", style="blue", justify="right")
            table.add_column("Next Due", style="yellow")

            for topic in group:
                name = f"{topic.name} [dim](archived)[/dim]" if topic.is_archived else topic.name
                table.add_row(
                    name,
                    topic.status.replace("_", " "),
                    f"{topic.mastery_score}",
                    _fmt_ms(topic.next_due_at)
                )

            console.print(table)
    finally:
        db.close()

@app.command()
def archive(topic_search: str = typer.Option(..., prompt="Topic (search term)")):
    """Archive a topic so it no longer appears in feeds or reviews"""
    db = SessionLocal()
    try:
        topic = _select_topic(db, topic_search)
        if not typer.confirm(f"Archive '{topic.name}'?"):
            console.print("[yellow]Cancelled.[/yellow]")
            return
        archive_topic(db, topic.id)
        console.print(f"[green]✓[/green] Archived {topic.name}")
    except TrackerError as e:
        _fail(str(e))
    finally:
        db.close()

@app.command()
def study(
    topic_search: str = typer.Option(..., prompt="Topic (search term)"),
    summary: str = typer.Option(..., prompt="Summary of what you studied"),
    question: Optional[List[str]] = typer.Option(None, "--question", "-q", help="Recall question (repeat, at least 2)"),
    application: str = typer.Option(..., prompt="Ministry application"),
    contrast: Optional[str] = typer.Option(None, help="Optional contrast notes")
):
    """Record a study entry for a topic"""
    db = SessionLocal()
    try:
        topic = _select_topic(db, topic_search)

        questions = list(question or [])
        if not questions:
            console.print("Enter recall questions (blank line to finish, at least 2):")
            while True:
                text = typer.prompt(f"  Q{len(questions) + 1}", default="", show_default=False)
                if not text.strip():
                    break
                questions.append(text)

        create_study_entry(db, StudyEntryCreate(
            topic_id=topic.id,
            summary=summary,
            recall_questions=questions,
            ministry_application=application,
            contrast_notes=contrast
        ))
        console.print(f"[green]✓[/green] Study entry saved for {topic.name}!")
        console.print("  This topic will now appear in your review queue.")
    except TrackerError as e:
        _fail(str(e))
    finally:
        db.close()

@app.command()
def feed():
    """Show today's adaptive feed"""
    db = SessionLocal()
    try:
        result = get_daily_feed(
            get_topic_snapshots(db),
            get_review_snapshots(db),
            get_activity_timestamps(db)
        )

        if result.missed_yesterday:
            msg = missed_day_message()
            console.print(Panel(msg.message, title=msg.title, border_style="yellow"))

        console.print(
            f"\n[bold]Today's Training[/bold] - {result.intensity.label} "
            f"({result.intensity.daily_limit} cards): {result.intensity.description}"
        )
        console.print(f"Streak: {result.streak} days 🔥\n")

        if result.feed_exhausted:
            console.print("[green]Nothing to train today. Add topics or record study entries.[/green]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("#", justify="right")
        table.add_column("Topic", style="cyan")
        table.add_column("Mode")
        table.add_column("Mastery", style="blue", justify="right")
        table.add_column("", style="dim")

        for i, card in enumerate(result.cards, 1):
            style = MODE_STYLE[card.mode]
            table.add_row(
                str(i),
                card.topic_name,
                f"[{style}]{card.badge}[/{style}]",
                str(card.mastery_score),
                card.encouragement
            )

        console.print(table)
    finally:
        db.close()

@app.command()
def review():
    """Run an interactive review session over due topics"""
    db = SessionLocal()
    try:
        now = now_ms()
        items = load_due_items(db, now)
        if not items:
            console.print("[green]All caught up![/green] No items due for review.")
            return

        session = start_session(items, now)
        console.print(f"\n[bold]Review session: {len(items)} topic(s) due[/bold]\n")

        while not session.complete:
            item = current_item(session)
            console.print(Panel(
                item.question,
                title=f"{session.current_index + 1}/{len(session.items)} · {item.topic_name}",
                subtitle=f"Question {item.question_index} of {item.question_count} · mastery {item.mastery_score}",
            ))
            typer.prompt("Press Enter to show the answer", default="", show_default=False)

            session = reveal(session)
            console.print(f"[bold]Summary:[/bold] {item.summary}")
            console.print(f"[bold]Application:[/bold] {item.ministry_application}")
            if item.contrast_notes:
                console.print(f"[bold]Contrast:[/bold] {item.contrast_notes}")

            while session.confidence is None:
                try:
                    session = set_confidence(session, typer.prompt("Confidence (1-5)", type=int))
                except InvalidInputError as e:
                    console.print(f"[red]✗[/red] {e}")

            while True:
                try:
                    quality = quality_for(typer.prompt(f"Grade [{'/'.join(QUALITY_MAP)}]"))
                    break
                except InvalidInputError as e:
                    console.print(f"[red]✗[/red] {e}")

            try:
                session, result = grade(session, quality, now_ms(), lambda r: save_grade(db, r))
            except StaleReviewError as e:
                console.print(f"[yellow]![/yellow] {e}. Skipping this card; run 'review' again to pick it up.\n")
                session = advance(session)
                continue
            except PersistenceError as e:
                console.print(f"[red]✗[/red] Save failed: {e}")
                if typer.confirm("Retry this card?", default=True):
                    continue
                raise typer.Exit(code=1)

            console.print(
                f"[green]✓[/green] Next review in {result.state.interval_days} day(s) · "
                f"mastery {result.mastery_score} · {result.status.value.replace('_', ' ')}\n"
            )

        streak = compute_streak(get_activity_timestamps(db)).streak
        msg = completion_message(streak)
        body = f"You reviewed {len(session.items)} topic(s). Your progress has been saved.\n{msg.message}"
        if msg.scripture:
            body += f"\n\n[italic dim]{msg.scripture}[/italic dim]"
        console.print(Panel(
            body,
            title=msg.title,
            border_style="green"
        ))
    finally:
        db.close()

@app.command()
def progress():
    """View learning progress statistics"""
    db = SessionLocal()
    try:
        stats = compute_progress(
            get_topic_snapshots(db),
            get_review_snapshots(db),
            get_activity_timestamps(db, REVIEW_COMPLETED)
        )

        console.print(f"\n[bold]Learning Progress[/bold]\n")
        console.print(f"[cyan]Statistics:[/cyan]")
        console.print(f"  Topics studied: {stats.total_studied}")
        console.print(f"  Mastered: {stats.mastered}")
        console.print(f"  Average mastery: {stats.avg_mastery}%")
        console.print(f"  Due for review: {stats.due_count}")
        console.print(f"  Retention: {stats.retention}%")
        console.print(f"  Review streak: {stats.streak} days")

        table = Table(show_header=True, header_style="bold magenta", title="Reviews this week")
        for day in stats.weekly:
            table.add_column(day.day, justify="center")
        table.add_row(*[str(day.count) for day in stats.weekly])
        console.print(table)
    finally:
        db.close()

if __name__ == "__main__":
    app()
