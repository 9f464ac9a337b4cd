"""CLI commands for STAAR Kids.

Commands:
- init-db: Create the SQLite database
- generate: Generate STAAR questions (LLM with built-in bank fallback)
- validate: Check question payloads from a JSON file
- serve: Run the Web API with uvicorn
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from staarkids.config.app_config import load_app_config
from staarkids.core.question_generator import QuestionGenerator
from staarkids.core.question_validator import validate_question
from staarkids.core.questions import Question
from staarkids.core.teks import is_valid_teks, validate_grade_subject
from staarkids.db.database import init_db
from staarkids.db.questions_repository import insert_question
from staarkids.llm.client import LLMClient

app = typer.Typer(
    name="staar",
    help="STAAR practice question generation and API server.",
    no_args_is_help=True,
)

console = Console()


def _truncate(text: str, max_len: int = 70) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."


@app.command(name="init-db")
def init_database(
    db: Path | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Create the database and its tables."""
    db_path = db or load_app_config().db_path
    init_db(db_path)
    console.print(f"[green]✓ Database ready:[/green] {db_path}")


@app.command()
def generate(
    grade: int = typer.Option(..., "--grade", "-g", help="Grade: 3, 4 or 5"),
    subject: str = typer.Option(..., "--subject", "-s", help="Subject: math or reading"),
    count: int = typer.Option(1, "--count", "-n", min=1, max=20, help="Number of questions"),
    category: str | None = typer.Option(None, "--category", "-c", help="Question category"),
    teks: str | None = typer.Option(None, "--teks", help="TEKS standard, e.g. 4.2A"),
    save: bool = typer.Option(False, "--save", help="Store generated questions"),
    as_json: bool = typer.Option(False, "--json", help="Print questions as JSON"),
) -> None:
    """Generate STAAR questions for a grade and subject.

    Falls back to the built-in question bank when the LLM produces nothing.
    """
    try:
        validate_grade_subject(grade, subject)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if teks and not is_valid_teks(teks):
        console.print(f"[red]✗ Invalid TEKS standard: {teks}[/red]")
        raise typer.Exit(code=1)

    client = LLMClient()
    with client:
        generator = QuestionGenerator(client=client)
        questions, method = generator.generate_with_fallback(
            grade, subject, count=count, category=category, teks_standard=teks
        )

    if save:
        init_db(load_app_config().db_path)
        for question in questions:
            insert_question(question)

    if as_json:
        payload = {
            "questions": [q.to_payload() for q in questions],
            "generated": len(questions),
            "method": method,
        }
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    source = "LLM" if method == "llm" else "question bank"
    console.print(f"[green]✓ {len(questions)} question(s) from {source}[/green]")
    for i, question in enumerate(questions, 1):
        console.print(f"\n[bold]{i}. [{question.teks_standard}][/bold] {question.question_text}")
        for choice in question.answer_choices:
            console.print(f"   {choice}")
        console.print(f"   [dim]Answer:[/dim] {question.correct_answer}")
    if save:
        console.print(f"\n[dim]Saved {len(questions)} question(s)[/dim]")


@app.command()
def validate(
    file: Path = typer.Argument(..., help="JSON file with a question or a list of questions"),
) -> None:
    """Validate question payloads (camelCase JSON) from a file."""
    if not file.exists():
        console.print(f"[red]✗ File not found: {file}[/red]")
        raise typer.Exit(code=1)

    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]✗ Invalid JSON: {e}[/red]")
        raise typer.Exit(code=1)

    items = data if isinstance(data, list) else [data]
    if not all(isinstance(item, dict) for item in items):
        console.print("[red]✗ Expected a question object or a list of them[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="cyan", width=4)
    table.add_column("TEKS", width=8)
    table.add_column("Status", justify="center", width=8)
    table.add_column("Question", width=40)
    table.add_column("Issues", width=50)

    invalid = 0
    for i, item in enumerate(items, 1):
        question = Question.from_payload(item)
        result = validate_question(question)
        if not result.is_valid:
            invalid += 1
        table.add_row(
            str(i),
            question.teks_standard or "-",
            "[green]✓[/green]" if result.is_valid else "[red]✗[/red]",
            _truncate(question.question_text),
            "; ".join(result.issues) or "-",
        )

    console.print(table)
    console.print(f"\n{len(items) - invalid}/{len(items)} valid")

    if invalid:
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    console.print(f"[green]Starting STAAR Kids API on http://{host}:{port}[/green]")
    uvicorn.run("staarkids.web.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
