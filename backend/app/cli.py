"""CLI commands for database and catalog management."""
import asyncio
import json
import sys
import uuid
from pathlib import Path

import click
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import async_session_maker, close_db, init_db
from app.core.exceptions import ApplicationError
from app.core.logging import configure_logging
from app.models.organization import User
from app.services.organization_service import OrganizationService
from app.services.questionnaire_service import QuestionnaireService

# Operator identity for commands that bypass company access checks
CLI_USER = User(id=uuid.UUID(int=0), name="cli")


async def _allow_all(user: User, company_id: uuid.UUID) -> bool:
    return True


def _run(coro):
    async def _wrapped():
        try:
            return await coro
        finally:
            await close_db()

    return asyncio.run(_wrapped())


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Database and catalog management commands."""
    configure_logging(level="DEBUG" if verbose else None, json_output=False)


@cli.command("init-db")
def init_db_command():
    """Create all database tables (development only)."""

    try:
        _run(init_db())
        click.echo("✓ All tables created successfully")
    except SQLAlchemyError as e:
        click.echo(f"✗ Error creating tables: {e}")
        sys.exit(1)


@cli.command("seed-catalog")
@click.argument("catalog_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def seed_catalog(catalog_file: Path):
    """Import sections, questions and options from a JSON catalog document."""

    try:
        payload = json.loads(catalog_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        click.echo(f"✗ {catalog_file.name} is not valid JSON: {e}")
        sys.exit(1)

    async def _import():
        async with async_session_maker() as db:
            return await QuestionnaireService(db).import_catalog(payload)

    try:
        counts = _run(_import())
    except ApplicationError as e:
        click.echo(f"✗ Import failed: {e.message}")
        if e.details:
            click.echo(json.dumps(e.details, indent=2, default=str))
        sys.exit(1)

    click.echo("✅ Catalog imported")
    for key, value in counts.items():
        click.echo(f"   {key.capitalize()}: {value}")


@cli.command("list-questions")
def list_questions():
    """Print the question catalog with option scores."""

    async def _list():
        async with async_session_maker() as db:
            questions = await QuestionnaireService(db).list_questions()
            return [
                (
                    question.id,
                    question.section.title if question.section else None,
                    question.text,
                    [(option.id, option.text, option.score_value) for option in question.options],
                )
                for question in questions
            ]

    try:
        rows = _run(_list())
    except SQLAlchemyError as e:
        click.echo(f"✗ Error loading questions: {e}")
        sys.exit(1)

    if not rows:
        click.echo("No questions found")
        return

    for question_id, section_title, text, options in rows:
        click.echo(f"[{question_id}] ({section_title or '-'}) {text}")
        for option_id, option_text, score in options:
            click.echo(f"    {option_id}: {option_text} -> {score if score is not None else 0}")


@cli.command("company-maturity")
@click.argument("company_id")
def company_maturity(company_id: str):
    """Show the average maturity of a company's completed assessments."""

    async def _metrics():
        async with async_session_maker() as db:
            service = OrganizationService(db, access_checker=_allow_all)
            return await service.get_company_metrics(company_id, CLI_USER)

    try:
        metrics = _run(_metrics())
    except ApplicationError as e:
        click.echo(f"✗ {e.message}")
        sys.exit(1)

    click.echo(f"Company: {metrics['company_id']}")
    click.echo(f"   Applications: {metrics['total_applications']}")
    click.echo(f"   Completed assessments: {metrics['completed_assessments']}")
    click.echo(f"   In progress assessments: {metrics['in_progress_assessments']}")
    average = metrics["average_score"]
    click.echo(f"   Average score: {average if average is not None else '-'}")
    click.echo(f"   Maturity: {metrics['maturity_percentage']}%")


if __name__ == "__main__":
    cli()
