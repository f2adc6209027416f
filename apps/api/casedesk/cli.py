"""CLI tools for casedesk administration."""

import click

from casedesk.core.exceptions import CaseDeskError
from casedesk.core.stage_definitions import get_stage_defs
from casedesk.db.enums import Role
from casedesk.db.base import Base
from casedesk.db.session import SessionLocal, engine
from casedesk.services import case_service, user_service


@click.group()
def cli():
    """Casedesk CLI tools."""
    pass


@cli.command()
def init_db():
    """
    Create all tables directly from the models.

    For local SQLite development; use Alembic migrations elsewhere.
    """
    import casedesk.db.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    click.echo("✓ Tables created")


@cli.command()
@click.option("--email", required=True, help="Advisor email address")
@click.option("--name", "display_name", required=True, help="Display name")
@click.option("--phone", default=None, help="Phone number")
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.ADVISOR.value,
    show_default=True,
    help="User role",
)
def create_user(email: str, display_name: str, phone: str | None, role: str):
    """
    Create a user account.

    Example:
        python -m casedesk.cli create-user --email "jo@example.com" --name "Jo Smith"
    """
    db = SessionLocal()
    try:
        user = user_service.create_user(
            db, email=email, display_name=display_name, phone=phone, role=Role(role)
        )
        click.echo(f"✓ Created {user.role}: {user.display_name}")
        click.echo(f"  ID: {user.id}")
    except CaseDeskError as e:
        db.rollback()
        click.echo(f"❌ Error: {e.message}")
    finally:
        db.close()


@cli.command()
def list_stages():
    """Print configured pipeline stages in board order."""
    for stage in get_stage_defs():
        click.echo(f"{stage['order']:>2}. {stage['name']}")


@cli.command()
def next_case_number():
    """Show the case number the next created case would receive."""
    db = SessionLocal()
    try:
        click.echo(case_service.generate_case_number(db))
    finally:
        db.close()


if __name__ == "__main__":
    cli()
