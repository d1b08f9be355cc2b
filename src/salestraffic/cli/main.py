import asyncio
import json
import logging
from pathlib import Path

import typer
from motor.motor_asyncio import AsyncIOMotorClient
from tortoise import Tortoise
from tortoise.exceptions import IntegrityError

from ..core.config import get_settings, build_tortoise_config
from ..features.auth.models import User as AuthUser
from ..features.auth.security import get_password_hash
from ..features.reports.repository import MongoReportRepository

logger = logging.getLogger(__name__)

app = typer.Typer(name="sales-traffic-cli", help="CLI for managing Sales and Traffic Stats data.")


class DBConnection:
    """Tortoise connection to the user database for the duration of a command."""

    async def __aenter__(self):
        settings = get_settings()
        await Tortoise.init(config=build_tortoise_config(settings.database_url))
        await Tortoise.generate_schemas(safe=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Tortoise.close_connections()


class ReportStore:
    """MongoDB report collection for the duration of a command."""

    async def __aenter__(self) -> MongoReportRepository:
        settings = get_settings()
        self.client = AsyncIOMotorClient(settings.mongodb_url)
        collection = self.client[settings.mongodb_database][settings.report_collection]
        return MongoReportRepository(collection)

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.client.close()


# User management commands
user_app = typer.Typer(name="users", help="Manage user accounts.")
app.add_typer(user_app)

@user_app.command("create-admin")
def create_admin_user_command(
    username: str = typer.Option(..., prompt=True, help="Username for the new admin."),
    email: str = typer.Option(..., prompt=True, help="Email for the new admin."),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password for the new admin.")
):
    """Creates a new admin user."""
    asyncio.run(_create_admin_user(username, email, password))

async def _create_admin_user(username: str, email: str, password: str):
    async with DBConnection():
        typer.echo(f"Attempting to create admin user: {username} ({email})...")
        if await AuthUser.filter(username=username).exists():
            typer.secho(f"Error: User with username '{username}' already exists.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        if await AuthUser.filter(email=email).exists():
            typer.secho(f"Error: User with email '{email}' already exists.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        try:
            admin_user = await AuthUser.create(
                username=username,
                email=email,
                hashed_password=get_password_hash(password),
                role="admin",
                is_active=True
            )
        except IntegrityError as e:
            typer.secho(f"Error creating admin user: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        typer.secho(f"Admin user '{admin_user.username}' created successfully with ID: {admin_user.public_id}", fg=typer.colors.GREEN)

@user_app.command("disable-user")
def disable_user_account_command(
    username: str = typer.Argument(..., help="The username of the user to disable.")
):
    """Disables an existing user's account. Their tokens stop validating."""
    asyncio.run(_set_user_active(username, False))

@user_app.command("enable-user")
def enable_user_account_command(
    username: str = typer.Argument(..., help="The username of the user to enable.")
):
    """Enables an existing user's account."""
    asyncio.run(_set_user_active(username, True))

async def _set_user_active(username: str, active: bool):
    state = "active" if active else "inactive"
    async with DBConnection():
        user = await AuthUser.get_or_none(username=username)

        if not user:
            typer.secho(f"Error: User with username '{username}' not found.", fg=typer.colors.RED)
            raise typer.Exit(code=1)

        if user.is_active == active:
            typer.secho(f"User '{username}' is already {state}.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=0)

        user.is_active = active
        await user.save()
        typer.secho(f"User account '{username}' is now {state}.", fg=typer.colors.GREEN)


# Report data commands
report_app = typer.Typer(name="reports", help="Load and inspect report documents.")
app.add_typer(report_app)

def read_report_file(path: Path) -> list[dict]:
    """Reads one report object or a list of report objects from a JSON file."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list) and all(isinstance(item, dict) for item in data):
        return data
    raise ValueError("Expected a JSON object or an array of objects")

@report_app.command("import")
def import_reports_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON file with report document(s).")
):
    """Loads report documents into the report collection."""
    try:
        reports = read_report_file(path)
    except ValueError as e:
        typer.secho(f"Error: {path} is not a valid report file: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    inserted = asyncio.run(_import_reports(reports))
    typer.secho(f"Imported {inserted} report document(s) from {path}.", fg=typer.colors.GREEN)

async def _import_reports(reports: list[dict]) -> int:
    async with ReportStore() as repository:
        return await repository.insert_many(reports)

@report_app.command("count")
def count_reports_command():
    """Prints the number of report documents."""
    count = asyncio.run(_count_reports())
    typer.echo(f"Found {count} report document(s).")

async def _count_reports() -> int:
    async with ReportStore() as repository:
        return await repository.count()


if __name__ == "__main__":
    app()
