"""Typer CLI for the RSVP Event Manager."""
from __future__ import annotations

import typer
import uvicorn
from sqlalchemy.exc import OperationalError

from rsvp_app.config import settings
from rsvp_app.database import Base, SessionLocal, engine
from rsvp_app.logging_config import configure_logging
from rsvp_app.models.user import RoleName, User
from rsvp_app.services.auth_service import get_roles

import rsvp_app.models  # noqa: F401

app = typer.Typer(help="RSVP Event Manager command-line interface")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Show help when no subcommand is provided."""
    configure_logging()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _init_db() -> None:
    try:
        Base.metadata.create_all(bind=engine)
    except OperationalError as exc:
        typer.secho(f"Unable to initialise {settings.database_url}: {exc.orig}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command("init-db")
def init_db() -> None:
    """Create every table for the active environment's database."""
    _init_db()
    typer.echo(f"Database ready at {settings.database_url} (env={settings.APP_ENV})")


@app.command("seed-roles")
def seed_roles() -> None:
    """Create the fixed roles if they are missing."""
    _init_db()
    with SessionLocal() as db:
        roles = get_roles(db, list(RoleName))
        db.commit()
        typer.echo("Roles: " + ", ".join(role.name.value for role in roles))


@app.command("create-admin")
def create_admin(
    username: str = typer.Option(..., "--username", prompt=True),
    email: str = typer.Option(..., "--email", prompt=True),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True, confirmation_prompt=True),
) -> None:
    """Create a user holding the admin role."""
    if not 8 <= len(password) <= 72:
        typer.secho("Password must be between 8 and 72 characters.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    _init_db()
    with SessionLocal() as db:
        email = email.lower()
        if db.query(User).filter((User.username == username) | (User.email == email)).first():
            typer.secho("A user with that username or email already exists.", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        user = User(username=username, email=email)
        user.password = password
        user.roles = get_roles(db, [RoleName.admin])
        db.add(user)
        db.commit()
        typer.echo(f"Created admin {user.username} ({user.id})")


@app.command("reset-password")
def reset_password(
    email: str = typer.Argument(..., help="Email of the account to reset"),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True, confirmation_prompt=True),
) -> None:
    """Set a new password for an existing account."""
    if not 8 <= len(password) <= 72:
        typer.secho("Password must be between 8 and 72 characters.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    with SessionLocal() as db:
        user = db.query(User).filter(User.email == email.lower()).first()
        if user is None:
            typer.secho(f"No user with email {email}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        user.password = password
        user.reset_password_token = None
        user.reset_password_expire = None
        db.commit()
        typer.echo(f"Password updated for {user.username}")


@app.command("runserver")
def runserver(
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind"),
    port: int = typer.Option(8000, "--port", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Start the API with uvicorn."""
    _init_db()
    uvicorn.run("rsvp_app.main:app", host=host, port=port, reload=reload, log_config=None)


if __name__ == "__main__":
    app()
