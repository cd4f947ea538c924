import json

import typer

from session_segments.config import settings
from session_segments.domain.flash import FLASH_KEYS
from session_segments.infrastructure.adapters.session.sqlite_store import SQLiteSessionStore

app = typer.Typer(help="Session Segments maintenance CLI")

DbOption = typer.Option(None, "--db", help="SQLite session database (defaults to SESSION_DB_PATH)")


def _store(db: str | None) -> SQLiteSessionStore:
    return SQLiteSessionStore(db or settings.session_db_path, name=settings.session_name)


@app.command("list")
def list_sessions(db: str | None = DbOption) -> None:
    ids = _store(db).ids()
    for session_id in ids:
        typer.echo(session_id)
    typer.echo(f"Sessions: {len(ids)}")


@app.command()
def show(session_id: str, db: str | None = DbOption, flash_only: bool = typer.Option(False, "--flash")) -> None:
    payload = _store(db).read(session_id)
    if payload is None:
        typer.echo(f"Unknown session {session_id}", err=True)
        raise typer.Exit(code=1)
    if flash_only:
        payload = {key: payload.get(key) for key in FLASH_KEYS.values()}
    typer.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))


@app.command()
def purge(session_id: str, db: str | None = DbOption) -> None:
    if not _store(db).delete(session_id):
        typer.echo(f"Unknown session {session_id}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Purged {session_id}")


if __name__ == "__main__":
    app()
