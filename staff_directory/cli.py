"""Staff directory CLI tool (dirctl)."""

import typer

app = typer.Typer(name="dirctl", help="Staff Directory CLI")
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init():
    """Create all tables that do not exist yet."""
    import staff_directory.models  # noqa: F401
    from staff_directory.db.base import Base
    from staff_directory.db.session import engine

    Base.metadata.create_all(bind=engine)
    typer.echo("✅ Tables created (or already exist)")


@db_app.command("seed")
def db_seed():
    """Seed the owner account and the default directory columns."""
    from staff_directory.db.session import SessionLocal
    from staff_directory.db.seeds.seed_owner import seed_owner
    from staff_directory.db.seeds.seed_columns import seed_columns

    db = SessionLocal()
    try:
        seed_owner(db)
        seed_columns(db)
    finally:
        db.close()
    typer.echo("✅ All seeds applied")


@db_app.command("reset")
def db_reset():
    """Drop and recreate every table (DANGER)."""
    confirm = typer.confirm("⚠️  This will DROP all directory data. Continue?")
    if not confirm:
        raise typer.Abort()
    import staff_directory.models  # noqa: F401
    from staff_directory.db.base import Base
    from staff_directory.db.session import engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    typer.echo("✅ Database reset")


@app.command("create-owner")
def create_owner(
    username: str = typer.Argument(..., help="Login of the new owner"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
    full_name: str = typer.Option("", help="Display name"),
):
    """Create an additional owner account."""
    from staff_directory.db.session import SessionLocal
    from staff_directory.db.seeds.seed_owner import seed_owner

    db = SessionLocal()
    try:
        created = seed_owner(db, username=username, password=password, full_name=full_name)
    finally:
        db.close()
    if not created:
        raise typer.Exit(code=1)


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Auto-reload"),
):
    """Start the API server."""
    import uvicorn
    uvicorn.run("staff_directory.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
