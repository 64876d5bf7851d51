"""Management commands for the Kingdom Hospital backend application."""

from __future__ import annotations

import logging
import os

import click
from dotenv import load_dotenv

if not os.getenv("DATABASE_URL"):
    load_dotenv()

from kingdom_hospital.db.seed import ensure_default_specialties, seed_demo_data  # noqa: E402
from kingdom_hospital.db.session import create_tables, drop_tables  # noqa: E402

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@click.group()
def cli() -> None:
    """Entry point for management commands."""


@cli.command("init-db")
def init_db() -> None:
    """Create every table that does not exist yet."""
    create_tables()
    logging.info("Database tables ensured.")


@cli.command("seed")
@click.option("--demo", is_flag=True, help="Also load demo doctors, patients and medications.")
def seed(demo: bool) -> None:
    """Seed the default specialties (and optionally demo data)."""
    create_tables()
    created = ensure_default_specialties()
    logging.info("%s specialties created.", created)
    if demo:
        if seed_demo_data():
            logging.info("Demo data loaded.")
        else:
            logging.info("Demo data skipped: the database already has doctors.")


@cli.command("reset-db")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
def reset_db(yes: bool) -> None:
    """Drop and recreate every table, then seed the default specialties."""
    if not yes:
        click.confirm("This deletes ALL data. Continue?", abort=True)
    drop_tables()
    create_tables()
    ensure_default_specialties()
    logging.info("Database reset.")


if __name__ == "__main__":
    cli()
