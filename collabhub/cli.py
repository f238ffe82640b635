"""Operator CLI — scheduled maintenance jobs run outside the API process.

Usage:
    collabhub sweep-expired
    collabhub sweep-expired --now 2026-01-31T00:00:00

Invariants:
    - Exit code 0 when every candidate was expired or skipped, 1 when any failed
    - Runs the same LifecycleEngine.sweep_expired as the admin endpoint
"""

import asyncio
import json
from datetime import datetime
from typing import Optional

import typer

from collabhub.config import get_settings
from collabhub.db.session import create_session_factory
from collabhub.infrastructure.notifications import get_publisher
from collabhub.infrastructure.observability import setup_logging
from collabhub.infrastructure.read_retry import ReadRetryPolicy
from collabhub.services.actor_directory import ActorDirectory
from collabhub.services.lifecycle_engine import LifecycleEngine, SweepResult
from collabhub.services.request_store import RequestStore

app = typer.Typer(
    name="collabhub",
    help="CollabHub maintenance commands",
    add_completion=False,
)


@app.callback()
def main() -> None:
    """CollabHub maintenance commands."""


async def _sweep(database_url: str, now: datetime | None) -> SweepResult:
    settings = get_settings()
    engine, session_factory = create_session_factory(database_url)
    retry = ReadRetryPolicy(
        attempts=settings.read_retry_attempts,
        base_delay_ms=settings.read_retry_base_delay_ms,
        max_delay_ms=settings.read_retry_max_delay_ms,
    )
    try:
        async with session_factory() as db:
            lifecycle = LifecycleEngine(
                RequestStore(db, retry), ActorDirectory(db, retry), get_publisher(),
                ttl_days=settings.request_ttl_days,
                default_currency=settings.default_currency,
            )
            return await lifecycle.sweep_expired(now)
    finally:
        await engine.dispose()


@app.command("sweep-expired")
def sweep_expired(
    now: Optional[datetime] = typer.Option(
        None,
        "--now",
        help="Evaluate expiry as of this instant (UTC, ISO-8601); defaults to now",
    ),
    database_url: Optional[str] = typer.Option(
        None,
        "--database-url",
        help="Override DATABASE_URL",
    ),
) -> None:
    """Expire pending requests that have been idle longer than the TTL."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    result = asyncio.run(_sweep(database_url or settings.database_url, now))
    typer.echo(json.dumps(result.to_dict()))
    if result.failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
