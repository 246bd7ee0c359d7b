"""
permitgate CLI
Check a coordinator and exercise the limiters with concurrent callers.
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from permitgate.config import settings
from permitgate.coordinator import AtomicCoordinator, CoordinatorError, create_coordinator
from permitgate.coordinator.redis import RedisCoordinator
from permitgate.limits import PermitSemaphore, RateLimiter


console = Console()


def build_coordinator(backend: str, url: Optional[str]) -> AtomicCoordinator:
    """Create a coordinator from CLI options."""
    if backend == "redis" and url:
        return create_coordinator(backend, url=url)
    return create_coordinator(backend)


async def _connect(coordinator: AtomicCoordinator) -> None:
    if isinstance(coordinator, RedisCoordinator):
        await coordinator.connect()


def print_outcomes(title: str, outcomes: list[bool], extra: dict[str, object]) -> None:
    """Render granted/denied counts as a table."""
    granted = sum(1 for o in outcomes if o)

    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Callers", str(len(outcomes)))
    table.add_row("Granted", f"[green]{granted}[/green]")
    table.add_row("Denied", f"[red]{len(outcomes) - granted}[/red]")
    for name, value in extra.items():
        table.add_row(name, str(value))

    console.print(table)


@click.group()
@click.option(
    "--backend",
    "-b",
    type=click.Choice(["redis", "memory"]),
    default=settings.coordinator_backend,
    show_default=True,
    help="Coordinator backend",
)
@click.option("--url", "-u", default=None, help="Redis URL (overrides settings)")
@click.option("--log-level", default=settings.log_level, help="Logging level")
@click.pass_context
def cli(ctx, backend: str, url: Optional[str], log_level: str):
    """permitgate - distributed rate limits and semaphores."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["backend"] = backend
    ctx.obj["url"] = url


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def health(ctx, as_json: bool):
    """Check coordinator health."""

    async def run() -> dict:
        coordinator = build_coordinator(ctx.obj["backend"], ctx.obj["url"])
        try:
            return await coordinator.health_check()
        finally:
            await coordinator.close()

    status = asyncio.run(run())

    if as_json:
        console.print(json.dumps(status, indent=2, default=str))
    elif status.get("connected"):
        console.print(f"✅ [green]{status['backend']} coordinator is healthy[/green]")
        for key, value in status.items():
            if key not in ("backend", "connected"):
                console.print(f"   {key}: {value}")
    else:
        console.print(f"❌ [red]{status['backend']} coordinator unavailable[/red]")
        if status.get("error"):
            console.print(f"   {status['error']}")

    if not status.get("connected"):
        sys.exit(1)


@cli.command()
@click.option("--permits", "-p", default=10, show_default=True, help="Permits per second")
@click.option("--callers", "-n", default=200, show_default=True, help="Concurrent callers")
@click.option("--key-prefix", default=settings.bucket_key_prefix, help="Window key prefix")
@click.pass_context
def bucket(ctx, permits: int, callers: int, key_prefix: str):
    """Fire concurrent callers at a fixed-window rate limiter."""

    async def run() -> tuple[list[bool], str]:
        coordinator = build_coordinator(ctx.obj["backend"], ctx.obj["url"])
        try:
            await _connect(coordinator)
            limiter = RateLimiter(coordinator, permits, key_prefix=key_prefix)
            window = limiter.window_key()
            outcomes = await asyncio.gather(
                *(limiter.try_acquire() for _ in range(callers))
            )
            return list(outcomes), window
        finally:
            await coordinator.close()

    try:
        outcomes, window = asyncio.run(run())
    except ValueError as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        sys.exit(1)

    print_outcomes(
        f"Rate limiter ({permits}/s)",
        outcomes,
        {"First window": window},
    )


@cli.command()
@click.option("--limit", "-l", default=100, show_default=True, help="Total permits")
@click.option("--callers", "-n", default=200, show_default=True, help="Concurrent callers")
@click.option("--key", default=settings.semaphore_key, help="Permit counter key")
@click.option("--hold", default=0.05, show_default=True, help="Seconds to hold a permit")
@click.pass_context
def semaphore(ctx, limit: int, callers: int, key: str, hold: float):
    """Initialize a semaphore and fire concurrent acquire/release callers.

    Initialization resets the counter, so do not point this at a key a
    live deployment is using.
    """

    async def run() -> tuple[list[bool], Optional[int]]:
        coordinator = build_coordinator(ctx.obj["backend"], ctx.obj["url"])
        try:
            await _connect(coordinator)
            sem = await PermitSemaphore.create(coordinator, limit, key=key)

            async def caller() -> bool:
                async with sem.permit() as granted:
                    if granted:
                        await asyncio.sleep(hold)
                    return granted

            outcomes = list(await asyncio.gather(*(caller() for _ in range(callers))))
            try:
                remaining = await coordinator.get(key)
            except CoordinatorError as e:
                console.print(f"⚠️ [yellow]Could not read remaining permits: {e}[/yellow]")
                remaining = None
            return outcomes, remaining
        finally:
            await coordinator.close()

    try:
        outcomes, remaining = asyncio.run(run())
    except (ValueError, CoordinatorError) as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        sys.exit(1)

    print_outcomes(
        f"Semaphore ({limit} permits)",
        outcomes,
        {"Key": key, "Remaining": "unknown" if remaining is None else remaining},
    )


def main():
    """Entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
