"""Command-line interface for running the catalog"""
import logging
from typing import Optional

import click
import uvicorn

from .config import settings as default_settings
from .sample_data import load_sample_dividends


def configure_logging(level: str = "INFO"):
    """Log to stdout with timestamps"""
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[console_handler],
        force=True,
    )


@click.group()
def cli():
    """Dividend Catalog - Command Line Interface"""
    pass


@cli.command()
@click.option("--host", default=None, help="Bind address (default from HOST)")
@click.option("--port", default=None, type=int, help="Bind port (default from PORT)")
@click.option("--log-level", default=None, help="Logging level (default from LOG_LEVEL)")
@click.option("--seed/--no-seed", default=None, help="Load the sample dividend records")
def serve(host: Optional[str], port: Optional[int], log_level: Optional[str], seed: Optional[bool]):
    """Start the API server"""
    from .api import create_app

    overrides = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if log_level is not None:
        overrides["log_level"] = log_level
    if seed is not None:
        overrides["seed_sample_data"] = seed
    settings = default_settings.model_copy(update=overrides)

    configure_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting Dividend Catalog on {settings.host}:{settings.port} ({settings.env})")

    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


@cli.command()
def sample():
    """Show the sample records a fresh store is seeded with"""
    click.echo("\n" + "=" * 60)
    click.echo("SAMPLE DIVIDEND RECORDS")
    click.echo("=" * 60)

    for dividend in load_sample_dividends():
        click.echo(
            f"{dividend.ticker:<6} {dividend.company_name:<30} "
            f"{dividend.frequency.value:<10} {dividend.dividend_amount:>8}  {len(dividend.year_wise_data)} years"
        )

    click.echo("=" * 60 + "\n")


if __name__ == "__main__":
    cli()
