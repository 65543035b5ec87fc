"""Command-line interface for the ETF holdings fetcher."""

import json
import logging

import click

from . import __version__
from .client import EdgarClient
from .exceptions import BoundaryNotFoundError, ConfigurationError, EdgarError
from .export import export_holdings
from .pipeline import run_fetch
from .series import DEFAULT_CIKS, build_catalog, parse_series_file
from .storage import DEFAULT_CATALOG_PATH, DEFAULT_DATA_DIR, load_catalog, write_catalog

DEFAULT_RPS = 5


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _require_user_agent(user_agent):
    if not user_agent:
        click.echo(
            "Error: a user agent is required. Provide --user-agent "
            "or set the USER_AGENT environment variable.",
            err=True,
        )
        raise click.Abort()
    return user_agent


def _create_client(user_agent, rps):
    try:
        return EdgarClient(user_agent, rps)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()


user_agent_option = click.option(
    "--user-agent",
    envvar="USER_AGENT",
    help='Identification sent to EDGAR, e.g. "Jane Doe jane@example.com" (or set USER_AGENT env var)',
)
rps_option = click.option(
    "--rps",
    envvar="EDGAR_RPS",
    type=int,
    default=DEFAULT_RPS,
    show_default=True,
    help="Requests per second, between 1 and 10 (or set EDGAR_RPS env var)",
)
debug_option = click.option("--debug", "-d", is_flag=True, help="Enable verbose logging")


@click.group()
@click.version_option(version=__version__, prog_name="etf-holdings")
def cli():
    """
    ETF Holdings - Fetch ETF holdings from SEC N-PORT filings.

    Downloads N-PORT filings for the fund companies of an ETF catalog while
    staying within EDGAR's request limits, and records which filing dates
    were fetched so that later runs only fetch new filings.
    """
    pass


@cli.command()
@user_agent_option
@rps_option
@click.option(
    "--catalog",
    "catalog_path",
    default=str(DEFAULT_CATALOG_PATH),
    show_default=True,
    type=click.Path(),
    help="ETF catalog written by the series command",
)
@click.option(
    "--data-dir",
    default=str(DEFAULT_DATA_DIR),
    show_default=True,
    type=click.Path(file_okay=False),
    help="Directory holding fetched_map.json and the all/ and latest/ histories",
)
@click.option("--no-progress", is_flag=True, help="Disable progress bars")
@debug_option
def fetch(user_agent, rps, catalog_path, data_dir, no_progress, debug):
    """
    Fetch new N-PORT filings for every company of the catalog.

    Examples:

      # Fetch with the default 5 requests per second
      etf-holdings fetch --user-agent "Jane Doe jane@example.com"

      # Use an existing catalog and data directory
      etf-holdings fetch --catalog all_etfs.json --data-dir data
    """
    _configure_logging(debug)
    user_agent = _require_user_agent(user_agent)
    client = _create_client(user_agent, rps)

    try:
        catalog = load_catalog(catalog_path)
    except FileNotFoundError:
        click.echo(
            f"Error: ETF catalog {catalog_path} not found. Run the series command first.",
            err=True,
        )
        client.close()
        raise click.Abort()

    try:
        with client:
            results = run_fetch(client, catalog, data_dir, show_progress=not no_progress)
    except BoundaryNotFoundError as e:
        click.echo(f"Error: can't schedule fetches under the current limits: {e}", err=True)
        raise click.Abort()
    except EdgarError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()

    for cik, result in results.items():
        status = "complete" if result.complete else "incomplete"
        click.echo(
            f"cik={cik}: {result.stored} stored, {result.unmapped} unmapped, "
            f"{result.undecodable} undecodable, {result.failed} failed ({status})"
        )


@cli.command()
@click.option(
    "--out-file",
    default=str(DEFAULT_CATALOG_PATH),
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Path to the output catalog. If it doesn't exist, it will be created",
)
@click.option(
    "--process-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Parse a saved series listing HTML file and print the mapping (debugging)",
)
@click.option(
    "--cik",
    "ciks",
    type=int,
    multiple=True,
    help="CIK to scrape; repeat for several (default: the Vanguard registrants)",
)
@user_agent_option
@rps_option
@debug_option
def series(out_file, process_file, ciks, user_agent, rps, debug):
    """
    Build the ETF catalog from the EDGAR series listings.

    Examples:

      etf-holdings series --out-file all_etfs.json

      # Debug the HTML parsing against a saved page
      etf-holdings series --process-file listing.html -d
    """
    _configure_logging(debug)
    if process_file:
        try:
            mapping = parse_series_file(process_file)
        except EdgarError as e:
            click.echo(f"Error: {e}", err=True)
            raise click.Abort()
        click.echo(json.dumps(mapping, indent=2, sort_keys=True))
        return

    user_agent = _require_user_agent(user_agent)
    try:
        with _create_client(user_agent, rps) as client:
            catalog = build_catalog(client, ciks or DEFAULT_CIKS)
    except EdgarError as e:
        click.echo(f"Error: couldn't build the catalog: {e}", err=True)
        raise click.Abort()

    write_catalog(catalog, out_file)
    total = sum(len(catalog.etfs_for(cik)) for cik in catalog.ciks)
    click.echo(f"✓ Wrote {total} ETFs across {len(catalog.ciks)} CIKs to {out_file}")


@cli.command()
@click.option(
    "--data-dir",
    default=str(DEFAULT_DATA_DIR),
    show_default=True,
    type=click.Path(file_okay=False),
    help="Directory holding the all/ and latest/ histories",
)
@click.option(
    "--output",
    "-o",
    default="holdings.csv",
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Path to output CSV",
)
@click.option("--latest-only", is_flag=True, help="Only export the newest filing of each ETF")
def export(data_dir, output, latest_only):
    """Export the stored holdings as one CSV row per holding."""
    frame = export_holdings(data_dir, output, latest_only=latest_only)
    click.echo(f"✓ Exported {frame.height} holdings to {output}")


if __name__ == "__main__":
    cli()
