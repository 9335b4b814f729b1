"""Main CLI entry point for david-pipeline.

Provides command group with global options and subcommands for DAVID queries.
"""

import json
import logging
from pathlib import Path

import click
import structlog

from david_pipeline import __version__
from david_pipeline.annotation import (
    fetch_common_annotations,
    fetch_functional_annotations,
    fetch_gene_reports,
    fetch_term_clusters,
)
from david_pipeline.config.loader import load_config_with_overrides
from david_pipeline.errors import DavidError


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Route pipeline events through stdlib logging (stderr) so stdout stays JSON
structlog.configure(
    processors=[structlog.processors.KeyValueRenderer(key_order=['event'])],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
)


def _read_genes(genes, genes_file):
    """Combine positional genes with one-per-line entries from genes_file."""
    gene_ids = list(genes)
    if genes_file is not None:
        for line in genes_file.read_text().splitlines():
            line = line.strip()
            if line and not line.startswith('#'):
                gene_ids.append(line)
    if not gene_ids:
        raise click.UsageError("No genes given (pass GENES or --genes-file)")
    return gene_ids


def _load(ctx, species=None):
    overrides = dict(ctx.obj['overrides'])
    if species:
        overrides['species'] = species
    return load_config_with_overrides(ctx.obj['config_path'], overrides)


def _echo_json(data):
    click.echo(json.dumps(data, indent=2))


def _fail(ctx, error):
    click.echo(click.style(f"Error: {error}", fg='red'), err=True)
    ctx.exit(1)


genes_argument = click.argument('genes', nargs=-1)
genes_file_option = click.option(
    '--genes-file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='File with one gene identifier per line'
)
annot_option = click.option(
    '--annot',
    multiple=True,
    help='Annotation category code (repeatable; default from config)'
)
species_option = click.option(
    '--species',
    default=None,
    help='Species filter substring (default from config)'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Path to configuration YAML file (default: built-in settings)'
)
@click.option(
    '--timeout',
    type=click.IntRange(min=1),
    default=None,
    help='Request timeout in seconds (overrides api.timeout_seconds)'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, timeout, verbose):
    """david-pipeline: retrieve gene functional annotations from DAVID.

    Submits gene lists to the DAVID web service, relays its hidden-form
    session, and parses the downloaded reports.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['overrides'] = {'api.timeout_seconds': timeout} if timeout else {}
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display client information and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"david-pipeline v{__version__}")
    click.echo(f"Config: {config_path or '(built-in defaults)'}")
    click.echo()

    try:
        config = _load(ctx)
    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)

    click.echo(click.style("Service:", bold=True))
    click.echo(f"  Base URL: {config.service.base_url}")
    click.echo(f"  ID Type:  {config.service.id_type}")
    click.echo(f"  Species:  {config.species}")
    click.echo()

    click.echo(click.style("Annotation Categories:", bold=True))
    for category in config.annotation_categories:
        click.echo(f"  {category}")
    click.echo()

    click.echo(click.style("API Configuration:", bold=True))
    click.echo(f"  Timeout: {config.api.timeout_seconds}s")
    click.echo(f"  Download Attempts: {config.api.download_retries}")


@cli.command()
@genes_argument
@genes_file_option
@species_option
@annot_option
@click.pass_context
def annotate(ctx, genes, genes_file, species, annot):
    """Fetch per-gene functional annotations (annotationReport)."""
    gene_ids = _read_genes(genes, genes_file)
    try:
        config = _load(ctx, species)
        records = fetch_functional_annotations(
            gene_ids, config=config, annotations=list(annot) or None
        )
    except DavidError as e:
        _fail(ctx, e)
    _echo_json({symbol: record.model_dump() for symbol, record in records.items()})


@cli.command()
@genes_argument
@genes_file_option
@species_option
@annot_option
@click.pass_context
def common(ctx, genes, genes_file, species, annot):
    """Show annotation terms shared by every gene."""
    gene_ids = _read_genes(genes, genes_file)
    try:
        config = _load(ctx, species)
        shared = fetch_common_annotations(
            gene_ids, config=config, annotations=list(annot) or None
        )
    except (DavidError, ValueError) as e:
        _fail(ctx, e)
    _echo_json(shared)


@cli.command()
@genes_argument
@genes_file_option
@annot_option
@click.pass_context
def clusters(ctx, genes, genes_file, annot):
    """Fetch the term clustering table (term2term)."""
    gene_ids = _read_genes(genes, genes_file)
    try:
        config = _load(ctx)
        terms = fetch_term_clusters(
            gene_ids, config=config, annotations=list(annot) or None
        )
    except DavidError as e:
        _fail(ctx, e)
    _echo_json({term: cluster.attributes for term, cluster in terms.items()})


@cli.command()
@genes_argument
@genes_file_option
@species_option
@click.option(
    '--strict',
    is_flag=True,
    help='Fail on the first malformed gene block instead of skipping it'
)
@click.pass_context
def report(ctx, genes, genes_file, species, strict):
    """Fetch the full per-gene report (geneReportFull)."""
    gene_ids = _read_genes(genes, genes_file)
    try:
        config = _load(ctx, species)
        result = fetch_gene_reports(gene_ids, config=config, strict=strict)
    except DavidError as e:
        _fail(ctx, e)

    for warning in result.warnings:
        click.echo(click.style(f"Warning: {warning}", fg='yellow'), err=True)
    _echo_json({symbol: record.model_dump() for symbol, record in result.records.items()})


if __name__ == '__main__':
    cli()
