"""Query DAVID end to end: build URL, relay session, download and parse."""

from contextlib import nullcontext
from typing import Sequence

import structlog

from david_pipeline.annotation.aggregate import common_annotations
from david_pipeline.annotation.fetch import fetch_report_lines
from david_pipeline.annotation.models import (
    TOOL_ANNOTATION_REPORT,
    TOOL_GENE_REPORT_FULL,
    TOOL_TERM2TERM,
    ClusterTerm,
    GeneAnnotationRecord,
    GeneReport,
)
from david_pipeline.annotation.parsers import (
    parse_annotation_table,
    parse_cluster_table,
    parse_gene_report,
)
from david_pipeline.annotation.query import build_query_url
from david_pipeline.annotation.session import SessionRelay
from david_pipeline.api_clients.base import DavidClient
from david_pipeline.config.schema import DavidConfig

logger = structlog.get_logger()


def fetch_report(
    gene_ids: Sequence[str],
    tool: str,
    annotations: Sequence[str] | None = None,
    config: DavidConfig | None = None,
    client: DavidClient | None = None,
) -> list[str]:
    """Run one DAVID query and return the raw report lines.

    A fresh client (and therefore a fresh DAVID session) is opened from
    config unless one is passed in; a passed-in client is not closed.

    Raises:
        QueryTooLongError, TransportError, NoScriptContentError, NoFormError,
        DownloadLinkNotFoundError
    """
    config = config or DavidConfig()
    url = build_query_url(
        gene_ids,
        tool,
        annotations=annotations,
        id_type=config.service.id_type,
        base_url=config.service.base_url,
    )
    logger.info("david_query_start", tool=tool, gene_count=len(gene_ids))

    owned = client is None
    context = DavidClient.from_config(config) if owned else nullcontext(client)
    with context as active:
        link = SessionRelay(active).resolve_download_link(url)
        return fetch_report_lines(active, link)


def fetch_functional_annotations(
    gene_ids: Sequence[str],
    config: DavidConfig | None = None,
    species: str | None = None,
    annotations: Sequence[str] | None = None,
    client: DavidClient | None = None,
) -> dict[str, GeneAnnotationRecord]:
    """Fetch the annotationReport table for genes.

    Example result::

        {"CDKN2A": GeneAnnotationRecord(
            gene_symbol="CDKN2A",
            fields={"KEGG_PATHWAY": ["hsa04115:p53 signaling pathway", ...], ...},
            ...)}

    Args:
        gene_ids: Gene identifiers (interpreted per config.service.id_type)
        config: Client configuration (default: DavidConfig())
        species: Species filter (default: config.species)
        annotations: Category codes (default: config.annotation_categories)
        client: Existing client to reuse

    Returns:
        Gene symbol -> GeneAnnotationRecord
    """
    config = config or DavidConfig()
    lines = fetch_report(
        gene_ids,
        TOOL_ANNOTATION_REPORT,
        annotations=annotations or config.annotation_categories,
        config=config,
        client=client,
    )
    return parse_annotation_table(lines, species=species or config.species)


def fetch_term_clusters(
    gene_ids: Sequence[str],
    config: DavidConfig | None = None,
    annotations: Sequence[str] | None = None,
    client: DavidClient | None = None,
) -> dict[str, ClusterTerm]:
    """Fetch the term2term clustering table for genes."""
    config = config or DavidConfig()
    lines = fetch_report(
        gene_ids,
        TOOL_TERM2TERM,
        annotations=annotations or config.annotation_categories,
        config=config,
        client=client,
    )
    return parse_cluster_table(lines)


def fetch_gene_reports(
    gene_ids: Sequence[str],
    config: DavidConfig | None = None,
    species: str | None = None,
    strict: bool = False,
    client: DavidClient | None = None,
) -> GeneReport:
    """Fetch the geneReportFull block report for genes.

    Malformed blocks are collected as warnings unless strict is set.
    """
    config = config or DavidConfig()
    lines = fetch_report(
        gene_ids,
        TOOL_GENE_REPORT_FULL,
        config=config,
        client=client,
    )
    return parse_gene_report(lines, species=species or config.species, strict=strict)


def fetch_common_annotations(
    gene_ids: Sequence[str],
    config: DavidConfig | None = None,
    species: str | None = None,
    annotations: Sequence[str] | None = None,
    client: DavidClient | None = None,
) -> dict[str, list[str]]:
    """Fetch annotations for genes and return the terms shared by all of them.

    Raises:
        ValueError: If no gene survived the species filter
    """
    records = fetch_functional_annotations(
        gene_ids,
        config=config,
        species=species,
        annotations=annotations,
        client=client,
    )
    return common_annotations(records)
