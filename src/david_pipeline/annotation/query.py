"""Build DAVID api.jsp query URLs."""

from typing import Sequence

import structlog

from david_pipeline.annotation.models import ANNOTATED_TOOLS, TOOLS
from david_pipeline.errors import QueryTooLongError

logger = structlog.get_logger()

# Service-imposed URL length ceiling
MAX_QUERY_LENGTH = 2048

DEFAULT_BASE_URL = "https://davidbioinformatics.nih.gov"


def build_query_url(
    gene_ids: Sequence[str],
    tool: str,
    annotations: Sequence[str] | None = None,
    id_type: str = "OFFICIAL_GENE_SYMBOL",
    base_url: str = DEFAULT_BASE_URL,
) -> str:
    """Build an api.jsp query URL.

    Produces ``<base>/api.jsp?type=<idType>&ids=<ids>&tool=<tool>[&annot=<cats>]``.
    Gene ids are joined with commas as given; nothing is validated or escaped.
    The annot parameter is only added for tools that accept it and only when
    categories are given.

    Does not check the URL length, see check_query_length().

    Args:
        gene_ids: Gene identifiers in submission order
        tool: One of annotationReport, term2term, geneReportFull
        annotations: Annotation category codes (ignored for geneReportFull)
        id_type: DAVID identifier type
        base_url: Service root URL

    Returns:
        Query URL string
    """
    if tool not in TOOLS:
        raise ValueError(f"Unknown DAVID tool: {tool}. Must be one of {sorted(TOOLS)}")

    url = f"{base_url.rstrip('/')}/api.jsp?"
    url += f"type={id_type}"
    url += f"&ids={','.join(gene_ids)}"
    url += f"&tool={tool}"

    if tool in ANNOTATED_TOOLS and annotations:
        url += f"&annot={','.join(annotations)}"

    logger.debug(
        "david_query_built",
        tool=tool,
        gene_count=len(gene_ids),
        url_length=len(url),
    )

    return url


def check_query_length(url: str, limit: int = MAX_QUERY_LENGTH) -> None:
    """Raise QueryTooLongError if url is longer than limit characters."""
    if len(url) > limit:
        raise QueryTooLongError(len(url), limit)
