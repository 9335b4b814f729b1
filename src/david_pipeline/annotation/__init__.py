"""DAVID functional annotation retrieval: query, session relay, parsing."""

from david_pipeline.annotation.models import (
    ClusterTerm,
    GeneAnnotationRecord,
    GeneReport,
    GeneReportRecord,
    TOOL_ANNOTATION_REPORT,
    TOOL_GENE_REPORT_FULL,
    TOOL_TERM2TERM,
)
from david_pipeline.annotation.query import (
    MAX_QUERY_LENGTH,
    build_query_url,
    check_query_length,
)
from david_pipeline.annotation.session import (
    LineTokenExtractor,
    ScriptTokenExtractor,
    SessionRelay,
    SessionTokens,
)
from david_pipeline.annotation.fetch import download_url, fetch_report_lines
from david_pipeline.annotation.parsers import (
    parse_annotation_table,
    parse_cluster_table,
    parse_gene_report,
    species_matches,
)
from david_pipeline.annotation.aggregate import common_annotations
from david_pipeline.annotation.pipeline import (
    fetch_common_annotations,
    fetch_functional_annotations,
    fetch_gene_reports,
    fetch_report,
    fetch_term_clusters,
)

__all__ = [
    "ClusterTerm",
    "GeneAnnotationRecord",
    "GeneReport",
    "GeneReportRecord",
    "TOOL_ANNOTATION_REPORT",
    "TOOL_GENE_REPORT_FULL",
    "TOOL_TERM2TERM",
    "MAX_QUERY_LENGTH",
    "build_query_url",
    "check_query_length",
    "LineTokenExtractor",
    "ScriptTokenExtractor",
    "SessionRelay",
    "SessionTokens",
    "download_url",
    "fetch_report_lines",
    "parse_annotation_table",
    "parse_cluster_table",
    "parse_gene_report",
    "species_matches",
    "common_annotations",
    "fetch_common_annotations",
    "fetch_functional_annotations",
    "fetch_gene_reports",
    "fetch_report",
    "fetch_term_clusters",
]
