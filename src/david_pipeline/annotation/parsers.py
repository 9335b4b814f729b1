"""Parse DAVID tab-delimited reports into records.

Three layouts are supported:
- annotationReport: flat table, one row per gene
- term2term: clustering table, one row per term after a summary line
- geneReportFull: blank-line separated blocks, one block per gene
"""

from typing import Sequence

import structlog

from david_pipeline.annotation.models import (
    GENE_NAME_COLUMN,
    GENE_SYMBOL_COLUMN,
    SPECIES_COLUMN,
    TERM_COLUMN,
    ClusterTerm,
    GeneAnnotationRecord,
    GeneReport,
    GeneReportRecord,
)
from david_pipeline.errors import BlockParseError, MalformedHeaderError

logger = structlog.get_logger()


def species_matches(text: str, species: str) -> bool:
    """Species filter used by every parser.

    Plain substring test. For the flat table ``text`` is the whole raw line,
    so a species string appearing in any column lets the row through.
    """
    return species in text


def split_list_cell(cell: str) -> list[str]:
    """Split a comma separated cell into trimmed, non-empty pieces."""
    return [piece.strip() for piece in cell.split(",") if piece.strip()]


def _column_index(header: list[str], column: str) -> int:
    try:
        return header.index(column)
    except ValueError:
        raise MalformedHeaderError(column, header) from None


def parse_annotation_table(
    lines: Sequence[str],
    species: str = "9606:Homo sapiens",
) -> dict[str, GeneAnnotationRecord]:
    """Parse an annotationReport table.

    Line 0 is the header. A data line is kept only if it contains ``species``
    anywhere. GENE_SYMBOL, Gene Name and Species fill the record's named
    fields; every other column becomes a list of comma separated terms.
    Rows shorter than the header get empty lists for the missing columns,
    so all records share one field set.

    Args:
        lines: Report lines (newline-stripped)
        species: Species filter substring

    Returns:
        Dict mapping gene symbol -> GeneAnnotationRecord, in report order

    Raises:
        MalformedHeaderError: If GENE_SYMBOL, Gene Name or Species is missing
    """
    if not lines:
        return {}

    header = lines[0].split("\t")
    symbol_idx = _column_index(header, GENE_SYMBOL_COLUMN)
    name_idx = _column_index(header, GENE_NAME_COLUMN)
    species_idx = _column_index(header, SPECIES_COLUMN)
    special = {symbol_idx, name_idx, species_idx}

    records: dict[str, GeneAnnotationRecord] = {}
    skipped = 0

    for line in lines[1:]:
        if not species_matches(line, species):
            skipped += 1
            continue

        data = line.split("\t")
        data += [""] * (len(header) - len(data))

        fields = {
            column: split_list_cell(data[i])
            for i, column in enumerate(header)
            if i not in special
        }
        symbol = data[symbol_idx]
        records[symbol] = GeneAnnotationRecord(
            gene_symbol=symbol,
            description=data[name_idx],
            species=data[species_idx],
            fields=fields,
        )

    logger.info(
        "annotation_table_parsed",
        gene_count=len(records),
        skipped_lines=skipped,
        field_count=len(header) - len(special),
    )
    return records


def parse_cluster_table(lines: Sequence[str]) -> dict[str, ClusterTerm]:
    """Parse a term2term clustering table.

    Line 0 is a summary line and is discarded; line 1 is the header. Each
    following line is keyed by its Term cell (a repeated term overwrites the
    earlier one). Cells containing a comma become lists of trimmed pieces,
    all other cells stay strings. Blank lines and lines without a Term cell
    are skipped.

    Raises:
        MalformedHeaderError: If the header has no Term column
    """
    if len(lines) < 2:
        return {}

    header = lines[1].split("\t")
    term_idx = _column_index(header, TERM_COLUMN)

    terms: dict[str, ClusterTerm] = {}

    for line in lines[2:]:
        if not line.strip():
            continue

        data = line.split("\t")
        if len(data) <= term_idx:
            continue

        attributes: dict[str, str | list[str]] = {}
        for i, (column, cell) in enumerate(zip(header, data)):
            if i == term_idx:
                continue
            attributes[column] = split_list_cell(cell) if "," in cell else cell

        term = data[term_idx]
        terms[term] = ClusterTerm(term=term, attributes=attributes)

    logger.info("cluster_table_parsed", term_count=len(terms))
    return terms


def _split_blocks(lines: Sequence[str]) -> list[list[str]]:
    """Group lines into blocks separated by one or more blank lines.

    Only empty or space-only lines separate blocks; a row of empty tab
    cells belongs to the current block.
    """
    blocks: list[list[str]] = []
    current: list[str] = []

    for line in lines:
        if not line.strip(" "):
            if current:
                blocks.append(current)
                current = []
        else:
            current.append(line)

    if current:
        blocks.append(current)
    return blocks


def _parse_block(index: int, block: list[str]) -> GeneReportRecord:
    first = block[0].split("\t")
    if len(first) < 3:
        raise BlockParseError(
            index,
            f"first row has {len(first)} cell(s), expected symbol, description, species",
            first_line=block[0],
        )

    symbol, description, species = first[0], first[1], first[2]
    attributes: dict[str, str] = {}

    for row in block[1:]:
        cells = row.split("\t")
        attributes[cells[0]] = cells[1] if len(cells) > 1 else ""

    return GeneReportRecord(
        gene_symbol=symbol,
        description=description,
        species=species,
        attributes=attributes,
    )


def parse_gene_report(
    lines: Sequence[str],
    species: str = "9606:Homo sapiens",
    strict: bool = False,
) -> GeneReport:
    """Parse a geneReportFull report.

    Each block's first row is ``symbol, description, species``; following
    rows are ``attribute, value`` pairs (extra cells ignored, a repeated
    attribute overwrites). Blocks whose species cell does not match are
    left out.

    A malformed block does not abort the report: it is logged and collected
    in ``GeneReport.warnings``. With strict=True the first one is raised.

    Args:
        lines: Report lines (newline-stripped)
        species: Species filter substring
        strict: Raise BlockParseError instead of collecting it

    Returns:
        GeneReport with records and warnings
    """
    report = GeneReport()

    for index, block in enumerate(_split_blocks(lines)):
        try:
            record = _parse_block(index, block)
        except BlockParseError as e:
            if strict:
                raise
            logger.warning(
                "gene_report_block_skipped",
                block_index=index,
                reason=e.reason,
            )
            report.warnings.append(e)
            continue

        if not species_matches(record.species, species):
            continue
        report.records[record.gene_symbol] = record

    logger.info(
        "gene_report_parsed",
        gene_count=len(report.records),
        warning_count=len(report.warnings),
    )
    return report
