"""Data models for DAVID annotation reports."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

from david_pipeline.errors import BlockParseError

# DAVID api.jsp tool names
TOOL_ANNOTATION_REPORT = "annotationReport"
TOOL_TERM2TERM = "term2term"
TOOL_GENE_REPORT_FULL = "geneReportFull"

# Tools that accept an annot= category list
ANNOTATED_TOOLS = frozenset([TOOL_ANNOTATION_REPORT, TOOL_TERM2TERM])
TOOLS = ANNOTATED_TOOLS | {TOOL_GENE_REPORT_FULL}

# Report column names (service contract, case-sensitive)
GENE_SYMBOL_COLUMN = "GENE_SYMBOL"
GENE_NAME_COLUMN = "Gene Name"
SPECIES_COLUMN = "Species"
TERM_COLUMN = "Term"


class GeneAnnotationRecord(BaseModel):
    """One gene's row from the flat annotation table (annotationReport).

    Attributes:
        gene_symbol: Gene symbol, unique within one fetch
        description: Service "Gene Name" column
        species: Species as reported by DAVID (e.g. "9606:Homo sapiens")
        fields: Annotation category -> ordered annotation terms
            ("GO:0005622~intracellular"). Always list-typed, possibly empty.

    All records from one table share the same ``fields`` key set. Frozen
    means attributes cannot be reassigned; the ``fields`` mapping and its
    lists are plain containers owned by the caller.
    """

    model_config = ConfigDict(frozen=True)

    gene_symbol: str
    description: str
    species: str
    fields: dict[str, list[str]] = Field(default_factory=dict)


class ClusterTerm(BaseModel):
    """One term from the clustering table (term2term).

    Cells containing a comma are stored as lists of trimmed pieces, all
    others as the raw string. A scalar that contains a comma is therefore
    split too.
    """

    model_config = ConfigDict(frozen=True)

    term: str
    attributes: dict[str, str | list[str]] = Field(default_factory=dict)


class GeneReportRecord(BaseModel):
    """One gene block from the full gene report (geneReportFull).

    Frozen against attribute reassignment only; ``attributes`` is a plain
    dict.
    """

    model_config = ConfigDict(frozen=True)

    gene_symbol: str
    description: str
    species: str
    attributes: dict[str, str] = Field(default_factory=dict)


@dataclass
class GeneReport:
    """Parsed full gene report.

    Attributes:
        records: Included genes keyed by gene symbol
        warnings: Blocks that could not be parsed, in report order
    """
    records: dict[str, GeneReportRecord] = field(default_factory=dict)
    warnings: list[BlockParseError] = field(default_factory=list)
