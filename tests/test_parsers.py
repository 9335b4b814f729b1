"""Unit tests for DAVID report parsers."""

import pytest
from pydantic import ValidationError

from david_pipeline.annotation.models import GeneAnnotationRecord
from david_pipeline.annotation.parsers import (
    parse_annotation_table,
    parse_cluster_table,
    parse_gene_report,
    species_matches,
)
from david_pipeline.errors import BlockParseError, MalformedHeaderError

HUMAN = "9606:Homo sapiens"
FLAT_HEADER = "GENE_SYMBOL\tGene Name\tSpecies\tGOTERM_BP_3"


def test_species_matches_is_substring():
    """Test the species predicate uses plain substring matching."""
    assert species_matches("TP53\tdesc\t9606:Homo sapiens", HUMAN)
    assert species_matches("Homo sapiens", "sapiens")
    assert not species_matches("10090:Mus musculus", HUMAN)


def test_flat_table_round_trip():
    """Test a synthetic annotation row parses into list-typed fields."""
    lines = [
        FLAT_HEADER,
        "TP53\tdesc\t9606:Homo sapiens\tGO:1~a, GO:2~b",
    ]

    records = parse_annotation_table(lines, species=HUMAN)

    assert list(records) == ["TP53"]
    record = records["TP53"]
    assert isinstance(record, GeneAnnotationRecord)
    assert record.gene_symbol == "TP53"
    assert record.description == "desc"
    assert record.species == "9606:Homo sapiens"
    assert record.fields["GOTERM_BP_3"] == ["GO:1~a", "GO:2~b"]
    assert set(record.fields) == {"GOTERM_BP_3"}


def test_flat_table_excludes_other_species():
    """Test that rows without the species string are dropped."""
    lines = [
        FLAT_HEADER,
        "TP53\tdesc\t9606:Homo sapiens\tGO:1~a",
        "Trp53\tdesc\t10090:Mus musculus\tGO:1~a",
    ]

    records = parse_annotation_table(lines, species=HUMAN)

    assert list(records) == ["TP53"]


def test_flat_table_species_anywhere_in_line():
    """Test species string outside the Species column still includes the row."""
    lines = [
        FLAT_HEADER,
        "Trp53\tortholog of 9606:Homo sapiens TP53\t10090:Mus musculus\tGO:1~a",
    ]

    records = parse_annotation_table(lines, species=HUMAN)

    assert "Trp53" in records
    assert records["Trp53"].species == "10090:Mus musculus"


def test_flat_table_drops_empty_pieces():
    """Test that blank comma-separated pieces are removed and cells stay lists."""
    lines = [
        "GENE_SYMBOL\tGene Name\tSpecies\tGOTERM_BP_3\tKEGG_PATHWAY\tBIOCARTA",
        "MDM2\tMDM2 proto-oncogene\t9606:Homo sapiens\tGO:1~a, ,GO:2~b,\thsa04115:p53 signaling pathway\t",
    ]

    record = parse_annotation_table(lines, species=HUMAN)["MDM2"]

    assert record.fields["GOTERM_BP_3"] == ["GO:1~a", "GO:2~b"]
    assert record.fields["KEGG_PATHWAY"] == ["hsa04115:p53 signaling pathway"]
    assert record.fields["BIOCARTA"] == []


def test_flat_table_short_row_keeps_field_set():
    """Test that trailing missing cells become empty lists."""
    lines = [
        "GENE_SYMBOL\tGene Name\tSpecies\tGOTERM_BP_3\tKEGG_PATHWAY",
        "TP53\tdesc\t9606:Homo sapiens\tGO:1~a",
        "MDM2\tdesc\t9606:Homo sapiens\tGO:2~b\thsa1",
    ]

    records = parse_annotation_table(lines, species=HUMAN)

    assert set(records["TP53"].fields) == set(records["MDM2"].fields)
    assert records["TP53"].fields["KEGG_PATHWAY"] == []


def test_flat_table_special_columns_any_position():
    """Test special columns are located by header name, not position."""
    lines = [
        "KEGG_PATHWAY\tSpecies\tGENE_SYMBOL\tGene Name",
        "hsa1,hsa2\t9606:Homo sapiens\tCDKN2A\tcyclin dependent kinase inhibitor 2A",
    ]

    record = parse_annotation_table(lines, species=HUMAN)["CDKN2A"]

    assert record.description == "cyclin dependent kinase inhibitor 2A"
    assert record.fields == {"KEGG_PATHWAY": ["hsa1", "hsa2"]}


def test_flat_table_missing_gene_symbol():
    """Test that a header without GENE_SYMBOL raises MalformedHeaderError."""
    lines = [
        "ID\tGene Name\tSpecies\tGOTERM_BP_3",
        "TP53\tdesc\t9606:Homo sapiens\tGO:1~a",
    ]

    with pytest.raises(MalformedHeaderError) as exc_info:
        parse_annotation_table(lines, species=HUMAN)

    assert exc_info.value.column == "GENE_SYMBOL"


def test_flat_table_empty_input():
    """Test that no lines gives no records."""
    assert parse_annotation_table([], species=HUMAN) == {}


def test_record_attributes_cannot_be_reassigned():
    """Test that parsed records reject attribute reassignment."""
    record = parse_annotation_table(
        [FLAT_HEADER, "TP53\tdesc\t9606:Homo sapiens\tGO:1~a"], species=HUMAN
    )["TP53"]

    with pytest.raises(ValidationError):
        record.gene_symbol = "MDM2"

    with pytest.raises(ValidationError):
        record.fields = {}


CLUSTER_LINES = [
    "Annotation Cluster 1\tEnrichment Score: 2.87",
    "Category\tTerm\tCount\t%\tGenes",
    "KEGG_PATHWAY\thsa04115:p53 signaling pathway\t3\t100.0\tTP53, MDM2, CDKN2A",
    "GOTERM_BP_3\tGO:0008283~cell proliferation\t1\t33.3\tTP53",
]


def test_cluster_comma_cell_becomes_list():
    """Test that a comma cell splits and a plain cell stays scalar."""
    terms = parse_cluster_table(CLUSTER_LINES)

    pathway = terms["hsa04115:p53 signaling pathway"]
    assert pathway.attributes["Genes"] == ["TP53", "MDM2", "CDKN2A"]
    assert pathway.attributes["Count"] == "3"
    assert pathway.attributes["Category"] == "KEGG_PATHWAY"
    assert "Term" not in pathway.attributes

    go_term = terms["GO:0008283~cell proliferation"]
    assert go_term.attributes["Genes"] == "TP53"


def test_cluster_plain_list_cell():
    """Test the basic a,b,c -> [a, b, c] and a -> a rule."""
    lines = ["summary", "Term\tX", "t1\ta,b,c", "t2\ta"]

    terms = parse_cluster_table(lines)

    assert terms["t1"].attributes["X"] == ["a", "b", "c"]
    assert terms["t2"].attributes["X"] == "a"


def test_cluster_summary_line_not_a_record():
    """Test that the first line is discarded and never becomes a term."""
    terms = parse_cluster_table(CLUSTER_LINES)

    assert len(terms) == 2
    assert "Enrichment Score: 2.87" not in terms
    assert "Term" not in terms


def test_cluster_repeated_term_overwrites():
    """Test that the last occurrence of a term wins."""
    lines = ["summary", "Term\tCount", "t1\t1", "", "t1\t5"]

    terms = parse_cluster_table(lines)

    assert terms["t1"].attributes["Count"] == "5"


def test_cluster_missing_term_column():
    """Test that a header without Term raises MalformedHeaderError."""
    with pytest.raises(MalformedHeaderError):
        parse_cluster_table(["summary", "Category\tCount", "x\t1"])


def test_cluster_too_few_lines():
    """Test that a report with only a summary line gives no terms."""
    assert parse_cluster_table(["summary"]) == {}


def test_gene_report_blocks():
    """Test that blank-line separated blocks become distinct records."""
    lines = [
        "TP53\ttumor protein p53\tHomo sapiens",
        "GOTERM_BP_3\tGO:1~a",
        "KEGG_PATHWAY\thsa04115",
        "",
        "MDM2\tMDM2 proto-oncogene\tHomo sapiens",
        "GOTERM_BP_3\tGO:2~b\textra cell",
    ]

    report = parse_gene_report(lines, species="Homo sapiens")

    assert list(report.records) == ["TP53", "MDM2"]
    assert report.records["TP53"].description == "tumor protein p53"
    assert report.records["TP53"].attributes == {
        "GOTERM_BP_3": "GO:1~a",
        "KEGG_PATHWAY": "hsa04115",
    }
    assert report.records["MDM2"].attributes == {"GOTERM_BP_3": "GO:2~b"}
    assert report.warnings == []


def test_gene_report_species_filter_per_block():
    """Test that a filtered block does not affect its siblings."""
    lines = [
        "",
        "TP53\ttumor protein p53\tHomo sapiens",
        "GOTERM_BP_3\tGO:1~a",
        "",
        "",
        "Trp53\ttransformation related protein 53\tMus musculus",
        "GOTERM_BP_3\tGO:1~a",
        "",
        "CDKN2A\tcyclin dependent kinase inhibitor 2A\tHomo sapiens",
    ]

    report = parse_gene_report(lines, species="Homo sapiens")

    assert set(report.records) == {"TP53", "CDKN2A"}
    assert report.records["CDKN2A"].attributes == {}


def test_gene_report_repeated_attribute_overwrites():
    """Test that a later row with the same attribute name wins."""
    lines = [
        "TP53\tdesc\tHomo sapiens",
        "SYNONYM\tp53",
        "SYNONYM\tLFS1",
    ]

    report = parse_gene_report(lines, species="Homo sapiens")

    assert report.records["TP53"].attributes["SYNONYM"] == "LFS1"


def test_gene_report_malformed_block_isolated():
    """Test that a bad block becomes a warning and others still parse."""
    lines = [
        "BROKEN\tonly two cells",
        "GOTERM_BP_3\tGO:1~a",
        "",
        "TP53\ttumor protein p53\tHomo sapiens",
    ]

    report = parse_gene_report(lines, species="Homo sapiens")

    assert list(report.records) == ["TP53"]
    assert len(report.warnings) == 1
    assert isinstance(report.warnings[0], BlockParseError)
    assert report.warnings[0].block_index == 0
    assert report.warnings[0].first_line == "BROKEN\tonly two cells"


def test_gene_report_strict_raises():
    """Test that strict mode raises the first block error."""
    lines = [
        "TP53\ttumor protein p53\tHomo sapiens",
        "",
        "BROKEN",
    ]

    with pytest.raises(BlockParseError) as exc_info:
        parse_gene_report(lines, species="Homo sapiens", strict=True)

    assert exc_info.value.block_index == 1


def test_gene_report_tab_only_row_stays_in_block():
    """Test that a row of empty tab cells does not split a gene block."""
    lines = [
        "TP53\ttumor protein p53\tHomo sapiens",
        "GOTERM_BP_3\tGO:1~a",
        "\t\t",
        "KEGG_PATHWAY\thsa04115",
        "",
        "MDM2\tMDM2 proto-oncogene\tHomo sapiens",
    ]

    report = parse_gene_report(lines, species="Homo sapiens")

    assert list(report.records) == ["TP53", "MDM2"]
    assert report.records["TP53"].attributes["KEGG_PATHWAY"] == "hsa04115"
    assert report.warnings == []


def test_gene_report_space_only_line_separates_blocks():
    """Test that a line of spaces still ends a block."""
    lines = [
        "TP53\ttumor protein p53\tHomo sapiens",
        "   ",
        "MDM2\tMDM2 proto-oncogene\tHomo sapiens",
    ]

    report = parse_gene_report(lines, species="Homo sapiens")

    assert list(report.records) == ["TP53", "MDM2"]
