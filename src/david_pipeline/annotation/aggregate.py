"""Find annotation terms shared by every gene in an annotation table."""

from collections import Counter
from typing import Mapping

import structlog

from david_pipeline.annotation.models import GeneAnnotationRecord

logger = structlog.get_logger()


def common_annotations(
    records: Mapping[str, GeneAnnotationRecord],
) -> dict[str, list[str]]:
    """Compute, per field, the terms present in every gene's record.

    Each gene counts a term at most once, even if DAVID lists it twice for
    that gene. A field missing from any gene's record has an empty common
    list. Terms keep the order in which they were first seen. Inputs are
    not modified.

    Args:
        records: Gene symbol -> GeneAnnotationRecord (non-empty)

    Returns:
        Field name -> common terms, for every field seen in any record

    Raises:
        ValueError: If records is empty
    """
    if not records:
        raise ValueError("Cannot compute common annotations of an empty record set")

    gene_count = len(records)
    field_names: list[str] = []
    for record in records.values():
        for name in record.fields:
            if name not in field_names:
                field_names.append(name)

    common: dict[str, list[str]] = {}
    for name in field_names:
        counts: Counter[str] = Counter()
        seen_order: list[str] = []

        for record in records.values():
            terms = record.fields.get(name)
            if terms is None:
                continue
            for term in dict.fromkeys(t.strip() for t in terms):
                if term not in counts:
                    seen_order.append(term)
                counts[term] += 1

        common[name] = [term for term in seen_order if counts[term] == gene_count]

    logger.info(
        "common_annotations_computed",
        gene_count=gene_count,
        field_count=len(field_names),
        common_term_count=sum(len(v) for v in common.values()),
    )
    return common
