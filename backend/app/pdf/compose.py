"""
PDFMaster — Page composition.

Builds new documents by copying pages out of decoded sources. Sources are
never modified; every output page is an independent copy.
"""

from __future__ import annotations

from typing import Sequence

from app.errors import EmptyInputError, InvalidPageIndexError
from app.models.document import DocumentModel
from app.pipeline.cancel import CancellationToken, checkpoint
from app.utils.logging import logger


def merge_documents(
    sources: Sequence[DocumentModel],
    token: CancellationToken | None = None,
) -> DocumentModel:
    """
    Concatenate every page of every source, in input order.

    Metadata is taken from the first source that has any.
    """
    if not sources:
        raise EmptyInputError("documents")

    merged = DocumentModel()
    for n, source in enumerate(sources, start=1):
        checkpoint(token)
        merged.copy_pages_from(source, range(source.page_count))
        if not merged.metadata and source.metadata:
            merged.metadata = dict(source.metadata)
        logger.info("  Source %d: copied %d page(s)", n, source.page_count)

    logger.info("  Merged %d document(s) → %d pages", len(sources), merged.page_count)
    return merged


def extract_pages(
    source: DocumentModel,
    indices: Sequence[int],
    token: CancellationToken | None = None,
) -> DocumentModel:
    """
    Copy the requested pages into a new document, in the order given.

    Indices are zero-based and may repeat. Any out-of-range index rejects
    the whole request.
    """
    if not indices:
        raise EmptyInputError("page indices")

    for index in indices:
        if not 0 <= index < source.page_count:
            raise InvalidPageIndexError(index, source.page_count)

    extracted = DocumentModel(metadata=source.metadata)
    for index in indices:
        checkpoint(token)
        extracted.copy_pages_from(source, [index])

    logger.info("  Extracted pages %s of %d", list(indices), source.page_count)
    return extracted


def split_page(
    source: DocumentModel,
    page_number: int,
    token: CancellationToken | None = None,
) -> DocumentModel:
    """Single-page split; ``page_number`` is zero-based."""
    return extract_pages(source, [page_number], token)
