"""Unit tests for merge and page extraction on the in-memory model."""

import pytest
from app.errors import EmptyInputError, InvalidPageIndexError
from app.models.document import DocumentModel, ImportedPage, Page, TextRun
from app.pdf.compose import extract_pages, merge_documents, split_page
from app.pipeline.cancel import CancellationToken
from app.errors import RequestCancelledError


def _doc(label: str, count: int, **metadata) -> DocumentModel:
    source = f"{label}-source".encode()
    pages = [Page(612, 792, [ImportedPage(source, i), TextRun(f"{label}{i}", 72, 72)])
             for i in range(count)]
    return DocumentModel(pages, metadata)


class TestMergeDocuments:
    def test_page_count_is_sum(self):
        docs = [_doc("a", 3), _doc("b", 1), _doc("c", 4)]
        merged = merge_documents(docs)
        assert merged.page_count == 8

    def test_concatenation_indexing(self):
        docs = [_doc("a", 3), _doc("b", 2), _doc("c", 1)]
        merged = merge_documents(docs)
        expected = [page for d in docs for page in d.pages]
        assert merged.pages == expected

    def test_first_and_last_page(self):
        a, b = _doc("a", 2), _doc("b", 3)
        merged = merge_documents([a, b])
        assert extract_pages(merged, [0]).pages[0] == a.pages[0]
        assert extract_pages(merged, [merged.page_count - 1]).pages[0] == b.pages[-1]

    def test_single_source_is_copy(self):
        a = _doc("a", 2)
        merged = merge_documents([a])
        assert merged.pages == a.pages
        assert merged is not a
        assert all(m is not p for m, p in zip(merged.pages, a.pages))

    def test_output_does_not_alias_sources(self):
        a = _doc("a", 1)
        merged = merge_documents([a])
        merged.pages[0].draw(TextRun("added", 10, 10))
        merged.pages.append(Page(100, 100))
        assert len(a.pages[0].content) == 2
        assert a.page_count == 1

    def test_empty_sources(self):
        with pytest.raises(EmptyInputError):
            merge_documents([])

    def test_metadata_from_first_source_with_metadata(self):
        merged = merge_documents([_doc("a", 1), _doc("b", 1, title="B")])
        assert merged.metadata == {"title": "B"}

    def test_cancelled_token_stops_merge(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(RequestCancelledError):
            merge_documents([_doc("a", 1)], token)


class TestExtractPages:
    def test_order_and_duplicates_preserved(self):
        doc = _doc("d", 4)
        out = extract_pages(doc, [3, 1, 1])
        assert out.page_count == 3
        assert out.pages == [doc.pages[3], doc.pages[1], doc.pages[1]]

    def test_duplicates_are_independent(self):
        doc = _doc("d", 2)
        out = extract_pages(doc, [1, 1])
        out.pages[0].draw(TextRun("only first", 1, 1))
        assert out.pages[0] != out.pages[1]
        assert len(doc.pages[1].content) == 2

    @pytest.mark.parametrize("count", [1, 3, 5])
    def test_index_equal_to_page_count_rejected(self, count):
        with pytest.raises(InvalidPageIndexError):
            extract_pages(_doc("d", count), [count])

    def test_negative_index_rejected(self):
        with pytest.raises(InvalidPageIndexError):
            extract_pages(_doc("d", 3), [-1])

    def test_one_bad_index_rejects_whole_request(self):
        with pytest.raises(InvalidPageIndexError) as exc_info:
            extract_pages(_doc("d", 3), [0, 1, 9])
        assert exc_info.value.index == 9

    def test_empty_indices(self):
        with pytest.raises(EmptyInputError):
            extract_pages(_doc("d", 3), [])

    def test_source_untouched(self):
        doc = _doc("d", 3)
        before = [p.copy() for p in doc.pages]
        extract_pages(doc, [2, 0])
        assert doc.pages == before


class TestSplitPage:
    def test_single_page(self):
        doc = _doc("d", 3)
        out = split_page(doc, 2)
        assert out.pages == [doc.pages[2]]

    def test_out_of_range(self):
        with pytest.raises(InvalidPageIndexError):
            split_page(_doc("d", 3), 3)
