"""Unit tests for the structured error catalog."""

import pytest
from app.errors import (
    PDFMasterError, EmptyInputError, MalformedDocumentError,
    InvalidPageIndexError, UnsupportedInputTypeError, EncodingFailureError,
    LayoutError, FileTooLargeError, TooManyFilesError, RequestCancelledError,
    RasterCodecError, ImageEmbedError,
)


class TestErrorCatalog:
    """Verify every error type has its code, status and serialization."""

    def test_base_error(self):
        e = PDFMasterError(code="TEST", message="test msg", suggestion="try this")
        d = e.to_dict()
        assert d["error_code"] == "TEST"
        assert d["message"] == "test msg"
        assert d["suggestion"] == "try this"
        assert "detail" not in d

    def test_empty_input(self):
        e = EmptyInputError("images")
        assert e.code == "EMPTY_INPUT"
        assert "images" in e.message
        assert e.status_code == 400

    def test_malformed_document_names_file(self):
        e = MalformedDocumentError("broken.pdf", "no objects found")
        assert e.code == "MALFORMED_DOCUMENT"
        assert "broken.pdf" in e.message
        assert e.to_dict()["detail"] == "no objects found"

    def test_malformed_document_without_reason(self):
        assert "detail" not in MalformedDocumentError("x.pdf").to_dict()

    def test_invalid_page_index(self):
        e = InvalidPageIndexError(7, 3)
        assert e.code == "INVALID_PAGE_INDEX"
        assert "7" in e.message
        assert "0 and 2" in e.suggestion

    def test_unsupported_input_type(self):
        e = UnsupportedInputTypeError("notes.txt", "text/plain")
        assert e.code == "UNSUPPORTED_INPUT_TYPE"
        assert "notes.txt" in e.message
        assert e.status_code == 415

    def test_encoding_failure(self):
        e = EncodingFailureError("out of memory")
        assert e.code == "ENCODING_FAILED"
        assert e.status_code == 500

    def test_layout_error(self):
        assert LayoutError("bad margin").code == "INVALID_LAYOUT"

    def test_file_too_large(self):
        e = FileTooLargeError("big.pdf", 75.0, 50.0)
        assert e.code == "FILE_TOO_LARGE"
        assert e.status_code == 413
        assert "50MB" in e.message

    def test_too_many_files(self):
        e = TooManyFilesError(60, 50)
        assert e.code == "TOO_MANY_FILES"
        assert "60" in e.message

    def test_request_cancelled(self):
        assert RequestCancelledError().code == "REQUEST_CANCELLED"

    def test_internal_chain_errors(self):
        assert RasterCodecError("a.gif", "png", "truncated").code == "RASTER_CODEC_FAILED"
        assert ImageEmbedError("png", "bad signature").code == "IMAGE_EMBED_FAILED"

    def test_all_errors_are_exceptions(self):
        error_classes = [
            EmptyInputError, MalformedDocumentError, InvalidPageIndexError,
            UnsupportedInputTypeError, EncodingFailureError, LayoutError,
            FileTooLargeError, TooManyFilesError, RequestCancelledError,
            RasterCodecError, ImageEmbedError,
        ]
        for cls in error_classes:
            assert issubclass(cls, PDFMasterError)
            assert issubclass(cls, Exception)

    def test_raises_as_exception(self):
        with pytest.raises(PDFMasterError):
            raise EmptyInputError()
