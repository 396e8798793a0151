"""Integration tests for FastAPI endpoints (contract tests)."""

import base64
import json

import pytest
from httpx import AsyncClient, ASGITransport
from app.main import app

from conftest import make_image, pdf_page_texts

PDF = "application/pdf"


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _job(resp) -> dict:
    return json.loads(base64.b64decode(resp.headers["X-PDFMaster-Job"]))


@pytest.mark.asyncio
class TestHealthEndpoint:
    async def test_health_returns_ok(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["version"] == "1.0.0"


@pytest.mark.asyncio
class TestToolsEndpoint:
    async def test_list_tools(self, client):
        resp = await client.get("/v1/tools")
        assert resp.status_code == 200
        ids = [t["id"] for t in resp.json()]
        assert ids == ["merge", "split", "extract", "compress", "images-to-pdf", "pdf-to-text"]

    async def test_tool_has_required_fields(self, client):
        resp = await client.get("/v1/tools")
        for t in resp.json():
            assert t["endpoint"].startswith("/v1/")
            assert "name" in t
            assert "accepts" in t

    async def test_single_tool(self, client):
        resp = await client.get("/v1/tools/images-to-pdf")
        assert resp.status_code == 200
        assert resp.json()["accepts"] == ["image/*"]

    async def test_unknown_tool_is_404(self, client):
        resp = await client.get("/v1/tools/rotate")
        assert resp.status_code == 404
        assert resp.json()["detail"]["error_code"] == "UNKNOWN_TOOL"


@pytest.mark.asyncio
class TestMergeEndpoint:
    async def test_merge_keeps_upload_order(self, client, three_page_pdf, two_page_pdf):
        resp = await client.post("/v1/merge", files=[
            ("files", ("a.pdf", three_page_pdf, PDF)),
            ("files", ("b.pdf", two_page_pdf, PDF)),
        ])
        assert resp.status_code == 200
        assert resp.headers["content-type"] == PDF
        assert "merged-document.pdf" in resp.headers["content-disposition"]
        texts = pdf_page_texts(resp.content)
        assert texts == ["Alpha page 0", "Alpha page 1", "Alpha page 2",
                         "Bravo page 0", "Bravo page 1"]

    async def test_job_header(self, client, three_page_pdf):
        resp = await client.post("/v1/merge", files=[("files", ("a.pdf", three_page_pdf, PDF))])
        job = _job(resp)
        assert job["operation"] == "merge"
        assert job["artifact"]["pages"] == 3
        assert len(job["input_hashes"]) == 1
        assert "X-Request-Id" in resp.headers

    async def test_malformed_pdf_rejected(self, client, three_page_pdf):
        resp = await client.post("/v1/merge", files=[
            ("files", ("a.pdf", three_page_pdf, PDF)),
            ("files", ("broken.pdf", b"not a pdf", PDF)),
        ])
        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["error_code"] == "MALFORMED_DOCUMENT"
        assert "broken.pdf" in detail["message"]

    async def test_no_files_is_empty_input(self, client):
        resp = await client.post("/v1/merge")
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_code"] == "EMPTY_INPUT"


@pytest.mark.asyncio
class TestSplitEndpoint:
    async def test_split_single_page(self, client, three_page_pdf):
        resp = await client.post(
            "/v1/split", files={"file": ("a.pdf", three_page_pdf, PDF)}, data={"page": "1"}
        )
        assert resp.status_code == 200
        assert pdf_page_texts(resp.content) == ["Alpha page 1"]
        assert "page-2.pdf" in resp.headers["content-disposition"]

    async def test_default_page_is_first(self, client, three_page_pdf):
        resp = await client.post("/v1/split", files={"file": ("a.pdf", three_page_pdf, PDF)})
        assert pdf_page_texts(resp.content) == ["Alpha page 0"]

    async def test_out_of_range_page(self, client, three_page_pdf):
        resp = await client.post(
            "/v1/split", files={"file": ("a.pdf", three_page_pdf, PDF)}, data={"page": "3"}
        )
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_code"] == "INVALID_PAGE_INDEX"


@pytest.mark.asyncio
class TestExtractEndpoint:
    async def test_order_and_repeats(self, client, four_page_pdf):
        resp = await client.post(
            "/v1/extract",
            files={"file": ("d.pdf", four_page_pdf, PDF)},
            data={"pages": ["3", "1", "1"]},
        )
        assert resp.status_code == 200
        assert pdf_page_texts(resp.content) == ["Page three", "Page one", "Page one"]

    async def test_one_bad_index_fails_request(self, client, four_page_pdf):
        resp = await client.post(
            "/v1/extract",
            files={"file": ("d.pdf", four_page_pdf, PDF)},
            data={"pages": ["0", "4"]},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_code"] == "INVALID_PAGE_INDEX"

    async def test_no_pages_is_empty_input(self, client, four_page_pdf):
        resp = await client.post("/v1/extract", files={"file": ("d.pdf", four_page_pdf, PDF)})
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_code"] == "EMPTY_INPUT"


@pytest.mark.asyncio
class TestCompressEndpoint:
    async def test_size_report_headers(self, client, three_page_pdf):
        resp = await client.post("/v1/compress", files={"file": ("a.pdf", three_page_pdf, PDF)})
        assert resp.status_code == 200
        original = int(resp.headers["X-Original-Size"])
        compressed = int(resp.headers["X-Compressed-Size"])
        assert original == len(three_page_pdf)
        assert compressed == len(resp.content)
        expected = round((original - compressed) / original * 100, 1)
        assert float(resp.headers["X-Compression-Ratio"]) == pytest.approx(expected)
        assert len(pdf_page_texts(resp.content)) == 3


@pytest.mark.asyncio
class TestImagesToPdfEndpoint:
    async def test_one_page_per_image_with_placeholder(self, client, png_bytes, gif_bytes):
        resp = await client.post("/v1/images-to-pdf", files=[
            ("files", ("one.png", png_bytes, "image/png")),
            ("files", ("broken.jpg", b"garbage", "image/jpeg")),
            ("files", ("three.gif", gif_bytes, "image/gif")),
        ])
        assert resp.status_code == 200
        assert resp.headers["X-Images-Processed"] == "3"
        assert resp.headers["X-Placeholder-Pages"] == "1"
        texts = pdf_page_texts(resp.content)
        assert len(texts) == 3
        assert "broken.jpg" in texts[1]

    async def test_page_size_option(self, client, png_bytes):
        import fitz

        resp = await client.post(
            "/v1/images-to-pdf",
            files=[("files", ("one.png", png_bytes, "image/png"))],
            data={"page_size": "a4", "margin": "20"},
        )
        assert resp.status_code == 200
        doc = fitz.open(stream=resp.content, filetype="pdf")
        assert doc[0].rect.width == pytest.approx(595.28, abs=0.5)
        doc.close()

    async def test_no_images_is_empty_input(self, client):
        resp = await client.post("/v1/images-to-pdf", data={"page_size": "letter"})
        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["error_code"] == "EMPTY_INPUT"
        assert "images" in detail["message"]

    async def test_non_image_is_415(self, client, png_bytes):
        resp = await client.post("/v1/images-to-pdf", files=[
            ("files", ("one.png", png_bytes, "image/png")),
            ("files", ("notes.txt", b"hello", "text/plain")),
        ])
        assert resp.status_code == 415
        assert resp.json()["detail"]["error_code"] == "UNSUPPORTED_INPUT_TYPE"

    async def test_unknown_page_size(self, client):
        resp = await client.post(
            "/v1/images-to-pdf",
            files=[("files", ("a.png", make_image("PNG"), "image/png"))],
            data={"page_size": "tabloid"},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_code"] == "INVALID_LAYOUT"


@pytest.mark.asyncio
class TestPdfToTextEndpoint:
    async def test_text_layer(self, client, three_page_pdf):
        resp = await client.post(
            "/v1/pdf-to-text", files={"file": ("a.pdf", three_page_pdf, PDF)}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["pages"] == 3
        assert data["filename"] == "a.pdf"
        assert "Alpha page 2" in data["text"]
        assert [p["page"] for p in data["page_texts"]] == [0, 1, 2]
        assert "job_id" in data


@pytest.mark.asyncio
class TestUploadLimits:
    @pytest.fixture
    def tight_limits(self, monkeypatch):
        from dataclasses import replace

        import app.main as main_module
        from app.core.config import LimitsConfig

        limits = LimitsConfig(max_file_bytes=1024, max_request_bytes=2048, max_files=2)
        monkeypatch.setattr(main_module, "settings", replace(main_module.settings, limits=limits))

    async def test_oversize_file_is_413(self, client, tight_limits, three_page_pdf):
        big = three_page_pdf + b"%" * 2048
        resp = await client.post("/v1/compress", files={"file": ("big.pdf", big, PDF)})
        assert resp.status_code == 413
        detail = resp.json()["detail"]
        assert detail["error_code"] == "FILE_TOO_LARGE"
        assert "big.pdf" in detail["message"]

    async def test_too_many_files(self, client, tight_limits):
        resp = await client.post("/v1/merge", files=[
            ("files", (f"{i}.pdf", b"x", PDF)) for i in range(3)
        ])
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_code"] == "TOO_MANY_FILES"
