"""Shared test configuration and fixtures for the PDFMaster test suite."""

import io
import sys
from pathlib import Path

import pytest

# Add backend to Python path so imports work
backend_dir = str(Path(__file__).parent.parent / "backend")
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)


def make_pdf(*page_texts: str, size=(612, 792), metadata=None) -> bytes:
    """Create a PDF with one page per text, each page carrying its text."""
    import fitz

    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page(width=size[0], height=size[1])
        page.insert_text((72, 72), text, fontsize=12)
    if metadata:
        doc.set_metadata(metadata)
    pdf_bytes = doc.tobytes()
    doc.close()
    return pdf_bytes


def make_image(fmt: str = "PNG", size=(120, 80), mode: str = "RGB", color=(200, 30, 30)) -> bytes:
    from PIL import Image

    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def pdf_page_texts(pdf_bytes: bytes) -> list[str]:
    import fitz

    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    texts = [page.get_text().strip() for page in doc]
    doc.close()
    return texts


@pytest.fixture(scope="session")
def project_root():
    return Path(__file__).parent.parent


@pytest.fixture
def three_page_pdf():
    return make_pdf("Alpha page 0", "Alpha page 1", "Alpha page 2")


@pytest.fixture
def four_page_pdf():
    return make_pdf("Page zero", "Page one", "Page two", "Page three")


@pytest.fixture
def two_page_pdf():
    return make_pdf("Bravo page 0", "Bravo page 1", metadata={"title": "Bravo"})


@pytest.fixture
def png_bytes():
    return make_image("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image("JPEG", size=(3000, 1000))


@pytest.fixture
def gif_bytes():
    return make_image("GIF", mode="P", color=3)
