"""
PDFMaster — Backend Configuration
Loads .env automatically, then reads all settings from environment variables.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_env_path = Path(__file__).resolve().parents[3] / ".env"  # repo root
load_dotenv(_env_path)


@dataclass(frozen=True)
class LimitsConfig:
    """Upload limits enforced before any document is decoded."""
    max_file_bytes: int
    max_request_bytes: int
    max_files: int


@dataclass(frozen=True)
class LayoutConfig:
    """Defaults for image-to-PDF page layout."""
    page_size: str
    margin: float


@dataclass(frozen=True)
class OCRConfig:
    """Tesseract settings for text extraction of image-only pages."""
    dpi: int
    lang: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""
    host: str
    port: int
    debug: bool
    cors_origins: list[str]
    limits: LimitsConfig
    layout: LayoutConfig
    ocr: OCRConfig


def _mb(name: str, default: str) -> int:
    return int(float(os.getenv(name, default)) * 1024 * 1024)


def _load_config() -> AppConfig:
    return AppConfig(
        host=os.getenv("APP_HOST", "0.0.0.0"),
        port=int(os.getenv("APP_PORT", "3000")),
        debug=os.getenv("APP_DEBUG", "false").lower() == "true",
        cors_origins=[
            o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
        ],
        limits=LimitsConfig(
            max_file_bytes=_mb("MAX_FILE_MB", "50"),
            max_request_bytes=_mb("MAX_REQUEST_MB", "200"),
            max_files=int(os.getenv("MAX_FILES", "50")),
        ),
        layout=LayoutConfig(
            page_size=os.getenv("DEFAULT_PAGE_SIZE", "letter").lower(),
            margin=float(os.getenv("DEFAULT_MARGIN", "50")),
        ),
        ocr=OCRConfig(
            dpi=int(os.getenv("OCR_DPI", "200")),
            lang=os.getenv("OCR_LANG", "eng"),
        ),
    )


def _validate_config(cfg: AppConfig) -> None:
    """Fail fast if limits or layout defaults are unusable."""
    from app.pdf.layout import PAGE_SIZES

    problems: list[str] = []
    if cfg.limits.max_file_bytes <= 0:
        problems.append("MAX_FILE_MB must be positive")
    if cfg.limits.max_request_bytes < cfg.limits.max_file_bytes:
        problems.append("MAX_REQUEST_MB must be at least MAX_FILE_MB")
    if cfg.limits.max_files < 1:
        problems.append("MAX_FILES must be at least 1")
    if cfg.layout.page_size not in PAGE_SIZES:
        problems.append(
            f"DEFAULT_PAGE_SIZE must be one of {', '.join(sorted(PAGE_SIZES))}"
        )
    else:
        w, h = PAGE_SIZES[cfg.layout.page_size]
        if not 0 <= cfg.layout.margin < min(w, h) / 2:
            problems.append("DEFAULT_MARGIN must be >= 0 and below half the shorter page side")
    if cfg.ocr.dpi < 36:
        problems.append("OCR_DPI must be at least 36")
    if problems:
        print(
            f"\n  ERROR: Invalid configuration: {'; '.join(problems)}\n"
            f"  Fix backend/.env or the environment and restart.\n",
            file=sys.stderr,
        )
        sys.exit(1)


settings = _load_config()
_validate_config(settings)
