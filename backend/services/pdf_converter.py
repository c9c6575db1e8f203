"""Render the first page of a PDF resume to a PNG preview."""

import asyncio
import io
import logging
from pathlib import Path

import pdfplumber

from config import settings
from services.gateways.base import ConversionResult, DocumentConverter, SourceFile

logger = logging.getLogger(__name__)


def render_first_page(pdf_bytes: bytes, resolution: int) -> bytes:
    """Return PNG bytes of page one. Raises if the PDF cannot be opened or is empty."""
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        if not pdf.pages:
            raise ValueError("PDF has no pages")
        image = pdf.pages[0].to_image(resolution=resolution)
        buf = io.BytesIO()
        image.save(buf, format="PNG")
    return buf.getvalue()


class PdfImageConverter(DocumentConverter):
    def __init__(self, resolution: int | None = None) -> None:
        self.resolution = resolution or settings.preview_resolution

    async def convert(self, file: SourceFile) -> ConversionResult:
        if not file.name.lower().endswith(".pdf"):
            return ConversionResult(error=f"Unsupported file type: {file.name}")
        try:
            png = await asyncio.to_thread(render_first_page, file.data, self.resolution)
        except Exception as e:
            logger.warning("PDF conversion failed for %s: %s", file.name, e)
            return ConversionResult(error=f"Failed to convert PDF: {e}")

        name = f"{Path(file.name).stem}.png"
        return ConversionResult(artifact=SourceFile(name=name, data=png, content_type="image/png"))
