import pytest

from services.gateways.base import SourceFile
from services.pdf_converter import PdfImageConverter


@pytest.mark.asyncio
async def test_rejects_non_pdf():
    result = await PdfImageConverter().convert(SourceFile(name="resume.docx", data=b"PK"))
    assert result.artifact is None
    assert "resume.docx" in result.error


@pytest.mark.asyncio
async def test_corrupt_pdf_reports_error():
    result = await PdfImageConverter().convert(SourceFile(name="resume.pdf", data=b"not really a pdf"))
    assert result.artifact is None
    assert result.error.startswith("Failed to convert PDF")


def test_default_resolution_from_settings():
    from config import settings

    assert PdfImageConverter().resolution == settings.preview_resolution
    assert PdfImageConverter(resolution=72).resolution == 72
