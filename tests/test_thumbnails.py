import pytest
from io import BytesIO
from PIL import Image
from s3filemanager.services.thumbnails import ThumbnailService, ThumbnailGenerationError


@pytest.fixture
def thumbnail_service(fake_s3_service, config):
    return ThumbnailService(fake_s3_service, config)


class TestThumbnailService:
    """Test suite for ThumbnailService."""

    def test_render_first_page(self, thumbnail_service, pdf_content):
        """Test rendering a PDF page as PNG."""
        data = thumbnail_service.render_first_page(pdf_content)
        image = Image.open(BytesIO(data))
        assert image.format == "PNG"
        assert image.width > 0 and image.height > image.width

    def test_render_invalid_document(self, thumbnail_service):
        """Test rendering a document that is not a PDF."""
        with pytest.raises(ThumbnailGenerationError):
            thumbnail_service.render_first_page(b"%PDF- broken")

    @pytest.mark.asyncio
    async def test_generate_from_storage(self, thumbnail_service, fake_s3_service, pdf_content):
        """Test making the preview of a stored document."""
        fake_s3_service.put("docs/file.pdf", pdf_content, "application/pdf")

        key = await thumbnail_service.generate("docs/file.pdf")

        assert key == "thumbnails/docs/file.pdf"
        assert fake_s3_service.objects[key][1] == "image/png"
        assert key in fake_s3_service.public

    @pytest.mark.asyncio
    async def test_generate_from_content(self, thumbnail_service, fake_s3_service, pdf_content):
        """Test making the preview of a document being uploaded."""
        await thumbnail_service.generate("file.pdf", pdf_content)

        assert ("get_object", "file.pdf") not in fake_s3_service.calls
        assert "thumbnails/file.pdf" in fake_s3_service.objects

    @pytest.mark.asyncio
    async def test_generate_missing_document(self, thumbnail_service):
        """Test making the preview of a document that does not exist."""
        with pytest.raises(ThumbnailGenerationError):
            await thumbnail_service.generate("missing.pdf")

    @pytest.mark.asyncio
    async def test_generate_upload_failed(self, thumbnail_service, fake_s3_service, pdf_content):
        """Test a preview that cannot be stored."""
        fake_s3_service.failures["put_object"] = 500
        with pytest.raises(ThumbnailGenerationError):
            await thumbnail_service.generate("file.pdf", pdf_content)

    @pytest.mark.asyncio
    async def test_delete(self, thumbnail_service, fake_s3_service):
        """Test removing a preview."""
        fake_s3_service.put("thumbnails/file.pdf", b"png", "image/png")
        assert await thumbnail_service.delete("file.pdf") is True
        assert "thumbnails/file.pdf" not in fake_s3_service.objects
