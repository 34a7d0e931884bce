from io import BytesIO
import asyncio
import logging
import pypdfium2 as pdfium
from PIL import Image
from ..models.config import S3Config
from .s3 import S3Service

# PDF user space unit, in dots per inch
PDF_DPI = 72

class ThumbnailGenerationError(Exception):
    """Exception raised when the preview of a document could not be made or stored."""
    pass

class ThumbnailService:
    """Makes the preview images of the stored documents: the first page of a PDF rendered as PNG.
    """

    def __init__(self, s3_service: S3Service, config: S3Config):
        self.s3_service = s3_service
        self.config = config

    def render_first_page(self, content: bytes) -> bytes:
        """Render the first page of a PDF document.

        Args:
            content (bytes): The PDF document

        Raises:
            ThumbnailGenerationError: When the document cannot be read or has no page.

        Returns:
            bytes: The PNG image data
        """
        try:
            pdf = pdfium.PdfDocument(content)
        except pdfium.PdfiumError as e:
            raise ThumbnailGenerationError(f"Cannot read PDF document: {e}")
        try:
            if len(pdf) == 0:
                raise ThumbnailGenerationError("PDF document has no page")
            page = pdf[0]
            image: Image.Image = page.render(scale=self.config.thumbnail_dpi / PDF_DPI).to_pil()
            data = BytesIO()
            image.convert("RGB").save(data, format="png")
            return data.getvalue()
        finally:
            pdf.close()

    async def generate(self, key: str, content: bytes = None) -> str:
        """Make the preview of a stored document and store it with public read permission.

        Args:
            key (str): The document key
            content (bytes, optional): The document content, fetched from S3 when not provided.

        Raises:
            ThumbnailGenerationError: When any step fails.

        Returns:
            str: The key of the preview image
        """
        thumbnail_key = self.config.thumbnail_key(key)
        try:
            if content is None:
                content, _ = await self.s3_service.get_object(key)
            # rendering is CPU bound
            image = await asyncio.to_thread(self.render_first_page, content)
            status = await self.s3_service.put_object(thumbnail_key, image, "image/png")
            if status != 200:
                raise ThumbnailGenerationError(f"Failed to upload preview {thumbnail_key}: HTTP {status}")
            status = await self.s3_service.set_public_read_acl(thumbnail_key)
            if status != 200:
                raise ThumbnailGenerationError(f"Failed to set permission of preview {thumbnail_key}: HTTP {status}")
        except ThumbnailGenerationError:
            raise
        except Exception as e:
            raise ThumbnailGenerationError(f"Failed to make preview of {key}: {e}") from e
        logging.info(f"Preview generated path : {thumbnail_key}")
        return thumbnail_key

    async def delete(self, key: str) -> bool:
        """Remove the preview of a document, if any.

        Args:
            key (str): The document key

        Returns:
            bool: True if the preview was deleted, False otherwise.
        """
        thumbnail_key = self.config.thumbnail_key(key)
        try:
            status = await self.s3_service.delete_object(thumbnail_key)
        except Exception as e:
            logging.warning(f"Could not delete preview {thumbnail_key}: {e}")
            return False
        return status == 204
