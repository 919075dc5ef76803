"""
Attachment classification.
"""

import os
from typing import Optional

from ..core.config import Config
from ..core.models import (Attachment, AttachmentFile, PaginatedDocument,
                           RasterImage, Unsupported)
from ..utils.logging_config import get_module_logger

_PDF_SIGNATURE = b"%PDF-"
_JPEG_SIGNATURE = b"\xff\xd8\xff"
_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class AttachmentClassifier:
    """Resolves an attachment to a paginated document, a raster image or unsupported."""

    def __init__(self):
        self.logger = get_module_logger(__name__)

    def classify(self, attachment: AttachmentFile) -> Attachment:
        """
        Classify an attachment by declared MIME type, then filename extension,
        then leading signature bytes.

        Args:
            attachment: The attachment to classify

        Returns:
            PaginatedDocument, RasterImage or Unsupported. Never raises.
        """
        mime_type = self._normalize_mime(attachment.declared_mime_type)

        if mime_type in Config.PDF_MIME_TYPES:
            return PaginatedDocument(attachment.name, attachment.data)
        if mime_type in Config.IMAGE_MIME_TYPES:
            return RasterImage(attachment.name, attachment.data, Config.IMAGE_MIME_TYPES[mime_type])

        kind = self._kind_from_extension(attachment.name)
        if kind is None and mime_type in Config.GENERIC_MIME_TYPES:
            kind = self._kind_from_signature(attachment.data)
            if kind is not None:
                self.logger.debug("    > '%s' classified from content signature as %s", attachment.name, kind)
        elif kind is not None:
            self.logger.debug("    > '%s' classified from extension as %s (declared type '%s')",
                              attachment.name, kind, mime_type or "none")

        if kind == "pdf":
            return PaginatedDocument(attachment.name, attachment.data)
        if kind in ("jpeg", "png"):
            return RasterImage(attachment.name, attachment.data, kind)

        return Unsupported(attachment.name, f"unsupported file type '{mime_type or 'unknown'}'")

    @staticmethod
    def _normalize_mime(mime_type: Optional[str]) -> str:
        # Drop parameters such as "; charset=binary"
        return (mime_type or "").split(";", 1)[0].strip().lower()

    @staticmethod
    def _kind_from_extension(filename: str) -> Optional[str]:
        extension = os.path.splitext(filename or "")[1].lower()
        if extension in Config.SUPPORTED_PDF_EXTENSIONS:
            return "pdf"
        return Config.IMAGE_EXTENSIONS.get(extension)

    @staticmethod
    def _kind_from_signature(data: bytes) -> Optional[str]:
        head = bytes(data[:1024]) if data else b""
        if _PDF_SIGNATURE in head:
            return "pdf"
        if head.startswith(_JPEG_SIGNATURE):
            return "jpeg"
        if head.startswith(_PNG_SIGNATURE):
            return "png"
        return None
