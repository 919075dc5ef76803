"""
Fallback assembly with fpdf2.

Used only when the PyMuPDF merge path is unavailable or gives up. fpdf2
cannot import existing PDF pages, so this path keeps the letter and image
attachments and drops PDFs, unsupported files and the reference document
with a warning. Page geometry is computed in millimetres.
"""

import asyncio
import io
from typing import List, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.image_parsing import preload_image
from PIL import Image

from ..core.config import Config
from ..core.models import (AssemblyOutcome, AttachmentGroup, FormData,
                           LogoImage, PaginatedDocument, RasterImage,
                           SectionRecord, Unsupported)
from ..document.canvas import FpdfCanvas
from ..document.letter_renderer import LetterRenderer
from ..utils.logging_config import get_fallback_logger
from ..utils.validators import Validators
from .classifier import AttachmentClassifier
from .geometry import compute_page_geometry
from .section_labeler import SectionLabeler


class FallbackProcessor:
    """Degraded assembler that supports image attachments only."""

    def __init__(self, letter_renderer: Optional[LetterRenderer] = None,
                 section_labeler: Optional[SectionLabeler] = None,
                 classifier: Optional[AttachmentClassifier] = None):
        self.letter_renderer = letter_renderer or LetterRenderer()
        self.section_labeler = section_labeler or SectionLabeler()
        self.classifier = classifier or AttachmentClassifier()
        self.logger = get_fallback_logger()

    async def assemble(self, form_data: FormData, groups: Sequence[AttachmentGroup],
                       logo: Optional[LogoImage] = None) -> AssemblyOutcome:
        """
        Build a letter-plus-images document.

        Args:
            form_data: Letter content
            groups: Attachment groups already in output order
            logo: Cached organization logo

        Returns:
            AssemblyOutcome; ``failure_reason`` is set only when not even the
            letter could be produced
        """
        outcome = AssemblyOutcome()
        pdf = FPDF(unit="mm", format="letter")
        pdf.set_creator(Config.ORGANIZATION_NAME)
        canvas = FpdfCanvas(pdf)
        has_attachments = any(not group.is_empty for group in groups)

        try:
            pages = self.letter_renderer.render(canvas, form_data, logo, has_attachments)
        except Exception as e:
            self.logger.error("  > ❌ Fallback letter rendering failed: %s", e, exc_info=True)
            outcome.failure_reason = f"fallback letter rendering failed: {e}"
            return outcome
        outcome.sections.append(SectionRecord(Config.LETTER_SECTION_TITLE, 0, pages))

        for group in groups:
            if group.is_empty:
                continue
            await asyncio.sleep(0)
            images = self._decodable_images(group, outcome.warnings)
            if not images:
                self.logger.warning("  > ⚠️ Group '%s' has no images the fallback can embed.", group.title)
                continue

            start = canvas.page_count
            self.section_labeler.render(canvas, group.title)
            for image, pixels in images:
                await asyncio.sleep(0)
                self._add_image_page(pdf, image, pixels, outcome.warnings, group.title)
            outcome.sections.append(SectionRecord(group.title, start, canvas.page_count - start))

        outcome.warnings.append(f"{Config.REFERENCE_DOCUMENT_NAME}: not supported by the fallback assembler, "
                                f"section omitted")
        self.logger.warning("  > ⚠️ Reference document omitted by the fallback assembler.")

        try:
            outcome.document_bytes = bytes(pdf.output())
        except Exception as e:
            self.logger.error("  > ❌ Fallback serialization failed: %s", e, exc_info=True)
            outcome.failure_reason = f"fallback serialization failed: {e}"
            return outcome

        outcome.page_count = pdf.page_no()
        self.logger.info("  > ✓ Fallback document has %d page(s).", outcome.page_count)
        return outcome

    def _decodable_images(self, group: AttachmentGroup,
                          warnings: List[str]) -> List[Tuple[RasterImage, Image.Image]]:
        """Classify and decode a group's files, keeping images that open cleanly."""
        images = []
        for attachment in group.files:
            check = Validators.validate_attachment(attachment)
            if not check['valid']:
                self._skip(warnings, group.title, attachment.name, check['error_message'])
                continue

            classified = self.classifier.classify(attachment)
            if isinstance(classified, PaginatedDocument):
                self._skip(warnings, group.title, attachment.name, "PDF attachments need the primary merge path")
                continue
            if isinstance(classified, Unsupported):
                self._skip(warnings, group.title, attachment.name, classified.reason)
                continue

            try:
                with Image.open(io.BytesIO(classified.data)) as decoded:
                    decoded.load()
                    pixels = decoded.copy()
            except Exception as e:
                self._skip(warnings, group.title, attachment.name, f"could not be read: {e}")
                continue
            images.append((classified, pixels))
        return images

    def _add_image_page(self, pdf: FPDF, image: RasterImage, pixels: Image.Image,
                        warnings: List[str], group_title: str) -> None:
        # Pixels are taken as points (72 dpi), then expressed in millimetres
        width_mm = Config.points_to_mm(pixels.width)
        height_mm = Config.points_to_mm(pixels.height)
        geometry = compute_page_geometry(width_mm, height_mm, Config.FALLBACK_IMAGE_PADDING_MM,
                                         Config.FALLBACK_IMAGE_MAX_SIZE_MM,
                                         Config.FALLBACK_IMAGE_MIN_SIZE_MM)
        draw = geometry.draw
        # Load into the image cache first so a bad image never leaves a page behind
        try:
            preload_image(pdf.image_cache, pixels)
        except Exception as e:
            self._skip(warnings, group_title, image.name, f"could not be embedded: {e}")
            return
        before = pdf.page_no()
        try:
            pdf.add_page(format=(geometry.page.width, geometry.page.height))
            pdf.image(pixels, x=draw.x, y=draw.y, w=draw.width, h=draw.height)
        except Exception as e:
            self._drop_pages_after(pdf, before)
            self._skip(warnings, group_title, image.name, f"could not be embedded: {e}")
            return
        self.logger.info("    ✓ '%s' placed on %.1f x %.1f mm page.", image.name,
                         geometry.page.width, geometry.page.height)

    @staticmethod
    def _drop_pages_after(pdf: FPDF, page_no: int) -> None:
        # fpdf2 has no public page removal; pages are keyed 1..n
        while pdf.page > page_no:
            del pdf.pages[pdf.page]
            pdf.page -= 1

    def _skip(self, warnings: List[str], group_title: str, name: str, reason: str) -> None:
        message = f"{group_title}: skipped '{name}' ({reason})"
        self.logger.warning("    ⚠️ %s", message)
        warnings.append(message)
