"""
Primary document assembly with PyMuPDF.

Builds the output document by appending, in fixed order, the letter pages,
each non-empty attachment group (label page plus attachment pages) and the
reference document. Every attachment is built in a scratch document first and
committed to the output with a single insertion, so a failing attachment
leaves no pages behind.
"""

import asyncio
import io
from typing import List, Optional, Sequence

import fitz  # PyMuPDF
from PIL import Image

from ..core.config import Config
from ..core.models import (AssemblyOutcome, AttachmentFile, AttachmentGroup,
                           EmbedOutcome, Embedded, FallbackRequired, FormData,
                           LogoImage, PaginatedDocument, RasterImage,
                           SectionRecord, Skipped, Unsupported)
from ..document.canvas import FitzCanvas
from ..document.letter_renderer import LetterRenderer
from ..utils.logging_config import get_merge_logger
from ..utils.resources import ReferenceDocumentLoader
from ..utils.validators import Validators
from .classifier import AttachmentClassifier
from .geometry import compute_page_geometry
from .section_labeler import SectionLabeler


class MergeProcessor:
    """Assembles letter, attachments and reference document into one PDF."""

    def __init__(self, reference_loader: Optional[ReferenceDocumentLoader] = None,
                 letter_renderer: Optional[LetterRenderer] = None,
                 section_labeler: Optional[SectionLabeler] = None,
                 classifier: Optional[AttachmentClassifier] = None):
        self.reference_loader = reference_loader or ReferenceDocumentLoader()
        self.letter_renderer = letter_renderer or LetterRenderer()
        self.section_labeler = section_labeler or SectionLabeler()
        self.classifier = classifier or AttachmentClassifier()
        self.logger = get_merge_logger()

    def is_available(self) -> bool:
        """Check that PyMuPDF can create and serialize a document."""
        try:
            with fitz.open() as scratch:
                scratch.new_page(width=Config.LETTER_PAGE_SIZE[0], height=Config.LETTER_PAGE_SIZE[1])
                scratch.tobytes()
            return True
        except Exception as e:
            self.logger.warning("  > ⚠️ PyMuPDF merge path unavailable: %s", e)
            return False

    async def merge(self, form_data: FormData, groups: Sequence[AttachmentGroup],
                    logo: Optional[LogoImage] = None) -> AssemblyOutcome:
        """
        Build the merged document.

        Args:
            form_data: Letter content
            groups: Attachment groups already in output order
            logo: Cached organization logo

        Returns:
            AssemblyOutcome with the document bytes, or with ``failure_reason``
            set when the fallback assembler has to take over
        """
        outcome = AssemblyOutcome()
        output_doc = fitz.open()
        try:
            has_attachments = any(not group.is_empty for group in groups)

            # [1] Letter
            self.logger.info("  > Rendering approval letter...")
            result = self._append_letter(output_doc, form_data, logo, has_attachments)
            if isinstance(result, FallbackRequired):
                outcome.failure_reason = result.reason
                return outcome
            outcome.sections.append(SectionRecord(Config.LETTER_SECTION_TITLE, 0, result.page_count))

            # [2] Attachment groups
            for group in groups:
                if group.is_empty:
                    self.logger.debug("  > Group '%s' is empty. Skipping.", group.title)
                    continue
                result = await self._append_group(output_doc, group, outcome.warnings)
                if isinstance(result, FallbackRequired):
                    outcome.failure_reason = result.reason
                    return outcome
                outcome.sections.append(SectionRecord(group.title, output_doc.page_count - result.page_count,
                                                      result.page_count))

            # [3] Reference document
            result = await self._append_reference(output_doc, outcome.warnings)
            if isinstance(result, FallbackRequired):
                outcome.failure_reason = result.reason
                return outcome
            if isinstance(result, Embedded):
                outcome.sections.append(SectionRecord(self._reference_title(),
                                                      output_doc.page_count - result.page_count,
                                                      result.page_count))

            # [4] Finalize
            await asyncio.sleep(0)
            try:
                outcome.document_bytes = output_doc.tobytes(garbage=3, deflate=True)
            except Exception as e:
                self.logger.error("  > ❌ Could not serialize merged document: %s", e, exc_info=True)
                outcome.failure_reason = f"serialization failed: {e}"
                return outcome

            outcome.page_count = output_doc.page_count
            self.logger.info("  > ✓ Merged document has %d page(s).", outcome.page_count)
            return outcome
        finally:
            output_doc.close()

    def _append_letter(self, output_doc: fitz.Document, form_data: FormData,
                       logo: Optional[LogoImage], has_attachments: bool) -> EmbedOutcome:
        try:
            pages = self.letter_renderer.render(FitzCanvas(output_doc), form_data, logo, has_attachments)
        except Exception as e:
            self.logger.error("  > ❌ Letter rendering failed on the merge path: %s", e, exc_info=True)
            return FallbackRequired(f"letter rendering failed: {e}")
        return Embedded(pages)

    async def _append_group(self, output_doc: fitz.Document, group: AttachmentGroup,
                            warnings: List[str]) -> EmbedOutcome:
        self.logger.info("  > Processing group '%s' (%d file(s))...", group.title, len(group.files))
        start = output_doc.page_count
        try:
            self.section_labeler.render(FitzCanvas(output_doc), group.title)
        except Exception as e:
            self.logger.error("  > ❌ Could not add section label '%s': %s", group.title, e, exc_info=True)
            return FallbackRequired(f"section label failed: {e}")

        for idx, attachment in enumerate(group.files, 1):
            await asyncio.sleep(0)
            result = self._embed_attachment(output_doc, attachment)
            if isinstance(result, Skipped):
                message = f"{group.title}: skipped '{attachment.name}' ({result.reason})"
                self.logger.warning("    ⚠️ %s", message)
                warnings.append(message)
            elif isinstance(result, Embedded):
                self.logger.info("    ✓ [%d/%d] '%s' added %d page(s).",
                                 idx, len(group.files), attachment.name, result.page_count)

        return Embedded(output_doc.page_count - start)

    def _embed_attachment(self, output_doc: fitz.Document, attachment: AttachmentFile) -> EmbedOutcome:
        check = Validators.validate_attachment(attachment)
        if not check['valid']:
            return Skipped(check['error_message'])

        classified = self.classifier.classify(attachment)
        if isinstance(classified, Unsupported):
            return Skipped(classified.reason)

        try:
            if isinstance(classified, PaginatedDocument):
                staging = self._stage_document(classified)
            else:
                staging = self._stage_image(classified)
        except Exception as e:
            return Skipped(f"could not be read: {e}")

        with staging:
            if staging.page_count == 0:
                return Skipped("document has no pages")
            page_count = staging.page_count
            before = output_doc.page_count
            try:
                output_doc.insert_pdf(staging)
            except Exception as e:
                # Drop anything a partial insertion left behind
                if output_doc.page_count > before:
                    output_doc.delete_pages(from_page=before, to_page=output_doc.page_count - 1)
                return Skipped(f"could not be merged: {e}")
        return Embedded(page_count)

    def _stage_document(self, document: PaginatedDocument) -> fitz.Document:
        source = fitz.open(stream=document.data, filetype="pdf")
        if source.needs_pass and not source.authenticate(""):
            source.close()
            raise ValueError("document is password protected")
        # All pages, no page limit
        staging = fitz.open()
        try:
            staging.insert_pdf(source)
        except Exception:
            staging.close()
            raise
        finally:
            source.close()
        return staging

    def _stage_image(self, image: RasterImage) -> fitz.Document:
        with Image.open(io.BytesIO(image.data)) as decoded:
            decoded.load()
            width, height = decoded.size

        geometry = compute_page_geometry(width, height, Config.IMAGE_PAGE_PADDING,
                                         Config.IMAGE_PAGE_MAX_SIZE, Config.IMAGE_PAGE_MIN_SIZE)
        self.logger.debug("    > '%s' %dx%d px -> page %.1f x %.1f pt at scale %.3f",
                          image.name, width, height, geometry.page.width, geometry.page.height,
                          geometry.scale)

        staging = fitz.open()
        try:
            page = staging.new_page(width=geometry.page.width, height=geometry.page.height)
            draw = geometry.draw
            page.insert_image(fitz.Rect(draw.x, draw.y, draw.x1, draw.y1),
                              stream=image.data, keep_proportion=True)
        except Exception:
            staging.close()
            raise
        return staging

    async def _append_reference(self, output_doc: fitz.Document, warnings: List[str]) -> EmbedOutcome:
        data = await self.reference_loader.load()
        if data is None:
            message = f"{self._reference_title()}: reference document unavailable, section omitted"
            self.logger.warning("  > ⚠️ %s", message)
            warnings.append(message)
            return Skipped("reference document unavailable")

        try:
            reference = fitz.open(stream=data, filetype="pdf")
            if reference.page_count == 0:
                reference.close()
                raise ValueError("document has no pages")
        except Exception as e:
            message = f"{self._reference_title()}: reference document unreadable ({e}), section omitted"
            self.logger.warning("  > ⚠️ %s", message)
            warnings.append(message)
            return Skipped(str(e))

        start = output_doc.page_count
        try:
            with reference:
                self.logger.info("  > Appending reference document (%d pages)...", reference.page_count)
                self.section_labeler.render(FitzCanvas(output_doc), self._reference_title())
                output_doc.insert_pdf(reference)
        except Exception as e:
            self.logger.error("  > ❌ Could not append reference document: %s", e, exc_info=True)
            return FallbackRequired(f"reference document append failed: {e}")
        return Embedded(output_doc.page_count - start)

    def _reference_title(self) -> str:
        return self.reference_loader.name
