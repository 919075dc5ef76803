"""
Approval letter generation orchestration.

This module contains the ApprovalLetterAssembler class that takes validated
form data and attachment groups and produces one downloadable PDF, trying the
PyMuPDF merge path first and the fpdf2 fallback path second.
"""

from typing import Iterable, List, Optional

from ..pdf.fallback_processor import FallbackProcessor
from ..pdf.merge_processor import MergeProcessor
from ..utils.filename import build_filename
from ..utils.logging_config import get_assembler_logger
from ..utils.resources import LogoProvider, ReferenceDocumentLoader
from ..utils.validators import Validators
from .config import Config
from .models import (AssemblyOutcome, AttachmentFile, AttachmentGroup,
                     FormData, GenerationResult)


def make_groups(site_conditions: Iterable[AttachmentFile] = (),
                submitted_files: Iterable[AttachmentFile] = ()) -> List[AttachmentGroup]:
    """Build the two standard attachment groups from file lists."""
    return [
        AttachmentGroup(Config.GROUP_SITE_CONDITIONS,
                        Config.get_group_title(Config.GROUP_SITE_CONDITIONS), tuple(site_conditions)),
        AttachmentGroup(Config.GROUP_SUBMITTED_FILES,
                        Config.get_group_title(Config.GROUP_SUBMITTED_FILES), tuple(submitted_files)),
    ]


class ApprovalLetterAssembler:
    """Main orchestrator for approval letter generation."""

    def __init__(self, logo_provider: Optional[LogoProvider] = None,
                 reference_loader: Optional[ReferenceDocumentLoader] = None,
                 merge_processor: Optional[MergeProcessor] = None,
                 fallback_processor: Optional[FallbackProcessor] = None):
        """
        Initialize the assembler.

        Args:
            logo_provider: Process-wide logo cache; no logo is drawn when omitted
            reference_loader: Source of the reference document; defaults to the
                embedded, assets and network sources from Config
            merge_processor: Primary assembly path
            fallback_processor: Degraded assembly path
        """
        self.logo_provider = logo_provider
        self.merge_processor = merge_processor or MergeProcessor(reference_loader)
        self.fallback_processor = fallback_processor or FallbackProcessor()
        self.logger = get_assembler_logger()

    async def generate(self, form_data: FormData,
                       groups: Iterable[AttachmentGroup] = ()) -> GenerationResult:
        """
        Generate the approval letter with its attachments.

        Args:
            form_data: Letter content
            groups: Attachment groups in any order

        Returns:
            GenerationResult; ``success`` is False only when both assembly
            paths failed

        Raises:
            ValueError: For unknown or repeated group keys
        """
        ordered = self.order_groups(groups)
        filename = build_filename(form_data)

        self.logger.info("[Stage 1/4: Input Validation]")
        form_check = Validators.validate_form_data(form_data)
        if not form_check['valid']:
            self.logger.warning("  > ⚠️ Form data is missing: %s", ", ".join(form_check['missing_fields']))
        total_files = sum(len(group.files) for group in ordered)
        self.logger.info("  > %d attachment(s) across %d group(s).", total_files, len(ordered))

        self.logger.info("[Stage 2/4: Resources]")
        logo = None
        if self.logo_provider is not None:
            logo = await self.logo_provider.get()
        if logo is None:
            self.logger.warning("  > ⚠️ Letter will be generated without a logo.")

        self.logger.info("[Stage 3/4: Document Assembly]")
        outcome = await self._run_primary(form_data, ordered, logo)
        used_fallback = False
        if outcome is None or not outcome.succeeded:
            used_fallback = True
            outcome = await self._run_fallback(form_data, ordered, logo, outcome)
            if outcome is None or not outcome.succeeded:
                self.logger.error("  > ❌ Approval letter generation failed.")
                return GenerationResult(success=False, document_bytes=None, filename=filename,
                                        warnings=outcome.warnings if outcome else [],
                                        used_fallback=True)

        self.logger.info("[Stage 4/4: Finalization]")
        for warning in outcome.warnings:
            self.logger.debug("  > Omitted: %s", warning)
        self.logger.info("  > ✓ '%s' ready (%d pages%s).", filename, outcome.page_count,
                         ", fallback" if used_fallback else "")
        return GenerationResult(
            success=True,
            document_bytes=outcome.document_bytes,
            filename=filename,
            page_count=outcome.page_count,
            sections=list(outcome.sections),
            warnings=list(outcome.warnings),
            used_fallback=used_fallback,
        )

    @staticmethod
    def order_groups(groups: Iterable[AttachmentGroup]) -> List[AttachmentGroup]:
        """
        Put attachment groups into the fixed section order.

        Missing groups are treated as empty.

        Raises:
            ValueError: For unknown or repeated group keys
        """
        by_key = {}
        for group in groups:
            if group.key not in Config.GROUP_ORDER:
                raise ValueError(f"Unknown attachment group: {group.key!r}")
            if group.key in by_key:
                raise ValueError(f"Attachment group supplied twice: {group.key!r}")
            by_key[group.key] = group
        return [by_key.get(key) or AttachmentGroup(key, Config.get_group_title(key))
                for key in Config.GROUP_ORDER]

    async def _run_primary(self, form_data: FormData, groups: List[AttachmentGroup],
                           logo) -> Optional[AssemblyOutcome]:
        if not self.merge_processor.is_available():
            self.logger.warning("  > ⚠️ Merge path unavailable. Using fallback assembler.")
            return None
        try:
            outcome = await self.merge_processor.merge(form_data, groups, logo)
        except Exception as e:
            self.logger.error("  > ❌ Merge path raised unexpectedly: %s", e, exc_info=True)
            return AssemblyOutcome(failure_reason=f"merge path raised: {e}")
        if not outcome.succeeded:
            self.logger.warning("  > ⚠️ Merge path cannot continue (%s). Using fallback assembler.",
                                outcome.failure_reason)
        return outcome

    async def _run_fallback(self, form_data: FormData, groups: List[AttachmentGroup], logo,
                            primary: Optional[AssemblyOutcome]) -> Optional[AssemblyOutcome]:
        try:
            outcome = await self.fallback_processor.assemble(form_data, groups, logo)
        except Exception as e:
            self.logger.error("  > ❌ Fallback assembler raised: %s", e, exc_info=True)
            return None
        reason = primary.failure_reason if primary is not None else "merge path unavailable"
        outcome.warnings.insert(0, f"Generated with the fallback assembler: {reason}")
        return outcome
