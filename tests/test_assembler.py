"""
Integration tests for ApprovalLetterAssembler.
"""

import os
import shutil
import tempfile
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from approval_compiler.core.assembler import ApprovalLetterAssembler, make_groups
from approval_compiler.core.config import Config
from approval_compiler.core.models import AssemblyOutcome, AttachmentGroup
from approval_compiler.pdf.fallback_processor import FallbackProcessor
from approval_compiler.pdf.merge_processor import MergeProcessor
from approval_compiler.utils.resources import LogoProvider
from tests.test_config import TestUtils


class TestApprovalLetterAssembler(unittest.IsolatedAsyncioTestCase):
    """Test cases for the generation workflow."""

    def setUp(self):
        self.form_data = TestUtils.sample_form_data(address="12 Oak St.", lot="5", project_type="Pool/Spa")
        self.groups = make_groups(site_conditions=[TestUtils.image_attachment("lot.png")],
                                  submitted_files=[TestUtils.pdf_attachment("plans.pdf", pages=2)])
        # No reference document unless a test provides one
        for name, value in (("REFERENCE_DOCUMENT_EMBEDDED", None), ("REFERENCE_BASE_URL", None),
                            ("REFERENCE_ASSETS_DIR", os.path.join(tempfile.gettempdir(), "no-such-assets"))):
            patcher = patch.object(Config, name, value)
            patcher.start()
            self.addCleanup(patcher.stop)

    async def test_primary_path(self):
        assembler = ApprovalLetterAssembler()
        result = await assembler.generate(self.form_data, self.groups)

        self.assertTrue(result.success)
        self.assertFalse(result.used_fallback)
        self.assertEqual(result.filename,
                         "Sanctuary Architectural Approval Letter - 5 - 12 Oak St - PoolSpa - 03_15_2024.pdf")
        self.assertEqual(TestUtils.page_count(result.document_bytes), result.page_count)
        self.assertEqual([s.title for s in result.sections],
                         [Config.LETTER_SECTION_TITLE, "Current Site Conditions", "Submitted Plans"])

    async def test_group_order_independent_of_input_order(self):
        assembler = ApprovalLetterAssembler()
        result = await assembler.generate(self.form_data, list(reversed(self.groups)))

        self.assertEqual([s.title for s in result.sections][1:], ["Current Site Conditions", "Submitted Plans"])

    async def test_missing_groups_treated_as_empty(self):
        only_submitted = [g for g in self.groups if g.key == Config.GROUP_SUBMITTED_FILES]
        result = await ApprovalLetterAssembler().generate(self.form_data, only_submitted)

        self.assertTrue(result.success)
        self.assertNotIn("Current Site Conditions", [s.title for s in result.sections])

    async def test_unknown_group_rejected(self):
        bogus = AttachmentGroup("receipts", "Receipts")
        with self.assertRaises(ValueError):
            await ApprovalLetterAssembler().generate(self.form_data, [bogus])

    async def test_duplicate_group_rejected(self):
        with self.assertRaises(ValueError):
            await ApprovalLetterAssembler().generate(self.form_data, self.groups + self.groups[:1])

    async def test_fallback_when_merge_path_gives_up(self):
        merge = MergeProcessor()
        merge.merge = AsyncMock(return_value=AssemblyOutcome(failure_reason="letter rendering failed"))
        assembler = ApprovalLetterAssembler(merge_processor=merge)

        result = await assembler.generate(self.form_data, self.groups)

        self.assertTrue(result.success)
        self.assertTrue(result.used_fallback)
        self.assertIn("letter rendering failed", result.warnings[0])
        # PDF attachment dropped, image kept
        self.assertEqual([s.title for s in result.sections],
                         [Config.LETTER_SECTION_TITLE, "Current Site Conditions"])

    async def test_fallback_when_merge_path_unavailable(self):
        merge = MergeProcessor()
        with patch.object(merge, 'is_available', return_value=False):
            result = await ApprovalLetterAssembler(merge_processor=merge).generate(self.form_data, self.groups)

        self.assertTrue(result.success)
        self.assertTrue(result.used_fallback)

    async def test_fallback_when_merge_path_raises(self):
        merge = MergeProcessor()
        merge.merge = AsyncMock(side_effect=RuntimeError("engine crashed"))
        result = await ApprovalLetterAssembler(merge_processor=merge).generate(self.form_data, self.groups)

        self.assertTrue(result.success)
        self.assertTrue(result.used_fallback)
        self.assertIn("engine crashed", result.warnings[0])

    async def test_failure_when_both_paths_fail(self):
        merge = MergeProcessor()
        merge.merge = AsyncMock(return_value=AssemblyOutcome(failure_reason="merge failed"))
        fallback = FallbackProcessor()
        fallback.assemble = AsyncMock(side_effect=RuntimeError("fallback failed"))
        assembler = ApprovalLetterAssembler(merge_processor=merge, fallback_processor=fallback)

        result = await assembler.generate(self.form_data, self.groups)

        self.assertFalse(result.success)
        self.assertIsNone(result.document_bytes)
        self.assertTrue(result.filename.endswith(".pdf"))

    async def test_logo_loaded_once_across_calls(self):
        logo_provider = LogoProvider(data=TestUtils.make_image_bytes(300, 150))
        assembler = ApprovalLetterAssembler(logo_provider=logo_provider)

        await assembler.generate(self.form_data)
        await assembler.generate(self.form_data)

        self.assertEqual(logo_provider.load_count, 1)

    async def test_missing_logo_does_not_fail(self):
        logo_provider = LogoProvider(path="/nonexistent/logo.jpg")
        result = await ApprovalLetterAssembler(logo_provider=logo_provider).generate(self.form_data)

        self.assertTrue(result.success)

    async def test_default_assembler_reads_reference_from_assets(self):
        work_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, work_dir, True)
        os.makedirs(os.path.join(work_dir, "assets"))
        with open(os.path.join(work_dir, "assets", f"{Config.REFERENCE_DOCUMENT_NAME}.pdf"), "wb") as handle:
            handle.write(TestUtils.make_pdf_bytes(pages=3))
        self.addCleanup(os.chdir, os.getcwd())
        os.chdir(work_dir)

        with patch.object(Config, "REFERENCE_ASSETS_DIR", "assets"):
            result = await ApprovalLetterAssembler().generate(self.form_data, make_groups())

        self.assertTrue(result.success)
        self.assertEqual([s.title for s in result.sections],
                         [Config.LETTER_SECTION_TITLE, Config.REFERENCE_DOCUMENT_NAME])
        # label page + three reference pages
        self.assertEqual(result.sections[-1].page_count, 4)
        self.assertEqual(result.warnings, [])

    async def test_missing_reference_reported(self):
        result = await ApprovalLetterAssembler().generate(self.form_data, make_groups())

        self.assertTrue(result.success)
        self.assertTrue(any(Config.REFERENCE_DOCUMENT_NAME in warning for warning in result.warnings))

    async def test_reference_document_appended(self):
        reference_loader = MagicMock()
        reference_loader.name = Config.REFERENCE_DOCUMENT_NAME
        reference_loader.load = AsyncMock(return_value=TestUtils.make_pdf_bytes(pages=3))
        assembler = ApprovalLetterAssembler(reference_loader=reference_loader)

        result = await assembler.generate(self.form_data, self.groups)

        self.assertEqual(result.sections[-1].title, Config.REFERENCE_DOCUMENT_NAME)
        self.assertEqual(result.sections[-1].page_count, 4)


if __name__ == '__main__':
    unittest.main()
