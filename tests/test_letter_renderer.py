"""
Unit tests for letter rendering and word wrapping.
"""

import unittest

import fitz  # PyMuPDF
from fpdf import FPDF

from approval_compiler.core.config import Config
from approval_compiler.core.models import LogoImage
from approval_compiler.document.canvas import FitzCanvas, FpdfCanvas
from approval_compiler.document.letter_renderer import (LetterRenderer, format_currency,
                                                        wrap_text)
from tests.test_config import TestUtils


def char_count(text):
    return float(len(text))


class TestWrapText(unittest.TestCase):
    """Test cases for wrap_text."""

    def test_empty_text(self):
        self.assertEqual(wrap_text("", 10, char_count), [])

    def test_greedy_wrap(self):
        lines = wrap_text("the quick brown fox jumps", 10, char_count)
        self.assertEqual(lines, ["the quick", "brown fox", "jumps"])
        for line in lines:
            self.assertLessEqual(len(line), 10)

    def test_explicit_breaks_and_blank_lines(self):
        self.assertEqual(wrap_text("first\n\nsecond", 20, char_count), ["first", "", "second"])

    def test_long_word_broken(self):
        self.assertEqual(wrap_text("abcdefghij", 4, char_count), ["abcd", "efgh", "ij"])


class TestFormatCurrency(unittest.TestCase):

    def test_whole_and_fractional_amounts(self):
        self.assertEqual(format_currency(5000), "$5,000")
        self.assertEqual(format_currency(1250.5), "$1,250.50")


class TestLetterRenderer(unittest.TestCase):
    """Test cases for LetterRenderer."""

    def setUp(self):
        self.renderer = LetterRenderer()
        self.doc = fitz.open()

    def tearDown(self):
        self.doc.close()

    def letter_text(self):
        return "\n".join(page.get_text() for page in self.doc)

    def test_renders_letter_content(self):
        form_data = TestUtils.sample_form_data()
        pages = self.renderer.render(FitzCanvas(self.doc), form_data, has_attachments=True)

        self.assertGreaterEqual(pages, 1)
        self.assertEqual(pages, self.doc.page_count)
        text = self.letter_text()
        self.assertIn(Config.ORGANIZATION_NAME, text)
        self.assertIn("Date: 03/15/2024", text)
        self.assertIn("Lot: 17", text)
        self.assertIn("RE: Architectural Review - Fence", text)
        self.assertIn("Dear Rivera,", text)
        self.assertIn("Approved by: J. Morgan", text)
        self.assertIn("$1,000", text)
        self.assertIn(Config.ATTACHMENTS_NOTE, text)

    def test_generic_greeting_and_no_footnote(self):
        form_data = TestUtils.sample_form_data(owner_name="", approved_by="")
        self.renderer.render(FitzCanvas(self.doc), form_data, has_attachments=False)

        text = self.letter_text()
        self.assertIn(Config.DEFAULT_GREETING, text)
        self.assertNotIn(Config.ATTACHMENTS_NOTE, text)
        self.assertNotIn("Approved by:", text)

    def test_major_project_deposit(self):
        form_data = TestUtils.sample_form_data(project_type="New Home")
        self.renderer.render(FitzCanvas(self.doc), form_data)
        self.assertIn("$5,000", self.letter_text())

    def test_explicit_deposit_amount(self):
        form_data = TestUtils.sample_form_data(deposit_amount=2500.0)
        self.renderer.render(FitzCanvas(self.doc), form_data)
        self.assertIn("$2,500", self.letter_text())

    def test_long_comments_continue_on_new_pages(self):
        long_comments = " ".join(["The committee noted the drainage plan in detail."] * 120)
        form_data = TestUtils.sample_form_data(review_comments=long_comments)
        pages = self.renderer.render(FitzCanvas(self.doc), form_data)

        self.assertGreater(pages, 1)
        self.assertEqual(pages, self.doc.page_count)
        for page in self.doc:
            self.assertEqual((page.rect.width, page.rect.height), Config.LETTER_PAGE_SIZE)

    def test_footnote_stays_with_signature(self):
        base_comments = TestUtils.sample_form_data().review_comments
        for extra_sentences in range(0, 12):
            with self.subTest(extra_sentences=extra_sentences):
                comments = " ".join([base_comments] + ["Gates must swing inward."] * extra_sentences)
                form_data = TestUtils.sample_form_data(review_comments=comments)
                with fitz.open() as doc:
                    self.renderer.render(FitzCanvas(doc), form_data, has_attachments=True)
                    pages = [page.get_text() for page in doc]

                footnote_pages = [text for text in pages if Config.ATTACHMENTS_NOTE in text]
                self.assertEqual(len(footnote_pages), 1)
                self.assertIn("Sincerely,", footnote_pages[0])
                self.assertIn("Approved by: J. Morgan", footnote_pages[0])

    def test_logo_drawn(self):
        logo_data = TestUtils.make_image_bytes(400, 200)
        logo = LogoImage(logo_data, 400, 200)
        self.renderer.render(FitzCanvas(self.doc), TestUtils.sample_form_data(), logo=logo)
        self.assertEqual(len(self.doc[0].get_images()), 1)

    def test_same_page_count_on_fpdf_canvas(self):
        """Both drawing surfaces paginate the letter the same way."""
        form_data = TestUtils.sample_form_data()
        fitz_pages = self.renderer.render(FitzCanvas(self.doc), form_data, has_attachments=True)

        pdf = FPDF(unit="mm", format="letter")
        fpdf_pages = LetterRenderer().render(FpdfCanvas(pdf), form_data, has_attachments=True)

        self.assertEqual(fpdf_pages, fitz_pages)
        self.assertEqual(pdf.page_no(), fpdf_pages)


if __name__ == '__main__':
    unittest.main()
