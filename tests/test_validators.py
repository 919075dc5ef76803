"""
Unit tests for the Validators utility class.
"""

import os
import unittest
from unittest.mock import patch

import fitz  # PyMuPDF

from approval_compiler.core.config import Config
from approval_compiler.core.models import AttachmentFile, FormData
from approval_compiler.utils.validators import Validators
from tests.test_config import BaseTestCase, TestConfig, TestUtils


class TestValidators(BaseTestCase):
    """Test cases for Validators class."""

    def test_validate_form_data_complete(self):
        result = Validators.validate_form_data(TestUtils.sample_form_data())

        self.assertTrue(result['valid'])
        self.assertEqual(result['missing_fields'], [])

    def test_validate_form_data_missing_fields(self):
        result = Validators.validate_form_data(FormData(address="1 Main", lot=" "))

        self.assertFalse(result['valid'])
        self.assertIn('lot', result['missing_fields'])
        self.assertIn('project_type', result['missing_fields'])
        self.assertNotIn('address', result['missing_fields'])

    def test_validate_attachment_valid(self):
        result = Validators.validate_attachment(TestUtils.image_attachment())

        self.assertTrue(result['valid'])
        self.assertIsNone(result['error_message'])
        self.assertGreater(result['file_size_mb'], 0)

    def test_validate_attachment_empty(self):
        result = Validators.validate_attachment(AttachmentFile("empty.pdf", "application/pdf", b""))

        self.assertFalse(result['valid'])
        self.assertIn("empty", result['error_message'])

    def test_validate_attachment_too_large(self):
        attachment = AttachmentFile("huge.pdf", "application/pdf", b"x" * 2048)
        with patch.object(Config, 'MAX_ATTACHMENT_SIZE_MB', 0.001):
            result = Validators.validate_attachment(attachment)

        self.assertFalse(result['valid'])
        self.assertIn("huge.pdf", result['error_message'])

    def test_validate_pdf_bytes(self):
        result = Validators.validate_pdf_bytes(TestUtils.make_pdf_bytes(pages=3))

        self.assertTrue(result['valid'])
        self.assertEqual(result['page_count'], 3)

    def test_validate_pdf_bytes_invalid(self):
        for data in (b"", TestConfig.CORRUPT_PDF_CONTENT, b"plain text"):
            with self.subTest(data=data[:10]):
                result = Validators.validate_pdf_bytes(data)
                self.assertFalse(result['valid'])
                self.assertIsNotNone(result['error_message'])

    def test_validate_pdf_bytes_encrypted(self):
        doc = fitz.open()
        doc.new_page()
        data = doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw="owner", user_pw="user")
        doc.close()

        result = Validators.validate_pdf_bytes(data)

        self.assertFalse(result['valid'])
        self.assertIn("password", result['error_message'])

    def test_validate_output_path_creates_directory(self):
        output_path = os.path.join(self.temp_dir, "letters", "out.pdf")
        result = Validators.validate_output_path(output_path)

        self.assertTrue(result['valid'])
        self.assertFalse(result['file_exists'])
        self.assertTrue(os.path.isdir(os.path.dirname(result['resolved_path'])))

    def test_validate_output_path_existing_file(self):
        output_path = self.write_temp_file("existing.pdf", b"old")
        result = Validators.validate_output_path(output_path)

        self.assertTrue(result['valid'])
        self.assertTrue(result['file_exists'])


if __name__ == '__main__':
    unittest.main()
