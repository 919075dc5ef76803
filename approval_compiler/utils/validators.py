"""
Validation utilities for form data, attachments and PDF buffers.
"""

import os
from typing import Any, Dict

import fitz  # PyMuPDF

from ..core.config import Config
from ..core.models import AttachmentFile, FormData


class Validators:
    """Utility class for validating generation inputs."""

    @staticmethod
    def validate_form_data(form_data: FormData) -> Dict[str, Any]:
        """
        Check that the fields the letter depends on are filled in.

        Args:
            form_data: Letter content

        Returns:
            Dict with 'valid' and the list of 'missing_fields'
        """
        missing = [name for name in Config.REQUIRED_FORM_FIELDS
                   if not str(getattr(form_data, name) or "").strip()]
        return {
            'valid': not missing,
            'missing_fields': missing,
        }

    @staticmethod
    def validate_attachment(attachment: AttachmentFile) -> Dict[str, Any]:
        """
        Validate an attachment buffer before classification.

        Args:
            attachment: The attachment to check

        Returns:
            Dict with validation results including size in MB
        """
        result = {
            'valid': False,
            'error_message': None,
            'file_size_mb': attachment.size / (1024 * 1024),
        }

        if not attachment.data:
            result['error_message'] = f"File is empty: {attachment.name}"
            return result

        if result['file_size_mb'] > Config.MAX_ATTACHMENT_SIZE_MB:
            result['error_message'] = (f"File exceeds {Config.MAX_ATTACHMENT_SIZE_MB:.0f} MB limit: "
                                       f"{attachment.name} ({result['file_size_mb']:.1f} MB)")
            return result

        result['valid'] = True
        return result

    @staticmethod
    def validate_pdf_bytes(data: bytes) -> Dict[str, Any]:
        """
        Check that a buffer opens as a PDF with at least one page.

        Args:
            data: Candidate PDF bytes

        Returns:
            Dict with validation results including page count
        """
        result = {
            'valid': False,
            'page_count': 0,
            'error_message': None,
        }

        if not data:
            result['error_message'] = "PDF buffer is empty"
            return result

        try:
            with fitz.open(stream=data, filetype="pdf") as pdf_doc:
                if pdf_doc.needs_pass:
                    result['error_message'] = "PDF is password protected"
                    return result
                result['page_count'] = pdf_doc.page_count
        except Exception as e:
            result['error_message'] = f"Invalid PDF data: {e}"
            return result

        if result['page_count'] == 0:
            result['error_message'] = "PDF has no pages"
            return result

        result['valid'] = True
        return result

    @staticmethod
    def validate_output_path(output_path: str) -> Dict[str, Any]:
        """
        Validate an output file path.

        Args:
            output_path: Desired output file path

        Returns:
            Dict with validation results
        """
        result = {
            'valid': False,
            'resolved_path': None,
            'error_message': None,
            'file_exists': False
        }

        resolved_path = os.path.abspath(output_path)
        directory = os.path.dirname(resolved_path)

        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            result['error_message'] = f"Cannot create output directory: {e}"
            return result

        if not os.access(directory, os.W_OK):
            result['error_message'] = f"Cannot write to output directory: {directory}"
            return result

        result['file_exists'] = os.path.exists(resolved_path)
        result['valid'] = True
        result['resolved_path'] = resolved_path
        return result
