#!/usr/bin/env python3
"""
Approval Letter Compiler - Main CLI entry point.

Generates an architectural approval letter PDF with its attachments.
"""

import argparse
import asyncio
import json
import mimetypes
import os
import sys
from pathlib import Path

# Add the package to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from approval_compiler import (ApprovalLetterAssembler, AttachmentFile, Config,
                               FormData, LogoProvider, ReferenceDocumentLoader,
                               make_groups)
from approval_compiler.utils.logging_config import get_logger, setup_logging
from approval_compiler.utils.validators import Validators


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Approval Letter Compiler - Generate approval letters with merged attachments',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --form review.json --output-dir out/
  %(prog)s --form review.json --site-photo lot17.jpg --submitted plans.pdf --output-dir out/
  %(prog)s --form review.json --reference-url https://example.org --verbose

Form file:
  JSON object with address, lot, projectType, reviewComments, approvalReason
  and optionally ownerName, contractorName, approvedBy, approvalDate
  (MM/DD/YYYY) and depositAmount.
        """)

    parser.add_argument('--form', required=True, help='JSON file with the letter fields')
    parser.add_argument('--site-photo', action='append', default=[], help='Current site conditions file (repeatable)')
    parser.add_argument('--submitted', action='append', default=[], help='Submitted plans file (repeatable)')
    parser.add_argument('--output-dir', default='.', help='Directory for the generated PDF')
    parser.add_argument('--logo', default=Config.LOGO_PATH, help='Organization logo image')
    parser.add_argument('--reference-assets', default=Config.REFERENCE_ASSETS_DIR,
                        help='Directory containing the reference document PDF')
    parser.add_argument('--reference-url', default=Config.REFERENCE_BASE_URL,
                        help='Base URL serving assets/<reference>.pdf')
    parser.add_argument('--verbose', '-v', '--debug', action='store_true', help='Enable verbose logging (DEBUG level)')
    parser.add_argument('--log-file', help='Log to file in addition to console')
    parser.add_argument('--version', action='version', version=f'Approval Letter Compiler v{Config.__version__}')

    args = parser.parse_args()

    setup_logging(log_file=args.log_file, verbose=args.verbose)

    logger = get_logger()
    logger.info("=" * 60)
    logger.info("Approval Letter Compiler v%s - Starting generation", Config.__version__)
    logger.info("=" * 60)

    return handle_generation(args, logger)


def read_attachment(path: str) -> AttachmentFile:
    """Read a file fully into memory with its guessed MIME type."""
    file_path = Path(path)
    mime_type, _ = mimetypes.guess_type(file_path.name)
    return AttachmentFile(name=file_path.name, declared_mime_type=mime_type or "",
                          data=file_path.read_bytes())


def handle_generation(args, logger) -> int:
    """Load inputs, run the assembler and write the result."""
    form_path = Path(args.form)
    if not form_path.exists():
        logger.error("Form file not found: %s", args.form)
        return 1

    try:
        form_data = FormData.from_dict(json.loads(form_path.read_text(encoding='utf-8')))
    except (ValueError, TypeError) as e:
        logger.error("Invalid form file %s: %s", args.form, e)
        return 1

    try:
        site_files = [read_attachment(path) for path in args.site_photo]
        submitted_files = [read_attachment(path) for path in args.submitted]
    except OSError as e:
        logger.error("Cannot read attachment: %s", e)
        return 1

    assembler = ApprovalLetterAssembler(
        logo_provider=LogoProvider(path=args.logo),
        reference_loader=ReferenceDocumentLoader(assets_dir=args.reference_assets,
                                                 base_url=args.reference_url),
    )

    try:
        result = asyncio.run(assembler.generate(form_data, make_groups(site_files, submitted_files)))
    except KeyboardInterrupt:
        logger.warning("\n⚠️ Generation interrupted by user.")
        return 1

    if not result.success:
        logger.error("=" * 60)
        logger.error("❌ Approval letter generation failed!")
        logger.error("=" * 60)
        return 1

    filename = result.filename
    for separator in filter(None, (os.sep, os.altsep)):
        filename = filename.replace(separator, "-")
    if filename != result.filename:
        logger.warning("⚠️ Path separators in the suggested filename replaced: %s", filename)

    output_check = Validators.validate_output_path(os.path.join(args.output_dir, filename))
    if not output_check['valid']:
        logger.error("❌ %s", output_check['error_message'])
        return 1
    if output_check['file_exists']:
        logger.warning("⚠️ Output file exists and will be overwritten.")

    Path(output_check['resolved_path']).write_bytes(result.document_bytes)

    logger.info("=" * 60)
    logger.info("🎉 Approval letter generated successfully!")
    logger.info("📄 Output: %s", output_check['resolved_path'])
    for warning in result.warnings:
        logger.warning("⚠️ %s", warning)
    logger.info("=" * 60)
    return 0


if __name__ == '__main__':
    sys.exit(main())
