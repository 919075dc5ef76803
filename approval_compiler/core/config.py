"""
Configuration constants for the approval letter compiler.
"""

import os


class Config:
    """Static configuration shared by the letter renderer and both assemblers."""

    __version__ = "1.0.0"

    # Organization branding
    ORGANIZATION_NAME = "Sanctuary Homeowners Association"
    DEPARTMENT_NAME = "Architectural Review Committee"
    FILENAME_PREFIX = "Sanctuary Architectural Approval Letter"

    # Page sizes in points (1/72 inch)
    LETTER_PAGE_SIZE = (612.0, 792.0)
    IMAGE_PAGE_PADDING = 40.0
    IMAGE_PAGE_MAX_SIZE = (792.0, 1224.0)
    IMAGE_PAGE_MIN_SIZE = LETTER_PAGE_SIZE

    # Fallback renderer works in millimetres
    MM_PER_POINT = 25.4 / 72.0
    FALLBACK_LETTER_PAGE_SIZE_MM = (215.9, 279.4)
    FALLBACK_IMAGE_PADDING_MM = 20.0
    FALLBACK_IMAGE_MAX_SIZE_MM = (279.4, 431.8)
    FALLBACK_IMAGE_MIN_SIZE_MM = FALLBACK_LETTER_PAGE_SIZE_MM

    # Letter layout (points)
    LETTER_MARGIN = 72.0
    HEADER_BAR_HEIGHT = 99.0
    LOGO_MAX_SIZE = (170.0, 85.0)
    LOGO_TEXT_GAP = 28.0
    BODY_LINE_HEIGHT = 17.0
    PARAGRAPH_GAP = 28.0
    BODY_FONT_SIZE = 11
    TITLE_FONT_SIZE = 20
    SUBTITLE_FONT_SIZE = 12
    DATE_FONT_SIZE = 10
    FOOTNOTE_FONT_SIZE = 9

    # Colours (RGB 0-255)
    BRAND_COLOR = (44, 85, 48)
    HEADER_FILL_COLOR = (245, 245, 245)
    DIVIDER_COLOR = (200, 200, 200)
    SUBTLE_TEXT_COLOR = (70, 70, 70)
    DATE_TEXT_COLOR = (100, 100, 100)
    BODY_TEXT_COLOR = (30, 30, 30)
    FOOTNOTE_TEXT_COLOR = (120, 120, 120)
    BLACK = (0, 0, 0)

    # Fixed letter text
    DEFAULT_GREETING = "Dear Property Owner,"
    CLOSING_PARAGRAPH = "We look forward to another beautiful addition to the neighborhood."
    ATTACHMENTS_NOTE = "Attachments included on following pages."
    DEPOSIT_TEMPLATE = (
        "A refundable construction deposit of {amount} is required before work begins. "
        "Please make checks payable to {organization} and deliver them to the management office. "
        "The deposit will be returned after the final inspection confirms the project matches "
        "the approved plans."
    )

    # Deposit tiers
    MAJOR_PROJECT_TYPES = ("new home", "new construction", "addition")
    MAJOR_PROJECT_DEPOSIT = 5000
    MINOR_PROJECT_DEPOSIT = 1000

    # Section labels
    SECTION_LABEL_FONT_SIZE = 28
    LETTER_SECTION_TITLE = "Approval Letter"
    GROUP_SITE_CONDITIONS = "site_conditions"
    GROUP_SUBMITTED_FILES = "submitted_files"
    GROUP_ORDER = (GROUP_SITE_CONDITIONS, GROUP_SUBMITTED_FILES)
    GROUP_TITLES = {
        GROUP_SITE_CONDITIONS: "Current Site Conditions",
        GROUP_SUBMITTED_FILES: "Submitted Plans",
    }

    # Reference document
    REFERENCE_DOCUMENT_NAME = "Sanctuary Rules and Regulations"
    REFERENCE_DOCUMENT_EMBEDDED = os.environ.get("APPROVAL_REFERENCE_PDF_B64")
    REFERENCE_ASSETS_DIR = os.environ.get("APPROVAL_ASSETS_DIR", "assets")
    REFERENCE_BASE_URL = os.environ.get("APPROVAL_BASE_URL")
    REFERENCE_FETCH_TIMEOUT = 10.0

    # Logo
    LOGO_PATH = os.environ.get("APPROVAL_LOGO_PATH", os.path.join("assets", "logo", "sanctuary logo.jpg"))
    DEFAULT_LOGO_SIZE = (200, 100)

    # Attachment typing
    PDF_MIME_TYPES = ("application/pdf", "application/x-pdf", "application/acrobat")
    IMAGE_MIME_TYPES = {
        "image/jpeg": "jpeg",
        "image/jpg": "jpeg",
        "image/pjpeg": "jpeg",
        "image/png": "png",
        "image/x-png": "png",
    }
    GENERIC_MIME_TYPES = ("", "application/octet-stream", "binary/octet-stream", "application/unknown")
    SUPPORTED_PDF_EXTENSIONS = (".pdf",)
    IMAGE_EXTENSIONS = {".jpg": "jpeg", ".jpeg": "jpeg", ".jpe": "jpeg", ".png": "png"}
    MAX_ATTACHMENT_SIZE_MB = 50.0

    # Form fields the letter cannot be written without
    REQUIRED_FORM_FIELDS = ("address", "lot", "project_type", "review_comments", "approval_reason")

    @classmethod
    def get_group_title(cls, group_key: str) -> str:
        """Return the section label title for an attachment group key."""
        return cls.GROUP_TITLES[group_key]

    @classmethod
    def get_deposit_amount(cls, project_type: str) -> int:
        """Return the deposit tier for a project type."""
        if (project_type or "").strip().lower() in cls.MAJOR_PROJECT_TYPES:
            return cls.MAJOR_PROJECT_DEPOSIT
        return cls.MINOR_PROJECT_DEPOSIT

    @classmethod
    def points_to_mm(cls, value: float) -> float:
        return value * cls.MM_PER_POINT
