"""
Suggested output filenames.
"""

import re
from datetime import date
from typing import Optional

from ..core.config import Config
from ..core.models import FormData

_DISALLOWED = re.compile(r'[^a-zA-Z0-9\s]')
_WHITESPACE = re.compile(r'\s+')


def sanitize_filename_part(text: str) -> str:
    """Keep ASCII letters, digits and whitespace; collapse whitespace runs; trim."""
    cleaned = _DISALLOWED.sub('', text or '')
    return _WHITESPACE.sub(' ', cleaned).strip()


def build_filename(form_data: FormData, on_date: Optional[date] = None) -> str:
    """
    Build the download filename for a generated letter.

    Args:
        form_data: Letter content supplying lot, address and project type
        on_date: Date stamp; defaults to the approval date, then today

    Returns:
        "<prefix> - <lot> - <address> - <project type> - MM_DD_YYYY.pdf"
    """
    stamp = (on_date or form_data.effective_date()).strftime('%m_%d_%Y')
    return (f"{Config.FILENAME_PREFIX} - {form_data.lot} - "
            f"{sanitize_filename_part(form_data.address)} - "
            f"{sanitize_filename_part(form_data.project_type)} - {stamp}.pdf")
