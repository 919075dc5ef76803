"""
Approval letter rendering.

Lays out the letter in points on any drawing surface from
``approval_compiler.document.canvas`` so that the primary merge path and the
fallback assembler produce the same letter.
"""

from typing import Callable, List, Optional

from ..core.config import Config
from ..core.models import FormData, LogoImage
from ..utils.logging_config import get_letter_logger


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """
    Greedy word wrap against a measured width.

    Explicit line breaks are kept, blank lines survive as empty strings, and
    words wider than ``max_width`` are broken between characters.

    Args:
        text: Text to wrap
        max_width: Available width in the same unit ``measure`` returns
        measure: Returns the rendered width of a string

    Returns:
        List of lines; empty for empty text
    """
    if not text:
        return []

    wrapped: List[str] = []
    for raw_line in text.splitlines():
        words = raw_line.split()
        if not words:
            wrapped.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if measure(candidate) <= max_width:
                current = candidate
                continue
            if current:
                wrapped.append(current)
                current = ""
            if measure(word) <= max_width:
                current = word
                continue
            chunk = ""
            for char in word:
                if chunk and measure(chunk + char) > max_width:
                    wrapped.append(chunk)
                    chunk = char
                else:
                    chunk += char
            current = chunk
        if current:
            wrapped.append(current)
    return wrapped


def format_currency(amount: float) -> str:
    if float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


class LetterRenderer:
    """Renders the approval letter pages."""

    def __init__(self):
        self.logger = get_letter_logger()
        self.page_width, self.page_height = Config.LETTER_PAGE_SIZE
        self.margin = Config.LETTER_MARGIN
        self.content_width = self.page_width - 2 * self.margin

    def render(self, canvas, form_data: FormData, logo: Optional[LogoImage] = None,
               has_attachments: bool = False) -> int:
        """
        Draw the letter onto new pages of ``canvas``.

        Args:
            canvas: Drawing surface (FitzCanvas or FpdfCanvas)
            form_data: Letter content
            logo: Cached organization logo, if one was loaded
            has_attachments: Add the footnote pointing at the attachment pages

        Returns:
            Number of pages the letter occupies
        """
        first_page = canvas.page_count
        self.canvas = canvas
        canvas.new_page(self.page_width, self.page_height)

        self.y = self._draw_header(logo)
        self._draw_date(form_data)
        self._draw_property_block(form_data)
        self._draw_subject(form_data)
        self._draw_greeting(form_data)

        self._draw_paragraph(form_data.review_comments, Config.PARAGRAPH_GAP)
        self._draw_paragraph(form_data.approval_reason, Config.PARAGRAPH_GAP)
        self._draw_paragraph(Config.CLOSING_PARAGRAPH, Config.PARAGRAPH_GAP)
        self._draw_paragraph(self._deposit_text(form_data), Config.PARAGRAPH_GAP)

        self._draw_signature(form_data, has_attachments)

        page_count = canvas.page_count - first_page
        self.logger.debug("  > Letter rendered on %d page(s).", page_count)
        return page_count

    def _draw_header(self, logo: Optional[LogoImage]) -> float:
        canvas = self.canvas
        bar_height = Config.HEADER_BAR_HEIGHT
        canvas.fill_rect(0, 0, self.page_width, bar_height, Config.HEADER_FILL_COLOR)

        text_x = self.margin
        if logo is not None:
            try:
                max_w, max_h = Config.LOGO_MAX_SIZE
                aspect = logo.width / logo.height
                logo_w = max_w
                logo_h = logo_w / aspect
                if logo_h > max_h:
                    logo_h = max_h
                    logo_w = logo_h * aspect
                canvas.image(self.margin, (bar_height - logo_h) / 2, logo_w, logo_h, logo.data)
                text_x = self.margin + max_w + Config.LOGO_TEXT_GAP
            except Exception as e:
                self.logger.warning("  > ⚠️ Could not draw logo, continuing without it: %s", e)

        title_y = self.margin / 2 + Config.TITLE_FONT_SIZE
        canvas.text(text_x, title_y, Config.ORGANIZATION_NAME, 'bold',
                    Config.TITLE_FONT_SIZE, Config.BRAND_COLOR)
        canvas.text(text_x, title_y + 20, Config.DEPARTMENT_NAME, 'normal',
                    Config.SUBTITLE_FONT_SIZE, Config.SUBTLE_TEXT_COLOR)

        divider_y = bar_height + 42
        canvas.line(self.margin, divider_y, self.page_width - self.margin, divider_y,
                    Config.DIVIDER_COLOR, 0.5)
        return divider_y + 34

    def _draw_date(self, form_data: FormData) -> None:
        date_text = form_data.effective_date().strftime('%m/%d/%Y')
        self.canvas.text(self.margin, self.y, f"Date: {date_text}", 'normal',
                         Config.DATE_FONT_SIZE, Config.DATE_TEXT_COLOR)
        self.y += 28

    def _draw_property_block(self, form_data: FormData) -> None:
        lines = [form_data.address, f"Lot: {form_data.lot}"]
        if form_data.owner_name:
            lines.append(f"Owner: {form_data.owner_name}")
        if form_data.contractor_name:
            lines.append(f"Contractor: {form_data.contractor_name}")
        for line in lines:
            self._ensure_space(Config.BODY_LINE_HEIGHT)
            self.canvas.text(self.margin, self.y, line, 'normal', Config.BODY_FONT_SIZE, Config.BLACK)
            self.y += 20
        self.y += 22

    def _draw_subject(self, form_data: FormData) -> None:
        subject = f"RE: Architectural Review - {form_data.project_type}"
        lines = wrap_text(subject, self.content_width,
                          lambda s: self.canvas.text_width(s, 'bold', Config.SUBTITLE_FONT_SIZE))
        for line in lines:
            self._ensure_space(Config.BODY_LINE_HEIGHT)
            self.canvas.text(self.margin, self.y, line, 'bold', Config.SUBTITLE_FONT_SIZE, Config.BRAND_COLOR)
            self.y += Config.BODY_LINE_HEIGHT
        self.y += 17

    def _draw_greeting(self, form_data: FormData) -> None:
        greeting = f"Dear {form_data.owner_name}," if form_data.owner_name else Config.DEFAULT_GREETING
        self._ensure_space(Config.BODY_LINE_HEIGHT)
        self.canvas.text(self.margin, self.y, greeting, 'normal', Config.BODY_FONT_SIZE, Config.BLACK)
        self.y += 34

    def _draw_paragraph(self, text: str, gap: float) -> None:
        lines = wrap_text(text, self.content_width,
                          lambda s: self.canvas.text_width(s, 'normal', Config.BODY_FONT_SIZE))
        for line in lines:
            self._ensure_space(Config.BODY_LINE_HEIGHT)
            if line:
                self.canvas.text(self.margin, self.y, line, 'normal', Config.BODY_FONT_SIZE,
                                 Config.BODY_TEXT_COLOR)
            self.y += Config.BODY_LINE_HEIGHT
        self.y += gap

    def _draw_signature(self, form_data: FormData, has_attachments: bool) -> None:
        canvas = self.canvas
        # Sign-off, approver and footnote move to a new page together
        last_line = 56 + (28 if form_data.approved_by else 0) + (28 if has_attachments else 0)
        self._ensure_space(last_line + Config.BODY_LINE_HEIGHT)
        canvas.text(self.margin, self.y, "Sincerely,", 'normal', Config.BODY_FONT_SIZE, Config.BODY_TEXT_COLOR)
        self.y += 34
        canvas.text(self.margin, self.y, Config.ORGANIZATION_NAME, 'bold', Config.BODY_FONT_SIZE,
                    Config.BRAND_COLOR)
        self.y += 22
        canvas.text(self.margin, self.y, Config.DEPARTMENT_NAME, 'normal', Config.BODY_FONT_SIZE,
                    Config.SUBTLE_TEXT_COLOR)
        self.y += 28
        if form_data.approved_by:
            canvas.text(self.margin, self.y, f"Approved by: {form_data.approved_by}", 'normal',
                        Config.BODY_FONT_SIZE, Config.BODY_TEXT_COLOR)
            self.y += 28
        if has_attachments:
            canvas.text(self.margin, self.y, Config.ATTACHMENTS_NOTE, 'italic',
                        Config.FOOTNOTE_FONT_SIZE, Config.FOOTNOTE_TEXT_COLOR)

    def _deposit_text(self, form_data: FormData) -> str:
        amount = form_data.deposit_amount
        if amount is None:
            amount = Config.get_deposit_amount(form_data.project_type)
        return Config.DEPOSIT_TEMPLATE.format(amount=format_currency(amount),
                                              organization=Config.ORGANIZATION_NAME)

    def _ensure_space(self, needed: float) -> None:
        """Start a continuation page when ``needed`` would cross the bottom margin."""
        if self.y + needed > self.page_height - self.margin:
            self.canvas.new_page(self.page_width, self.page_height)
            self.y = self.margin + Config.BODY_LINE_HEIGHT
