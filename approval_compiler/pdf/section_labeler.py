"""
Section divider pages.
"""

from ..core.config import Config
from ..utils.logging_config import get_module_logger


class SectionLabeler:
    """Appends a divider page carrying a centred section title."""

    def __init__(self):
        self.logger = get_module_logger(__name__)
        self.page_width, self.page_height = Config.LETTER_PAGE_SIZE
        self.max_text_width = self.page_width - 2 * Config.LETTER_MARGIN

    def render(self, canvas, title: str) -> int:
        """
        Append one standard-size page with ``title`` centred on it.

        Titles wider than the content width are set in a smaller size so the
        whole title stays on the page.

        Returns:
            Number of pages added (always 1)
        """
        size = float(Config.SECTION_LABEL_FONT_SIZE)
        width = canvas.text_width(title, 'bold', size)
        if width > self.max_text_width:
            size = size * self.max_text_width / width
            width = canvas.text_width(title, 'bold', size)
            self.logger.debug("    > Section title '%s' reduced to %.1fpt to fit.", title, size)

        canvas.new_page(self.page_width, self.page_height)
        x = (self.page_width - width) / 2
        # Baseline sits about a third of the font size below the visual centre
        y = self.page_height / 2 + size / 3
        canvas.text(x, y, title, 'bold', size, Config.BRAND_COLOR)
        return 1
