"""
Drawing surfaces shared by the letter renderer and the section labeler.

Both surfaces accept coordinates in points with a top-left origin and text
positioned on its baseline. ``FitzCanvas`` draws into a PyMuPDF document;
``FpdfCanvas`` draws into an fpdf2 document whose user unit is millimetres
and converts on the way in.
"""

import io
from typing import Tuple

import fitz  # PyMuPDF
from fpdf import FPDF

from ..core.config import Config

Color = Tuple[int, int, int]

_FITZ_FONTS = {
    'normal': 'helv',
    'bold': 'hebo',
    'italic': 'heit',
}

_FPDF_STYLES = {
    'normal': '',
    'bold': 'B',
    'italic': 'I',
}


def _fitz_color(color: Color) -> Tuple[float, float, float]:
    return tuple(channel / 255.0 for channel in color)


class FitzCanvas:
    """Draws onto pages appended to a PyMuPDF document."""

    def __init__(self, doc: fitz.Document):
        self.doc = doc
        self.page = None

    @property
    def page_count(self) -> int:
        return self.doc.page_count

    def new_page(self, width: float, height: float) -> None:
        self.page = self.doc.new_page(width=width, height=height)

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        self.page.draw_rect(fitz.Rect(x, y, x + width, y + height), color=None,
                            fill=_fitz_color(color), width=0)

    def line(self, x0: float, y0: float, x1: float, y1: float, color: Color, width: float = 0.5) -> None:
        self.page.draw_line(fitz.Point(x0, y0), fitz.Point(x1, y1), color=_fitz_color(color), width=width)

    def text(self, x: float, y: float, text: str, style: str = 'normal', size: float = 11,
             color: Color = Config.BLACK) -> None:
        self.page.insert_text(fitz.Point(x, y), text, fontname=_FITZ_FONTS[style],
                              fontsize=size, color=_fitz_color(color))

    def text_width(self, text: str, style: str = 'normal', size: float = 11) -> float:
        return fitz.get_text_length(text, fontname=_FITZ_FONTS[style], fontsize=size)

    def image(self, x: float, y: float, width: float, height: float, data: bytes) -> None:
        self.page.insert_image(fitz.Rect(x, y, x + width, y + height), stream=data, keep_proportion=True)


class FpdfCanvas:
    """Draws onto pages appended to an fpdf2 document measured in millimetres."""

    def __init__(self, pdf: FPDF):
        self.pdf = pdf
        self.pdf.set_auto_page_break(False)

    @staticmethod
    def _mm(value: float) -> float:
        return Config.points_to_mm(value)

    @staticmethod
    def _latin1(text: str) -> str:
        # Core fonts only cover Latin-1
        return text.encode('latin-1', 'replace').decode('latin-1')

    @property
    def page_count(self) -> int:
        return self.pdf.page_no()

    def new_page(self, width: float, height: float) -> None:
        self.pdf.add_page(format=(self._mm(width), self._mm(height)))

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        self.pdf.set_fill_color(*color)
        self.pdf.rect(self._mm(x), self._mm(y), self._mm(width), self._mm(height), style='F')

    def line(self, x0: float, y0: float, x1: float, y1: float, color: Color, width: float = 0.5) -> None:
        self.pdf.set_draw_color(*color)
        self.pdf.set_line_width(self._mm(width))
        self.pdf.line(self._mm(x0), self._mm(y0), self._mm(x1), self._mm(y1))

    def text(self, x: float, y: float, text: str, style: str = 'normal', size: float = 11,
             color: Color = Config.BLACK) -> None:
        self.pdf.set_font('helvetica', style=_FPDF_STYLES[style], size=size)
        self.pdf.set_text_color(*color)
        self.pdf.text(self._mm(x), self._mm(y), self._latin1(text))

    def text_width(self, text: str, style: str = 'normal', size: float = 11) -> float:
        self.pdf.set_font('helvetica', style=_FPDF_STYLES[style], size=size)
        return self.pdf.get_string_width(self._latin1(text)) / Config.MM_PER_POINT

    def image(self, x: float, y: float, width: float, height: float, data: bytes) -> None:
        self.pdf.image(io.BytesIO(data), x=self._mm(x), y=self._mm(y), w=self._mm(width), h=self._mm(height))
