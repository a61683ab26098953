from typing import Dict, Iterable, List, NamedTuple
import logging

from pdf_annots.core.transform import from_media_top_down, to_media_top_down
from pdf_annots.core.types import PageGeometry, PageText, Rect, TextRun

logger = logging.getLogger(__name__)

LINE_TOLERANCE = 3.0
WORD_GAP = 3.0  # same as pdfplumber's default x_tolerance


class _Glyph(NamedTuple):
    box: Rect  # native page space, y up
    text: str


def _native_glyphs(chars: Iterable[Dict], geometry: PageGeometry) -> List[_Glyph]:
    """pdfplumber chars with their boxes mapped back into native page space.

    pdfplumber reports chars in the upright page, so on a page with /Rotate
    its `top`/`x0` order is not the order the text reads in.
    """
    glyphs: List[_Glyph] = []
    for ch in chars:
        text = ch.get("text", "")
        if not text:
            continue
        box = from_media_top_down((ch["x0"], ch["top"], ch["x1"], ch["bottom"]), geometry)
        glyphs.append(_Glyph(box, text))
    return glyphs


def _group_lines(glyphs: List[_Glyph], line_tol: float = LINE_TOLERANCE) -> List[List[_Glyph]]:
    """Group glyphs into lines by native baseline, top line first, left to right."""
    ordered = sorted(glyphs, key=lambda g: (-g.box[1], g.box[0]))
    lines: List[List[_Glyph]] = []
    for g in ordered:
        if lines and abs(g.box[1] - lines[-1][0].box[1]) <= line_tol:
            lines[-1].append(g)
        else:
            lines.append([g])
    for line in lines:
        line.sort(key=lambda g: g.box[0])
    return lines


def _split_words(line: List[_Glyph], gap: float = WORD_GAP) -> List[List[_Glyph]]:
    """Split a line at whitespace glyphs and at horizontal gaps wider than `gap`."""
    words: List[List[_Glyph]] = []
    current: List[_Glyph] = []
    for g in line:
        if g.text.isspace():
            if current:
                words.append(current)
                current = []
            continue
        if current and g.box[0] - current[-1].box[2] > gap:
            words.append(current)
            current = []
        current.append(g)
    if current:
        words.append(current)
    return words


def page_text(pl_page, geometry: PageGeometry) -> PageText:
    """Flatten a page into text plus one run per glyph.

    Words on a line are joined by a space and lines by a newline; every
    glyph run records its offset into that string and its box in native
    page space.
    """
    parts: List[str] = []
    runs: List[TextRun] = []
    length = 0
    for line_no, line in enumerate(_group_lines(_native_glyphs(pl_page.chars, geometry))):
        if line_no:
            parts.append("\n")
            length += 1
        for word_no, word in enumerate(_split_words(line)):
            if word_no:
                parts.append(" ")
                length += 1
            for g in word:
                runs.append(TextRun(bbox=g.box, offset=length, text=g.text))
                parts.append(g.text)
                length += len(g.text)
    logger.debug(f"Page {pl_page.page_number}: {len(runs)} text runs")
    return PageText("".join(parts), tuple(runs))


def region_text(pl_page, geometry: PageGeometry, rect: Rect, dpi: float = 72.0) -> str:
    """Text of the glyphs whose centre lies in a y-down display region.

    `rect` is given in pixels at `dpi` relative to the visible page area.
    Lines are joined by single spaces.
    """
    factor = 72.0 / dpi
    points = tuple(v * factor for v in rect)
    x0, top, x1, bottom = to_media_top_down(points, geometry)

    def _inside(ch) -> bool:
        cx = (ch["x0"] + ch["x1"]) / 2
        cy = (ch["top"] + ch["bottom"]) / 2
        return x0 <= cx <= x1 and top <= cy <= bottom

    glyphs = _native_glyphs((ch for ch in pl_page.chars if _inside(ch)), geometry)
    return " ".join(
        " ".join("".join(g.text for g in word) for word in _split_words(line))
        for line in _group_lines(glyphs)
    )


def render(pl_page, dpi: int):
    """Rasterise the page to a PIL image at `dpi`."""
    return pl_page.to_image(resolution=dpi).original
