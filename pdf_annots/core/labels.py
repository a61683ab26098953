"""Display labels for pages, following the document's /PageLabels tree."""
from typing import Dict, Iterable, NamedTuple, Optional

_ROMAN = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)
MAX_ROMAN = 3999


class LabelRange(NamedTuple):
    start: int                   # first page index the range applies to
    style: Optional[str] = None  # D, r, R, a, A or None for prefix only
    prefix: str = ""
    first: int = 1               # /St, numeric value of the first page


def to_roman(number: int) -> str:
    if number > MAX_ROMAN or number < 1:
        return str(number)
    out = []
    for value, digits in _ROMAN:
        while number >= value:
            out.append(digits)
            number -= value
    return "".join(out)


def to_letters(number: int) -> str:
    """1 -> a, 26 -> z, 27 -> aa, 52 -> zz, 53 -> aaa."""
    if number < 1:
        return str(number)
    rem = number % 26 or 26
    return chr(ord("a") + rem - 1) * ((number - 1) // 26 + 1)


def format_label(number: int, style: Optional[str], prefix: str = "") -> str:
    if style is None:
        return prefix
    if style == "r":
        body = to_roman(number).lower()
    elif style == "R":
        body = to_roman(number)
    elif style == "a":
        body = to_letters(number)
    elif style == "A":
        body = to_letters(number).upper()
    else:
        body = str(number)
    return prefix + body


def page_label_map(num_pages: int, ranges: Iterable[LabelRange]) -> Optional[Dict[int, str]]:
    """Label for every page index, or None when the document defines none."""
    by_start = {r.start: r for r in ranges if r.start >= 0}
    if not by_start:
        return None
    labels: Dict[int, str] = {}
    current: Optional[LabelRange] = None
    counter = 0
    for index in range(num_pages):
        if index in by_start:
            current = by_start[index]
            counter = 0
        if current is not None:
            labels[index] = format_label(current.first + counter, current.style, current.prefix)
        counter += 1
    return labels


def label_for(labels: Optional[Dict[int, str]], page_index: int) -> str:
    if labels and page_index in labels:
        return labels[page_index]
    return str(page_index + 1)
