import colorsys
from typing import Optional, Sequence

# Upper hue bound (degrees, exclusive) -> category, for saturated colors.
_HUES = (
    (15, "Red"),
    (45, "Orange"),
    (65, "Yellow"),
    (170, "Green"),
    (190, "Cyan"),
    (263, "Blue"),
    (280, "Purple"),
    (335, "Magenta"),
    (360, "Red"),
)


def _rgb(color: Optional[Sequence[float]]):
    if not color or len(color) < 3:
        return None
    try:
        return tuple(min(max(float(c), 0.0), 1.0) for c in color[:3])
    except (TypeError, ValueError):
        return None


def color_hex(color: Optional[Sequence[float]]) -> Optional[str]:
    rgb = _rgb(color)
    if rgb is None:
        return None
    return "#" + "".join(f"{int(c * 255):02x}" for c in rgb)


def color_category(color: Optional[Sequence[float]]) -> Optional[str]:
    rgb = _rgb(color)
    if rgb is None:
        return None
    h, l, s = colorsys.rgb_to_hls(*rgb)
    if l < 0.12:
        return "Black"
    if l > 0.98:
        return "White"
    if s < 0.2:
        return "Gray"
    hue = h * 360
    for bound, name in _HUES:
        if hue < bound:
            return name
    return "Red"
