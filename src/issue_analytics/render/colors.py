"""
Named widget colors and the glyphs that stand in for them in text output.
"""

from ..errors import RenderError

COLORS = {
    "red": "\U0001F534",
    "yellow": "\U0001F49B",
    "green": "✅",
    "blue": "\U0001F537",
    "black": "⬛️",
}


def render_color(color: str) -> str:
    """Returns the glyph for a named color."""
    try:
        return COLORS[color]
    except KeyError:
        raise RenderError(f"invalid color: {color}") from None
