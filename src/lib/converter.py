"""
Character style converter

Maps text through a style's glyph tables. Characters without a mapping
(whitespace, punctuation, unmapped symbols) pass through unchanged.
"""

from ..models.renderables import StyleDef


def convert(text: str, style: StyleDef) -> str:
    """
    Map every character of ``text`` through ``style``.

    Example:
        convert("Hi 5!", mathbold) → "𝐇𝐢 𝟓!"
    """
    return "".join(style.char_map(char) or char for char in text)


def convert_with_separator(text: str, style: StyleDef, separator: str, count: int = 1) -> str:
    """
    Convert ``text`` and insert ``separator`` (repeated ``count`` times)
    between consecutive converted characters.

    A count of zero or an empty separator is a plain conversion.

    Example:
        convert_with_separator("AB", mathbold, "·") → "𝐀·𝐁"
    """
    if count <= 0 or not separator:
        return convert(text, style)
    return (separator * count).join(style.char_map(char) or char for char in text)


def convert_with_spacing(text: str, style: StyleDef, spacing: int) -> str:
    """
    Convert ``text`` with ``spacing`` spaces between converted characters.

    Example:
        convert_with_spacing("AB", mathbold, 2) → "𝐀  𝐁"
    """
    if spacing <= 0:
        return convert(text, style)
    return convert_with_separator(text, style, " ", spacing)
