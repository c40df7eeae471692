"""
Post-processing transforms for component expansions

blockquote: prefix every line with "> "; blank lines become ">".
row:        collapse whitespace, turn markdown images into <img> tags and
            wrap the result in an aligned HTML paragraph, so that badges
            sit side by side on GitHub.
"""

import re

from .errors import InvalidParameterValue


ALIGNMENTS = ("left", "center", "right")

_image_pattern = re.compile(r"!\[([^\]]*)\]\(([^)\s]+)\)")
_whitespace_pattern = re.compile(r"\s+")


def blockquote_apply(text: str) -> str:
    """
    Example:
        >>> blockquote_apply("a\\n\\nb")
        '> a\\n>\\n> b'
    """
    lines = text.split("\n")
    return "\n".join(f"> {line}" if line.strip() else ">" for line in lines)


def row_apply(text: str, align: str = "center") -> str:
    """
    Wrap inline items in ``<p align="...">``.

    Args:
        text: Fully expanded row content
        align: One of left, center, right

    Raises:
        InvalidParameterValue: On any other alignment

    Example:
        >>> row_apply("![](a.svg)  ![](b.svg)")
        '<p align="center"><img alt="" src="a.svg"> <img alt="" src="b.svg"></p>'
    """
    if align not in ALIGNMENTS:
        raise InvalidParameterValue("align", align, f"expected one of {', '.join(ALIGNMENTS)}")
    collapsed = _whitespace_pattern.sub(" ", text).strip()
    html = _image_pattern.sub(
        lambda m: f'<img alt="{m.group(1)}" src="{m.group(2)}">', collapsed
    )
    return f'<p align="{align}">{html}</p>'
