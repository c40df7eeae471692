"""
Renderer backends

A renderer turns a Primitive into a RenderedAsset. The processor only
relies on the ``Renderer`` protocol; the backends here are the ones the
``mdfx`` command offers:

    shields    shields.io badge images (default)
    plaintext  ASCII stand-ins, useful for terminals and diffs
    svg        self-contained SVG files written next to the output
"""

import hashlib
from typing import Dict, Protocol
from urllib.parse import quote

from ..models.assets import FileAsset, InlineMarkdown, RenderedAsset
from ..models.primitive import Divider, Primitive, Status, Swatch, Tech, TwoTone


SHIELDS_BASE = "https://img.shields.io/badge"

# Colors of the semantic status levels
STATUS_COLORS: Dict[str, str] = {
    "success": "22C55E",
    "warning": "EAB308",
    "error": "EF4444",
    "info": "3B82F6",
}
STATUS_UNKNOWN_COLOR = "6B7280"

STATUS_LABELS: Dict[str, str] = {
    "success": "OK",
    "warning": "WARN",
    "error": "ERR",
    "info": "INFO",
}


class Renderer(Protocol):
    def render(self, primitive: Primitive) -> RenderedAsset: ...


def statusColor_get(level: str) -> str:
    return STATUS_COLORS.get(level, STATUS_UNKNOWN_COLOR)


class ShieldsRenderer:
    """
    Markdown images pointing at shields.io.

    Example:
        Swatch("F41C80", "flat-square") →
        "![](https://img.shields.io/badge/-%20-F41C80?style=flat-square)"
    """

    def block_url(self, color: str, style: str) -> str:
        return f"{SHIELDS_BASE}/-%20-{color}?style={style}"

    def image(self, url: str, alt: str = "") -> str:
        return f"![{alt}]({url})"

    def render(self, primitive: Primitive) -> RenderedAsset:
        if isinstance(primitive, Swatch):
            url = self.block_url(primitive.color, primitive.style)
            if primitive.label:
                url = (
                    f"{SHIELDS_BASE}/-{quote(primitive.label, safe='')}-{primitive.color}"
                    f"?style={primitive.style}"
                )
            return InlineMarkdown(self.image(url))
        if isinstance(primitive, Divider):
            return InlineMarkdown(
                "".join(self.image(self.block_url(c, primitive.style)) for c in primitive.colors)
            )
        if isinstance(primitive, Tech):
            name = quote(primitive.name, safe="")
            url = (
                f"{SHIELDS_BASE}/-%20-{primitive.bg_color}?style={primitive.style}"
                f"&logo={name}&logoColor={primitive.logo_color}"
            )
            return InlineMarkdown(self.image(url, primitive.name))
        if isinstance(primitive, Status):
            url = self.block_url(statusColor_get(primitive.level), primitive.style)
            return InlineMarkdown(self.image(url, primitive.level))
        if isinstance(primitive, TwoTone):
            url = (
                f"{self.block_url(primitive.right, primitive.style)}"
                f"&label=&labelColor={primitive.left}"
            )
            return InlineMarkdown(self.image(url))
        raise TypeError(f"unsupported primitive: {type(primitive).__name__}")


class PlainTextRenderer:
    """
    ASCII representations.

    Example:
        Status("success", ...) → "[OK]"
        Divider(("292A2D", "F41C80"), ...) → "--- #292A2D #F41C80 ---"
    """

    def render(self, primitive: Primitive) -> RenderedAsset:
        if isinstance(primitive, Swatch):
            text = f"[#{primitive.color}]"
            if primitive.label:
                text = f"[#{primitive.color} {primitive.label}]"
            return InlineMarkdown(text)
        if isinstance(primitive, Divider):
            colors = " ".join(f"#{c}" for c in primitive.colors)
            return InlineMarkdown(f"--- {colors} ---")
        if isinstance(primitive, Tech):
            return InlineMarkdown(f"[{primitive.name}]")
        if isinstance(primitive, Status):
            return InlineMarkdown(f"[{STATUS_LABELS.get(primitive.level, '?')}]")
        if isinstance(primitive, TwoTone):
            return InlineMarkdown(f"[#{primitive.left}|#{primitive.right}]")
        raise TypeError(f"unsupported primitive: {type(primitive).__name__}")


class SvgRenderer:
    """
    Self-contained SVG files.

    Files are named after a hash of their bytes, so identical primitives
    always produce identical files and names.

    Args:
        assets_dir: Directory (relative to the output root) for the files
    """

    height = 20
    block_width = 20

    def __init__(self, assets_dir: str = "assets"):
        self.assets_dir = assets_dir.strip("/") or "."

    def rects_make(self, colors, width: int) -> str:
        return "".join(
            f'<rect x="{i * width}" y="0" width="{width}" height="{self.height}" fill="#{c}"/>'
            for i, c in enumerate(colors)
        )

    def svg_make(self, body: str, width: int) -> str:
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" '
            f'height="{self.height}" viewBox="0 0 {width} {self.height}">'
            f"{body}</svg>\n"
        )

    def text_make(self, text: str, x: int, color: str = "FFFFFF") -> str:
        escaped = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        return (
            f'<text x="{x}" y="14" fill="#{color}" font-family="monospace" '
            f'font-size="11">{escaped}</text>'
        )

    def body_make(self, primitive: Primitive):
        if isinstance(primitive, Swatch):
            width = self.block_width if not primitive.label else 8 + 7 * len(primitive.label)
            body = self.rects_make([primitive.color], width)
            if primitive.label:
                body += self.text_make(primitive.label, 4)
            return body, width
        if isinstance(primitive, Divider):
            width = self.block_width * len(primitive.colors)
            return self.rects_make(primitive.colors, self.block_width), width
        if isinstance(primitive, Tech):
            width = 8 + 7 * len(primitive.name)
            body = self.rects_make([primitive.bg_color], width)
            body += self.text_make(primitive.name, 4, primitive.logo_color)
            return body, width
        if isinstance(primitive, Status):
            return self.rects_make([statusColor_get(primitive.level)], self.block_width), self.block_width
        if isinstance(primitive, TwoTone):
            return self.rects_make([primitive.left, primitive.right], self.block_width // 2), self.block_width
        raise TypeError(f"unsupported primitive: {type(primitive).__name__}")

    def render(self, primitive: Primitive) -> RenderedAsset:
        body, width = self.body_make(primitive)
        data = self.svg_make(body, width).encode("utf-8")
        digest = hashlib.sha256(data).hexdigest()[:12]
        relative_path = f"{self.assets_dir}/{primitive.kind}_{digest}.svg"
        return FileAsset(
            relative_path=relative_path,
            data=data,
            markdown_ref=f"![]({relative_path})",
        )


RENDERERS = ("shields", "plaintext", "svg")


def renderer_create(name: str, assets_dir: str = "assets") -> Renderer:
    """
    Build a backend by name.

    Raises:
        ValueError: For an unknown backend name
    """
    if name == "shields":
        return ShieldsRenderer()
    if name == "plaintext":
        return PlainTextRenderer()
    if name == "svg":
        return SvgRenderer(assets_dir)
    raise ValueError(f"unknown backend '{name}' (expected one of {', '.join(RENDERERS)})")
