"""
Primitives

Backend-neutral descriptions of renderable units. Each variant carries
semantic fields only; how it looks is the renderer's business. Colors are
already palette-resolved uppercase hex strings.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union


@dataclass(frozen=True)
class Swatch:
    """A single color block"""

    kind: ClassVar[str] = "swatch"

    color: str
    style: str
    label: Optional[str] = None


@dataclass(frozen=True)
class Divider:
    """A horizontal bar made of color segments"""

    kind: ClassVar[str] = "divider"

    colors: Tuple[str, ...]
    style: str


@dataclass(frozen=True)
class Tech:
    """A technology logo badge"""

    kind: ClassVar[str] = "tech"

    name: str
    bg_color: str
    logo_color: str
    style: str


@dataclass(frozen=True)
class Status:
    """A status indicator (success, warning, error, info)"""

    kind: ClassVar[str] = "status"

    level: str
    style: str


@dataclass(frozen=True)
class TwoTone:
    """A block split into two colors"""

    kind: ClassVar[str] = "twotone"

    left: str
    right: str
    style: str


Primitive = Union[Swatch, Divider, Tech, Status, TwoTone]
