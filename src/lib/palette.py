"""
Palette resolution

Colors may be given by name or as raw hex. Names are looked up in the
caller's overlay first, then in the built-in palette; anything else that
is a 6-digit hex value passes through. Results are uppercase hex without
a leading '#'.
"""

import re
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .errors import InvalidParameterValue


HEX_PATTERN = re.compile(r"#?([0-9A-Fa-f]{6})")

# Parameters whose values name colors (comma-separated lists allowed)
COLOR_PARAMS = (
    "color",
    "colors",
    "bg",
    "logoColor",
    "labelColor",
    "label_color",
    "icon_color",
    "left",
    "right",
)

_param_pattern = re.compile(
    r"(?<![A-Za-z0-9_-])(" + "|".join(COLOR_PARAMS) + r")=([^:/}]*)"
)


def hex_normalize(value: str) -> Optional[str]:
    """Return ``value`` as uppercase 6-digit hex, or None if it is not hex"""
    match = HEX_PATTERN.fullmatch(value.strip())
    if match is None:
        return None
    return match.group(1).upper()


class Palette:
    """
    Built-in named colors plus a caller-controlled overlay.

    The built-in table is immutable; only the overlay changes, and only
    through ``extend``.

    Example:
        >>> palette = Palette({"accent": "F41C80"})
        >>> palette.value_resolve("accent")
        'F41C80'
        >>> palette.value_resolve("ff00aa")
        'FF00AA'
        >>> palette.value_resolve("nonsense")
        'nonsense'
    """

    def __init__(self, builtin: Mapping[str, str]):
        self.builtin: Mapping[str, str] = MappingProxyType(dict(builtin))
        self.overlay: Dict[str, str] = {}

    def lookup(self, name: str) -> Optional[str]:
        """Resolve a name or hex value strictly; None when it is neither"""
        key = name.strip()
        if key in self.overlay:
            return self.overlay[key]
        if key in self.builtin:
            return self.builtin[key]
        return hex_normalize(key)

    def value_resolve(self, value: str) -> str:
        """
        Resolve a value leniently: unknown values are returned unchanged.

        Used for component arguments, which may be colors or plain words.
        """
        resolved = self.lookup(value)
        return value if resolved is None else resolved

    def color_require(self, param: str, value: str) -> str:
        """
        Resolve a value that must be a color.

        Raises:
            InvalidParameterValue: If the value is neither a known name nor hex
        """
        resolved = self.lookup(value)
        if resolved is None:
            raise InvalidParameterValue(param, value, "not a palette color or 6-digit hex")
        return resolved

    def refs_resolve(self, text: str) -> str:
        """
        Resolve palette names embedded in color parameters of template text.

        Only the values of color parameters (``color=``, ``bg=``, ...) are
        touched; each comma-separated item is resolved leniently.

        Example:
            "{{ui:swatch:x:color=accent/}}" → "{{ui:swatch:x:color=F41C80/}}"
        """

        def replace(match: "re.Match[str]") -> str:
            items = match.group(2).split(",")
            resolved = ",".join(self.value_resolve(item) if item else item for item in items)
            return f"{match.group(1)}={resolved}"

        return _param_pattern.sub(replace, text)

    def extend(self, overrides: Mapping[str, str]) -> None:
        """
        Add or replace overlay colors.

        Values must be 6-digit hex (with or without '#'). The overlay takes
        precedence over built-in names.

        Raises:
            InvalidParameterValue: If a value is not hex
        """
        validated = {}
        for name, value in overrides.items():
            normalized = hex_normalize(str(value))
            if normalized is None:
                raise InvalidParameterValue(name, str(value), "palette colors must be 6-digit hex")
            validated[name] = normalized
        self.overlay.update(validated)
