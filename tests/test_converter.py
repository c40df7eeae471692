"""
Converter and palette tests
"""

import pytest

from mdfx.lib.converter import convert, convert_with_separator, convert_with_spacing
from mdfx.lib.errors import InvalidParameterValue
from mdfx.lib.palette import Palette, hex_normalize
from mdfx.models.renderables import RenderableKind


@pytest.fixture
def mathbold(registry):
    return registry.definition_get(RenderableKind.STYLE, "mathbold")


class TestConvert:
    """Test character mapping"""

    def test_letters_and_digits(self, mathbold):
        """Upper, lower and digits map through their tables"""
        assert convert("Ab1", mathbold) == "\U0001D400\U0001D41B\U0001D7CF"

    def test_unmapped_pass_through(self, mathbold):
        """Whitespace, punctuation and symbols are unchanged"""
        assert convert(" ,.!?\n\t✓é", mathbold) == " ,.!?\n\t✓é"

    def test_style_exceptions(self, registry):
        """Letters outside the contiguous block use their legacy code points"""
        italic = registry.definition_get(RenderableKind.STYLE, "italic")
        double = registry.definition_get(RenderableKind.STYLE, "double-struck")
        assert convert("h", italic) == "ℎ"
        assert convert("CHNPQRZ", double) == "ℂℍℕℙℚℝℤ"

    def test_partial_tables(self, registry):
        """Styles without digit glyphs leave digits alone"""
        script = registry.definition_get(RenderableKind.STYLE, "script")
        assert convert("7", script) == "7"

    def test_small_caps(self, registry):
        """Small caps maps lowercase only"""
        small = registry.definition_get(RenderableKind.STYLE, "small-caps")
        assert convert("Ab", small) == "Aʙ"


class TestSeparators:
    """Test separator and spacing insertion"""

    def test_separator(self, mathbold):
        """Separator between every pair of converted characters"""
        assert convert_with_separator("AB", mathbold, "·") == "\U0001D400·\U0001D401"

    def test_separator_count(self, mathbold):
        """Separator repeated count times"""
        assert convert_with_separator("AB", mathbold, "-", 3) == "\U0001D400---\U0001D401"

    def test_separator_zero_is_plain(self, mathbold):
        """Count 0 is a plain conversion"""
        assert convert_with_separator("AB", mathbold, "·", 0) == convert("AB", mathbold)

    def test_single_character(self, mathbold):
        """No separator around a single character"""
        assert convert_with_separator("A", mathbold, "·") == "\U0001D400"

    def test_spacing(self, mathbold):
        """N spaces between characters"""
        assert convert_with_spacing("AB", mathbold, 2) == "\U0001D400  \U0001D401"

    def test_spacing_zero(self, mathbold):
        """Spacing 0 is a plain conversion"""
        assert convert_with_spacing("AB", mathbold, 0) == convert("AB", mathbold)

    def test_empty_text(self, mathbold):
        """Empty text stays empty"""
        assert convert_with_separator("", mathbold, "·") == ""


class TestPalette:
    """Test palette resolution"""

    @pytest.fixture
    def palette(self):
        return Palette({"accent": "F41C80", "cobalt": "2B6CB0"})

    def test_hex_normalize(self):
        """Hex values are uppercased, '#' stripped"""
        assert hex_normalize("#ff00aa") == "FF00AA"
        assert hex_normalize("ff00a") is None
        assert hex_normalize("red") is None

    def test_builtin_name(self, palette):
        """Built-in names resolve"""
        assert palette.value_resolve("accent") == "F41C80"

    def test_overlay_precedence(self, palette):
        """Overlay beats built-in"""
        palette.extend({"accent": "#000000", "brand": "abcdef"})
        assert palette.value_resolve("accent") == "000000"
        assert palette.value_resolve("brand") == "ABCDEF"

    def test_lenient_passthrough(self, palette):
        """Non-colors pass through leniently"""
        assert palette.value_resolve("warning") == "warning"

    def test_strict_color(self, palette):
        """Strict resolution rejects non-colors"""
        with pytest.raises(InvalidParameterValue):
            palette.color_require("color", "warning")

    def test_extend_validates(self, palette):
        """Overlay values must be hex"""
        with pytest.raises(InvalidParameterValue):
            palette.extend({"brand": "orange"})
        assert "brand" not in palette.overlay

    def test_refs_resolve(self, palette):
        """Only color parameters are rewritten"""
        text = "{{ui:x:accent:color=accent:bg=cobalt,accent:name=accent/}}"
        assert palette.refs_resolve(text) == (
            "{{ui:x:accent:color=F41C80:bg=2B6CB0,F41C80:name=accent/}}"
        )

    def test_refs_resolve_word_boundary(self, palette):
        """'textcolor=' is not 'color='"""
        assert palette.refs_resolve("textcolor=accent") == "textcolor=accent"
