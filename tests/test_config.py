"""
Configuration tests

AppSettings (environment) and ProjectConfig (.mdfx.yaml).
"""

import pytest
from pydantic import ValidationError

from mdfx.config import AppSettings, ProjectConfig
from mdfx.lib.errors import ConfigurationError
from mdfx.lib.processor import Processor
from mdfx.lib.registry import Registry
from mdfx.lib.renderers import PlainTextRenderer
from mdfx.models.context import EvalContext


PROJECT_YAML = """
palette:
  brand: "FF6B35"
partials:
  shout:
    template: "{{mathbold}}$content{{/mathbold}}"
    description: Bold text
context: inline
backend: plaintext
"""


class TestAppSettings:
    """Environment driven settings"""

    def test_defaults(self, settings):
        assert settings.max_expansion_depth == 64
        assert settings.max_expansions == 10000
        assert settings.context_default() == EvalContext.block()
        assert settings.separatorContext_make() == EvalContext.inline(1)

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("MDFX_MAX_EXPANSION_DEPTH", "8")
        monkeypatch.setenv("MDFX_DEFAULT_CONTEXT", "frame_chrome")
        settings = AppSettings()
        assert settings.max_expansion_depth == 8
        assert settings.context_default() == EvalContext.frame_chrome(16)

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("MDFX_DEFAULT_BACKEND", "png")
        with pytest.raises(ValidationError):
            AppSettings()

    def test_context_make(self, settings):
        assert settings.context_make("inline") == EvalContext.inline(1)
        with pytest.raises(ValueError):
            settings.context_make("sideways")


class TestProjectConfig:
    """Loading and discovery"""

    def test_load(self, tmp_path):
        path = tmp_path / ".mdfx.yaml"
        path.write_text(PROJECT_YAML, encoding="utf-8")
        config = ProjectConfig.load(path)
        assert config.palette == {"brand": "FF6B35"}
        assert config.context == "inline"
        assert config.backend == "plaintext"
        assert config.path == path
        assert config.partials_asTemplates() == {"shout": "{{mathbold}}$content{{/mathbold}}"}

    def test_empty_file(self, tmp_path):
        path = tmp_path / ".mdfx.yaml"
        path.write_text("", encoding="utf-8")
        assert ProjectConfig.load(path).palette == {}

    @pytest.mark.parametrize(
        "text",
        ["palette: [", "- just\n- a list\n", "context: sideways\n", "partials:\n  x: {}\n"],
    )
    def test_invalid(self, tmp_path, text):
        path = tmp_path / ".mdfx.yaml"
        path.write_text(text, encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ProjectConfig.load(path)

    def test_missing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ProjectConfig.load(tmp_path / "nope.yaml")

    def test_discover_walks_up(self, tmp_path):
        (tmp_path / ".mdfx.yaml").write_text(PROJECT_YAML, encoding="utf-8")
        nested = tmp_path / "docs" / "guide"
        nested.mkdir(parents=True)
        config = ProjectConfig.discover(nested)
        assert config.path == (tmp_path / ".mdfx.yaml").resolve()

    def test_discover_custom_name(self, tmp_path):
        (tmp_path / "mdfx.yml").write_text("palette:\n  x: '000000'\n", encoding="utf-8")
        assert ProjectConfig.discover(tmp_path, "mdfx.yml").palette == {"x": "000000"}

    def test_applied_to_processor(self, tmp_path, settings):
        """Partials and palette from the file reach the processor"""
        path = tmp_path / ".mdfx.yaml"
        path.write_text(PROJECT_YAML, encoding="utf-8")
        config = ProjectConfig.load(path)
        processor = Processor(
            registry=Registry.builtin(config.partials_asTemplates()),
            renderer=PlainTextRenderer(),
            settings=settings,
        )
        processor.extend_palette(config.palette)
        result = processor.process("{{partial:shout}}A{{/partial}} {{ui:swatch:brand/}}")
        assert result == "\U0001D400 [#FF6B35]"
