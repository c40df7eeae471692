"""
Shared fixtures for the mdfx test suite
"""

import pytest

from mdfx.config.settings import AppSettings
from mdfx.lib.processor import Processor
from mdfx.lib.registry import Registry
from mdfx.lib.renderers import PlainTextRenderer, ShieldsRenderer


TEST_REGISTRY = """
components:
  a:
    template: "[A:$content]"
  b:
    template: "<B:$content>"
  echo:
    args: [value]
    template: "v=$1"
  raw:
    template: "$content"
  paint:
    self_closing: true
    template: "{{shields:block:color=accent/}}"
  loop:
    self_closing: true
    template: "{{ui:loop/}}"
  fan:
    self_closing: true
    template: "{{ui:leaf/}}{{ui:leaf/}}"
  leaf:
    self_closing: true
    template: "x"
  broken:
    template: "{{nosuchstyle}}$content{{/nosuchstyle}}"
  blockonly:
    contexts: [block]
    self_closing: true
    template: "B"

frames:
  box:
    prefix: "("
    suffix: ")"

palette:
  accent: "F41C80"
  cobalt: "2B6CB0"
"""


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings()


@pytest.fixture
def registry() -> Registry:
    return Registry.builtin()


@pytest.fixture
def processor(registry, settings) -> Processor:
    return Processor(registry=registry, renderer=ShieldsRenderer(), settings=settings)


@pytest.fixture
def plain(registry, settings) -> Processor:
    return Processor(registry=registry, renderer=PlainTextRenderer(), settings=settings)


@pytest.fixture
def test_registry(tmp_path) -> Registry:
    path = tmp_path / "registry.yaml"
    path.write_text(TEST_REGISTRY, encoding="utf-8")
    return Registry.from_file(path)


@pytest.fixture
def test_processor(test_registry, settings) -> Processor:
    return Processor(registry=test_registry, renderer=ShieldsRenderer(), settings=settings)
