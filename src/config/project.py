"""
Project configuration file (.mdfx.yaml)

A project may carry a YAML file that extends the palette, defines
partials and overrides the default context and backend:

    palette:
      brand: "FF6B35"
    partials:
      note:
        template: "{{ui:callout:info}}$content{{/ui}}"
        description: Informational callout
    context: block
    backend: shields
"""

from pathlib import Path
from typing import Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..lib.errors import ConfigurationError
from ..lib.log import LOG


class PartialConfig(BaseModel):
    """One user-defined partial template"""

    template: str
    description: str = ""


class ProjectConfig(BaseModel):
    """
    Parsed project configuration.

    Attributes:
        palette: Named colors added on top of the built-in palette
        partials: Partial templates keyed by name
        context: Optional override of the top-level evaluation context
        backend: Optional override of the renderer backend
        path: File the configuration was read from, if any
    """

    palette: Dict[str, str] = Field(default_factory=dict)
    partials: Dict[str, PartialConfig] = Field(default_factory=dict)
    context: Optional[Literal["inline", "block", "frame_chrome"]] = None
    backend: Optional[Literal["shields", "plaintext", "svg"]] = None
    path: Optional[Path] = None

    @classmethod
    def load(cls, path: Path) -> "ProjectConfig":
        """
        Load and validate a configuration file.

        Args:
            path: YAML file to read

        Returns:
            The parsed configuration

        Raises:
            ConfigurationError: If the file cannot be read, is not valid
                                YAML, or does not match the schema
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to load {path}: {e}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: top level must be a mapping")

        try:
            config = cls(**data, path=Path(path))
        except ValidationError as e:
            raise ConfigurationError(f"{path}: {e}")
        LOG(
            f"Loaded {path}: {len(config.palette)} colors, {len(config.partials)} partials",
            level=2,
        )
        return config

    @classmethod
    def discover(cls, start: Path, name: str = ".mdfx.yaml") -> "ProjectConfig":
        """
        Find the nearest configuration file at or above ``start``.

        Returns an empty configuration when no file is found.
        """
        start = Path(start).resolve()
        if start.is_file():
            start = start.parent
        for directory in (start, *start.parents):
            candidate = directory / name
            if candidate.is_file():
                return cls.load(candidate)
        LOG(f"No {name} found above {start}", level=3)
        return cls()

    def partials_asTemplates(self) -> Dict[str, str]:
        return {name: partial.template for name, partial in self.partials.items()}
