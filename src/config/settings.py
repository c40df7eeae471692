"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use MDFX_ prefix (e.g., MDFX_MAX_EXPANSION_DEPTH=32).

Settings can also be loaded from a .env file in the project root.
"""

from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.context import EvalContext


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use MDFX_ prefix.

    Examples:
        MDFX_MAX_EXPANSION_DEPTH=32
        MDFX_DEFAULT_CONTEXT=inline
        MDFX_DEFAULT_BACKEND=plaintext
    """

    model_config = SettingsConfigDict(
        env_prefix="MDFX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Expansion limits
    max_expansion_depth: int = Field(
        default=64,
        ge=1,
        description="Maximum nesting depth of re-entrant expansion (cycle protection)",
    )

    max_expansions: int = Field(
        default=10000,
        ge=1,
        description="Maximum number of component/partial expansions in one process call",
    )

    # Evaluation contexts
    default_context: Literal["inline", "block", "frame_chrome"] = Field(
        default="block",
        description="Evaluation context of top-level text",
    )

    separator_max_graphemes: int = Field(
        default=1,
        ge=1,
        description="Grapheme limit of the inline context used to resolve separators",
    )

    frame_chrome_max_length: int = Field(
        default=16,
        ge=1,
        description="Length limit of the frame chrome context",
    )

    max_spacing: int = Field(
        default=16,
        ge=0,
        description="Largest accepted value of a style's spacing= parameter",
    )

    # Scanner
    fence_markers: List[str] = Field(
        default_factory=lambda: ["```", "~~~"],
        description="Line prefixes that open and close fenced code blocks",
    )

    inline_code_delimiter: str = Field(
        default="`",
        min_length=1,
        description="Delimiter of inline code spans",
    )

    # Output
    default_backend: Literal["shields", "plaintext", "svg"] = Field(
        default="shields",
        description="Renderer used for primitives when none is given",
    )

    assets_dir: str = Field(
        default="assets",
        description="Directory (relative to the output root) for file assets",
    )

    project_config_name: str = Field(
        default=".mdfx.yaml",
        description="File name searched for project configuration",
    )

    def context_default(self) -> EvalContext:
        """
        Build the configured top-level evaluation context.

        Example:
            >>> AppSettings(default_context="inline").context_default()
            EvalContext(kind=<ContextKind.INLINE: 'inline'>, limit=1)
        """
        return self.context_make(self.default_context)

    def context_make(self, name: str) -> EvalContext:
        """Build the context called ``name`` with the configured limits"""
        return EvalContext.context_fromName(
            name,
            max_graphemes=self.separator_max_graphemes,
            max_length=self.frame_chrome_max_length,
        )

    def separatorContext_make(self) -> EvalContext:
        return EvalContext.inline(self.separator_max_graphemes)


# Singleton instance - import this in your code
appsettings = AppSettings()
