"""
Rendered assets

The only shapes a renderer hands back to the processor.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class InlineMarkdown:
    """Markdown spliced directly into the output"""

    markdown: str

    @property
    def is_file(self) -> bool:
        return False

    def to_markdown(self) -> str:
        return self.markdown


@dataclass(frozen=True)
class FileAsset:
    """
    A file the caller must persist, referenced from the output.

    Attributes:
        relative_path: Where the file belongs, relative to the output root
        data: File contents
        markdown_ref: Markdown spliced into the output in place of the tag
    """

    relative_path: str
    data: bytes
    markdown_ref: str

    @property
    def is_file(self) -> bool:
        return True

    def to_markdown(self) -> str:
        return self.markdown_ref


RenderedAsset = Union[InlineMarkdown, FileAsset]
