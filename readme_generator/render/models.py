"""Pydantic models for files flowing through the render pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class SourceFile(BaseModel):
    """A registered template file (the ``.verb.md`` input, typically)."""

    key: str = Field(..., description="Registration key, e.g. 'README' or '.verb'")
    path: Path = Field(..., description="Absolute path the file was loaded from")
    contents: str = Field(default="", description="Body with front matter removed")
    data: dict[str, Any] = Field(default_factory=dict, description="Front matter")

    @property
    def layout(self) -> str | None:
        """Layout requested by the front matter, if any."""
        value = self.data.get("layout")
        return str(value) if value else None

    @property
    def extension(self) -> str:
        return self.path.suffix

    @property
    def filename(self) -> str:
        return self.path.name


class RenderedOutput(BaseModel):
    """Final artifact written by the pipeline's sink."""

    source: Path = Field(..., description="Template the output was rendered from")
    path: Path = Field(..., description="Destination file")
    contents: str = Field(default="")


class LintWarning(BaseModel):
    """A non-fatal problem reported after generation."""

    filename: str
    message: str


# Keys under which the input template is registered.
RESERVED_KEYS: tuple[str, ...] = ("README", ".verb")
