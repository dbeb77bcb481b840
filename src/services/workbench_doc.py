# src/services/workbench_doc.py
"""
WorkbenchDoc: the editor's document envelope.

The recipe inside is always valid. Whoever mutates the recipe or the draft
must bump ``meta.revision`` and refresh ``meta.updatedAt`` (see ``touch``).
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from src.services.lite_compiler import compile_lite_recipe
from src.services.recipe_models import Recipe

DraftMode = Literal["raw", "structured"]
ImportSource = Literal["paste", "upload", "manual"]


def now_iso() -> str:
    """Current UTC time as ISO 8601 with milliseconds, e.g. 2024-01-15T10:30:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LastImport(BaseModel):
    source: ImportSource
    confidence: float
    mode: str
    at: str


class Draft(BaseModel):
    mode: DraftMode = "raw"
    rawText: str = ""
    lastImport: Optional[LastImport] = None


class Prose(BaseModel):
    text: str
    format: Literal["plain", "markdown"] = "plain"
    capturedAt: str


class Extensions(BaseModel):
    prose: Optional[Prose] = None


class DocMeta(BaseModel):
    revision: int = Field(default=0, ge=0)
    updatedAt: str


class WorkbenchDoc(BaseModel):
    recipe: Recipe
    draft: Draft = Field(default_factory=Draft)
    extensions: Optional[Extensions] = None
    meta: DocMeta

    def to_payload(self) -> dict[str, Any]:
        """Plain JSON-compatible dict, the shape handed to storage."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def create_empty_workbench_doc() -> WorkbenchDoc:
    return WorkbenchDoc(
        recipe=compile_lite_recipe(),
        draft=Draft(mode="raw", rawText=""),
        meta=DocMeta(revision=0, updatedAt=now_iso()),
    )


def touch(doc: WorkbenchDoc, **changes: Any) -> WorkbenchDoc:
    """Copy of ``doc`` with ``changes`` applied, the revision bumped and updatedAt refreshed."""
    meta = DocMeta(revision=doc.meta.revision + 1, updatedAt=now_iso())
    return doc.model_copy(update={**changes, "meta": meta})
