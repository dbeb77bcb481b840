# src/app/services/workbench_service.py
"""
Editor workflow over WorkbenchDoc.
Every change to the recipe or the draft goes through ``touch`` so the
revision always increases and updatedAt is refreshed.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from src.app.config import settings
from src.app.domain.errors import InvalidWorkbenchDocError, UnknownStackError
from src.services.conversion import recipe_from_ai_text
from src.services.lite_compiler import compile_parse_result
from src.services.parse_freeform import parse_freeform
from src.services.recipe_models import Recipe
from src.services.stacks import (
    disable_stack,
    enable_stack,
    is_known_stack,
    migrate_versioned_stack_keys,
)
from src.services.workbench_doc import (
    DraftMode,
    Extensions,
    ImportSource,
    LastImport,
    Prose,
    WorkbenchDoc,
    now_iso,
    touch,
)

logger = logging.getLogger(__name__)

AI_IMPORT_MODE = "ai"
AI_IMPORT_CONFIDENCE = 1.0


class WorkbenchService:
    """
    Pure transforms over an externally owned WorkbenchDoc.

    Responsibilities:
    - Re-parse the raw draft into the canonical recipe
    - Record imports (local parser or AI conversion)
    - Toggle stacks against the registry
    - Load stored documents, migrating legacy stack keys
    """

    def __init__(self, warn_on_dropped_stacks: bool = settings.WARN_ON_DROPPED_STACKS):
        self.warn_on_dropped_stacks = warn_on_dropped_stacks

    def apply_raw_text(self, doc: WorkbenchDoc, text: str) -> WorkbenchDoc:
        """
        Store the draft text and recompile the recipe from it.

        Blank text keeps the last recipe so a cleared textarea does not wipe
        the user's work.
        """
        draft = doc.draft.model_copy(update={"rawText": text})
        if not text.strip():
            return touch(doc, draft=draft)

        recipe = compile_parse_result(parse_freeform(text))
        return touch(doc, draft=draft, recipe=recipe)

    def import_text(
        self,
        doc: WorkbenchDoc,
        text: str,
        source: ImportSource = "paste",
        preserve_prose: bool = False,
    ) -> WorkbenchDoc:
        result = parse_freeform(text)
        recipe = compile_parse_result(result)
        last_import = LastImport(
            source=source,
            confidence=result.confidence,
            mode=result.mode.value,
            at=now_iso(),
        )
        logger.info(
            "Imported %s text: mode=%s, confidence=%.2f",
            source,
            result.mode.value,
            result.confidence,
        )
        return self._install_import(doc, recipe, text, last_import, preserve_prose)

    def import_ai_output(
        self,
        doc: WorkbenchDoc,
        response_text: str,
        original_text: str,
        preserve_prose: bool = False,
    ) -> WorkbenchDoc:
        """
        Install the recipe produced by the AI converter.

        Raises:
            AIResponseFormatError: If the converter answer is not a JSON object
        """
        recipe = recipe_from_ai_text(response_text, original_text)
        last_import = LastImport(
            source="paste",
            confidence=AI_IMPORT_CONFIDENCE,
            mode=AI_IMPORT_MODE,
            at=now_iso(),
        )
        return self._install_import(doc, recipe, original_text, last_import, preserve_prose)

    def _install_import(
        self,
        doc: WorkbenchDoc,
        recipe: Recipe,
        text: str,
        last_import: LastImport,
        preserve_prose: bool,
    ) -> WorkbenchDoc:
        changes: dict[str, Any] = {
            "recipe": recipe,
            "draft": doc.draft.model_copy(
                update={"mode": "structured", "rawText": text, "lastImport": last_import}
            ),
        }
        if preserve_prose:
            changes["extensions"] = Extensions(
                prose=Prose(text=text, format="plain", capturedAt=last_import.at)
            )
        return touch(doc, **changes)

    def replace_recipe(self, doc: WorkbenchDoc, recipe: Recipe) -> WorkbenchDoc:
        return touch(doc, recipe=recipe)

    def set_draft_mode(self, doc: WorkbenchDoc, mode: DraftMode) -> WorkbenchDoc:
        if doc.draft.mode == mode:
            return doc
        return touch(doc, draft=doc.draft.model_copy(update={"mode": mode}))

    def enable_stack(self, doc: WorkbenchDoc, key: str) -> WorkbenchDoc:
        if not is_known_stack(key):
            raise UnknownStackError(key)
        recipe = doc.recipe.model_copy(update={"stacks": enable_stack(doc.recipe.stacks, key)})
        return touch(doc, recipe=recipe)

    def disable_stack(self, doc: WorkbenchDoc, key: str) -> WorkbenchDoc:
        if not is_known_stack(key):
            raise UnknownStackError(key)
        recipe = doc.recipe.model_copy(update={"stacks": disable_stack(doc.recipe.stacks, key)})
        return touch(doc, recipe=recipe)

    def load_document(self, payload: Mapping[str, Any]) -> WorkbenchDoc:
        """
        Validate a stored document and migrate its legacy stack keys.

        Args:
            payload: JSON blob as returned by storage

        Returns:
            WorkbenchDoc, with a new revision only if migration changed the stacks

        Raises:
            InvalidWorkbenchDocError: If the payload is not a valid document
        """
        recipe_payload = payload.get("recipe")
        stacks = recipe_payload.get("stacks") if isinstance(recipe_payload, Mapping) else None
        dropped: list[str] = []
        migrated = stacks
        if isinstance(stacks, Mapping):
            # dropped legacy keys may hold any value, so migrate before validating
            migrated = migrate_versioned_stack_keys(stacks, on_drop=dropped.append)
            if migrated is not stacks:
                payload = {**payload, "recipe": {**recipe_payload, "stacks": dict(migrated)}}

        if dropped and self.warn_on_dropped_stacks:
            logger.warning("Dropped unsupported stack keys while loading document: %s", dropped)

        try:
            doc = WorkbenchDoc.model_validate(payload)
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ]
            raise InvalidWorkbenchDocError(errors) from exc

        if migrated is stacks:
            return doc
        return touch(doc)
