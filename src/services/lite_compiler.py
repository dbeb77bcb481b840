# src/services/lite_compiler.py
from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from src.services.recipe_models import (
    PLACEHOLDER_ITEM,
    PLACEHOLDER_NAME,
    Ingredient,
    IngredientSection,
    Instruction,
    MiseExtension,
    ParseProvenance,
    Recipe,
    StructuredIngredient,
    StructuredInstruction,
)
from src.services.types import ParseResult

logger = logging.getLogger(__name__)

_INGREDIENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(Ingredient)
_INSTRUCTION_ADAPTER: TypeAdapter[Any] = TypeAdapter(Instruction)


def _clean_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _fallback_text(item: Mapping[str, Any]) -> Optional[str]:
    for key in ("text", "name"):
        text = _clean_text(item.get(key))
        if text:
            return text
    return None


def _is_blank_entry(item: Any) -> bool:
    match item:
        case StructuredIngredient(name=name):
            return not name.strip()
        case StructuredInstruction(text=text):
            return not text.strip()
        case IngredientSection(name=name, items=section_items):
            return not name.strip() and not section_items
    return False


def _clean_items(
    items: Optional[Iterable[Any]],
    adapter: TypeAdapter[Any],
    model_types: tuple[type[BaseModel], ...],
) -> list[Any]:
    if not isinstance(items, Iterable) or isinstance(items, (str, bytes, Mapping)):
        return []

    cleaned: list[Any] = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, str):
            # kept as written; blank entries are dropped
            if item.strip():
                cleaned.append(item)
            continue
        if isinstance(item, Mapping):
            try:
                item = adapter.validate_python(dict(item))
            except ValidationError:
                text = _fallback_text(item)
                if text:
                    cleaned.append(text)
                else:
                    logger.debug("Dropping unusable recipe entry: %r", item)
                continue
        if isinstance(item, model_types):
            if _is_blank_entry(item):
                logger.debug("Dropping blank recipe entry: %r", item)
            else:
                cleaned.append(item)
            continue
        text = str(item)
        if text.strip():
            cleaned.append(text)
    return cleaned


def _coerce_confidence(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(confidence):
        return 0.0
    return min(1.0, max(0.0, confidence))


def _provenance(meta: Mapping[str, Any]) -> MiseExtension:
    mode = meta.get("mode")
    return MiseExtension(
        parse=ParseProvenance(
            confidence=_coerce_confidence(meta.get("confidence")),
            mode=mode if isinstance(mode, str) else "unknown",
        )
    )


def compile_lite_recipe(
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    ingredients: Optional[Iterable[Any]] = None,
    instructions: Optional[Iterable[Any]] = None,
    meta: Optional[Mapping[str, Any]] = None,
) -> Recipe:
    """
    Build an always-valid Soustack Lite recipe.

    Missing name, ingredients or instructions are replaced by placeholders.
    ``x-mise.parse`` is only attached when ``meta`` is given, even if empty.
    Never raises.

    Args:
        name: Recipe title, trimmed.
        description: Optional blurb; omitted from the artifact when blank.
        ingredients: Strings or structured entries, blank ones dropped.
        instructions: Strings or structured entries, blank ones dropped.
        meta: Parse metadata with optional ``confidence`` and ``mode``.

    Returns:
        Recipe with profile ``lite`` and empty stacks.
    """
    ingredient_items = _clean_items(
        ingredients, _INGREDIENT_ADAPTER, (StructuredIngredient, IngredientSection)
    )
    instruction_items = _clean_items(
        instructions, _INSTRUCTION_ADAPTER, (StructuredInstruction,)
    )

    fields: dict[str, Any] = {
        "profile": "lite",
        "stacks": {},
        "name": _clean_text(name) or PLACEHOLDER_NAME,
        "description": _clean_text(description),
        "ingredients": ingredient_items or [PLACEHOLDER_ITEM],
        "instructions": instruction_items or [PLACEHOLDER_ITEM],
    }
    if meta is not None:
        fields["x_mise"] = _provenance(meta if isinstance(meta, Mapping) else {})

    return Recipe(**fields)


def compile_parse_result(result: ParseResult) -> Recipe:
    return compile_lite_recipe(
        name=result.title,
        ingredients=result.ingredients,
        instructions=result.instructions,
        meta=result.as_meta(),
    )
