# src/services/capabilities.py
"""Stack capabilities derived from recipe content, plus editor hints."""
from __future__ import annotations

import re
from typing import Any, Mapping

from src.services.recipe_models import (
    IngredientSection,
    Recipe,
    StructuredIngredient,
    StructuredInstruction,
    instruction_text,
)
from src.services.stacks import is_stack_enabled

_TIME_PATTERNS = (
    re.compile(r"\d+\s*(min|minute|minutes|hr|hour|hours)", re.IGNORECASE),
    re.compile(r"\d+-\d+\s*(min|minute|minutes)", re.IGNORECASE),
    re.compile(r"for\s+\d+", re.IGNORECASE),
    re.compile(r"until\s+(golden|brown|tender|done|cooked)", re.IGNORECASE),
    re.compile(r"bake\s+\d+", re.IGNORECASE),
    re.compile(r"cook\s+\d+", re.IGNORECASE),
    re.compile(r"simmer\s+\d+", re.IGNORECASE),
)


def _extra(recipe: Recipe, key: str) -> Any:
    return (recipe.model_extra or {}).get(key)


def _has_scaling(item: StructuredIngredient) -> bool:
    return (item.model_extra or {}).get("scaling") is not None


def compute_capabilities(recipe: Recipe) -> dict[str, int]:
    """Stacks implied by the data present in the recipe, not by user toggles."""
    caps: dict[str, int] = {}

    for ingredient in recipe.ingredients:
        match ingredient:
            case StructuredIngredient():
                caps["structured"] = 1
                if _has_scaling(ingredient):
                    caps["scaling"] = 1
            case IngredientSection():
                caps["structured"] = 1
            case str():
                pass

    for instruction in recipe.instructions:
        match instruction:
            case StructuredInstruction(timing=timing, inputs=inputs):
                caps["structured"] = 1
                if timing is not None:
                    caps["timed"] = 1
                if inputs:
                    caps["referenced"] = 1
            case str():
                pass

    if has_mise_en_place_data(recipe):
        caps["prep"] = 1
    if has_storage_data(recipe):
        caps["storage"] = 1

    return caps


def infer_stacks(recipe: Recipe) -> dict[str, int]:
    """Stacks inferred for AI-converted recipes: timing -> timed, to-taste -> scaling."""
    stacks: dict[str, int] = {}
    if any(
        isinstance(item, StructuredInstruction) and item.timing is not None
        for item in recipe.instructions
    ):
        stacks["timed"] = 1
    if any(
        isinstance(item, StructuredIngredient) and item.toTaste is True
        for item in recipe.ingredients
    ):
        stacks["scaling"] = 1
    return stacks


def detect_time_patterns(recipe: Recipe) -> bool:
    for instruction in recipe.instructions:
        text = instruction_text(instruction)
        if any(pattern.search(text) for pattern in _TIME_PATTERNS):
            return True
    return False


def has_storage_data(recipe: Recipe) -> bool:
    return isinstance(_extra(recipe, "storage"), Mapping)


def has_mise_en_place_data(recipe: Recipe) -> bool:
    items = _extra(recipe, "miseEnPlace")
    return isinstance(items, list) and len(items) > 0


def should_suggest_timed(recipe: Recipe) -> bool:
    return detect_time_patterns(recipe) and not is_stack_enabled(recipe.stacks, "timed")


def should_auto_enable_storage(recipe: Recipe) -> bool:
    return has_storage_data(recipe) and not is_stack_enabled(recipe.stacks, "storage")


def should_auto_enable_prep(recipe: Recipe) -> bool:
    return has_mise_en_place_data(recipe) and not is_stack_enabled(recipe.stacks, "prep")
