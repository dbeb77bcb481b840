# src/services/conversion.py
"""
Canonicalization of AI conversion output.

The LLM call lives outside this package; its answer (JSON, sometimes wrapped
in markdown fences) goes through the same lite compiler as the local parser,
so every recipe has one shape regardless of origin.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping, Optional

from src.services.capabilities import infer_stacks
from src.services.errors import AIResponseFormatError
from src.services.lite_compiler import compile_lite_recipe
from src.services.recipe_models import MiseExtension, Recipe
from src.services.workbench_doc import now_iso

logger = logging.getLogger(__name__)

DEFAULT_CONVERTER = "gemini-2.0-flash"

_OPEN_FENCE_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CLOSE_FENCE_RE = re.compile(r"\s*```$")


def strip_markdown_fences(text: str) -> str:
    text = _OPEN_FENCE_RE.sub("", text.strip(), count=1)
    return _CLOSE_FENCE_RE.sub("", text, count=1).strip()


def parse_ai_response(text: str) -> dict[str, Any]:
    cleaned = strip_markdown_fences(text or "")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as error:
        logger.warning("Failed to parse AI JSON output: %s", error)
        raise AIResponseFormatError(str(error), raw_text=text) from error

    if not isinstance(payload, dict):
        raise AIResponseFormatError(f"expected an object, got {type(payload).__name__}", raw_text=text)
    return payload


def _as_list(value: Any) -> Optional[list[Any]]:
    return value if isinstance(value, list) else None


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def recipe_from_ai_output(
    payload: Mapping[str, Any],
    original_text: Optional[str] = None,
    *,
    converter: str = DEFAULT_CONVERTER,
) -> Recipe:
    recipe = compile_lite_recipe(
        name=_as_str(payload.get("name")),
        description=_as_str(payload.get("description")),
        ingredients=_as_list(payload.get("ingredients")),
        instructions=_as_list(payload.get("instructions")),
    )

    update: dict[str, Any] = {"stacks": infer_stacks(recipe)}
    if original_text is not None:
        update["x_mise"] = MiseExtension(
            source={
                "text": original_text.strip(),
                "convertedAt": now_iso(),
                "converter": converter,
            }
        )
    return recipe.model_copy(update=update)


def recipe_from_ai_text(
    response_text: str,
    original_text: Optional[str] = None,
    *,
    converter: str = DEFAULT_CONVERTER,
) -> Recipe:
    return recipe_from_ai_output(
        parse_ai_response(response_text), original_text, converter=converter
    )
