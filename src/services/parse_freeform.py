# src/services/parse_freeform.py
"""
Freeform recipe text -> title / ingredients / instructions.

Conservative, explainable rules: explicit section headers first, then an
ingredient-likelihood heuristic, then a fallback for empty input. Never raises.
"""
from __future__ import annotations

import logging
import re
from typing import Any

from src.services.types import ParseMode, ParseResult

logger = logging.getLogger(__name__)

EXPLICIT_CONFIDENCE = 0.85
HEURISTIC_CONFIDENCE = 0.55
FALLBACK_CONFIDENCE = 0.1

# Number of leading lines inspected to decide whether the text starts with ingredients
HEURISTIC_WINDOW = 5
MIN_INGREDIENT_LIKE = 2

_INGREDIENT_HEADER_RE = re.compile(r"^(ingredients?|ingredient\s+list)\s*:?\s*$", re.IGNORECASE)
_INSTRUCTION_HEADER_RE = re.compile(
    r"^(instructions?|directions?|method|steps?)\s*:?\s*$", re.IGNORECASE
)

_BULLET_RE = re.compile(r"^\s*[-*•]\s+")
_LIST_PREFIX_RE = re.compile(r"^\s*[-*•]\s+|^\s*\d+[.)]\s+")
_NUMBERED_RE = re.compile(r"^\d+[.)]\s+")

_UNIT_TOKENS_RE = re.compile(
    r"\b(cup|tbsp|tsp|oz|lb|g|kg|ml|l|clove|piece|pieces|slice|slices|can|cans|package|packages)\b",
    re.IGNORECASE,
)
# Quantities at the start of a line: 1/2, 1 1/2, 1.5, or a bare "2 "
_QUANTITY_RE = re.compile(r"^\s*(\d+\s*/\s*\d+|\d+\s+\d+/\d+|\d+\.\d+|\d+\s+)")
# Whitespace plus the byte-order mark, which str.strip keeps
_TRIM_RE = re.compile(r"^[\s\ufeff]+|[\s\ufeff]+$")


def strip_list_prefix(line: str) -> str:
    """Remove a leading bullet (-, *, •) or number marker (1. / 1)) and trim."""
    return _LIST_PREFIX_RE.sub("", line, count=1).strip()


def is_ingredient_like(line: str) -> bool:
    trimmed = line.strip()
    if not trimmed:
        return False

    stripped = strip_list_prefix(line)
    if not stripped:
        return False

    # "1. " / "1) " lines are usually steps, so their number is not a quantity
    is_numbered = bool(_NUMBERED_RE.match(trimmed))
    if not is_numbered and (_QUANTITY_RE.match(stripped) or _QUANTITY_RE.match(trimmed)):
        return True

    if _UNIT_TOKENS_RE.search(trimmed) or _UNIT_TOKENS_RE.search(stripped):
        return True

    return bool(_BULLET_RE.match(line))


def _trim(line: str) -> str:
    return _TRIM_RE.sub("", line)


def _normalize_lines(text: str) -> list[str]:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    trimmed = (_trim(line) for line in text.split("\n"))
    return [line for line in trimmed if line]


def _is_ingredient_header(line: str) -> bool:
    return bool(_INGREDIENT_HEADER_RE.match(line))


def _is_instruction_header(line: str) -> bool:
    return bool(_INSTRUCTION_HEADER_RE.match(line))


def _fallback() -> ParseResult:
    return ParseResult(
        title=None,
        ingredients=[],
        instructions=[],
        confidence=FALLBACK_CONFIDENCE,
        mode=ParseMode.FALLBACK,
    )


def _parse_sections(lines: list[str], has_ingredients_header: bool, has_instructions_header: bool) -> ParseResult:
    title_lines: list[str] = []
    ingredient_lines: list[str] = []
    instruction_lines: list[str] = []
    section = "title"

    for line in lines:
        if _is_ingredient_header(line):
            section = "ingredients"
            continue
        if _is_instruction_header(line):
            section = "instructions"
            continue

        # Without an instructions header, the first non-ingredient line ends the list
        if (
            section == "ingredients"
            and has_ingredients_header
            and not has_instructions_header
            and ingredient_lines
            and not is_ingredient_like(line)
        ):
            section = "instructions"

        if section == "title":
            title_lines.append(line)
        elif section == "ingredients":
            ingredient_lines.append(strip_list_prefix(line))
        else:
            instruction_lines.append(strip_list_prefix(line))

    return ParseResult(
        title=title_lines[0] if title_lines else None,
        ingredients=ingredient_lines,
        instructions=instruction_lines,
        confidence=EXPLICIT_CONFIDENCE,
        mode=ParseMode.EXPLICIT_SECTIONS,
    )


def _parse_heuristic(lines: list[str]) -> ParseResult:
    ingredient_lines: list[str] = []
    instruction_lines: list[str] = []

    early = lines[:HEURISTIC_WINDOW]
    ingredient_heavy = sum(1 for line in early if is_ingredient_like(line)) >= MIN_INGREDIENT_LIKE

    if ingredient_heavy:
        found_instructions = False
        for line in lines:
            stripped = strip_list_prefix(line)
            if not found_instructions and is_ingredient_like(line):
                ingredient_lines.append(stripped)
            else:
                found_instructions = True
                instruction_lines.append(stripped)
    else:
        instruction_lines = [strip_list_prefix(line) for line in lines]

    # The first line is also classified above; it is not removed from the lists.
    return ParseResult(
        title=lines[0],
        ingredients=ingredient_lines,
        instructions=instruction_lines,
        confidence=HEURISTIC_CONFIDENCE,
        mode=ParseMode.HEURISTIC,
    )


def parse_freeform(text: Any) -> ParseResult:
    if not text or not isinstance(text, str):
        return _fallback()

    lines = _normalize_lines(text)
    if not lines:
        return _fallback()

    # Last match wins; only presence matters for the branch decision
    ingredients_header_index = -1
    instructions_header_index = -1
    for index, line in enumerate(lines):
        if _is_ingredient_header(line):
            ingredients_header_index = index
        if _is_instruction_header(line):
            instructions_header_index = index

    has_ingredients_header = ingredients_header_index >= 0
    has_instructions_header = instructions_header_index >= 0

    if has_ingredients_header or has_instructions_header:
        result = _parse_sections(lines, has_ingredients_header, has_instructions_header)
    else:
        result = _parse_heuristic(lines)

    logger.debug(
        "Parsed freeform text: mode=%s, ingredients=%d, instructions=%d",
        result.mode.value,
        len(result.ingredients),
        len(result.instructions),
    )
    return result
