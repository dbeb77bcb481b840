from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ParseMode(str, Enum):
    """How the freeform parser arrived at its sections."""
    EXPLICIT_SECTIONS = "explicit-sections"
    HEURISTIC = "heuristic"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ParseResult:
    title: Optional[str]
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    confidence: float = 0.1  # 0..1
    mode: ParseMode = ParseMode.FALLBACK

    def as_meta(self) -> dict[str, float | str]:
        return {"confidence": self.confidence, "mode": self.mode.value}
