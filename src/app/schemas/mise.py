from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class ParseRequest(BaseModel):
    text: str = ""


class ParseMetaIn(BaseModel):
    confidence: Optional[float] = None
    mode: Optional[str] = None


class ParseResultOut(BaseModel):
    title: Optional[str] = None
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    confidence: float
    mode: Literal["explicit-sections", "heuristic", "fallback"]


class ParseResponse(BaseModel):
    parse: ParseResultOut
    recipe: dict[str, Any]


class CompileRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    ingredients: Optional[list[Any]] = None
    instructions: Optional[list[Any]] = None
    meta: Optional[ParseMetaIn] = None


class ConvertRequest(BaseModel):
    responseText: str = Field(..., min_length=1)
    originalText: Optional[str] = None


class StacksMigrateRequest(BaseModel):
    stacks: dict[str, Any] = Field(default_factory=dict)


class StacksMigrateResponse(BaseModel):
    stacks: dict[str, Any]
    changed: bool
    dropped: list[str] = Field(default_factory=list)


class StackToggleRequest(BaseModel):
    document: dict[str, Any]
    enabled: bool = True


class RecipeEnvelope(BaseModel):
    recipe: dict[str, Any]


class CapabilitiesResponse(BaseModel):
    capabilities: dict[str, int]
    suggestTimed: bool
    autoEnableStorage: bool
    autoEnablePrep: bool
