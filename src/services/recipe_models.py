# src/services/recipe_models.py
"""
Soustack recipe artifact.

A Recipe built by the lite compiler is always structurally valid: name,
ingredients and instructions are never empty. Ingredients and instructions
are tagged variants; consumers resolve them with ``match`` on the classes below.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

CANONICAL_SCHEMA_URL = "https://soustack.spec/soustack.schema.json"
MEDIA_TYPE = "application/vnd.soustack+json"

PLACEHOLDER_NAME = "Untitled Recipe"
PLACEHOLDER_ITEM = "(not provided)"

Profile = Literal["lite", "base", "scalable", "timed", "equipped", "prepped", "illustrated"]


class _Extensible(BaseModel):
    model_config = ConfigDict(extra="allow")


class QuantityRange(BaseModel):
    min: float
    max: float


class StructuredIngredient(_Extensible):
    name: str
    quantity: Optional[Union[int, float, QuantityRange]] = None
    unit: Optional[str] = None
    prep: Optional[str] = None
    toTaste: Optional[bool] = None


class IngredientSection(_Extensible):
    name: str
    items: list[Ingredient] = Field(default_factory=list)


def _ingredient_kind(value: Any) -> str:
    if isinstance(value, str):
        return "text"
    if isinstance(value, IngredientSection):
        return "section"
    if isinstance(value, dict) and "items" in value:
        return "section"
    return "structured"


Ingredient = Annotated[
    Union[
        Annotated[str, Tag("text")],
        Annotated[StructuredIngredient, Tag("structured")],
        Annotated[IngredientSection, Tag("section")],
    ],
    Discriminator(_ingredient_kind),
]


class Timing(_Extensible):
    activity: Optional[Literal["active", "passive"]] = None
    minutes: Optional[float] = None
    minMinutes: Optional[float] = None
    maxMinutes: Optional[float] = None
    completionCue: Optional[str] = None


class StructuredInstruction(_Extensible):
    text: str
    id: Optional[str] = None
    timing: Optional[Timing] = None
    inputs: Optional[list[str]] = None


def _instruction_kind(value: Any) -> str:
    return "text" if isinstance(value, str) else "structured"


Instruction = Annotated[
    Union[
        Annotated[str, Tag("text")],
        Annotated[StructuredInstruction, Tag("structured")],
    ],
    Discriminator(_instruction_kind),
]

IngredientSection.model_rebuild()


class ParseProvenance(BaseModel):
    confidence: float
    mode: str


class MiseExtension(_Extensible):
    parse: Optional[ParseProvenance] = None


class Recipe(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    schema_url: str = Field(default=CANONICAL_SCHEMA_URL, alias="$schema")
    profile: Profile = "lite"
    stacks: dict[str, int] = Field(default_factory=dict)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    ingredients: list[Ingredient] = Field(..., min_length=1)
    instructions: list[Instruction] = Field(..., min_length=1)
    x_mise: Optional[MiseExtension] = Field(default=None, alias="x-mise")

    def to_artifact(self) -> dict[str, Any]:
        """JSON document for the recipe: aliased keys, absent optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def ingredient_text(item: Ingredient) -> str:
    match item:
        case str():
            return item
        case IngredientSection(name=name):
            return name
        case StructuredIngredient(name=name, quantity=quantity, unit=unit, prep=prep):
            parts: list[str] = []
            match quantity:
                case QuantityRange(min=low, max=high):
                    parts.append(f"{low:g}-{high:g}")
                case int() | float():
                    parts.append(f"{quantity:g}")
            if unit:
                parts.append(unit)
            parts.append(name)
            text = " ".join(parts)
            return f"{text}, {prep}" if prep else text
    raise TypeError(f"Unsupported ingredient: {item!r}")


def instruction_text(item: Instruction) -> str:
    match item:
        case str():
            return item
        case StructuredInstruction(text=text):
            return text
    raise TypeError(f"Unsupported instruction: {item!r}")
