from __future__ import annotations

import json

import pytest

from src.services.lite_compiler import compile_lite_recipe, compile_parse_result
from src.services.parse_freeform import parse_freeform
from src.services.recipe_models import (
    CANONICAL_SCHEMA_URL,
    IngredientSection,
    QuantityRange,
    StructuredIngredient,
    StructuredInstruction,
)


class TestPlaceholders:
    def test_empty_input_is_valid(self) -> None:
        recipe = compile_lite_recipe()

        assert recipe.schema_url == CANONICAL_SCHEMA_URL
        assert recipe.profile == "lite"
        assert recipe.stacks == {}
        assert recipe.name == "Untitled Recipe"
        assert recipe.ingredients == ["(not provided)"]
        assert recipe.instructions == ["(not provided)"]
        assert recipe.description is None
        assert recipe.x_mise is None

    def test_none_values(self) -> None:
        recipe = compile_lite_recipe(name=None, ingredients=None, instructions=None)

        assert recipe.name == "Untitled Recipe"
        assert recipe.ingredients == ["(not provided)"]
        assert recipe.instructions == ["(not provided)"]

    def test_blank_values(self) -> None:
        recipe = compile_lite_recipe(name="   ", ingredients=["", "  "], instructions=[" \t "])

        assert recipe.name == "Untitled Recipe"
        assert recipe.ingredients == ["(not provided)"]
        assert recipe.instructions == ["(not provided)"]

    def test_string_instead_of_list_is_ignored(self) -> None:
        recipe = compile_lite_recipe(ingredients="2 cups flour")

        assert recipe.ingredients == ["(not provided)"]

    def test_non_iterable_is_ignored(self) -> None:
        recipe = compile_lite_recipe(ingredients=5, instructions=3.5)

        assert recipe.ingredients == ["(not provided)"]
        assert recipe.instructions == ["(not provided)"]


class TestFieldNormalization:
    def test_trims_name_and_filters_blank_entries(self) -> None:
        recipe = compile_lite_recipe(name="  Cake  ", ingredients=["", "  ", "2 cups flour"])

        assert recipe.name == "Cake"
        assert recipe.ingredients == ["2 cups flour"]

    def test_entries_are_kept_as_written(self) -> None:
        recipe = compile_lite_recipe(instructions=["  Mix well "])

        assert recipe.instructions == ["  Mix well "]

    def test_description_is_trimmed(self) -> None:
        recipe = compile_lite_recipe(description="  Moist and rich  ")

        assert recipe.description == "Moist and rich"

    def test_blank_description_is_omitted(self) -> None:
        artifact = compile_lite_recipe(description="   ").to_artifact()

        assert "description" not in artifact

    def test_preserves_order(self) -> None:
        recipe = compile_lite_recipe(instructions=["Mix ingredients", "", "Bake at 350F"])

        assert recipe.instructions == ["Mix ingredients", "Bake at 350F"]


class TestStructuredEntries:
    def test_structured_ingredient_mapping(self) -> None:
        recipe = compile_lite_recipe(
            ingredients=[{"quantity": {"min": 2, "max": 3}, "unit": "cloves", "name": "garlic"}]
        )

        item = recipe.ingredients[0]
        assert isinstance(item, StructuredIngredient)
        assert item.name == "garlic"
        assert item.quantity == QuantityRange(min=2, max=3)

    def test_section_mapping(self) -> None:
        recipe = compile_lite_recipe(
            ingredients=[{"name": "Sauce", "items": ["1 tbsp soy", {"name": "salt", "toTaste": True}]}]
        )

        section = recipe.ingredients[0]
        assert isinstance(section, IngredientSection)
        assert section.items[0] == "1 tbsp soy"
        assert isinstance(section.items[1], StructuredIngredient)
        assert section.items[1].toTaste is True

    def test_structured_instruction_mapping(self) -> None:
        recipe = compile_lite_recipe(
            instructions=[{"text": "Bake", "timing": {"activity": "passive", "minutes": 30}}]
        )

        step = recipe.instructions[0]
        assert isinstance(step, StructuredInstruction)
        assert step.timing is not None
        assert step.timing.minutes == 30

    def test_invalid_mapping_degrades_to_text(self) -> None:
        recipe = compile_lite_recipe(instructions=[{"text": "Mix", "timing": "soon"}])

        assert recipe.instructions == ["Mix"]

    def test_unusable_mapping_is_dropped(self) -> None:
        recipe = compile_lite_recipe(ingredients=[{"quantity": 2}])

        assert recipe.ingredients == ["(not provided)"]

    def test_blank_structured_mappings_are_dropped(self) -> None:
        recipe = compile_lite_recipe(
            ingredients=[{"name": "   "}, {"name": "", "items": []}],
            instructions=[{"text": ""}],
        )

        assert recipe.ingredients == ["(not provided)"]
        assert recipe.instructions == ["(not provided)"]
        assert recipe.to_artifact()["ingredients"] == ["(not provided)"]

    def test_blank_structured_models_are_dropped(self) -> None:
        recipe = compile_lite_recipe(
            ingredients=[
                StructuredIngredient(name=" "),
                IngredientSection(name=""),
                StructuredIngredient(name="salt"),
            ],
            instructions=[StructuredInstruction(text="\t"), StructuredInstruction(text="Mix")],
        )

        assert recipe.ingredients == [StructuredIngredient(name="salt")]
        assert recipe.instructions == [StructuredInstruction(text="Mix")]

    def test_unnamed_section_with_items_is_kept(self) -> None:
        recipe = compile_lite_recipe(ingredients=[{"name": "", "items": ["soy"]}])

        section = recipe.ingredients[0]
        assert isinstance(section, IngredientSection)
        assert section.items == ["soy"]

    def test_scalars_become_text(self) -> None:
        recipe = compile_lite_recipe(ingredients=[3, None, "eggs"])

        assert recipe.ingredients == ["3", "eggs"]


class TestProvenance:
    def test_meta_is_recorded(self) -> None:
        recipe = compile_lite_recipe(name="Test", meta={"confidence": 0.85, "mode": "explicit-sections"})

        assert recipe.to_artifact()["x-mise"] == {
            "parse": {"confidence": 0.85, "mode": "explicit-sections"}
        }

    def test_empty_meta_uses_defaults(self) -> None:
        recipe = compile_lite_recipe(meta={})

        assert recipe.to_artifact()["x-mise"] == {"parse": {"confidence": 0.0, "mode": "unknown"}}

    def test_no_meta_omits_field(self) -> None:
        artifact = compile_lite_recipe(name="Test").to_artifact()

        assert "x-mise" not in artifact

    @pytest.mark.parametrize(
        ("confidence", "expected"),
        [(-1, 0.0), (7, 1.0), ("abc", 0.0), (None, 0.0), (float("nan"), 0.0), (0.55, 0.55)],
    )
    def test_confidence_is_kept_in_range(self, confidence, expected: float) -> None:
        recipe = compile_lite_recipe(meta={"confidence": confidence, "mode": ""})

        assert recipe.x_mise is not None
        assert recipe.x_mise.parse is not None
        assert recipe.x_mise.parse.confidence == expected


class TestArtifact:
    def test_key_order_and_aliases(self) -> None:
        artifact = compile_lite_recipe(name="Cake").to_artifact()

        assert list(artifact) == ["$schema", "profile", "stacks", "name", "ingredients", "instructions"]
        assert artifact["$schema"] == CANONICAL_SCHEMA_URL

    def test_artifact_is_json_serializable(self) -> None:
        recipe = compile_lite_recipe(
            name="Cake",
            ingredients=[{"name": "flour", "quantity": 2, "unit": "cups"}],
            meta={"confidence": 0.55, "mode": "heuristic"},
        )

        payload = json.loads(json.dumps(recipe.to_artifact()))

        assert payload["ingredients"] == [{"name": "flour", "quantity": 2, "unit": "cups"}]


class TestCompileParseResult:
    def test_scenario_round_trip(self) -> None:
        result = parse_freeform("Chocolate Cake\nIngredients:\n- 2 cups flour\nInstructions:\n1. Bake")

        recipe = compile_parse_result(result)

        assert recipe.name == "Chocolate Cake"
        assert recipe.ingredients == ["2 cups flour"]
        assert recipe.instructions == ["Bake"]
        assert recipe.x_mise is not None
        assert recipe.x_mise.parse is not None
        assert recipe.x_mise.parse.mode == "explicit-sections"
        assert recipe.x_mise.parse.confidence == 0.85

    def test_fallback_parse_still_compiles(self) -> None:
        recipe = compile_parse_result(parse_freeform(""))

        assert recipe.name == "Untitled Recipe"
        assert recipe.ingredients == ["(not provided)"]
        assert recipe.to_artifact()["x-mise"] == {"parse": {"confidence": 0.1, "mode": "fallback"}}
