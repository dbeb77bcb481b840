from __future__ import annotations

import pytest

from src.services.lite_compiler import compile_lite_recipe
from src.services.slugify import export_filename, slugify


class TestSlugify:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Chocolate Cake", "chocolate-cake"),
            ("  Mom's  Best -- Pie!  ", "mom-s-best-pie"),
            ("Crème Brûlée", "creme-brulee"),
            ("", "recipe"),
            ("!!!", "recipe"),
        ],
    )
    def test_slugify(self, text: str, expected: str) -> None:
        assert slugify(text) == expected


class TestExportFilename:
    def test_uses_recipe_name(self) -> None:
        recipe = compile_lite_recipe(name="Chocolate Cake")

        assert export_filename(recipe) == "chocolate-cake.soustack.json"

    def test_placeholder_name(self) -> None:
        assert export_filename(compile_lite_recipe()) == "untitled-recipe.soustack.json"
