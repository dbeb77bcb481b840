# src/services/slugify.py
import re
import unicodedata

from src.services.recipe_models import Recipe

EXPORT_SUFFIX = ".soustack.json"


def slugify(text: str) -> str:
    """Lowercase, accent-free, hyphen-separated slug; "recipe" when nothing is left."""
    if not text or not isinstance(text, str):
        return "recipe"
    # strip accents
    t = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    t = re.sub(r"[^a-zA-Z0-9]+", "-", t).strip("-").lower()
    return t or "recipe"


def export_filename(recipe: Recipe) -> str:
    return f"{slugify(recipe.name)}{EXPORT_SUFFIX}"  # e.g. chocolate-cake.soustack.json
