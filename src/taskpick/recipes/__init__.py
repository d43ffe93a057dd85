from taskpick.recipes.base import InvocableRecipe, NamedRecipe, RecipeProvider
from taskpick.recipes.builtin import BUILTIN_RECIPES
from taskpick.recipes.engine import RecipeEngine, Resolution, build_providers

__all__ = [
    "BUILTIN_RECIPES",
    "InvocableRecipe",
    "NamedRecipe",
    "RecipeEngine",
    "RecipeProvider",
    "Resolution",
    "build_providers",
]
