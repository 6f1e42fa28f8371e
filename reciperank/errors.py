"""Exception types raised at the reciperank boundaries."""


class ReciperankError(Exception):
    """Base class for all reciperank errors."""


class ConfigurationError(ReciperankError):
    """Invalid weights, constraints or environment settings."""


class RecipeValidationError(ReciperankError):
    """A recipe row that cannot become a LibraryRecipe."""


class HistoryFormatError(ReciperankError):
    """A history file that does not match the expected layout."""
