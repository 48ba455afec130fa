"""
Exception types raised by the blending engine.

Numeric steps (similarity, analysis, aggregation) never raise; these cover
configuration mistakes, malformed catalogs and invalid blend requests.
"""


class RetroBlendError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(RetroBlendError, ValueError):
    """Invalid weights, thresholds or environment overrides."""


class CatalogError(RetroBlendError):
    """A catalog file or record could not be turned into metadata."""


class BuildError(RetroBlendError):
    """A compatibility graph could not be built for the requested selection."""


class InsufficientSelectionError(BuildError):
    """Fewer than two distinct items were selected."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Need at least 2 items to blend, got {count}")


class UnknownItemError(BuildError, KeyError):
    """A selected id has no metadata record in the catalog."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item {item_id!r} not found in catalog")

    def __str__(self) -> str:
        return self.args[0]
